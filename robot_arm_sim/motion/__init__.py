"""
Motion queue for the simulated arm.

Accepts Cartesian and joint moves, validates them, executes them one at a
time with joint-space interpolation, and notifies subscribers through a
typed event bus.
"""

from robot_arm_sim.motion.clock import MonotonicClock, VirtualClock
from robot_arm_sim.motion.events import Event, EventBus, EventKind
from robot_arm_sim.motion.requests import CartesianMove, JointMove, RequestStatus
from robot_arm_sim.motion.scheduler import MotionQueue, SchedulerState

__all__ = [
    "MonotonicClock",
    "VirtualClock",
    "Event",
    "EventBus",
    "EventKind",
    "CartesianMove",
    "JointMove",
    "RequestStatus",
    "MotionQueue",
    "SchedulerState",
]
