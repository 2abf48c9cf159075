"""
Motion request records held by the queue.

A request is created by a submit call after validation succeeded, lives in
the FIFO until it executes, and is dropped once its future is resolved.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from robot_arm_sim.kinematics.inverse import ElbowConfig


class RequestStatus(Enum):
    """Lifecycle of a motion request.

    A submission that fails validation raises and never becomes a queued
    record, so ``VALIDATING`` and ``REJECTED`` name the synchronous gate
    rather than states a stored request passes through.
    """

    PENDING = "pending"
    VALIDATING = "validating"
    REJECTED = "rejected"
    QUEUED = "queued"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset(
    {RequestStatus.REJECTED, RequestStatus.COMPLETED, RequestStatus.FAILED, RequestStatus.CANCELLED}
)


@dataclass
class MotionRequest:
    """Fields shared by every queued move.

    Attributes:
        request_id: Monotonically increasing id assigned once the submission
            passed validation.
        future: Resolved with a ``RobotState`` snapshot or failed with the
            execution error.
        speed: Effective speed (mm/s for Cartesian, deg/s for joint moves)
            after the speed override.
        status: Lifecycle position.
        error: Execution error, if the request failed.
    """

    request_id: int
    future: asyncio.Future
    speed: float
    status: RequestStatus = field(default=RequestStatus.PENDING, init=False)
    error: Optional[BaseException] = field(default=None, init=False)

    @property
    def done(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass
class JointMove(MotionRequest):
    """Move to a joint vector; ``homing`` marks the move issued by ``home()``."""

    target_joints: np.ndarray
    homing: bool = False


@dataclass
class CartesianMove(MotionRequest):
    """Move the flange to a Cartesian point through inverse kinematics."""

    target_position: np.ndarray
    acceleration: float = 50.0
    elbow: ElbowConfig = ElbowConfig.UP
