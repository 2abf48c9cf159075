"""
Typed notifications emitted by the motion queue.

Subscribers register for one or more ``EventKind`` values and receive an
``Event`` whose payload type is fixed per kind:

    POSITION_CHANGED, HOMED, EMERGENCY_STOP -> StatePayload
    POSITION_UPDATE                         -> PoseUpdate
    JOINTS_UPDATE                           -> JointsUpdate
    GRIPPER_CHANGED                         -> GripperPayload
    ERROR                                   -> ErrorPayload
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

import numpy as np

from robot_arm_sim.robots.robot_state import GripperState, RobotState

logger = logging.getLogger(__name__)


class EventKind(Enum):
    POSITION_CHANGED = "position_changed"
    POSITION_UPDATE = "position_update"
    JOINTS_UPDATE = "joints_update"
    GRIPPER_CHANGED = "gripper_changed"
    HOMED = "homed"
    EMERGENCY_STOP = "emergency_stop"
    ERROR = "error"


@dataclass(frozen=True)
class StatePayload:
    state: RobotState


@dataclass(frozen=True)
class PoseUpdate:
    """Cartesian pose after one interpolation step."""

    position: np.ndarray
    orientation: np.ndarray
    progress: float
    request_id: int


@dataclass(frozen=True)
class JointsUpdate:
    """Joint vector after one interpolation step."""

    joints: np.ndarray
    progress: float
    request_id: int


@dataclass(frozen=True)
class GripperPayload:
    gripper: GripperState


@dataclass(frozen=True)
class ErrorPayload:
    error: BaseException
    request_id: Optional[int] = None


Payload = Union[StatePayload, PoseUpdate, JointsUpdate, GripperPayload, ErrorPayload]


@dataclass(frozen=True)
class Event:
    kind: EventKind
    payload: Payload
    timestamp: float = field(default_factory=time.time)


Callback = Callable[[Event], None]


class EventBus:
    """Synchronous fan-out of events to subscribers.

    Callbacks run in subscription order on the emitting task.  A callback
    that raises is logged and skipped; the remaining callbacks still run.
    """

    def __init__(self) -> None:
        self._subscribers: List[Tuple[Callback, frozenset]] = []

    def subscribe(self, callback: Callback, *kinds: EventKind) -> Callable[[], None]:
        """Register *callback* for *kinds* (every kind when none are given).

        Args:
            callback: Called with each matching ``Event``.
            *kinds: Event kinds to receive.

        Returns:
            A function that removes the subscription.
        """
        entry = (callback, frozenset(kinds or EventKind))
        self._subscribers.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    def emit(self, kind: EventKind, payload: Payload) -> Event:
        """Build an ``Event`` and deliver it to every matching subscriber."""
        event = Event(kind=kind, payload=payload)
        for callback, kinds in list(self._subscribers):
            if kind not in kinds:
                continue
            try:
                callback(event)
            except Exception:
                logger.exception(f"Event subscriber {callback!r} failed on {kind.value}")
        return event

    def __len__(self) -> int:
        return len(self._subscribers)
