"""
Motion queue: validation gate, FIFO scheduling, and interpolated playback.

``MotionQueue`` is the single owner of the arm's ``RobotState``.  Submit
calls validate their target synchronously (raising on rejection) and
return an ``asyncio.Future``; accepted requests run one at a time in
submission order on a drain task that yields to the event loop between
interpolation steps.

Emergency stops are cooperative.  Every drain task is tagged with the run
generation it was started in; ``emergency_stop`` bumps the generation, so
a step loop from an older generation exits at its next yield without
touching state.

Classes:
    SchedulerState: Coarse state of the drain loop.
    MotionQueue: The scheduler and the public motion API.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Dict, Optional, Sequence, Tuple

import numpy as np

from robot_arm_sim.config import SimulatorConfig
from robot_arm_sim.errors import EmergencyStopError, InvalidGripperPositionError, RobotSimError
from robot_arm_sim.kinematics.inverse import ElbowConfig, solve_inverse
from robot_arm_sim.motion.clock import MonotonicClock
from robot_arm_sim.motion.events import (
    ErrorPayload,
    EventBus,
    EventKind,
    GripperPayload,
    JointsUpdate,
    PoseUpdate,
    StatePayload,
)
from robot_arm_sim.motion.requests import CartesianMove, JointMove, MotionRequest, RequestStatus
from robot_arm_sim.robots.robot_model import RobotModel
from robot_arm_sim.robots.robot_state import GripperState, RobotState
from robot_arm_sim.safety.validator import MotionValidator
from robot_arm_sim.utils.helpers import as_vector, distance, lerp, max_abs_delta

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    """Activity of the drain loop.

    ``IDLE``: no drain task is running.
    ``DRAINING``: the drain task is between requests.
    ``EXECUTING``: a request is being interpolated.
    """

    IDLE = "idle"
    DRAINING = "draining"
    EXECUTING = "executing"


class MotionQueue:
    """Serialises motion requests for one simulated arm.

    All public methods must be called from the thread running the event
    loop; the submit methods additionally require a running loop because
    they return futures bound to it.

    Attributes:
        config: Simulator configuration.
        model: The arm being driven.
        clock: Time source used for every wait.
        validator: Gate applied to every submitted target.
        events: Subscribers of state-change notifications.
    """

    def __init__(
        self,
        model: Optional[RobotModel] = None,
        config: Optional[SimulatorConfig] = None,
        clock: Any = None,
        validator: Optional[MotionValidator] = None,
    ) -> None:
        self.config = config or SimulatorConfig()
        self.model = model or self.config.build_model()
        self.clock = clock or MonotonicClock()
        self.validator = validator or MotionValidator(self.model, self.config.safety)
        self.events = EventBus()

        self._state = RobotState.from_joints(self.model, self.model.home)
        self._queue: Deque[MotionRequest] = deque()
        self._current: Optional[MotionRequest] = None
        self._processing = False
        self._generation = 0
        self._next_id = 1
        self._scheduler_state = SchedulerState.IDLE
        self._speed_override = 100.0
        self._drain_task: Optional[asyncio.Task] = None
        self._gripper_ops: Dict[asyncio.Task, asyncio.Future] = {}

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def queue_length(self) -> int:
        """Number of accepted requests waiting behind the executing one."""
        return len(self._queue)

    @property
    def scheduler_state(self) -> SchedulerState:
        return self._scheduler_state

    @property
    def speed_override(self) -> float:
        return self._speed_override

    def get_state(self) -> RobotState:
        """Return a snapshot of the arm state; never a live reference."""
        return self._state.snapshot()

    def get_status(self) -> Dict[str, Any]:
        """Return a flat status summary for UIs and transport layers."""
        return {
            "is_moving": self._state.is_moving,
            "is_homed": self._state.is_homed,
            "has_error": self._state.last_error is not None,
            "last_error": self._state.last_error,
            "timestamp": self._state.timestamp,
            "queue_length": self.queue_length,
            "scheduler_state": self._scheduler_state.value,
            "speed_override": self._speed_override,
        }

    def on(self, kind: EventKind, callback: Callable) -> Callable[[], None]:
        """Subscribe *callback* to one event kind; returns the unsubscribe function."""
        return self.events.subscribe(callback, kind)

    def set_speed_override(self, percent: float) -> None:
        """Scale the speed of every subsequently submitted request.

        Raises:
            ValueError: If *percent* is outside [1, 100].
        """
        if not 1.0 <= percent <= 100.0:
            raise ValueError(f"Speed override must be between 1 and 100 percent, got {percent}")
        self._speed_override = float(percent)
        logger.info(f"Speed override set to {self._speed_override:.0f}%")

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_cartesian_move(
        self,
        target: Sequence[float] | np.ndarray,
        speed: Optional[float] = None,
        acceleration: Optional[float] = None,
        elbow: Optional[ElbowConfig] = None,
        auto_correct: bool = False,
    ) -> asyncio.Future:
        """Queue a move of the flange to a Cartesian point.

        Args:
            target: Cartesian target [x, y, z] (millimetres).
            speed: Linear speed in mm/s; ``config.default_speed`` when *None*.
            acceleration: Recorded with the request; not modelled.
            elbow: Elbow branch for the closed-form solver.
            auto_correct: Clamp an out-of-workspace target instead of rejecting it.

        Returns:
            Future resolved with the ``RobotState`` snapshot at completion.

        Raises:
            OutOfWorkspaceError: If the target is outside the workspace box.
            CollisionDetectedError: If the target overlaps an obstacle.
            ValueError: On malformed arguments.
            RuntimeError: If no event loop is running.
        """
        loop = asyncio.get_running_loop()
        speed = self._effective_speed(speed)
        acceleration = self._positive("acceleration", acceleration, self.config.default_acceleration)
        try:
            position = self.validator.require_position(
                as_vector(target, 3, "target"), auto_correct=auto_correct
            )
        except RobotSimError as exc:
            self._reject(CartesianMove.__name__, exc)
            raise
        request = CartesianMove(
            request_id=self._allocate_id(),
            future=loop.create_future(),
            speed=speed,
            target_position=position,
            acceleration=acceleration,
            elbow=elbow or self.config.elbow_config,
        )
        return self._enqueue(request)

    def submit_joint_move(
        self,
        target_joints: Sequence[float] | np.ndarray,
        speed: Optional[float] = None,
        auto_correct: bool = False,
    ) -> asyncio.Future:
        """Queue a move to a joint vector.

        Args:
            target_joints: Joint angles in degrees.
            speed: Speed of the fastest joint in deg/s; ``config.default_speed``
                when *None*.
            auto_correct: Clamp violating joints instead of rejecting them.

        Returns:
            Future resolved with the ``RobotState`` snapshot at completion.

        Raises:
            JointLimitExceededError: If a joint is outside its range.
            ValueError: On malformed arguments.
            RuntimeError: If no event loop is running.
        """
        return self._submit_joints(target_joints, speed, auto_correct, homing=False)

    def home(self, speed: Optional[float] = None) -> asyncio.Future:
        """Queue a joint move to the model's home pose.

        On completion ``is_homed`` becomes True and ``HOMED`` is emitted.
        """
        logger.info("Homing requested")
        return self._submit_joints(self.model.home, speed, False, homing=True)

    def _submit_joints(
        self,
        target_joints: Sequence[float] | np.ndarray,
        speed: Optional[float],
        auto_correct: bool,
        homing: bool,
    ) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        speed = self._effective_speed(speed)
        try:
            joints = self.validator.require_joints(
                as_vector(target_joints, self.model.joint_count, "target_joints"),
                auto_correct=auto_correct,
            )
        except RobotSimError as exc:
            self._reject(JointMove.__name__, exc)
            raise
        request = JointMove(
            request_id=self._allocate_id(),
            future=loop.create_future(),
            speed=speed,
            target_joints=joints,
            homing=homing,
        )
        return self._enqueue(request)

    def set_gripper(self, position_pct: float, force: Optional[float] = None) -> asyncio.Future:
        """Command the gripper opening.

        The command does not wait for queued moves; it completes after
        ``config.gripper_actuation_time`` seconds.

        Args:
            position_pct: 0 = fully open, 100 = fully closed.
            force: Gripping force; ``config.default_gripper_force`` when *None*.

        Returns:
            Future resolved with a copy of the new ``GripperState``.

        Raises:
            InvalidGripperPositionError: If *position_pct* is outside [0, 100].
            ValueError: If *force* is negative.
        """
        loop = asyncio.get_running_loop()
        if not 0.0 <= position_pct <= 100.0:
            raise InvalidGripperPositionError(position_pct)
        force = self.config.default_gripper_force if force is None else force
        if force < 0:
            raise ValueError(f"Gripper force must be non-negative, got {force}")

        future = loop.create_future()
        task = loop.create_task(self._actuate_gripper(float(position_pct), float(force), future))
        self._gripper_ops[task] = future
        task.add_done_callback(lambda t: self._gripper_ops.pop(t, None))
        return future

    def open_gripper(self, force: float = 30.0) -> asyncio.Future:
        return self.set_gripper(0.0, force)

    def close_gripper(self, force: float = 50.0) -> asyncio.Future:
        return self.set_gripper(100.0, force)

    # ------------------------------------------------------------------
    # Emergency stop
    # ------------------------------------------------------------------

    def emergency_stop(self) -> None:
        """Discard all queued and in-flight work immediately.

        The executing request and every pending one are marked
        ``CANCELLED`` and their futures fail with ``EmergencyStopError``;
        pending gripper commands are cancelled the same way.  The arm keeps
        the joint vector of its last completed interpolation step.
        """
        self._generation += 1
        cancelled = ([self._current] if self._current is not None else []) + list(self._queue)
        self._queue.clear()
        for request in cancelled:
            request.status = RequestStatus.CANCELLED
            if not request.future.done():
                request.future.set_exception(EmergencyStopError(request.request_id))

        for task, future in list(self._gripper_ops.items()):
            task.cancel()
            if not future.done():
                future.set_exception(EmergencyStopError())
        self._gripper_ops.clear()

        self._current = None
        self._processing = False
        self._scheduler_state = SchedulerState.IDLE
        self._state.is_moving = False
        self._state.touch()
        logger.warning(f"Emergency stop: cancelled {len(cancelled)} motion request(s)")
        self.events.emit(EventKind.EMERGENCY_STOP, StatePayload(self._state.snapshot()))

    # ------------------------------------------------------------------
    # Queue internals
    # ------------------------------------------------------------------

    def _allocate_id(self) -> int:
        request_id = self._next_id
        self._next_id += 1
        return request_id

    def _positive(self, name: str, value: Optional[float], default: float) -> float:
        value = default if value is None else float(value)
        if not value > 0:
            raise ValueError(f"`{name}` must be positive, got {value}")
        return value

    def _effective_speed(self, speed: Optional[float]) -> float:
        return self._positive("speed", speed, self.config.default_speed) * self._speed_override / 100.0

    def _reject(self, kind: str, exc: Exception) -> None:
        # Rejected submissions get neither an id nor a future.
        logger.warning(f"Rejected {kind}: {exc}")

    def _enqueue(self, request: MotionRequest) -> asyncio.Future:
        request.status = RequestStatus.QUEUED
        self._queue.append(request)
        logger.info(
            f"Queued {type(request).__name__} #{request.request_id} (queue length {len(self._queue)})"
        )
        if not self._processing:
            self._processing = True
            self._scheduler_state = SchedulerState.DRAINING
            self._state.is_moving = True
            loop = asyncio.get_running_loop()
            self._drain_task = loop.create_task(self._drain(self._generation))
        return request.future

    async def _drain(self, generation: int) -> None:
        """Execute queued requests in order until the queue is empty or stopped."""
        try:
            while generation == self._generation and self._queue:
                request = self._queue.popleft()
                if request.future.done():
                    request.status = RequestStatus.CANCELLED
                    logger.info(f"Skipping cancelled request #{request.request_id}")
                    continue
                await self._run(request, generation)
        finally:
            if generation == self._generation:
                self._processing = False
                self._drain_task = None
                self._scheduler_state = SchedulerState.IDLE
                self._state.is_moving = False

    async def _run(self, request: MotionRequest, generation: int) -> None:
        """Execute one request and settle its future."""
        self._current = request
        request.status = RequestStatus.EXECUTING
        self._scheduler_state = SchedulerState.EXECUTING
        try:
            completed = await self._execute(request, generation)
        except RobotSimError as exc:
            if generation == self._generation:
                logger.error(f"Request #{request.request_id} failed: {exc}")
                self._fail(request, exc)
        except Exception as exc:
            if generation == self._generation:
                logger.exception(f"Unexpected error while executing request #{request.request_id}")
                self._fail(request, exc)
        else:
            if completed and generation == self._generation:
                self._complete(request)
        finally:
            if generation == self._generation:
                self._current = None
                self._scheduler_state = SchedulerState.DRAINING

    async def _execute(self, request: MotionRequest, generation: int) -> bool:
        """Plan and play back *request*.

        Returns:
            False if an emergency stop interrupted playback.
        """
        start = self._state.joints.copy()
        if isinstance(request, CartesianMove):
            target_joints, duration = self._plan_cartesian(request)
        elif isinstance(request, JointMove):
            target_joints = request.target_joints
            duration = max(
                self.config.min_move_duration, max_abs_delta(start, target_joints) / request.speed
            )
        else:
            raise TypeError(f"Unsupported motion request: {type(request).__name__}")

        duration = self._respect_joint_speeds(start, target_joints, duration)
        logger.debug(
            f"Request #{request.request_id}: {start.tolist()} -> {target_joints.tolist()} "
            f"over {duration:.3f}s"
        )
        return await self._interpolate(request, start, target_joints, duration, generation)

    def _plan_cartesian(self, request: CartesianMove) -> Tuple[np.ndarray, float]:
        """Check the path and solve IK for a Cartesian move.

        Returns:
            Tuple ``(target_joints, duration)``.
        """
        start_position = self._state.position.copy()
        self.validator.check_path(start_position, request.target_position)
        solution = solve_inverse(
            self.model,
            request.target_position,
            seed=self._state.joints,
            elbow=request.elbow,
            allow_numeric=self.config.numeric_fallback,
            settings=self.config.ik,
            verify_tolerance=self.config.verify_tolerance,
        )
        logger.debug(
            f"Request #{request.request_id}: {solution.method} IK "
            f"(error {solution.position_error:.2e} mm)"
        )
        duration = max(
            self.config.min_move_duration,
            distance(start_position, request.target_position) / request.speed,
        )
        return solution.joints, duration

    def _respect_joint_speeds(self, start: np.ndarray, target: np.ndarray, duration: float) -> float:
        """Stretch *duration* so that no joint exceeds its speed limit."""
        delta = np.abs(target - start)
        if not np.any(delta > 0):
            return duration
        if duration > 0:
            check = self.validator.limits.validate_joint_velocities(delta / duration)
            if check.valid:
                return duration
        required = float(np.max(delta / self.model.max_speeds))
        logger.debug(f"Stretching move from {duration:.3f}s to {required:.3f}s for joint speed limits")
        return max(duration, required)

    async def _interpolate(
        self,
        request: MotionRequest,
        start: np.ndarray,
        target: np.ndarray,
        duration: float,
        generation: int,
    ) -> bool:
        """Step linearly from *start* to *target* in joint space.

        Each step updates the state through forward kinematics, emits the
        progress events, then waits ``duration / steps`` on the clock.

        Returns:
            False if the generation changed before a step.
        """
        steps = self.config.interpolation_steps
        step_time = duration / steps
        for i in range(1, steps + 1):
            if generation != self._generation:
                return False
            t = i / steps
            self._state.apply_joints(self.model, lerp(start, target, t))
            self._emit_progress(request, t)
            await self.clock.sleep(step_time)
        return generation == self._generation

    def _emit_progress(self, request: MotionRequest, progress: float) -> None:
        state = self._state
        self.events.emit(
            EventKind.JOINTS_UPDATE,
            JointsUpdate(joints=state.joints.copy(), progress=progress, request_id=request.request_id),
        )
        self.events.emit(
            EventKind.POSITION_UPDATE,
            PoseUpdate(
                position=state.position.copy(),
                orientation=state.orientation.copy(),
                progress=progress,
                request_id=request.request_id,
            ),
        )

    def _complete(self, request: MotionRequest) -> None:
        homing = isinstance(request, JointMove) and request.homing
        if homing:
            self._state.is_homed = True
        self._state.is_moving = bool(self._queue)
        self._state.touch()
        snapshot = self._state.snapshot()
        request.status = RequestStatus.COMPLETED
        logger.info(f"Request #{request.request_id} completed at {snapshot.position.round(3).tolist()}")

        self.events.emit(EventKind.POSITION_CHANGED, StatePayload(snapshot))
        if homing:
            logger.info("Robot homed")
            self.events.emit(EventKind.HOMED, StatePayload(snapshot))
        if not request.future.done():
            request.future.set_result(snapshot)

    def _fail(self, request: MotionRequest, exc: Exception) -> None:
        request.status = RequestStatus.FAILED
        request.error = exc
        self._state.last_error = str(exc)
        self._state.is_moving = bool(self._queue)
        self._state.touch()
        self.events.emit(EventKind.ERROR, ErrorPayload(error=exc, request_id=request.request_id))
        if not request.future.done():
            request.future.set_exception(exc)

    async def _actuate_gripper(self, position_pct: float, force: float, future: asyncio.Future) -> None:
        await self.clock.sleep(self.config.gripper_actuation_time)
        self._state.gripper.update(position_pct, force)
        self._state.touch()
        gripper: GripperState = self._state.gripper.copy()
        logger.info(f"Gripper at {position_pct:.0f}% (force {force:.0f}, open={gripper.is_open})")
        self.events.emit(EventKind.GRIPPER_CHANGED, GripperPayload(gripper))
        if not future.done():
            future.set_result(gripper)
