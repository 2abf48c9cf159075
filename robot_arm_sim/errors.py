"""
Exception taxonomy for the robot arm simulator.

Validation errors (workspace, joint limits, gripper range, collisions) are
raised synchronously by the submit calls and never reach the queue.
Kinematics errors (unreachable, not converged) are raised while a request
executes and end up on that request's future.

Classes:
    RobotSimError: Base class of every simulator error.
    OutOfWorkspaceError: Cartesian target outside the workspace box.
    CollisionDetectedError: Cartesian target or path hits an obstacle.
    JointLimitExceededError: Joint target outside the per-joint ranges.
    InvalidGripperPositionError: Gripper position outside [0, 100].
    UnreachableError: Closed-form IK found no solution within limits.
    NotConvergedError: Numerical IK exhausted its iteration budget.
    EmergencyStopError: Request cancelled by an emergency stop.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np


class RobotSimError(Exception):
    """Base class of every error raised by the simulator."""


class OutOfWorkspaceError(RobotSimError, ValueError):
    """Raised when a Cartesian target lies outside the workspace box.

    Attributes:
        position: The rejected target position.
        violated_axes: Names of the axes that are out of bounds.
    """

    def __init__(self, position: Sequence[float], violated_axes: Sequence[str]) -> None:
        self.position = tuple(float(v) for v in position)
        self.violated_axes: Tuple[str, ...] = tuple(violated_axes)
        axes = ", ".join(self.violated_axes)
        super().__init__(f"Target position out of workspace: {self.position} (axes: {axes})")


class CollisionDetectedError(RobotSimError, ValueError):
    """Raised when a target or sampled path point intersects an obstacle."""

    def __init__(self, position: Sequence[float], obstacle_name: str) -> None:
        self.position = tuple(float(v) for v in position)
        self.obstacle_name = obstacle_name
        super().__init__(f"Collision detected with obstacle '{obstacle_name}' at {self.position}")


class JointLimitExceededError(RobotSimError, ValueError):
    """Raised when a joint target violates one or more joint ranges.

    Attributes:
        joints: The rejected joint vector (degrees).
        violations: Per-joint violation records from the limit validator.
    """

    def __init__(self, joints: Sequence[float], violations: Sequence[object]) -> None:
        self.joints = tuple(float(v) for v in joints)
        self.violations = tuple(violations)
        details = "; ".join(str(v) for v in self.violations)
        super().__init__(f"Joint angles out of limits: {self.joints} ({details})")


class InvalidGripperPositionError(RobotSimError, ValueError):
    """Raised when a gripper position is outside the [0, 100] percent range."""

    def __init__(self, position: float) -> None:
        self.position = position
        super().__init__(f"Gripper position must be between 0 and 100, got {position}")


class UnreachableError(RobotSimError):
    """Raised when the closed-form solver cannot reach a target.

    Attributes:
        target: The Cartesian target that could not be reached.
        reason: Human-readable explanation.
    """

    def __init__(self, target: Sequence[float], reason: str) -> None:
        self.target = tuple(float(v) for v in target)
        self.reason = reason
        super().__init__(f"Target {self.target} unreachable: {reason}")


class NotConvergedError(RobotSimError):
    """Raised when the numerical solver runs out of iterations.

    The best-effort joint vector is kept for diagnostics only and must not be
    treated as a solution.

    Attributes:
        target: The Cartesian target.
        best_effort: Joint vector (degrees) of the last iterate.
        residual: Remaining position error norm (millimetres).
        iterations: Number of iterations performed.
    """

    def __init__(
        self,
        target: Sequence[float],
        best_effort: np.ndarray,
        residual: float,
        iterations: int,
    ) -> None:
        self.target = tuple(float(v) for v in target)
        self.best_effort = np.array(best_effort, dtype=np.float64)
        self.residual = residual
        self.iterations = iterations
        super().__init__(
            f"IK did not converge towards {self.target} within {iterations} iterations "
            f"(residual {residual:.4f} mm)"
        )


class EmergencyStopError(RobotSimError):
    """Set on the futures of requests discarded by an emergency stop."""

    def __init__(self, request_id: Optional[int] = None) -> None:
        self.request_id = request_id
        super().__init__(f"Motion request {request_id} cancelled by emergency stop")
