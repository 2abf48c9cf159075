"""
Composite validation gate used by the motion queue.

``MotionValidator`` combines the workspace and joint-limit checks of
:class:`~robot_arm_sim.safety.limits.LimitValidator` with obstacle checks
from :class:`~robot_arm_sim.safety.collision.CollisionDetector`.  Each
check family can be switched off through ``ValidationSettings``.

Classes:
    ValidationSettings: Which checks run and with which parameters.
    ValidationReport: Errors, warnings and the optional corrected target.
    MotionValidator: Produces reports and raises the taxonomy errors.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from robot_arm_sim.errors import (
    CollisionDetectedError,
    JointLimitExceededError,
    OutOfWorkspaceError,
)
from robot_arm_sim.robots.robot_model import RobotModel
from robot_arm_sim.safety.collision import CollisionDetector, Obstacle
from robot_arm_sim.safety.limits import JointViolation, LimitValidator
from robot_arm_sim.utils.helpers import as_vector, lerp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationSettings:
    """Switches and parameters of the composite validator.

    Attributes:
        enforce_workspace: Reject Cartesian targets outside the box.
        enforce_joint_limits: Reject joint targets outside their ranges.
        enforce_collision: Reject targets overlapping an obstacle.
        path_validation: Sample the straight segment before a Cartesian move.
        path_steps: Number of path intervals sampled.
        safety_margin: Distance to a workspace face that triggers a warning (mm).
        tool_size: Edge lengths of the tool box used for collisions (mm).
    """

    enforce_workspace: bool = True
    enforce_joint_limits: bool = True
    enforce_collision: bool = True
    path_validation: bool = True
    path_steps: int = 10
    safety_margin: float = 10.0
    tool_size: Tuple[float, float, float] = (100.0, 100.0, 100.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tool_size", tuple(float(v) for v in self.tool_size))
        if self.path_steps < 1:
            raise ValueError("`path_steps` must be at least 1")
        if self.safety_margin < 0:
            raise ValueError("`safety_margin` must be non-negative")
        if len(self.tool_size) != 3 or any(v <= 0 for v in self.tool_size):
            raise ValueError(f"`tool_size` must be three positive lengths, got {self.tool_size}")


@dataclass
class ValidationReport:
    """Outcome of one validation call.

    Attributes:
        valid: True when no error was recorded.
        errors: Human-readable error messages.
        warnings: Human-readable warnings (never block a move).
        violated_axes: Workspace axes out of bounds.
        violations: Joint-limit violations.
        collision: The obstacle hit, if any.
        corrected: Clamped target, filled only when auto-correction was requested.
    """

    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    violated_axes: Tuple[str, ...] = ()
    violations: Tuple[JointViolation, ...] = ()
    collision: Optional[Obstacle] = None
    corrected: Optional[np.ndarray] = None

    def fail(self, message: str) -> None:
        self.valid = False
        self.errors.append(message)


class MotionValidator:
    """Validation gate in front of the motion queue.

    Attributes:
        model: The arm being validated against.
        settings: Active ``ValidationSettings``.
        limits: Underlying workspace and joint-limit checks.
        collisions: Registered obstacles.
    """

    def __init__(
        self,
        model: RobotModel,
        settings: Optional[ValidationSettings] = None,
        collisions: Optional[CollisionDetector] = None,
    ) -> None:
        self.model = model
        self.settings = settings or ValidationSettings()
        self.limits = LimitValidator(model)
        self.collisions = collisions or CollisionDetector()

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def validate_position(
        self, position: Sequence[float] | np.ndarray, auto_correct: bool = False
    ) -> ValidationReport:
        """Check a Cartesian target against the workspace and the obstacles.

        A target inside the box but closer than ``safety_margin`` to a face
        produces a warning only.

        Args:
            position: Cartesian target [x, y, z].
            auto_correct: Fill ``corrected`` with the clamped target when
                the workspace check fails.

        Returns:
            A ``ValidationReport``.
        """
        pos = as_vector(position, 3, "position")
        report = ValidationReport()

        if self.settings.enforce_workspace:
            check = self.limits.validate_position(pos)
            if not check.valid:
                report.violated_axes = check.violated_axes
                report.fail(f"Position outside workspace bounds (axes: {', '.join(check.violated_axes)})")
                if auto_correct:
                    report.corrected = self.limits.clamp_position(pos)
            elif not self.limits.is_position_safe(pos, self.settings.safety_margin):
                report.warnings.append("Position near workspace boundary")

        if self.settings.enforce_collision:
            obstacle = self.collisions.check_collision(pos, self.settings.tool_size)
            if obstacle is not None:
                report.collision = obstacle
                report.fail(f"Collision detected with obstacle: {obstacle.name}")

        return report

    def validate_joints(
        self, joints: Sequence[float] | np.ndarray, auto_correct: bool = False
    ) -> ValidationReport:
        """Check a joint target against the per-joint ranges.

        Args:
            joints: Joint angles in degrees.
            auto_correct: Fill ``corrected`` with the clamped joints on failure.

        Returns:
            A ``ValidationReport``.
        """
        values = as_vector(joints, self.model.joint_count, "joints")
        report = ValidationReport()
        if not self.settings.enforce_joint_limits:
            return report

        check = self.limits.validate_joints(values)
        if not check.valid:
            report.violations = check.violations
            report.fail("Joint limits exceeded")
            report.errors.extend(str(v) for v in check.violations)
            if auto_correct:
                report.corrected = self.limits.clamp_joints(values)
        return report

    def validate_path(
        self, start: Sequence[float] | np.ndarray, end: Sequence[float] | np.ndarray
    ) -> ValidationReport:
        """Sample the straight segment from *start* to *end*.

        The workspace test is skipped when *start* itself is outside the box,
        so an arm that was jogged out of the box can still be moved back.
        The start sample is never tested for collisions for the same reason.

        Args:
            start: Current Cartesian position.
            end: Cartesian target.

        Returns:
            A ``ValidationReport``; ``collision`` names the first obstacle hit.
        """
        report = ValidationReport()
        if not self.settings.path_validation:
            return report

        a = as_vector(start, 3, "start")
        b = as_vector(end, 3, "end")
        steps = self.settings.path_steps
        if (
            self.settings.enforce_workspace
            and self.model.workspace.contains(a)
            and not self.limits.is_path_valid(a, b, steps)
        ):
            report.fail("Path goes outside workspace")

        if self.settings.enforce_collision and self.collisions.obstacles:
            for i in range(1, steps + 1):
                obstacle = self.collisions.check_collision(lerp(a, b, i / steps), self.settings.tool_size)
                if obstacle is not None:
                    report.collision = obstacle
                    report.fail(f"Path collides with obstacle: {obstacle.name}")
                    break
        return report

    # ------------------------------------------------------------------
    # Raising variants used by the motion queue
    # ------------------------------------------------------------------

    def require_position(
        self, position: Sequence[float] | np.ndarray, auto_correct: bool = False
    ) -> np.ndarray:
        """Return an accepted Cartesian target or raise.

        Args:
            position: Cartesian target [x, y, z].
            auto_correct: Clamp an out-of-workspace target instead of rejecting it.

        Returns:
            The target, clamped when auto-correction was applied.

        Raises:
            OutOfWorkspaceError: If the target is outside the box.
            CollisionDetectedError: If the (possibly clamped) target hits an obstacle.
        """
        pos = as_vector(position, 3, "position")
        report = self.validate_position(pos, auto_correct=auto_correct)
        if not report.valid and report.corrected is not None:
            logger.warning(
                f"Auto-correcting position {pos.tolist()} to {report.corrected.tolist()}"
            )
            pos = report.corrected
            report = self.validate_position(pos)
        for warning in report.warnings:
            logger.debug(f"{warning}: {pos.tolist()}")
        if report.valid:
            return pos
        if report.violated_axes:
            raise OutOfWorkspaceError(pos, report.violated_axes)
        raise CollisionDetectedError(pos, report.collision.name)

    def require_joints(
        self, joints: Sequence[float] | np.ndarray, auto_correct: bool = False
    ) -> np.ndarray:
        """Return an accepted joint target or raise.

        Args:
            joints: Joint angles in degrees.
            auto_correct: Clamp violating joints instead of rejecting them.

        Returns:
            The joint target, clamped when auto-correction was applied.

        Raises:
            JointLimitExceededError: If a joint is outside its range.
        """
        values = as_vector(joints, self.model.joint_count, "joints")
        report = self.validate_joints(values, auto_correct=auto_correct)
        if report.valid:
            return values
        if report.corrected is not None:
            logger.warning(f"Auto-correcting joints {values.tolist()} to {report.corrected.tolist()}")
            return report.corrected
        raise JointLimitExceededError(values, report.violations)

    def check_path(self, start: Sequence[float] | np.ndarray, end: Sequence[float] | np.ndarray) -> None:
        """Raise if the sampled path leaves the box or hits an obstacle.

        Raises:
            OutOfWorkspaceError: If a sample is outside the workspace.
            CollisionDetectedError: If a sample overlaps an obstacle.
        """
        report = self.validate_path(start, end)
        if report.valid:
            return
        target = as_vector(end, 3, "end")
        if report.collision is not None:
            raise CollisionDetectedError(target, report.collision.name)
        raise OutOfWorkspaceError(target, self.limits.validate_position(target).violated_axes or ("path",))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def summary(self) -> Dict[str, Any]:
        """Describe the active bounds, limits, obstacles and settings."""
        workspace = self.model.workspace
        return {
            "workspace": {
                "bounds": asdict(workspace),
                "volume": workspace.volume,
                "center": workspace.center.tolist(),
            },
            "joint_limits": [asdict(limit) for limit in self.model.joint_limits],
            "obstacles": len(self.collisions.obstacles),
            "settings": asdict(self.settings),
        }
