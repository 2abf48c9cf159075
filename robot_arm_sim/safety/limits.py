"""
Workspace-bounds and joint-limit checks.

Every check is a pure function of its input and the robot model.  The
validator never clamps silently: ``clamp_position`` and ``clamp_joints``
exist for callers that explicitly opt into auto-correction.

Classes:
    JointViolation: One joint outside its angle or speed limit.
    PositionCheck: Result of a workspace check.
    JointCheck: Result of a joint-angle or joint-velocity check.
    LimitValidator: The checks themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from robot_arm_sim.robots.robot_model import JointLimit, RobotModel
from robot_arm_sim.utils.constants import AXIS_NAMES
from robot_arm_sim.utils.helpers import as_vector, lerp


@dataclass(frozen=True)
class JointViolation:
    """A joint value outside its configured limit.

    Attributes:
        index: Zero-based joint index.
        value: Offending angle (degrees) or speed (degrees per second).
        limit: The joint's ``JointLimit``.
        kind: ``'position'`` or ``'velocity'``.
    """

    index: int
    value: float
    limit: JointLimit
    kind: str = "position"

    def __str__(self) -> str:
        if self.kind == "velocity":
            return f"Joint {self.index + 1}: {self.value:.2f} deg/s (limit: {self.limit.max_speed_deg_s} deg/s)"
        return f"Joint {self.index + 1}: {self.value:.2f} deg (limit: {self.limit.min_deg} to {self.limit.max_deg})"


@dataclass(frozen=True)
class PositionCheck:
    valid: bool
    violated_axes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class JointCheck:
    valid: bool
    violations: Tuple[JointViolation, ...] = ()


class LimitValidator:
    """Checks Cartesian positions and joint vectors against a ``RobotModel``.

    Attributes:
        model: The arm whose workspace and joint limits are enforced.
    """

    def __init__(self, model: RobotModel) -> None:
        self.model = model
        self._lower, self._upper = model.workspace.as_arrays()

    # ------------------------------------------------------------------
    # Workspace
    # ------------------------------------------------------------------

    def validate_position(self, position: Sequence[float] | np.ndarray) -> PositionCheck:
        """Check each axis of *position* independently against the box.

        Args:
            position: Cartesian point [x, y, z].

        Returns:
            ``PositionCheck`` listing every axis outside its bounds.
        """
        pos = as_vector(position, 3, "position")
        violated = tuple(
            axis
            for axis, value, lo, hi in zip(AXIS_NAMES, pos, self._lower, self._upper)
            if value < lo or value > hi
        )
        return PositionCheck(valid=not violated, violated_axes=violated)

    def clamp_position(self, position: Sequence[float] | np.ndarray) -> np.ndarray:
        """Clamp each axis of *position* into the workspace box."""
        return np.clip(as_vector(position, 3, "position"), self._lower, self._upper)

    def is_position_safe(self, position: Sequence[float] | np.ndarray, margin: float) -> bool:
        """Return True if *position* is at least *margin* inside every face."""
        return self.distance_to_boundary(position) >= margin

    def distance_to_boundary(self, position: Sequence[float] | np.ndarray) -> float:
        """Signed distance to the nearest workspace face (negative when outside).

        Args:
            position: Cartesian point [x, y, z].

        Returns:
            Minimum over the six face distances.
        """
        pos = as_vector(position, 3, "position")
        return float(min(np.min(pos - self._lower), np.min(self._upper - pos)))

    def is_path_valid(
        self,
        start: Sequence[float] | np.ndarray,
        end: Sequence[float] | np.ndarray,
        steps: int = 10,
    ) -> bool:
        """Sample the straight segment from *start* to *end* against the box.

        This is a coarse check: ``steps + 1`` evenly spaced samples
        (endpoints included) are tested, nothing in between.

        Args:
            start: Segment start point.
            end: Segment end point.
            steps: Number of intervals to sample.

        Returns:
            True if every sample lies inside the workspace.

        Raises:
            ValueError: If *steps* is less than one.
        """
        if steps < 1:
            raise ValueError("`steps` must be at least 1")
        a = as_vector(start, 3, "start")
        b = as_vector(end, 3, "end")
        return all(
            self.model.workspace.contains(lerp(a, b, i / steps)) for i in range(steps + 1)
        )

    # ------------------------------------------------------------------
    # Joints
    # ------------------------------------------------------------------

    def validate_joints(self, joints: Sequence[float] | np.ndarray) -> JointCheck:
        """Check every joint angle against its range.

        Args:
            joints: Joint angles in degrees.

        Returns:
            ``JointCheck`` listing every violating joint.
        """
        values = as_vector(joints, self.model.joint_count, "joints")
        violations = tuple(
            JointViolation(index=i, value=float(angle), limit=limit)
            for i, (angle, limit) in enumerate(zip(values, self.model.joint_limits))
            if not limit.contains(angle)
        )
        return JointCheck(valid=not violations, violations=violations)

    def clamp_joints(self, joints: Sequence[float] | np.ndarray) -> np.ndarray:
        """Clamp every joint angle into its range."""
        values = as_vector(joints, self.model.joint_count, "joints")
        return np.clip(values, self.model.lower_limits, self.model.upper_limits)

    def validate_joint_velocities(self, velocities: Sequence[float] | np.ndarray) -> JointCheck:
        """Check absolute joint speeds against each joint's ``max_speed_deg_s``.

        Args:
            velocities: Joint speeds in degrees per second.

        Returns:
            ``JointCheck`` whose violations have kind ``'velocity'``.
        """
        values = as_vector(velocities, self.model.joint_count, "velocities")
        violations = tuple(
            JointViolation(index=i, value=float(speed), limit=limit, kind="velocity")
            for i, (speed, limit) in enumerate(zip(values, self.model.joint_limits))
            if abs(speed) > limit.max_speed_deg_s
        )
        return JointCheck(valid=not violations, violations=violations)
