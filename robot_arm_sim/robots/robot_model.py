"""
Immutable description of a 6-DOF articulated arm.

Holds per-joint angle and speed limits, the Cartesian workspace box, the
Denavit-Hartenberg table of the kinematic chain, and the home pose.  Every
other component reads the model; none of them mutate it.

Classes:
    JointLimit: Angle range and speed limit of one joint.
    DHParameters: One row of the Denavit-Hartenberg table.
    WorkspaceBounds: Axis-aligned box the end-effector may be commanded in.
    RobotModel: The complete arm description.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from robot_arm_sim.utils.constants import (
    DEFAULT_WORKSPACE_X,
    DEFAULT_WORKSPACE_Y,
    DEFAULT_WORKSPACE_Z,
    INDUSTRIAL_DH,
    INDUSTRIAL_HOME,
    INDUSTRIAL_JOINT_LOWER,
    INDUSTRIAL_JOINT_UPPER,
    INDUSTRIAL_MAX_SPEED,
    JOINT_NAMES,
    NUM_JOINTS,
)
from robot_arm_sim.utils.helpers import clamp


@dataclass(frozen=True)
class JointLimit:
    """Angle range and speed limit of a single revolute joint.

    Attributes:
        name: Joint label used in messages.
        min_deg: Lower angle limit (degrees, inclusive).
        max_deg: Upper angle limit (degrees, inclusive).
        max_speed_deg_s: Maximum angular speed (degrees per second).
    """

    name: str
    min_deg: float
    max_deg: float
    max_speed_deg_s: float

    def __post_init__(self) -> None:
        if self.min_deg > self.max_deg:
            raise ValueError(f"Joint {self.name}: min {self.min_deg} > max {self.max_deg}")
        if self.max_speed_deg_s <= 0:
            raise ValueError(f"Joint {self.name}: max speed must be positive")

    def contains(self, angle: float) -> bool:
        """Return True if *angle* lies inside the closed range."""
        return self.min_deg <= angle <= self.max_deg

    def clamp(self, angle: float) -> float:
        """Return *angle* clamped into the joint range."""
        return clamp(angle, self.min_deg, self.max_deg)


@dataclass(frozen=True)
class DHParameters:
    """One row of a standard Denavit-Hartenberg table.

    The joint transform is ``Rot_z(theta + offset) Trans_z(d) Trans_x(a) Rot_x(alpha)``.

    Attributes:
        a: Link length along the rotated x axis (millimetres).
        alpha_deg: Link twist about the x axis (degrees).
        d: Link offset along the previous z axis (millimetres).
        offset_deg: Constant added to the joint angle (degrees).
    """

    a: float = 0.0
    alpha_deg: float = 0.0
    d: float = 0.0
    offset_deg: float = 0.0


@dataclass(frozen=True)
class WorkspaceBounds:
    """Axis-aligned box the end-effector may legally be commanded in.

    Attributes:
        x_min, x_max, y_min, y_max, z_min, z_max: Box faces (millimetres).
    """

    x_min: float = DEFAULT_WORKSPACE_X[0]
    x_max: float = DEFAULT_WORKSPACE_X[1]
    y_min: float = DEFAULT_WORKSPACE_Y[0]
    y_max: float = DEFAULT_WORKSPACE_Y[1]
    z_min: float = DEFAULT_WORKSPACE_Z[0]
    z_max: float = DEFAULT_WORKSPACE_Z[1]

    def __post_init__(self) -> None:
        lower, upper = self.as_arrays()
        if np.any(lower > upper):
            raise ValueError(f"Workspace minimum exceeds maximum: {lower} > {upper}")

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return the (lower, upper) corners as two length-3 arrays."""
        lower = np.array([self.x_min, self.y_min, self.z_min], dtype=np.float64)
        upper = np.array([self.x_max, self.y_max, self.z_max], dtype=np.float64)
        return lower, upper

    def contains(self, position: np.ndarray) -> bool:
        """Return True if *position* lies inside the closed box."""
        lower, upper = self.as_arrays()
        pos = np.asarray(position, dtype=np.float64)
        return bool(np.all(pos >= lower) and np.all(pos <= upper))

    @property
    def volume(self) -> float:
        """Box volume in cubic millimetres."""
        lower, upper = self.as_arrays()
        return float(np.prod(upper - lower))

    @property
    def center(self) -> np.ndarray:
        """Geometric centre of the box."""
        lower, upper = self.as_arrays()
        return (lower + upper) / 2.0


def _default_joint_limits() -> Tuple[JointLimit, ...]:
    return tuple(
        JointLimit(name, lo, hi, speed)
        for name, lo, hi, speed in zip(
            JOINT_NAMES, INDUSTRIAL_JOINT_LOWER, INDUSTRIAL_JOINT_UPPER, INDUSTRIAL_MAX_SPEED
        )
    )


def _default_dh_params() -> Tuple[DHParameters, ...]:
    return tuple(DHParameters(*row) for row in INDUSTRIAL_DH)


@dataclass(frozen=True)
class RobotModel:
    """Immutable kinematic and safety description of a 6-DOF arm.

    The closed-form solver assumes the default chain topology: a vertical
    base joint, a shoulder/elbow pair moving in the arm plane, and a
    spherical wrist.  Its link lengths are read from the DH table (see the
    geometry properties below).

    Attributes:
        name: Registry name of the model.
        joint_limits: One ``JointLimit`` per joint.
        dh_params: One ``DHParameters`` row per joint.
        workspace: Cartesian workspace box.
        home_joints: Home joint angles (degrees).
        approach_pitch_deg: Tool pitch held by the closed-form solver;
            90 points the tool straight down.
    """

    name: str = "industrial"
    joint_limits: Tuple[JointLimit, ...] = field(default_factory=_default_joint_limits)
    dh_params: Tuple[DHParameters, ...] = field(default_factory=_default_dh_params)
    workspace: WorkspaceBounds = field(default_factory=WorkspaceBounds)
    home_joints: Tuple[float, ...] = INDUSTRIAL_HOME
    approach_pitch_deg: float = 90.0

    def __post_init__(self) -> None:
        """Check table lengths and that the home pose is within limits."""
        object.__setattr__(self, "joint_limits", tuple(self.joint_limits))
        object.__setattr__(self, "dh_params", tuple(self.dh_params))
        object.__setattr__(self, "home_joints", tuple(float(v) for v in self.home_joints))
        self._check_lengths()
        self._check_home()

    def _check_lengths(self) -> None:
        """Raise if the per-joint tables disagree on the joint count.

        Raises:
            ValueError: When any table length differs from ``NUM_JOINTS``.
        """
        for label, table in (
            ("joint_limits", self.joint_limits),
            ("dh_params", self.dh_params),
            ("home_joints", self.home_joints),
        ):
            if len(table) != NUM_JOINTS:
                raise ValueError(f"{label} must have {NUM_JOINTS} entries, got {len(table)}")

    def _check_home(self) -> None:
        """Raise if a home angle lies outside its joint range.

        Raises:
            ValueError: On the first out-of-range home angle.
        """
        for angle, limit in zip(self.home_joints, self.joint_limits):
            if not limit.contains(angle):
                raise ValueError(
                    f"Home angle {angle} for joint {limit.name} outside "
                    f"[{limit.min_deg}, {limit.max_deg}]"
                )

    # ------------------------------------------------------------------
    # Derived tables
    # ------------------------------------------------------------------

    @property
    def joint_count(self) -> int:
        """Number of joints in the chain."""
        return len(self.joint_limits)

    @property
    def lower_limits(self) -> np.ndarray:
        """Per-joint lower angle limits (degrees)."""
        return np.array([lim.min_deg for lim in self.joint_limits], dtype=np.float64)

    @property
    def upper_limits(self) -> np.ndarray:
        """Per-joint upper angle limits (degrees)."""
        return np.array([lim.max_deg for lim in self.joint_limits], dtype=np.float64)

    @property
    def max_speeds(self) -> np.ndarray:
        """Per-joint speed limits (degrees per second)."""
        return np.array([lim.max_speed_deg_s for lim in self.joint_limits], dtype=np.float64)

    @property
    def home(self) -> np.ndarray:
        """Home pose as a fresh array (degrees)."""
        return np.array(self.home_joints, dtype=np.float64)

    # ------------------------------------------------------------------
    # Geometry used by the closed-form solver
    # ------------------------------------------------------------------

    @property
    def base_height(self) -> float:
        """Height of the shoulder axis above the base frame."""
        return self.dh_params[0].d

    @property
    def upper_arm_length(self) -> float:
        """Shoulder-to-elbow length."""
        return self.dh_params[1].a

    @property
    def forearm_length(self) -> float:
        """Elbow-to-wrist-centre length."""
        return self.dh_params[3].d

    @property
    def tool_length(self) -> float:
        """Wrist-centre-to-flange offset along the tool axis."""
        return self.dh_params[5].d
