"""
Shared constants for the robot_arm_sim package.

Holds the default kinematic tables of the registered arms and the timing
defaults of the motion queue.  Lengths are millimetres, angles degrees,
speeds degrees (or millimetres) per second, durations seconds.
"""

from __future__ import annotations

from typing import Tuple

# ---------------------------------------------------------------------------
# Arm geometry
# ---------------------------------------------------------------------------
NUM_JOINTS: int = 6
JOINT_NAMES: Tuple[str, ...] = ("BASE", "SHOULDER", "ELBOW", "WRIST1", "WRIST2", "WRIST3")
AXIS_NAMES: Tuple[str, str, str] = ("x", "y", "z")

# ---------------------------------------------------------------------------
# Industrial arm (default): DH rows are (a, alpha_deg, d, offset_deg)
# ---------------------------------------------------------------------------
INDUSTRIAL_DH: Tuple[Tuple[float, float, float, float], ...] = (
    (0.0, 90.0, 150.0, 0.0),
    (300.0, 180.0, 0.0, 0.0),
    (0.0, 90.0, 0.0, -90.0),
    (0.0, -90.0, 250.0, 0.0),
    (0.0, 90.0, 0.0, 0.0),
    (0.0, 0.0, 80.0, 0.0),
)
INDUSTRIAL_JOINT_LOWER: Tuple[float, ...] = (-360.0, -360.0, -165.0, -360.0, -360.0, -360.0)
INDUSTRIAL_JOINT_UPPER: Tuple[float, ...] = (360.0, 360.0, 165.0, 360.0, 360.0, 360.0)
INDUSTRIAL_MAX_SPEED: Tuple[float, ...] = (155.0, 155.0, 230.0, 270.0, 270.0, 270.0)
INDUSTRIAL_HOME: Tuple[float, ...] = (0.0, 90.0, -90.0, 0.0, 90.0, 0.0)

# ---------------------------------------------------------------------------
# Desktop arm: shorter links, tighter ranges
# ---------------------------------------------------------------------------
DESKTOP_DH: Tuple[Tuple[float, float, float, float], ...] = (
    (0.0, 90.0, 100.0, 0.0),
    (200.0, 180.0, 0.0, 0.0),
    (0.0, 90.0, 0.0, -90.0),
    (0.0, -90.0, 150.0, 0.0),
    (0.0, 90.0, 0.0, 0.0),
    (0.0, 0.0, 70.0, 0.0),
)
DESKTOP_JOINT_LOWER: Tuple[float, ...] = (-180.0, -90.0, -150.0, -180.0, -120.0, -360.0)
DESKTOP_JOINT_UPPER: Tuple[float, ...] = (180.0, 90.0, 150.0, 180.0, 120.0, 360.0)
DESKTOP_MAX_SPEED: Tuple[float, ...] = (100.0, 100.0, 100.0, 150.0, 150.0, 150.0)
DESKTOP_HOME: Tuple[float, ...] = (0.0, 90.0, -90.0, 0.0, 90.0, 0.0)

# ---------------------------------------------------------------------------
# Workspace box (min, max) per axis
# ---------------------------------------------------------------------------
DEFAULT_WORKSPACE_X: Tuple[float, float] = (-500.0, 500.0)
DEFAULT_WORKSPACE_Y: Tuple[float, float] = (-500.0, 500.0)
DEFAULT_WORKSPACE_Z: Tuple[float, float] = (0.0, 800.0)

# ---------------------------------------------------------------------------
# Motion queue defaults
# ---------------------------------------------------------------------------
DEFAULT_INTERPOLATION_STEPS: int = 20
DEFAULT_MIN_MOVE_DURATION: float = 0.5
DEFAULT_SPEED: float = 100.0
DEFAULT_ACCELERATION: float = 50.0
GRIPPER_ACTUATION_TIME: float = 0.2
GRIPPER_CLOSED_THRESHOLD: float = 50.0
DEFAULT_GRIPPER_FORCE: float = 50.0

# ---------------------------------------------------------------------------
# Kinematics tolerances
# ---------------------------------------------------------------------------
COS_NOISE_TOLERANCE: float = 1e-6
POSITION_TOLERANCE: float = 1e-3
