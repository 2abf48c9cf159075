"""
Forward kinematics over a Denavit-Hartenberg chain.

Each joint contributes ``T_i = Rot_z(theta_i + offset_i) Trans_z(d_i)
Trans_x(a_i) Rot_x(alpha_i)``; the end-effector pose is the product
``T_0 T_1 ... T_{N-1}``.  Public functions take joint angles in degrees,
the ``*_rad`` helpers are used by the inverse solvers.

Classes:
    Pose: End-effector position, rotation, full transform, and Euler angles.

Functions:
    dh_transform: Homogeneous transform of a single DH row.
    chain_transform: Product of the first *upto* joint transforms.
    forward_kinematics: Joint angles (degrees) to end-effector ``Pose``.
    rotation_to_euler: Rotation matrix to (rx, ry, rz) in degrees.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from robot_arm_sim.robots.robot_model import RobotModel
from robot_arm_sim.utils.helpers import as_vector


@dataclass(frozen=True)
class Pose:
    """End-effector pose produced by forward kinematics.

    Attributes:
        position: [x, y, z] in millimetres.
        rotation: 3x3 rotation matrix of the flange frame.
        transform: Full 4x4 homogeneous transform.
        euler: [rx, ry, rz] in degrees.
    """

    position: np.ndarray
    rotation: np.ndarray
    transform: np.ndarray
    euler: np.ndarray


def dh_transform(a: float, alpha: float, d: float, theta: float) -> np.ndarray:
    """Return the 4x4 transform of one standard DH row.

    Args:
        a: Link length.
        alpha: Link twist (radians).
        d: Link offset.
        theta: Total joint angle including its offset (radians).

    Returns:
        4x4 homogeneous transformation matrix.
    """
    ct, st = np.cos(theta), np.sin(theta)
    ca, sa = np.cos(alpha), np.sin(alpha)
    return np.array(
        [
            [ct, -st * ca, st * sa, a * ct],
            [st, ct * ca, -ct * sa, a * st],
            [0.0, sa, ca, d],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def chain_transform(
    model: RobotModel, joints_rad: Sequence[float], upto: Optional[int] = None
) -> np.ndarray:
    """Multiply the joint transforms of the first *upto* joints.

    Args:
        model: Arm description providing the DH table.
        joints_rad: Joint angles in radians (at least *upto* entries).
        upto: Number of joints to include; all of them when *None*.

    Returns:
        The accumulated 4x4 transform from the base frame.
    """
    count = model.joint_count if upto is None else upto
    transform = np.eye(4)
    for dh, theta in zip(model.dh_params[:count], joints_rad[:count]):
        transform = transform @ dh_transform(
            dh.a, np.deg2rad(dh.alpha_deg), dh.d, theta + np.deg2rad(dh.offset_deg)
        )
    return transform


def rotation_to_euler(rotation: np.ndarray) -> np.ndarray:
    """Extract (rx, ry, rz) in degrees from a rotation matrix.

    Uses ``rx = atan2(R21, R22)``, ``ry = atan2(-R20, hypot(R21, R22))``,
    ``rz = atan2(R10, R00)``.

    Args:
        rotation: 3x3 (or larger, upper-left block used) rotation matrix.

    Returns:
        Array of three angles in degrees.
    """
    r = rotation
    rx = np.arctan2(r[2, 1], r[2, 2])
    ry = np.arctan2(-r[2, 0], np.hypot(r[2, 1], r[2, 2]))
    rz = np.arctan2(r[1, 0], r[0, 0])
    return np.rad2deg(np.array([rx, ry, rz], dtype=np.float64))


def forward_position_rad(model: RobotModel, joints_rad: np.ndarray) -> np.ndarray:
    """Return only the end-effector position for joint angles in radians."""
    return chain_transform(model, joints_rad)[:3, 3].copy()


def forward_kinematics(model: RobotModel, joints: Sequence[float] | np.ndarray) -> Pose:
    """Compute the end-effector pose for a joint vector.

    Pure function: deterministic, no side effects.

    Args:
        model: Arm description providing the DH table.
        joints: Joint angles in degrees, one per joint.

    Returns:
        The end-effector ``Pose``.

    Raises:
        ValueError: If *joints* has the wrong length.
    """
    joints_deg = as_vector(joints, model.joint_count, "joints")
    transform = chain_transform(model, np.deg2rad(joints_deg))
    rotation = transform[:3, :3].copy()
    return Pose(
        position=transform[:3, 3].copy(),
        rotation=rotation,
        transform=transform,
        euler=rotation_to_euler(rotation),
    )
