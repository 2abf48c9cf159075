"""
Mutable state of the simulated arm.

``RobotState`` is owned and mutated exclusively by the motion queue; every
other component receives snapshots produced by :meth:`RobotState.snapshot`.
Cartesian position and orientation are always the forward-kinematics image
of the joint vector: the only way to change the joints is
:meth:`RobotState.apply_joints`, which re-derives the pose.

Classes:
    GripperState: Gripper opening, open flag, and applied force.
    RobotState: Joint, Cartesian, gripper, and status fields.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

import numpy as np

from robot_arm_sim.kinematics.forward import forward_kinematics
from robot_arm_sim.robots.robot_model import RobotModel
from robot_arm_sim.utils.constants import GRIPPER_CLOSED_THRESHOLD


@dataclass
class GripperState:
    """Gripper opening and force.

    Attributes:
        position_pct: 0 = fully open, 100 = fully closed.
        is_open: True while ``position_pct`` is below the closed threshold.
        force: Last commanded gripping force.
    """

    position_pct: float = 0.0
    is_open: bool = True
    force: float = 0.0

    def update(self, position_pct: float, force: float) -> None:
        """Apply a new opening and force, recomputing the open flag."""
        self.position_pct = float(position_pct)
        self.is_open = self.position_pct < GRIPPER_CLOSED_THRESHOLD
        self.force = float(force)

    def copy(self) -> GripperState:
        """Return an independent copy."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"position_pct": self.position_pct, "is_open": self.is_open, "force": self.force}


@dataclass
class RobotState:
    """Joint, Cartesian, gripper, and status fields of the arm.

    Attributes:
        joints: Joint angles (degrees).
        position: End-effector position [x, y, z] (millimetres).
        orientation: End-effector Euler angles [rx, ry, rz] (degrees).
        gripper: Gripper state.
        is_moving: True while the motion queue is draining.
        is_homed: True once a homing move has completed.
        last_error: Message of the most recent execution failure.
        timestamp: Wall-clock time of the last mutation (seconds).
    """

    joints: np.ndarray
    position: np.ndarray
    orientation: np.ndarray
    gripper: GripperState = field(default_factory=GripperState)
    is_moving: bool = False
    is_homed: bool = False
    last_error: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def from_joints(cls, model: RobotModel, joints: np.ndarray) -> RobotState:
        """Build a state whose pose is the forward-kinematics image of *joints*.

        Args:
            model: Arm description used for forward kinematics.
            joints: Joint angles (degrees).

        Returns:
            A new ``RobotState``.
        """
        pose = forward_kinematics(model, joints)
        return cls(
            joints=np.array(joints, dtype=np.float64),
            position=pose.position,
            orientation=pose.euler,
        )

    def apply_joints(self, model: RobotModel, joints: np.ndarray) -> None:
        """Set the joint vector and re-derive position and orientation.

        Args:
            model: Arm description used for forward kinematics.
            joints: New joint angles (degrees).
        """
        pose = forward_kinematics(model, joints)
        self.joints = np.array(joints, dtype=np.float64)
        self.position = pose.position
        self.orientation = pose.euler
        self.touch()

    def touch(self) -> None:
        """Refresh the mutation timestamp."""
        self.timestamp = time.time()

    def snapshot(self) -> RobotState:
        """Return a deep copy safe to hand to other components."""
        return replace(
            self,
            joints=self.joints.copy(),
            position=self.position.copy(),
            orientation=self.orientation.copy(),
            gripper=self.gripper.copy(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly view of the state."""
        return {
            "joints": self.joints.tolist(),
            "position": dict(zip(("x", "y", "z"), self.position.tolist())),
            "orientation": dict(zip(("rx", "ry", "rz"), self.orientation.tolist())),
            "gripper": self.gripper.to_dict(),
            "is_moving": self.is_moving,
            "is_homed": self.is_homed,
            "last_error": self.last_error,
            "timestamp": self.timestamp,
        }
