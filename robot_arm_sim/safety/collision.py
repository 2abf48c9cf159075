"""
Axis-aligned bounding-box obstacles.

Obstacles are boxes given by centre and size; the tool is approximated by
a box of configurable size centred on the flange.  Only box-box overlap is
modelled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from robot_arm_sim.utils.helpers import as_vector


@dataclass(frozen=True)
class Obstacle:
    """A named axis-aligned box.

    Attributes:
        name: Label reported on collision.
        center: Box centre [x, y, z] (millimetres).
        size: Full edge lengths [dx, dy, dz] (millimetres).
    """

    name: str
    center: np.ndarray
    size: np.ndarray

    @classmethod
    def box(cls, name: str, center: Sequence[float], size: Sequence[float]) -> Obstacle:
        """Build an obstacle from plain sequences.

        Raises:
            ValueError: If a size component is not positive.
        """
        size_arr = as_vector(size, 3, "size")
        if np.any(size_arr <= 0):
            raise ValueError(f"Obstacle '{name}' needs positive size, got {size_arr.tolist()}")
        return cls(name=name, center=as_vector(center, 3, "center"), size=size_arr)


def boxes_intersect(
    center_a: np.ndarray, size_a: np.ndarray, center_b: np.ndarray, size_b: np.ndarray
) -> bool:
    """Strict overlap test of two axis-aligned boxes (touching faces do not count)."""
    return bool(np.all(np.abs(center_a - center_b) < (size_a + size_b) / 2.0))


class CollisionDetector:
    """Keeps a list of obstacles and tests tool positions against them."""

    def __init__(self) -> None:
        self.obstacles: List[Obstacle] = []

    def add_obstacle(self, obstacle: Obstacle) -> None:
        self.obstacles.append(obstacle)

    def clear_obstacles(self) -> None:
        self.obstacles = []

    def check_collision(
        self, position: Sequence[float] | np.ndarray, tool_size: Sequence[float] | np.ndarray
    ) -> Optional[Obstacle]:
        """Return the first obstacle overlapping the tool box at *position*.

        Args:
            position: Tool centre [x, y, z].
            tool_size: Tool box edge lengths.

        Returns:
            The colliding ``Obstacle`` or *None*.
        """
        pos = as_vector(position, 3, "position")
        size = as_vector(tool_size, 3, "tool_size")
        for obstacle in self.obstacles:
            if boxes_intersect(pos, size, obstacle.center, obstacle.size):
                return obstacle
        return None
