"""
Small stateless helpers used across the robot_arm_sim package.

Provides functions for numerical clamping, interpolation, vector
coercion, and distance computation.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def clamp(value: float, lo: float, hi: float) -> float:
    """Return *value* clamped to the closed interval [*lo*, *hi*].

    Args:
        value: The scalar to clamp.
        lo: Lower bound (inclusive).
        hi: Upper bound (inclusive).

    Returns:
        The clamped scalar.
    """
    return max(lo, min(hi, value))


def as_vector(values: Sequence[float] | np.ndarray, length: int, name: str = "vector") -> np.ndarray:
    """Copy *values* into a float64 array and check its length.

    Args:
        values: Any sequence of numbers.
        length: Required number of elements.
        name: Label used in the error message.

    Returns:
        A fresh 1-D float64 array.

    Raises:
        ValueError: When the input does not have exactly *length* elements
            or contains non-finite values.
    """
    arr = np.array(values, dtype=np.float64).reshape(-1)
    if arr.shape[0] != length:
        raise ValueError(f"Expected {name} of length {length}, got {arr.shape[0]}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} contains non-finite values: {arr.tolist()}")
    return arr


def lerp(start: np.ndarray, end: np.ndarray, t: float) -> np.ndarray:
    """Linearly interpolate between *start* and *end*.

    Written as ``(1 - t) * start + t * end`` so that ``t == 1`` reproduces
    *end* exactly.

    Args:
        start: Value at ``t = 0``.
        end: Value at ``t = 1``.
        t: Interpolation parameter in [0, 1].

    Returns:
        The interpolated array.
    """
    return (1.0 - t) * start + t * end


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Return the Euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)))


def max_abs_delta(a: np.ndarray, b: np.ndarray) -> float:
    """Return the largest per-component absolute difference of two vectors."""
    return float(np.max(np.abs(np.asarray(b) - np.asarray(a))))
