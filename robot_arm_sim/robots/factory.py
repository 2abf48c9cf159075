"""
Factory function for creating named robot models.

Callers can instantiate any registered arm by name and override individual
fields (workspace box, home pose, approach pitch) without rebuilding the
full tables.

Functions:
    make_robot_model: Create a ``RobotModel`` by name with optional overrides.
    available_models: List the registered model names.
"""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Any, Callable, Dict, List

from robot_arm_sim.robots.robot_model import (
    DHParameters,
    JointLimit,
    RobotModel,
    WorkspaceBounds,
)
from robot_arm_sim.utils.constants import (
    DESKTOP_DH,
    DESKTOP_HOME,
    DESKTOP_JOINT_LOWER,
    DESKTOP_JOINT_UPPER,
    DESKTOP_MAX_SPEED,
    JOINT_NAMES,
)


def _industrial() -> RobotModel:
    """Return the default industrial arm.

    Returns:
        A ``RobotModel`` built from the industrial tables.
    """
    return RobotModel(name="industrial")


def _desktop() -> RobotModel:
    """Return the smaller desktop arm.

    Returns:
        A ``RobotModel`` with desktop link lengths and joint ranges.
    """
    limits = tuple(
        JointLimit(name, lo, hi, speed)
        for name, lo, hi, speed in zip(
            JOINT_NAMES, DESKTOP_JOINT_LOWER, DESKTOP_JOINT_UPPER, DESKTOP_MAX_SPEED
        )
    )
    return RobotModel(
        name="desktop",
        joint_limits=limits,
        dh_params=tuple(DHParameters(*row) for row in DESKTOP_DH),
        workspace=WorkspaceBounds(-400.0, 400.0, -400.0, 400.0, 0.0, 600.0),
        home_joints=DESKTOP_HOME,
    )


# ---------------------------------------------------------------------------
# Model look-up table (name -> default model constructor)
# ---------------------------------------------------------------------------
_MODEL_REGISTRY: Dict[str, Callable[[], RobotModel]] = {
    "industrial": _industrial,
    "desktop": _desktop,
}


def available_models() -> List[str]:
    """Return the registered model names."""
    return list(_MODEL_REGISTRY)


def _coerce_override(key: str, value: Any) -> Any:
    """Convert plain YAML/dict values into the model's field types.

    Args:
        key: Name of the ``RobotModel`` field being overridden.
        value: Raw override value.

    Returns:
        The value converted to the field's type where needed.
    """
    if key == "workspace" and isinstance(value, dict):
        return WorkspaceBounds(**value)
    if key == "home_joints":
        return tuple(float(v) for v in value)
    if key == "joint_limits":
        return tuple(v if isinstance(v, JointLimit) else JointLimit(**v) for v in value)
    if key == "dh_params":
        return tuple(v if isinstance(v, DHParameters) else DHParameters(**v) for v in value)
    return value


def make_robot_model(name: str = "industrial", **overrides: Any) -> RobotModel:
    """Create a registered robot model, optionally overriding fields.

    Args:
        name: One of the registered model names (``'industrial'``, ``'desktop'``).
        **overrides: ``RobotModel`` field values to replace.  ``workspace``
            may be given as a dict of box faces, the per-joint tables as
            lists of dicts.

    Returns:
        A concrete ``RobotModel`` instance.

    Raises:
        ValueError: If the name is not registered or an override names an
            unknown field.
    """
    if name not in _MODEL_REGISTRY:
        raise ValueError(f"Unknown robot model '{name}'. Choose from {available_models()}")
    model = _MODEL_REGISTRY[name]()
    if not overrides:
        return model
    known = {f.name for f in fields(RobotModel)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown robot model fields: {unknown}")
    coerced = {key: _coerce_override(key, value) for key, value in overrides.items()}
    return replace(model, **coerced)
