"""
Simulator configuration and its YAML loader.

``SimulatorConfig`` gathers every tunable of the motion queue, the inverse
kinematics fallback, and the safety layer in one dataclass with documented
defaults.  ``load_config`` maps a YAML file onto it; nested sections map
onto the nested dataclasses and unknown keys are rejected.

Classes:
    SimulatorConfig: Top-level configuration.

Functions:
    config_from_dict: Build a ``SimulatorConfig`` from a plain mapping.
    load_config: Read a YAML file into a ``SimulatorConfig``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Type, TypeVar

import yaml

from robot_arm_sim.kinematics.inverse import ElbowConfig, NumericIKSettings
from robot_arm_sim.robots.factory import make_robot_model
from robot_arm_sim.robots.robot_model import RobotModel
from robot_arm_sim.safety.validator import ValidationSettings
from robot_arm_sim.utils.constants import (
    DEFAULT_ACCELERATION,
    DEFAULT_GRIPPER_FORCE,
    DEFAULT_INTERPOLATION_STEPS,
    DEFAULT_MIN_MOVE_DURATION,
    DEFAULT_SPEED,
    GRIPPER_ACTUATION_TIME,
    POSITION_TOLERANCE,
)

T = TypeVar("T")


def _default_logging() -> Dict[str, Any]:
    return {"level": "INFO"}


@dataclass
class SimulatorConfig:
    """Configuration of one simulated arm and its motion queue.

    Attributes:
        model_name: Registered robot model (``'industrial'`` or ``'desktop'``).
        model_overrides: ``RobotModel`` fields to replace (workspace box,
            home pose, approach pitch, ...).
        interpolation_steps: Steps per move.
        min_move_duration: Lower bound on a move's duration (seconds).
        default_speed: Speed used when a submit call gives none
            (mm/s for Cartesian moves, deg/s for joint moves).
        default_acceleration: Acceleration recorded on Cartesian moves.
        gripper_actuation_time: Time a gripper command takes (seconds).
        default_gripper_force: Force used when ``set_gripper`` gives none.
        elbow: Default elbow branch, ``'up'`` or ``'down'``.
        numeric_fallback: Try Newton-Raphson when the closed form fails.
        verify_tolerance: Accepted FK error of an IK solution (mm).
        ik: Numerical solver parameters.
        safety: Validation switches and parameters.
        logging: Dict handed to ``setup_logging`` by the entry point.
    """

    model_name: str = "industrial"
    model_overrides: Dict[str, Any] = field(default_factory=dict)
    interpolation_steps: int = DEFAULT_INTERPOLATION_STEPS
    min_move_duration: float = DEFAULT_MIN_MOVE_DURATION
    default_speed: float = DEFAULT_SPEED
    default_acceleration: float = DEFAULT_ACCELERATION
    gripper_actuation_time: float = GRIPPER_ACTUATION_TIME
    default_gripper_force: float = DEFAULT_GRIPPER_FORCE
    elbow: str = "up"
    numeric_fallback: bool = True
    verify_tolerance: float = POSITION_TOLERANCE
    ik: NumericIKSettings = field(default_factory=NumericIKSettings)
    safety: ValidationSettings = field(default_factory=ValidationSettings)
    logging: Dict[str, Any] = field(default_factory=_default_logging)

    def __post_init__(self) -> None:
        if self.interpolation_steps < 1:
            raise ValueError("`interpolation_steps` must be at least 1")
        for name in ("min_move_duration", "gripper_actuation_time"):
            if getattr(self, name) < 0:
                raise ValueError(f"`{name}` must be non-negative")
        for name in ("default_speed", "default_acceleration", "verify_tolerance"):
            if getattr(self, name) <= 0:
                raise ValueError(f"`{name}` must be positive")
        if self.default_gripper_force < 0:
            raise ValueError("`default_gripper_force` must be non-negative")
        if self.elbow not in {e.value for e in ElbowConfig}:
            raise ValueError(f"Unknown elbow '{self.elbow}'. Choose from {[e.value for e in ElbowConfig]}")

    @property
    def elbow_config(self) -> ElbowConfig:
        return ElbowConfig(self.elbow)

    def build_model(self) -> RobotModel:
        """Instantiate the configured robot model with its overrides."""
        return make_robot_model(self.model_name, **self.model_overrides)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------
_NESTED: Dict[str, Type[Any]] = {"ik": NumericIKSettings, "safety": ValidationSettings}


def _build(cls: Type[T], data: Mapping[str, Any], section: str) -> T:
    """Instantiate dataclass *cls* from *data*, rejecting unknown keys.

    Args:
        cls: Target dataclass.
        data: Mapping of field names to values.
        section: Section label used in error messages.

    Returns:
        The constructed instance.

    Raises:
        ValueError: If *data* is not a mapping or names an unknown field.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"Config section '{section}' must be a mapping, got {type(data).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown keys in config section '{section}': {unknown}")
    return cls(**data)


def config_from_dict(data: Mapping[str, Any]) -> SimulatorConfig:
    """Build a ``SimulatorConfig`` from a plain (YAML-shaped) mapping.

    Args:
        data: Top-level mapping; ``ik`` and ``safety`` may be nested mappings.

    Returns:
        The validated configuration.

    Raises:
        ValueError: If *data* is not a mapping, or on unknown keys or
            invalid values.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"Configuration must be a mapping, got {type(data).__name__}")
    values = dict(data)
    for key, cls in _NESTED.items():
        if key in values and not isinstance(values[key], cls):
            values[key] = _build(cls, values[key], key)
    return _build(SimulatorConfig, values, "root")


def load_config(path: str | Path) -> SimulatorConfig:
    """Read a YAML configuration file.

    An empty file yields the defaults.

    Args:
        path: Location of the YAML file.

    Returns:
        The validated ``SimulatorConfig``.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the document is not a mapping or is invalid.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r") as f:
        data = yaml.safe_load(f)
    if data is None:
        return SimulatorConfig()
    return config_from_dict(data)
