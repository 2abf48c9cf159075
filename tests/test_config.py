"""Tests for SimulatorConfig and the YAML loader."""

from pathlib import Path

import pytest

from robot_arm_sim.config import SimulatorConfig, config_from_dict, load_config
from robot_arm_sim.kinematics.inverse import ElbowConfig, NumericIKSettings
from robot_arm_sim.safety.validator import ValidationSettings

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config.yaml"


def test_defaults():
    config = SimulatorConfig()
    assert config.interpolation_steps == 20
    assert config.min_move_duration == 0.5
    assert config.gripper_actuation_time == 0.2
    assert config.elbow_config is ElbowConfig.UP
    assert isinstance(config.ik, NumericIKSettings)
    assert isinstance(config.safety, ValidationSettings)
    assert config.build_model().name == "industrial"


def test_repository_config_loads():
    config = load_config(REPO_CONFIG)
    assert config.model_name == "industrial"
    assert config.ik == NumericIKSettings()
    assert config.safety == ValidationSettings()
    assert config.logging["level"] == "INFO"
    assert config.build_model().workspace.z_max == 800.0


def test_nested_sections(tmp_path):
    path = tmp_path / "sim.yaml"
    path.write_text(
        "model_name: desktop\n"
        "elbow: down\n"
        "ik:\n"
        "  max_iterations: 250\n"
        "safety:\n"
        "  safety_margin: 25.0\n"
        "  tool_size: [40, 40, 60]\n"
        "model_overrides:\n"
        "  workspace: {x_min: -300, x_max: 300, y_min: -300, y_max: 300, z_min: 0, z_max: 500}\n"
    )
    config = load_config(path)
    assert config.elbow_config is ElbowConfig.DOWN
    assert config.ik.max_iterations == 250
    assert config.ik.step_size == 0.1
    assert config.safety.safety_margin == 25.0
    assert config.safety.tool_size == (40.0, 40.0, 60.0)
    model = config.build_model()
    assert model.name == "desktop"
    assert model.workspace.x_max == 300.0


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == SimulatorConfig()


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_unknown_top_level_key_raises():
    with pytest.raises(ValueError, match="max_speed"):
        config_from_dict({"max_speed": 10})


def test_unknown_nested_key_raises():
    with pytest.raises(ValueError, match="ik"):
        config_from_dict({"ik": {"iterations": 10}})


def test_non_mapping_document_raises(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_config(path)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"interpolation_steps": 0},
        {"min_move_duration": -1.0},
        {"default_speed": 0.0},
        {"default_gripper_force": -5.0},
        {"elbow": "sideways"},
    ],
)
def test_invalid_values_raise(kwargs):
    with pytest.raises(ValueError):
        SimulatorConfig(**kwargs)
