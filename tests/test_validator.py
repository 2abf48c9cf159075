"""Tests for the composite motion validator."""

import numpy as np
import pytest

from robot_arm_sim.errors import (
    CollisionDetectedError,
    JointLimitExceededError,
    OutOfWorkspaceError,
)
from robot_arm_sim.safety.collision import Obstacle
from robot_arm_sim.safety.validator import MotionValidator, ValidationSettings


@pytest.fixture
def validator(model):
    return MotionValidator(model)


def test_out_of_workspace_raises(validator):
    with pytest.raises(OutOfWorkspaceError) as excinfo:
        validator.require_position([1000.0, 0.0, 300.0])
    assert excinfo.value.violated_axes == ("x",)


def test_auto_correct_clamps_position(validator):
    corrected = validator.require_position([1000.0, 0.0, 300.0], auto_correct=True)
    assert np.array_equal(corrected, [500.0, 0.0, 300.0])


def test_near_boundary_is_a_warning(validator):
    report = validator.validate_position([495.0, 0.0, 300.0])
    assert report.valid
    assert report.warnings == ["Position near workspace boundary"]


def test_collision_at_target_raises(validator):
    validator.collisions.add_obstacle(Obstacle.box("table", [300.0, 100.0, 300.0], [50.0, 50.0, 50.0]))
    with pytest.raises(CollisionDetectedError) as excinfo:
        validator.require_position([300.0, 100.0, 300.0])
    assert excinfo.value.obstacle_name == "table"


def test_disabled_workspace_check_accepts_any_position(model):
    validator = MotionValidator(model, ValidationSettings(enforce_workspace=False))
    assert np.array_equal(validator.require_position([1000.0, 0.0, 300.0]), [1000.0, 0.0, 300.0])


def test_joint_limits_raise(validator):
    with pytest.raises(JointLimitExceededError) as excinfo:
        validator.require_joints([0.0, 0.0, 200.0, 0.0, 0.0, 0.0])
    assert [v.index for v in excinfo.value.violations] == [2]


def test_joint_report_lists_each_violation(validator):
    report = validator.validate_joints([0.0, 0.0, 200.0, 0.0, 0.0, 400.0])
    assert not report.valid
    assert report.errors[0] == "Joint limits exceeded"
    assert len(report.errors) == 3


def test_auto_correct_clamps_joints(validator):
    joints = validator.require_joints([0.0, 0.0, 200.0, 0.0, 0.0, 0.0], auto_correct=True)
    assert joints[2] == 165.0


def test_path_through_obstacle_raises(validator):
    validator.collisions.add_obstacle(Obstacle.box("post", [300.0, 0.0, 300.0], [50.0, 50.0, 50.0]))
    with pytest.raises(CollisionDetectedError):
        validator.check_path([300.0, -200.0, 300.0], [300.0, 200.0, 300.0])


def test_path_leaving_box_raises(validator):
    with pytest.raises(OutOfWorkspaceError):
        validator.check_path([400.0, 0.0, 300.0], [600.0, 0.0, 300.0])


def test_path_from_outside_box_skips_workspace_samples(validator):
    validator.check_path([600.0, 0.0, 300.0], [300.0, 0.0, 300.0])


def test_path_validation_can_be_disabled(model):
    validator = MotionValidator(model, ValidationSettings(path_validation=False))
    validator.check_path([400.0, 0.0, 300.0], [600.0, 0.0, 300.0])


def test_summary(validator):
    validator.collisions.add_obstacle(Obstacle.box("post", [0.0, 0.0, 0.0], [1.0, 1.0, 1.0]))
    summary = validator.summary()
    assert summary["workspace"]["volume"] == pytest.approx(1000.0 * 1000.0 * 800.0)
    assert summary["workspace"]["center"] == [0.0, 0.0, 400.0]
    assert summary["obstacles"] == 1
    assert len(summary["joint_limits"]) == 6
    assert summary["settings"]["path_steps"] == 10


@pytest.mark.parametrize(
    "kwargs",
    [{"path_steps": 0}, {"safety_margin": -1.0}, {"tool_size": (1.0, 0.0, 1.0)}],
)
def test_settings_validation(kwargs):
    with pytest.raises(ValueError):
        ValidationSettings(**kwargs)
