"""Tests for workspace and joint-limit checks."""

import numpy as np
import pytest

from robot_arm_sim.safety.limits import LimitValidator


@pytest.fixture
def limits(model):
    return LimitValidator(model)


def test_position_outside_x_reports_axis(limits):
    check = limits.validate_position([1000.0, 0.0, 300.0])
    assert not check.valid
    assert check.violated_axes == ("x",)


def test_position_reports_every_violated_axis(limits):
    check = limits.validate_position([0.0, -600.0, -1.0])
    assert check.violated_axes == ("y", "z")


def test_position_bounds_are_inclusive(limits):
    assert limits.validate_position([500.0, -500.0, 800.0]).valid
    assert limits.validate_position([0.0, 0.0, 0.0]).valid


def test_clamp_position(limits):
    clamped = limits.clamp_position([1000.0, -700.0, 300.0])
    assert np.array_equal(clamped, [500.0, -500.0, 300.0])
    assert limits.validate_position(clamped).valid


def test_distance_to_boundary(limits):
    assert limits.distance_to_boundary([0.0, 0.0, 400.0]) == pytest.approx(400.0)
    assert limits.distance_to_boundary([495.0, 0.0, 400.0]) == pytest.approx(5.0)
    assert limits.distance_to_boundary([520.0, 0.0, 400.0]) == pytest.approx(-20.0)


def test_is_position_safe(limits):
    assert limits.is_position_safe([0.0, 0.0, 400.0], margin=10.0)
    assert not limits.is_position_safe([495.0, 0.0, 400.0], margin=10.0)


def test_path_inside_box_is_valid(limits):
    assert limits.is_path_valid([-400.0, -400.0, 100.0], [400.0, 400.0, 700.0])


def test_path_leaving_box_is_invalid(limits):
    assert not limits.is_path_valid([400.0, 0.0, 300.0], [600.0, 0.0, 300.0])


def test_path_sampling_checks_endpoints(limits):
    assert not limits.is_path_valid([0.0, 0.0, 300.0], [0.0, 0.0, 801.0], steps=1)


def test_path_steps_must_be_positive(limits):
    with pytest.raises(ValueError):
        limits.is_path_valid([0.0, 0.0, 0.0], [1.0, 1.0, 1.0], steps=0)


def test_joints_within_limits(limits):
    check = limits.validate_joints([30.0, 45.0, -45.0, 90.0, -90.0, 180.0])
    assert check.valid
    assert check.violations == ()


def test_joint_violation_details(limits):
    check = limits.validate_joints([0.0, 0.0, 170.0, 0.0, 0.0, -400.0])
    assert not check.valid
    assert [v.index for v in check.violations] == [2, 5]
    first = check.violations[0]
    assert first.value == 170.0
    assert first.limit.max_deg == 165.0
    assert "Joint 3" in str(first)


def test_clamp_joints_is_idempotent(limits, rng):
    for _ in range(20):
        joints = rng.uniform(-500.0, 500.0, size=6)
        once = limits.clamp_joints(joints)
        assert np.array_equal(limits.clamp_joints(once), once)
        assert limits.validate_joints(once).valid


def test_joint_velocities(limits):
    assert limits.validate_joint_velocities([100.0] * 6).valid
    check = limits.validate_joint_velocities([200.0, -200.0, 200.0, 0.0, 0.0, 0.0])
    assert [v.index for v in check.violations] == [0, 1]
    assert all(v.kind == "velocity" for v in check.violations)


def test_wrong_length_raises(limits):
    with pytest.raises(ValueError):
        limits.validate_joints([0.0] * 5)
