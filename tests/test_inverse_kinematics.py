"""Tests for the geometric and numerical inverse-kinematics solvers."""

from dataclasses import replace

import numpy as np
import pytest

from robot_arm_sim.errors import NotConvergedError, UnreachableError
from robot_arm_sim.kinematics import inverse
from robot_arm_sim.kinematics.forward import forward_kinematics
from robot_arm_sim.kinematics.inverse import (
    ElbowConfig,
    NumericIKSettings,
    _checked_cosine,
    inverse_geometric,
    inverse_numeric,
    numerical_jacobian,
    solve_inverse,
    solve_normal_equations,
)
from robot_arm_sim.robots.robot_model import DHParameters, RobotModel

OUT_OF_REACH = [0.0, 0.0, 790.0]
# Wrist centre 550 mm out at shoulder height: upper arm and forearm in line.
FULL_EXTENSION = np.array([550.0, 0.0, 70.0])


def _position(model, joints):
    return forward_kinematics(model, joints).position


# ----------------------------------------------------------------------
# Geometric solver
# ----------------------------------------------------------------------


def test_geometric_recovers_home_on_down_branch(model):
    target = _position(model, model.home)
    joints = inverse_geometric(model, target, elbow=ElbowConfig.DOWN)
    assert np.allclose(joints, model.home, atol=1e-6)


def test_geometric_up_branch_reaches_same_point(model):
    target = _position(model, model.home)
    joints = inverse_geometric(model, target, elbow=ElbowConfig.UP)
    assert joints[2] == pytest.approx(90.0)
    assert np.allclose(_position(model, joints), target, atol=1e-6)


def test_geometric_round_trip_random_joints(model, rng):
    solved = 0
    for _ in range(60):
        joints = rng.uniform(-150.0, 150.0, size=6)
        target = _position(model, joints)
        for elbow in ElbowConfig:
            try:
                solution = inverse_geometric(model, target, elbow=elbow)
            except UnreachableError:
                continue
            assert np.linalg.norm(_position(model, solution) - target) < 1e-3
            solved += 1
    assert solved > 0


def test_geometric_holds_tool_pointing_down(model):
    joints = inverse_geometric(model, [300.0, 100.0, 300.0])
    pose = forward_kinematics(model, joints)
    assert np.allclose(pose.rotation[:, 2], [0.0, 0.0, -1.0], atol=1e-9)


def test_geometric_horizontal_approach(model):
    target = np.array([400.0, 0.0, 300.0])
    joints = inverse_geometric(model, target, approach_pitch_deg=0.0)
    pose = forward_kinematics(model, joints)
    assert np.allclose(pose.position, target, atol=1e-6)
    assert np.allclose(pose.rotation[:, 2], [1.0, 0.0, 0.0], atol=1e-9)


def test_geometric_wrist_roll_sets_joint_six(model):
    joints = inverse_geometric(model, [300.0, 100.0, 300.0], wrist_roll_deg=45.0)
    assert joints[5] == 45.0


def test_geometric_out_of_reach_is_unreachable(model):
    with pytest.raises(UnreachableError) as excinfo:
        inverse_geometric(model, OUT_OF_REACH)
    assert excinfo.value.target == tuple(OUT_OF_REACH)


def test_geometric_rejects_limit_violation(model):
    # Limit joint 1 so that a target behind the arm needs an out-of-range base angle.
    limits = (replace(model.joint_limits[0], min_deg=-90.0, max_deg=90.0),) + model.joint_limits[1:]
    tight = replace(model, joint_limits=limits)
    with pytest.raises(UnreachableError, match="joint 1"):
        inverse_geometric(tight, [-300.0, 0.0, 300.0])


def _single_link_model():
    return RobotModel(dh_params=(DHParameters(d=60.0),) + (DHParameters(),) * 5)


def _relaxed_elbow_model(model):
    elbow = replace(model.joint_limits[2], min_deg=-185.0, max_deg=185.0)
    return replace(model, joint_limits=model.joint_limits[:2] + (elbow,) + model.joint_limits[3:])


@pytest.mark.parametrize("value", [-1.0 - 5e-7, 1.0 + 5e-7])
def test_cosine_rounding_noise_is_snapped(value):
    assert _checked_cosine(value, np.zeros(3), 550.0) == np.sign(value)


def test_cosine_inside_range_is_unchanged():
    assert _checked_cosine(-0.25, np.zeros(3), 400.0) == -0.25


@pytest.mark.parametrize("value", [-1.0 - 1e-5, 1.0 + 1e-5])
def test_cosine_overshoot_beyond_noise_is_unreachable(value):
    with pytest.raises(UnreachableError, match="outside the shoulder/elbow reach"):
        _checked_cosine(value, np.zeros(3), 550.0)


def test_geometric_full_extension_within_noise_is_solved(model):
    relaxed = _relaxed_elbow_model(model)
    # 5e-5 mm past full extension overshoots the cosine by about 4e-7.
    target = FULL_EXTENSION + np.array([5e-5, 0.0, 0.0])
    joints = inverse_geometric(relaxed, target)
    assert abs(joints[2]) == pytest.approx(180.0)
    assert np.linalg.norm(_position(relaxed, joints) - target) < 1e-3


def test_geometric_past_full_extension_is_unreachable(model):
    relaxed = _relaxed_elbow_model(model)
    with pytest.raises(UnreachableError, match="outside the shoulder/elbow reach"):
        inverse_geometric(relaxed, FULL_EXTENSION + np.array([0.01, 0.0, 0.0]))


def test_geometric_needs_shoulder_and_elbow_links():
    with pytest.raises(UnreachableError, match="non-zero upper arm and forearm"):
        inverse_geometric(_single_link_model(), [10.0, 0.0, 60.0])


# ----------------------------------------------------------------------
# Numerical solver
# ----------------------------------------------------------------------


def test_numerical_jacobian_matches_finite_motion(model):
    joints = np.deg2rad([20.0, 70.0, -80.0, 10.0, 80.0, 0.0])
    jacobian = numerical_jacobian(model, joints, 1e-3)
    assert jacobian.shape == (3, 6)
    # Joint 6 rotates about the tool axis and does not move the flange.
    assert np.allclose(jacobian[:, 5], 0.0, atol=1e-6)


def test_normal_equations_step_reduces_error():
    jacobian = np.array([[1.0, 0.0, 0.0, 0.0, 0.0, 0.0],
                         [0.0, 2.0, 0.0, 0.0, 0.0, 0.0],
                         [0.0, 0.0, 4.0, 0.0, 0.0, 0.0]])
    error = np.array([1.0, 2.0, 4.0])
    delta = solve_normal_equations(jacobian, error, 1e-9)
    assert np.allclose(jacobian @ delta, error, atol=1e-6)


def test_numeric_converges_from_nearby_seed(model):
    solution = np.array([20.0, 70.0, -80.0, 10.0, 80.0, 0.0])
    target = _position(model, solution)
    seed = solution + np.array([0.2, -0.2, 0.2, 0.0, 0.0, 0.0])
    joints = inverse_numeric(model, target, initial_guess=seed)
    assert np.linalg.norm(_position(model, joints) - target) < 1e-3


def test_numeric_returns_seed_when_already_on_target(model):
    target = _position(model, model.home)
    joints = inverse_numeric(model, target, initial_guess=model.home)
    assert np.allclose(joints, model.home)


def test_numeric_not_converged_carries_best_effort(model):
    with pytest.raises(NotConvergedError) as excinfo:
        inverse_numeric(model, OUT_OF_REACH, settings=NumericIKSettings(max_iterations=20))
    err = excinfo.value
    assert err.iterations == 20
    assert err.best_effort.shape == (6,)
    assert err.residual > 1e-3


def test_numeric_keeps_iterates_within_limits(model):
    with pytest.raises(NotConvergedError) as excinfo:
        inverse_numeric(model, OUT_OF_REACH, settings=NumericIKSettings(max_iterations=30))
    best = excinfo.value.best_effort
    assert np.all(best >= model.lower_limits - 1e-9)
    assert np.all(best <= model.upper_limits + 1e-9)


@pytest.mark.parametrize(
    "kwargs",
    [{"max_iterations": 0}, {"tolerance": 0.0}, {"step_size": -0.1}, {"damping": -1.0}],
)
def test_numeric_settings_validation(kwargs):
    with pytest.raises(ValueError):
        NumericIKSettings(**kwargs)


# ----------------------------------------------------------------------
# Combined solver
# ----------------------------------------------------------------------


def test_solve_inverse_prefers_geometric(model):
    result = solve_inverse(model, [300.0, 100.0, 300.0])
    assert result.method == "geometric"
    assert result.position_error < 1e-3


def test_solve_inverse_without_fallback_raises_unreachable(model):
    with pytest.raises(UnreachableError):
        solve_inverse(model, OUT_OF_REACH, allow_numeric=False)


def test_solve_inverse_single_link_model_uses_numeric_fallback():
    single = _single_link_model()
    result = solve_inverse(single, [0.0, 0.0, 60.0])
    assert result.method == "numeric"
    with pytest.raises(NotConvergedError):
        solve_inverse(single, [10.0, 0.0, 60.0], settings=NumericIKSettings(max_iterations=10))


def test_solve_inverse_falls_back_to_numeric(model, monkeypatch):
    def _unreachable(model, target, elbow=ElbowConfig.UP):
        raise UnreachableError(target, "forced")

    monkeypatch.setattr(inverse, "inverse_geometric", _unreachable)
    solution = np.array([20.0, 70.0, -80.0, 10.0, 80.0, 0.0])
    target = _position(model, solution)
    result = solve_inverse(model, target, seed=solution + 0.2)
    assert result.method == "numeric"
    assert result.position_error < 1e-3


def test_solve_inverse_rejects_unverified_solution(model, monkeypatch):
    monkeypatch.setattr(inverse, "inverse_geometric", lambda model, target, elbow: model.home)
    with pytest.raises(UnreachableError, match="misses the target"):
        solve_inverse(model, [300.0, 100.0, 300.0])
