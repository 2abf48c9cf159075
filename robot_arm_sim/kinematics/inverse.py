"""
Inverse kinematics: closed-form geometric solver and numerical fallback.

The geometric solver decouples the arm into a base rotation, a planar
shoulder/elbow pair solved with the law of cosines, and a spherical wrist
that holds the tool at a fixed approach pitch.  Any joint-limit violation
makes the whole solution unreachable; the solver never clamps, because a
clamped closed-form solution reaches a different point.

The numerical solver runs Newton-Raphson on position error only, using a
central-difference Jacobian and the normal equations of the 3xN system.
It clamps every iterate into the joint ranges and reports non-convergence
with its best-effort vector attached.

Classes:
    ElbowConfig: Elbow branch selector for the closed-form solver.
    NumericIKSettings: Iteration budget and step parameters of the fallback.
    IKSolution: Joint vector plus the method that produced it.

Functions:
    inverse_geometric: Closed-form position IK.
    inverse_numeric: Newton-Raphson position IK.
    solve_inverse: Geometric first, numeric fallback, verified by FK.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from robot_arm_sim.errors import NotConvergedError, UnreachableError
from robot_arm_sim.kinematics.forward import chain_transform, forward_position_rad
from robot_arm_sim.robots.robot_model import RobotModel
from robot_arm_sim.utils.constants import COS_NOISE_TOLERANCE, POSITION_TOLERANCE
from robot_arm_sim.utils.helpers import as_vector

logger = logging.getLogger(__name__)


class ElbowConfig(Enum):
    """Elbow branch of the closed-form solution.

    ``UP`` takes the positive joint-3 angle, ``DOWN`` the negative one; the
    shoulder angle is mirrored accordingly.
    """

    UP = "up"
    DOWN = "down"

    @property
    def sign(self) -> float:
        return 1.0 if self is ElbowConfig.UP else -1.0


@dataclass(frozen=True)
class NumericIKSettings:
    """Parameters of the Newton-Raphson fallback.

    Attributes:
        max_iterations: Iteration budget.
        tolerance: Convergence threshold on the position error norm (mm).
        epsilon: Joint perturbation for the numerical Jacobian (radians).
        step_size: Fraction of the Newton step applied per iteration.
        damping: Tikhonov term added to ``JᵀJ``, which is rank-deficient
            for a 3x6 Jacobian.
    """

    max_iterations: int = 100
    tolerance: float = POSITION_TOLERANCE
    epsilon: float = 1e-3
    step_size: float = 0.1
    damping: float = 1e-6

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError("`max_iterations` must be at least 1")
        for name in ("tolerance", "epsilon", "step_size"):
            if getattr(self, name) <= 0:
                raise ValueError(f"`{name}` must be positive")
        if self.damping < 0:
            raise ValueError("`damping` must be non-negative")


@dataclass(frozen=True)
class IKSolution:
    """Result of :func:`solve_inverse`.

    Attributes:
        joints: Joint angles in degrees.
        method: ``'geometric'`` or ``'numeric'``.
        position_error: Distance between the target and the FK of *joints*.
    """

    joints: np.ndarray
    method: str
    position_error: float


# ======================================================================
# Closed-form solver
# ======================================================================


def approach_direction(theta1: float, pitch: float) -> np.ndarray:
    """Unit tool axis for a base angle and a pitch below horizontal (radians)."""
    return np.array(
        [np.cos(theta1) * np.cos(pitch), np.sin(theta1) * np.cos(pitch), -np.sin(pitch)]
    )


def _checked_cosine(value: float, target: np.ndarray, reach: float) -> float:
    """Return *value* if it is a valid cosine, snapping pure rounding noise.

    Args:
        value: Cosine computed with the law of cosines.
        target: Cartesian target, for the error message.
        reach: Shoulder-to-wrist distance, for the error message.

    Returns:
        The cosine, clamped to +/-1 only when it overshoots by less than
        ``COS_NOISE_TOLERANCE``.

    Raises:
        UnreachableError: When the overshoot is larger than rounding noise.
    """
    if abs(value) <= 1.0:
        return value
    if abs(value) - 1.0 <= COS_NOISE_TOLERANCE:
        return float(np.sign(value))
    raise UnreachableError(
        target, f"wrist distance {reach:.1f} mm outside the shoulder/elbow reach (cos={value:.3f})"
    )


def _solve_wrist(
    model: RobotModel, arm_rad: Tuple[float, float, float], approach: np.ndarray
) -> Tuple[float, float]:
    """Return joints 4 and 5 (radians) that align the tool axis with *approach*.

    The approach direction is expressed in the joint-3 frame, where the
    spherical wrist maps it to ``(c4 s5, s4 s5, c5)``.

    Args:
        model: Arm description.
        arm_rad: Joints 1-3 in radians.
        approach: Desired tool axis in the base frame.

    Returns:
        Tuple ``(theta4, theta5)`` as joint values (offsets removed).
    """
    r03 = chain_transform(model, arm_rad, upto=3)[:3, :3]
    local = r03.T @ approach
    planar = float(np.hypot(local[0], local[1]))
    theta5 = float(np.arctan2(planar, local[2]))
    # Wrist singularity: any joint-4 angle works, keep it at zero.
    theta4 = float(np.arctan2(local[1], local[0])) if planar > 1e-9 else 0.0
    theta4 -= np.deg2rad(model.dh_params[3].offset_deg)
    theta5 -= np.deg2rad(model.dh_params[4].offset_deg)
    return theta4, theta5


def _check_limits(model: RobotModel, joints_deg: np.ndarray, target: np.ndarray) -> None:
    """Raise ``UnreachableError`` on the first joint outside its range."""
    for index, (angle, limit) in enumerate(zip(joints_deg, model.joint_limits)):
        if not limit.contains(angle):
            raise UnreachableError(
                target,
                f"joint {index + 1} ({limit.name}) needs {angle:.2f} deg, "
                f"outside [{limit.min_deg}, {limit.max_deg}]",
            )


def inverse_geometric(
    model: RobotModel,
    target: Sequence[float] | np.ndarray,
    elbow: ElbowConfig = ElbowConfig.UP,
    wrist_roll_deg: float = 0.0,
    approach_pitch_deg: Optional[float] = None,
) -> np.ndarray:
    """Solve joint angles that put the flange at *target* with the tool pitched down.

    Args:
        model: Arm description (default chain topology).
        target: Cartesian target [x, y, z] in millimetres.
        elbow: Elbow branch to select.
        wrist_roll_deg: Joint-6 angle; orientation about the tool axis is
            otherwise not solved.
        approach_pitch_deg: Tool pitch below horizontal; the model's
            ``approach_pitch_deg`` when *None*.

    Returns:
        Joint angles in degrees.

    Raises:
        UnreachableError: If the model has no shoulder/elbow pair, the
            wrist centre is out of reach, or any joint of the solution
            violates its limits.
    """
    pos = as_vector(target, 3, "target")
    pitch = np.deg2rad(model.approach_pitch_deg if approach_pitch_deg is None else approach_pitch_deg)
    upper_arm, forearm = model.upper_arm_length, model.forearm_length
    if upper_arm <= 0.0 or forearm <= 0.0:
        raise UnreachableError(pos, "closed-form solver needs non-zero upper arm and forearm lengths")

    theta1 = float(np.arctan2(pos[1], pos[0]))
    approach = approach_direction(theta1, pitch)
    wrist = pos - model.tool_length * approach

    # Signed radial distance in the arm plane, height above the shoulder.
    r = wrist[0] * np.cos(theta1) + wrist[1] * np.sin(theta1)
    s = wrist[2] - model.base_height
    reach = float(np.hypot(r, s))
    if reach < 1e-9:
        raise UnreachableError(pos, "wrist centre lies on the shoulder axis")

    cos_theta3 = (upper_arm**2 + forearm**2 - reach**2) / (2.0 * upper_arm * forearm)
    cos_theta3 = _checked_cosine(cos_theta3, pos, reach)
    theta3 = elbow.sign * float(np.arccos(cos_theta3))

    cos_beta = (upper_arm**2 + reach**2 - forearm**2) / (2.0 * upper_arm * reach)
    beta = float(np.arccos(np.clip(cos_beta, -1.0, 1.0)))
    theta2 = float(np.arctan2(s, r)) - elbow.sign * beta

    theta4, theta5 = _solve_wrist(model, (theta1, theta2, theta3), approach)
    joints = np.rad2deg(np.array([theta1, theta2, theta3, theta4, theta5, 0.0]))
    joints[5] = wrist_roll_deg
    _check_limits(model, joints, pos)
    return joints


# ======================================================================
# Numerical solver
# ======================================================================


def numerical_jacobian(model: RobotModel, joints_rad: np.ndarray, epsilon: float) -> np.ndarray:
    """Central-difference Jacobian of end-effector position (3 x N).

    Args:
        model: Arm description.
        joints_rad: Linearisation point (radians).
        epsilon: Perturbation per joint (radians).

    Returns:
        Array of shape ``(3, N)`` in millimetres per radian.
    """
    jacobian = np.zeros((3, model.joint_count))
    for i in range(model.joint_count):
        plus = joints_rad.copy()
        minus = joints_rad.copy()
        plus[i] += epsilon
        minus[i] -= epsilon
        jacobian[:, i] = (
            forward_position_rad(model, plus) - forward_position_rad(model, minus)
        ) / (2.0 * epsilon)
    return jacobian


def solve_normal_equations(jacobian: np.ndarray, error: np.ndarray, damping: float) -> np.ndarray:
    """Least-squares step from ``(JᵀJ + damping I) delta = Jᵀ error``.

    ``numpy.linalg.solve`` factors the system by LU with partial pivoting.

    Args:
        jacobian: 3 x N Jacobian.
        error: Position error (3,).
        damping: Non-negative regularisation term.

    Returns:
        Joint step (N,) in radians.
    """
    jtj = jacobian.T @ jacobian + damping * np.eye(jacobian.shape[1])
    return np.linalg.solve(jtj, jacobian.T @ error)


def inverse_numeric(
    model: RobotModel,
    target: Sequence[float] | np.ndarray,
    initial_guess: Optional[Sequence[float] | np.ndarray] = None,
    settings: Optional[NumericIKSettings] = None,
) -> np.ndarray:
    """Newton-Raphson position IK seeded at *initial_guess*.

    Args:
        model: Arm description.
        target: Cartesian target [x, y, z] in millimetres.
        initial_guess: Seed joint angles in degrees; the home pose when *None*.
        settings: Solver parameters; defaults when *None*.

    Returns:
        Joint angles in degrees whose position is within ``tolerance`` of
        the target.

    Raises:
        NotConvergedError: If the iteration budget runs out; the exception
            carries the last iterate.
    """
    settings = settings or NumericIKSettings()
    pos = as_vector(target, 3, "target")
    seed = model.home if initial_guess is None else as_vector(initial_guess, model.joint_count, "initial_guess")
    lower, upper = np.deg2rad(model.lower_limits), np.deg2rad(model.upper_limits)
    joints = np.clip(np.deg2rad(seed), lower, upper)

    residual = float("inf")
    for iteration in range(settings.max_iterations):
        error = pos - forward_position_rad(model, joints)
        residual = float(np.linalg.norm(error))
        if residual < settings.tolerance:
            logger.debug(f"Numeric IK converged in {iteration} iterations (residual {residual:.2e})")
            return np.rad2deg(joints)

        jacobian = numerical_jacobian(model, joints, settings.epsilon)
        try:
            delta = solve_normal_equations(jacobian, error, settings.damping)
        except np.linalg.LinAlgError as exc:
            raise NotConvergedError(pos, np.rad2deg(joints), residual, iteration) from exc
        joints = np.clip(joints + settings.step_size * delta, lower, upper)

    residual = float(np.linalg.norm(pos - forward_position_rad(model, joints)))
    if residual < settings.tolerance:
        return np.rad2deg(joints)
    logger.warning(
        f"Numeric IK did not converge within {settings.max_iterations} iterations "
        f"(residual {residual:.3f} mm)"
    )
    raise NotConvergedError(pos, np.rad2deg(joints), residual, settings.max_iterations)


# ======================================================================
# Combined solver
# ======================================================================


def solve_inverse(
    model: RobotModel,
    target: Sequence[float] | np.ndarray,
    seed: Optional[Sequence[float] | np.ndarray] = None,
    elbow: ElbowConfig = ElbowConfig.UP,
    allow_numeric: bool = True,
    settings: Optional[NumericIKSettings] = None,
    verify_tolerance: float = POSITION_TOLERANCE,
) -> IKSolution:
    """Solve IK geometrically, falling back to Newton-Raphson when allowed.

    The result is re-checked with forward kinematics before it is returned.

    Args:
        model: Arm description.
        target: Cartesian target [x, y, z] in millimetres.
        seed: Seed for the numerical fallback (degrees).
        elbow: Elbow branch for the closed-form solver.
        allow_numeric: Whether to try the numerical solver after an
            ``UnreachableError``.
        settings: Numerical solver parameters.
        verify_tolerance: Maximum accepted FK position error (mm).

    Returns:
        The verified ``IKSolution``.

    Raises:
        UnreachableError: If the closed-form solver fails and no fallback is
            allowed, or if verification fails.
        NotConvergedError: If the fallback runs out of iterations.
    """
    pos = as_vector(target, 3, "target")
    try:
        joints = inverse_geometric(model, pos, elbow=elbow)
        method = "geometric"
    except UnreachableError as exc:
        if not allow_numeric:
            raise
        logger.info(f"Geometric IK failed ({exc.reason}); trying numeric fallback")
        joints = inverse_numeric(model, pos, initial_guess=seed, settings=settings)
        method = "numeric"

    position_error = float(np.linalg.norm(forward_position_rad(model, np.deg2rad(joints)) - pos))
    if position_error > verify_tolerance:
        raise UnreachableError(
            pos, f"{method} solution misses the target by {position_error:.4f} mm"
        )
    return IKSolution(joints=joints, method=method, position_error=position_error)
