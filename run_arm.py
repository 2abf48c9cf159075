#!/usr/bin/env python3
"""
Command-line entry point for the robot arm simulator.

Runs a short scripted session against the motion queue, or exposes the
kinematics and validation layers directly for quick checks.

Usage examples::

    # Home, move through a few Cartesian points, actuate the gripper
    python run_arm.py --mode demo

    # Forward kinematics of a joint vector (degrees)
    python run_arm.py --mode fk --joints 0 90 -90 0 90 0

    # Inverse kinematics of a Cartesian point (millimetres)
    python run_arm.py --mode ik --target 300 100 300 --elbow up

    # Check a target against the workspace, obstacles and joint limits
    python run_arm.py --mode validate --target 1000 0 300
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List

import numpy as np

from robot_arm_sim.config import SimulatorConfig, load_config
from robot_arm_sim.errors import NotConvergedError, RobotSimError
from robot_arm_sim.kinematics.forward import forward_kinematics
from robot_arm_sim.kinematics.inverse import ElbowConfig, solve_inverse
from robot_arm_sim.motion.events import Event, EventKind
from robot_arm_sim.motion.scheduler import MotionQueue
from robot_arm_sim.robots.factory import available_models
from robot_arm_sim.safety.validator import MotionValidator
from robot_arm_sim.utils.logging_utils import setup_logging

logger = logging.getLogger("run_arm")

# Cartesian waypoints visited by the demo (millimetres)
_DEMO_WAYPOINTS: List[List[float]] = [
    [300.0, 100.0, 300.0],
    [200.0, -150.0, 250.0],
    [250.0, 0.0, 370.0],
]

# ======================================================================
# Configuration
# ======================================================================


def _build_config(args: argparse.Namespace) -> SimulatorConfig:
    """Load the YAML config (if any) and apply CLI overrides.

    Args:
        args: Parsed CLI arguments.

    Returns:
        The effective ``SimulatorConfig``.
    """
    config = load_config(args.config) if args.config else SimulatorConfig()
    if args.model:
        config.model_name = args.model
    if args.log_level:
        config.logging = {**config.logging, "level": args.log_level}
    return config


def _fmt(values: np.ndarray) -> str:
    return "[" + ", ".join(f"{v:8.3f}" for v in values) + "]"


# ======================================================================
# Mode runners
# ======================================================================


async def _demo_session(queue: MotionQueue) -> None:
    """Home the arm, visit the demo waypoints and cycle the gripper.

    Args:
        queue: Motion queue driving the simulated arm.
    """
    await queue.home()
    futures = [queue.submit_cartesian_move(point, speed=150.0) for point in _DEMO_WAYPOINTS]
    for point, future in zip(_DEMO_WAYPOINTS, futures):
        state = await future
        print(f"Reached {point} -> joints {_fmt(state.joints)}")
    gripper = await queue.close_gripper()
    print(f"Gripper closed: {gripper.position_pct:.0f}% (open={gripper.is_open})")
    gripper = await queue.open_gripper()
    print(f"Gripper opened: {gripper.position_pct:.0f}% (open={gripper.is_open})")


def _run_demo(config: SimulatorConfig, args: argparse.Namespace) -> None:
    """Run the scripted session on the real-time clock.

    Args:
        config: Simulator configuration.
        args: Parsed CLI arguments.
    """
    queue = MotionQueue(config=config)

    def _on_event(event: Event) -> None:
        if event.kind is EventKind.ERROR:
            print(f"  error: {event.payload.error}")
        elif event.kind is EventKind.HOMED:
            print("  homed")

    queue.events.subscribe(_on_event, EventKind.ERROR, EventKind.HOMED)
    asyncio.run(_demo_session(queue))
    print(f"Final status: {queue.get_status()}")


def _run_fk(config: SimulatorConfig, args: argparse.Namespace) -> None:
    """Print the end-effector pose of ``--joints``.

    Args:
        config: Simulator configuration.
        args: Parsed CLI arguments.
    """
    model = config.build_model()
    joints = args.joints if args.joints is not None else model.home
    pose = forward_kinematics(model, joints)
    print(f"Joints:      {_fmt(np.asarray(joints, dtype=float))}")
    print(f"Position:    {_fmt(pose.position)}")
    print(f"Orientation: {_fmt(pose.euler)}")


def _run_ik(config: SimulatorConfig, args: argparse.Namespace) -> None:
    """Print an IK solution for ``--target``.

    Args:
        config: Simulator configuration.
        args: Parsed CLI arguments.
    """
    if args.target is None:
        raise SystemExit("--target is required for --mode ik")
    model = config.build_model()
    elbow = ElbowConfig(args.elbow) if args.elbow else config.elbow_config
    try:
        solution = solve_inverse(
            model,
            args.target,
            elbow=elbow,
            allow_numeric=config.numeric_fallback,
            settings=config.ik,
            verify_tolerance=config.verify_tolerance,
        )
    except NotConvergedError as exc:
        print(f"Not converged: {exc}")
        print(f"Best effort: {_fmt(exc.best_effort)}")
        sys.exit(1)
    except RobotSimError as exc:
        print(f"Unreachable: {exc}")
        sys.exit(1)
    print(f"Method: {solution.method} (error {solution.position_error:.2e} mm)")
    print(f"Joints: {_fmt(solution.joints)}")


def _run_validate(config: SimulatorConfig, args: argparse.Namespace) -> None:
    """Print validation reports for ``--target`` and/or ``--joints``.

    Args:
        config: Simulator configuration.
        args: Parsed CLI arguments.
    """
    validator = MotionValidator(config.build_model(), config.safety)
    if args.target is not None:
        report = validator.validate_position(args.target, auto_correct=True)
        print(f"Position {args.target}: valid={report.valid}")
        for message in report.errors + report.warnings:
            print(f"  - {message}")
        if report.corrected is not None:
            print(f"  corrected to {report.corrected.tolist()}")
    if args.joints is not None:
        report = validator.validate_joints(args.joints, auto_correct=True)
        print(f"Joints {args.joints}: valid={report.valid}")
        for message in report.errors:
            print(f"  - {message}")
    print(f"Summary: {validator.summary()}")


# ======================================================================
# CLI
# ======================================================================


def _parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed ``argparse.Namespace``.
    """
    parser = argparse.ArgumentParser(description="6-axis robot arm simulator")
    parser.add_argument("--mode", choices=["demo", "fk", "ik", "validate"], default="demo")
    parser.add_argument("--config", default=None, help="YAML configuration file")
    parser.add_argument("--model", choices=available_models(), default=None)
    parser.add_argument("--joints", type=float, nargs=6, default=None)
    parser.add_argument("--target", type=float, nargs=3, default=None)
    parser.add_argument("--elbow", choices=[e.value for e in ElbowConfig], default=None)
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default=None
    )
    return parser.parse_args()


# Mapping from mode name to runner function
_MODE_DISPATCH = {
    "demo": _run_demo,
    "fk": _run_fk,
    "ik": _run_ik,
    "validate": _run_validate,
}


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------
if __name__ == "__main__":
    args = _parse_args()
    config = _build_config(args)
    setup_logging(config.logging, service_name="run_arm")
    logger.info(f"Model: {config.model_name} | Mode: {args.mode}")

    runner = _MODE_DISPATCH[args.mode]
    runner(config, args)
