"""Shared fixtures for the robot_arm_sim test suite."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from robot_arm_sim.motion.clock import VirtualClock
from robot_arm_sim.motion.scheduler import MotionQueue
from robot_arm_sim.robots.factory import make_robot_model


@pytest.fixture
def model():
    return make_robot_model("industrial")


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def make_queue(model, clock):
    """Build a ``MotionQueue`` on the virtual clock; keyword arguments override."""

    def _make(**kwargs):
        kwargs.setdefault("model", model)
        kwargs.setdefault("clock", clock)
        return MotionQueue(**kwargs)

    return _make


@pytest.fixture
def rng():
    return np.random.default_rng(7)


@pytest.fixture
def restore_root_logger():
    """Undo handler and level changes made by ``setup_logging``."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
