"""Tests for axis-aligned obstacle checks."""

import pytest

from robot_arm_sim.safety.collision import CollisionDetector, Obstacle


@pytest.fixture
def detector():
    d = CollisionDetector()
    d.add_obstacle(Obstacle.box("fixture", center=[300.0, 0.0, 100.0], size=[100.0, 100.0, 100.0]))
    return d


def test_overlap_returns_obstacle(detector):
    hit = detector.check_collision([300.0, 0.0, 100.0], tool_size=[100.0, 100.0, 100.0])
    assert hit is not None
    assert hit.name == "fixture"


def test_touching_faces_do_not_collide(detector):
    assert detector.check_collision([400.0, 0.0, 100.0], tool_size=[100.0, 100.0, 100.0]) is None
    assert detector.check_collision([399.0, 0.0, 100.0], tool_size=[100.0, 100.0, 100.0]) is not None


def test_first_hit_wins(detector):
    detector.add_obstacle(Obstacle.box("second", center=[300.0, 0.0, 100.0], size=[10.0, 10.0, 10.0]))
    assert detector.check_collision([300.0, 0.0, 100.0], [1.0, 1.0, 1.0]).name == "fixture"


def test_clear_obstacles(detector):
    detector.clear_obstacles()
    assert detector.check_collision([300.0, 0.0, 100.0], [100.0, 100.0, 100.0]) is None


def test_obstacle_size_must_be_positive():
    with pytest.raises(ValueError):
        Obstacle.box("flat", center=[0.0, 0.0, 0.0], size=[10.0, 0.0, 10.0])
