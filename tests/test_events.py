"""Tests for the typed event bus and the clocks."""

import asyncio
import logging

import pytest

from robot_arm_sim.motion.clock import VirtualClock
from robot_arm_sim.motion.events import ErrorPayload, EventBus, EventKind, GripperPayload
from robot_arm_sim.robots.robot_state import GripperState


def test_subscriber_without_kinds_receives_everything():
    bus = EventBus()
    seen = []
    bus.subscribe(seen.append)
    bus.emit(EventKind.GRIPPER_CHANGED, GripperPayload(GripperState()))
    bus.emit(EventKind.ERROR, ErrorPayload(RuntimeError("boom")))
    assert [e.kind for e in seen] == [EventKind.GRIPPER_CHANGED, EventKind.ERROR]


def test_subscriber_filters_by_kind():
    bus = EventBus()
    seen = []
    bus.subscribe(seen.append, EventKind.ERROR)
    bus.emit(EventKind.GRIPPER_CHANGED, GripperPayload(GripperState()))
    event = bus.emit(EventKind.ERROR, ErrorPayload(RuntimeError("boom"), request_id=3))
    assert seen == [event]
    assert seen[0].payload.request_id == 3


def test_unsubscribe_stops_delivery():
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe(seen.append)
    unsubscribe()
    unsubscribe()
    bus.emit(EventKind.ERROR, ErrorPayload(RuntimeError("boom")))
    assert seen == []
    assert len(bus) == 0


def test_failing_subscriber_is_logged_and_skipped(caplog):
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("subscriber bug")

    bus.subscribe(broken)
    bus.subscribe(seen.append)
    with caplog.at_level(logging.ERROR, logger="robot_arm_sim.motion.events"):
        bus.emit(EventKind.ERROR, ErrorPayload(RuntimeError("boom")))
    assert len(seen) == 1
    assert any("failed on error" in record.getMessage() for record in caplog.records)


def test_virtual_clock_advances_without_waiting():
    clock = VirtualClock(start=10.0)

    async def _run():
        await clock.sleep(0.25)
        await clock.sleep(0.5)

    asyncio.run(_run())
    assert clock.now() == pytest.approx(10.75)
    assert clock.sleeps == [0.25, 0.5]
