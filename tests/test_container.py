"""Tests for container wiring."""

import asyncio
from uuid import uuid4

from routine_tracker.containers import build_container
from routine_tracker.services.change_tracker import TrackerState


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.version_service is not None
    asyncio.run(container.close_resources())


def test_container_creates_uninitialized_tracker(container) -> None:
    tracker = container.change_tracker(uuid4())

    assert tracker.state == TrackerState.UNINITIALIZED
