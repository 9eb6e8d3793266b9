"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    StubTrackerLookup,
    make_tracker_project,
    make_tracker_task,
    make_tracker_users,
    make_webhook_payload,
)

__all__ = [
    "StubTrackerLookup",
    "make_tracker_project",
    "make_tracker_task",
    "make_tracker_users",
    "make_webhook_payload",
]
