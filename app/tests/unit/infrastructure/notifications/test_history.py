"""Unit tests for DeliveryHistory."""

import threading
from datetime import datetime, timezone

import pytest

from infrastructure.notifications.history import DeliveryHistory, DispatchRecord
from infrastructure.notifications.models import FailureKind, NotificationResult

OCCURRED_AT = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def make_record(event_name="task.created", results=()):
    return DispatchRecord(
        event_name=event_name, occurred_at=OCCURRED_AT, results=tuple(results)
    )


@pytest.mark.unit
class TestDispatchRecord:
    def test_counts(self):
        record = make_record(
            results=[
                NotificationResult.sent("chat"),
                NotificationResult.failed("email", "down", FailureKind.TRANSIENT),
            ]
        )

        assert record.succeeded == 1
        assert record.failed == 1
        assert record.id

    def test_ids_unique(self):
        assert make_record().id != make_record().id


@pytest.mark.unit
class TestDeliveryHistory:
    def test_recent_newest_first(self):
        history = DeliveryHistory()
        for name in ("a", "b", "c"):
            history.add(make_record(name))

        assert [r.event_name for r in history.recent()] == ["c", "b", "a"]
        assert [r.event_name for r in history.recent(2)] == ["c", "b"]

    def test_bounded(self):
        history = DeliveryHistory(max_records=2)
        for name in ("a", "b", "c"):
            history.add(make_record(name))

        assert len(history) == 2
        assert [r.event_name for r in history.recent()] == ["c", "b"]
        assert history.total_count() == 3

    def test_clear(self):
        history = DeliveryHistory()
        history.add(make_record())

        history.clear()

        assert len(history) == 0
        assert history.total_count() == 0

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            DeliveryHistory(max_records=0)

    def test_concurrent_adds(self):
        history = DeliveryHistory(max_records=1000)

        def add_many():
            for _ in range(100):
                history.add(make_record())

        threads = [threading.Thread(target=add_many) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert history.total_count() == 500
        assert len(history) == 500
