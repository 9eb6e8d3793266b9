"""In-memory delivery history.

Keeps the most recent dispatch records for audit and troubleshooting.
Bounded: the oldest records are dropped once ``max_records`` is reached.
"""

import threading
import uuid
from collections import deque
from datetime import datetime
from typing import Deque, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from infrastructure.notifications.models import NotificationResult, utc_now

DEFAULT_HISTORY_SIZE = 100


class DispatchRecord(BaseModel):
    """Outcome of dispatching one event."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_name: str
    occurred_at: datetime
    recorded_at: datetime = Field(default_factory=utc_now)
    correlation_id: Optional[str] = None
    degraded: Tuple[str, ...] = ()
    results: Tuple[NotificationResult, ...] = ()

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded


class DeliveryHistory:
    """Thread-safe bounded history of dispatch records."""

    def __init__(self, max_records: int = DEFAULT_HISTORY_SIZE):
        if max_records < 1:
            raise ValueError("History size must be at least 1")
        self._records: Deque[DispatchRecord] = deque(maxlen=max_records)
        self._total = 0
        self._lock = threading.Lock()

    def add(self, record: DispatchRecord) -> None:
        with self._lock:
            self._records.append(record)
            self._total += 1

    def recent(self, count: int = 50) -> List[DispatchRecord]:
        """Most recent records first."""
        with self._lock:
            records = list(self._records)
        records.reverse()
        return records[: max(count, 0)]

    def total_count(self) -> int:
        """Number of records ever added, including dropped ones."""
        with self._lock:
            return self._total

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._total = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
