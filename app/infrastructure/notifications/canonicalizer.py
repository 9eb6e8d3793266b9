"""Event canonicalizer.

Turns an already deserialized webhook payload into an immutable Event.
Only the event name and timestamp are interpreted; the ``data`` member is
kept opaque so enrichment can pull event-specific identifiers out of it
without this module knowing about event types.

Accepted shape:
    {"event_name": "task.created", "time": "2024-05-01T10:00:00Z", "data": {...}}

``eventName`` is accepted as an alias of ``event_name``.
"""

import copy
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from infrastructure.notifications.errors import MalformedEventError
from infrastructure.notifications.models import Event

EVENT_NAME_FIELDS = ("event_name", "eventName")
TIMESTAMP_FIELD = "time"
DATA_FIELD = "data"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise MalformedEventError(f"Unparseable event timestamp: {value!r}") from e
    else:
        raise MalformedEventError("Event timestamp is missing")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def canonicalize(raw_payload: Any) -> Event:
    """Normalize a raw webhook payload into an Event.

    Args:
        raw_payload: Deserialized payload (a mapping).

    Returns:
        Event with ``raw_data`` set to a copy of the payload's ``data`` member.

    Raises:
        MalformedEventError: If the payload is not a mapping, the event name
            is missing or blank, or the timestamp is absent or unparseable.
    """
    if not isinstance(raw_payload, Mapping):
        raise MalformedEventError(
            f"Event payload must be a mapping, got {type(raw_payload).__name__}"
        )

    event_name = None
    for field in EVENT_NAME_FIELDS:
        if field in raw_payload:
            event_name = raw_payload[field]
            break

    if not isinstance(event_name, str) or not event_name.strip():
        raise MalformedEventError("Event name is missing")

    occurred_at = _parse_timestamp(raw_payload.get(TIMESTAMP_FIELD))

    return Event(
        event_name=event_name.strip(),
        occurred_at=occurred_at,
        raw_data=copy.deepcopy(raw_payload.get(DATA_FIELD)),
    )
