"""Context enricher.

Builds an EnrichedContext for an event by looking up the task, project and
user the event refers to. Enrichment is best effort: a failed or absent
lookup leaves the corresponding field empty and is recorded in
``EnrichedContext.degraded``, it never fails the pipeline.

Identifiers are read from the event's raw data:
    task id     data.task.id | data.task_id              (task.* events)
    project id  data.project.id | data.task.project_id | data.project_id
    user id     data.member.id | data.user.id | data.assignee.id
                (only for events whose templates can show the user)
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import structlog

from infrastructure.notifications.cancellation import (
    CancellationToken,
    ConcurrencyLimiter,
)
from infrastructure.notifications.errors import DispatchCancelledError
from infrastructure.notifications.lookup import TrackerLookup
from infrastructure.notifications.models import EnrichedContext, Event
from infrastructure.notifications.templates import available_placeholders

logger = structlog.get_logger()

DEFAULT_LOOKUP_CONCURRENCY = 5


@dataclass(frozen=True)
class EntityIds:
    """Tracker identifiers referenced by one event."""

    task_id: Optional[int] = None
    project_id: Optional[int] = None
    user_id: Optional[int] = None


def _as_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        return parsed if parsed > 0 else None
    return None


def _nested_id(data: Mapping, key: str, field: str = "id") -> Optional[int]:
    nested = data.get(key)
    if isinstance(nested, Mapping):
        return _as_id(nested.get(field))
    return None


def extract_entity_ids(event: Event) -> EntityIds:
    """Pull the task/project/user ids an event refers to out of raw_data."""
    data = event.raw_data
    if not isinstance(data, Mapping):
        return EntityIds()

    task_id = None
    if event.event_name.startswith("task."):
        task_id = _nested_id(data, "task") or _as_id(data.get("task_id"))

    project_id = (
        _nested_id(data, "project")
        or _nested_id(data, "task", "project_id")
        or _as_id(data.get("project_id"))
    )

    user_id = None
    if "user.id" in available_placeholders(event.event_name):
        user_id = (
            _nested_id(data, "member")
            or _nested_id(data, "user")
            or _nested_id(data, "assignee")
        )

    return EntityIds(task_id=task_id, project_id=project_id, user_id=user_id)


class ContextEnricher:
    """Fetches related entities for an event concurrently.

    Args:
        lookup: Tracker collaborator. None disables enrichment.
        limiter: Shared outbound concurrency limiter. A private limiter is
            created when omitted.
    """

    def __init__(
        self,
        lookup: Optional[TrackerLookup],
        limiter: Optional[ConcurrencyLimiter] = None,
    ):
        self._lookup = lookup
        self._limiter = limiter or ConcurrencyLimiter(DEFAULT_LOOKUP_CONCURRENCY)

    async def enrich(
        self, event: Event, token: Optional[CancellationToken] = None
    ) -> EnrichedContext:
        """Build the enriched context for ``event``.

        Independent lookups run concurrently; waits for all of them.

        Args:
            event: Canonical event
            token: Dispatch cancellation token. Lookups still pending when it
                fires are cancelled and treated as absent.

        Returns:
            EnrichedContext, never raises for lookup failures
        """
        ids = extract_entity_ids(event)
        if self._lookup is None:
            return EnrichedContext(event=event)

        token = token or CancellationToken()
        calls: Dict[str, tuple[Callable[[int], Any], int]] = {}
        if ids.task_id is not None:
            calls["task"] = (self._lookup.get_task, ids.task_id)
            calls["assignees"] = (self._lookup.get_task_assignees, ids.task_id)
            calls["labels"] = (self._lookup.get_task_labels, ids.task_id)
        if ids.project_id is not None:
            calls["project"] = (self._lookup.get_project, ids.project_id)
        if ids.user_id is not None:
            calls["user"] = (self._lookup.get_user, ids.user_id)

        if not calls:
            return EnrichedContext(event=event)

        names = list(calls)
        values = await asyncio.gather(
            *(
                self._fetch(name, func, entity_id, token)
                for name, (func, entity_id) in calls.items()
            )
        )
        fetched = dict(zip(names, values))
        degraded = tuple(name for name in names if fetched[name] is None)

        if degraded:
            logger.warning(
                "enrichment_degraded",
                event_name=event.event_name,
                missing=list(degraded),
            )

        return EnrichedContext(
            event=event,
            project=fetched.get("project"),
            task=fetched.get("task"),
            user=fetched.get("user"),
            assignees=tuple(fetched.get("assignees") or ()),
            labels=tuple(fetched.get("labels") or ()),
            degraded=degraded,
        )

    async def _fetch(
        self,
        name: str,
        func: Callable[[int], Any],
        entity_id: int,
        token: CancellationToken,
    ) -> Any:
        try:
            return await token.run(self._limiter.run_in_thread(func, entity_id))
        except DispatchCancelledError as e:
            logger.info(
                "enrichment_lookup_cancelled",
                lookup=name,
                entity_id=entity_id,
                reason=str(e),
            )
        except Exception as e:
            logger.warning(
                "enrichment_lookup_failed",
                lookup=name,
                entity_id=entity_id,
                error=str(e),
                exc_info=True,
            )
        return None
