"""Dispatch context binding for structured logging.

Binds per-event context (correlation id, event name) to structlog's
context variables so every log entry emitted while an event is enriched
and dispatched carries the same identifiers, including entries logged from
concurrent provider tasks spawned inside the block.

Usage:
    from infrastructure.logging import bind_dispatch_context

    with bind_dispatch_context(event_name="task.created"):
        logger.info("dispatch_started")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_dispatch_context(
    correlation_id: Optional[str] = None,
    event_name: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind dispatch-scoped context to all logs within the block.

    Args:
        correlation_id: Unique dispatch identifier. Auto-generated if not provided.
        event_name: Name of the event being dispatched.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The correlation id in effect for the block.
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}

    if event_name is not None:
        context["event_name"] = event_name

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context."""
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")


def clear_dispatch_context() -> None:
    """Clear all dispatch-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
