"""Structured logging infrastructure.

This package provides centralized logging configuration and utilities
for the tracker notification service using structlog.

Public API:
    - configure_logging(): Initialize logging for the process
    - get_module_logger(): Get a logger for the calling module
    - bind_dispatch_context(): Context manager for dispatch-scoped logging
    - get_correlation_id(): Get current correlation ID from context
    - clear_dispatch_context(): Clear all dispatch context

Formatters:
    - add_app_info(): Processor to add app name/version
    - mask_sensitive_data(): Processor to redact secrets and endpoints
    - truncate_large_values(): Processor to limit string lengths

Example:
    from infrastructure.logging import (
        configure_logging,
        get_module_logger,
        bind_dispatch_context,
    )

    configure_logging()

    logger = get_module_logger()
    with bind_dispatch_context(event_name="task.created"):
        logger.info("dispatch_started")
"""

from infrastructure.logging.setup import (
    configure_logging,
    get_module_logger,
)

from infrastructure.logging.context import (
    bind_dispatch_context,
    get_correlation_id,
    clear_dispatch_context,
)

from infrastructure.logging.formatters import (
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
    SENSITIVE_PATTERNS,
)

__all__ = [
    # Setup
    "configure_logging",
    "get_module_logger",
    # Context
    "bind_dispatch_context",
    "get_correlation_id",
    "clear_dispatch_context",
    # Formatters
    "add_app_info",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
