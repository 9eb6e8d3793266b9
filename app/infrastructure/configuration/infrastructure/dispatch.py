"""Notification dispatch infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class DispatchSettings(InfrastructureSettings):
    """Event dispatch configuration.

    Controls the concurrency and time limits of the enrichment and delivery
    fan-out, and where the routing configuration document is read from.

    Environment Variables:
        DISPATCH_MAX_CONCURRENT_CONNECTIONS: Maximum simultaneous outbound calls
            shared by every in-flight dispatch (default: 10)
        DISPATCH_TIMEOUT_SECONDS: Deadline for one event's dispatch (default: 30)
        DISPATCH_PROVIDER_TIMEOUT_SECONDS: HTTP timeout for one channel send (default: 10)
        DISPATCH_HISTORY_SIZE: Number of dispatches kept in delivery history (default: 100)
        NOTIFICATIONS_CONFIG_PATH: JSON document with providers, defaults and templates

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        limit = settings.dispatch.max_concurrent_connections
        ```
    """

    max_concurrent_connections: int = Field(
        default=10,
        ge=1,
        alias="DISPATCH_MAX_CONCURRENT_CONNECTIONS",
        description="Maximum concurrent outbound connections across all dispatches",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        alias="DISPATCH_TIMEOUT_SECONDS",
        description="Deadline for dispatching a single event (seconds)",
    )
    provider_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        alias="DISPATCH_PROVIDER_TIMEOUT_SECONDS",
        description="HTTP timeout for a single provider send (seconds)",
    )
    history_size: int = Field(
        default=100,
        ge=1,
        alias="DISPATCH_HISTORY_SIZE",
        description="Number of recent dispatches kept in memory",
    )
    config_path: str | None = Field(
        default=None,
        alias="NOTIFICATIONS_CONFIG_PATH",
        description="Path to the JSON routing configuration document",
    )
