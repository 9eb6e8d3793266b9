"""Project tracker API integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class TrackerSettings(IntegrationSettings):
    """Project tracker (Vikunja-compatible) API configuration.

    The tracker API is only used for best-effort enrichment lookups, so an
    unset URL disables enrichment instead of failing startup.

    Environment Variables:
        TRACKER_API_URL: Base URL of the tracker instance (e.g. https://tasks.example.com)
        TRACKER_API_TOKEN: API token sent as a bearer token
        TRACKER_TIMEOUT_SECONDS: Per-lookup HTTP timeout (default: 10)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        base_url = settings.tracker.TRACKER_API_URL
        ```
    """

    TRACKER_API_URL: str = Field(default="", alias="TRACKER_API_URL")
    TRACKER_API_TOKEN: str | None = Field(default=None, alias="TRACKER_API_TOKEN")
    TRACKER_TIMEOUT_SECONDS: float = Field(
        default=10.0, alias="TRACKER_TIMEOUT_SECONDS"
    )

    @property
    def is_configured(self) -> bool:
        """True when a tracker base URL has been provided."""
        return bool(self.TRACKER_API_URL)
