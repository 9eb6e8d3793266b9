"""Infrastructure configuration module - public API.

This module provides centralized configuration management for the tracker
notification service using Pydantic BaseSettings with domain-based
organization.

Exports:
    Settings: Main settings class
    TrackerSettings: Tracker API settings class (for testing)
    DispatchSettings: Dispatch settings class (for testing)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    tracker_url = settings.tracker.TRACKER_API_URL
    limit = settings.dispatch.max_concurrent_connections
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.integrations import TrackerSettings
from infrastructure.configuration.infrastructure import DispatchSettings

__all__ = ["Settings", "TrackerSettings", "DispatchSettings"]
