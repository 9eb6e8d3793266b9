"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache
from typing import Optional

from infrastructure.configuration import Settings
from infrastructure.notifications import (
    DispatchConfig,
    NotificationService,
    TrackerLookup,
    load_dispatch_config,
)
from integrations.tracker import TrackerApiClient


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process,
    even if called from multiple packages.

    Usage:
        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_dispatch_config() -> DispatchConfig:
    """
    Get application-scoped dispatch configuration.

    Loaded from NOTIFICATIONS_CONFIG_PATH when set. Event types without a
    configured template fall back to the built-in templates.

    Returns:
        DispatchConfig: Cached routing configuration.
    """
    config_path = get_settings().dispatch.config_path
    if config_path:
        return load_dispatch_config(config_path, seed_default_templates=True)
    return DispatchConfig().with_default_templates()


@lru_cache
def get_tracker_lookup() -> Optional[TrackerLookup]:
    """
    Get application-scoped tracker lookup client.

    Returns:
        TrackerLookup, or None when TRACKER_API_URL is not set (enrichment disabled).
    """
    return TrackerApiClient.from_settings(get_settings().tracker)


@lru_cache
def get_notification_service() -> NotificationService:
    """
    Get application-scoped notification service singleton.

    Usage:
        service = get_notification_service()
        results = await service.process(payload)

    Returns:
        NotificationService: Cached service wired from settings.
    """
    return NotificationService.from_settings(
        get_settings(),
        config=get_dispatch_config(),
        lookup=get_tracker_lookup(),
    )
