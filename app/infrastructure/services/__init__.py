"""
Dependency injection services.

Provides application-scoped provider functions for infrastructure services.
"""

from infrastructure.services.providers import (
    get_settings,
    get_dispatch_config,
    get_tracker_lookup,
    get_notification_service,
)

__all__ = [
    "get_settings",
    "get_dispatch_config",
    "get_tracker_lookup",
    "get_notification_service",
]
