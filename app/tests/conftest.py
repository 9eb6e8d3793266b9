"""Shared pytest fixtures."""

import pytest
import structlog

from infrastructure.services import providers


@pytest.fixture(autouse=True)
def reset_application_singletons():
    """Clear cached application-scoped providers between tests."""
    providers.get_settings.cache_clear()
    providers.get_dispatch_config.cache_clear()
    providers.get_tracker_lookup.cache_clear()
    providers.get_notification_service.cache_clear()
    yield
    providers.get_settings.cache_clear()
    providers.get_dispatch_config.cache_clear()
    providers.get_tracker_lookup.cache_clear()
    providers.get_notification_service.cache_clear()


@pytest.fixture(autouse=True)
def clear_log_context():
    """Ensure no structlog context leaks between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
