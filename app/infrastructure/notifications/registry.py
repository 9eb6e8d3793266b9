"""Provider registry for notification channels.

Maps provider types (chat, email, webhook) to provider classes and creates
provider instances bound to a ProviderConfig.
"""

import threading
from typing import Any, Dict, List, Optional, Type

import structlog

from infrastructure.notifications.channels import (
    ChatProvider,
    EmailProvider,
    NotificationProvider,
    WebhookProvider,
)
from infrastructure.notifications.models import ProviderConfig, ValidationResult

logger = structlog.get_logger()


class ProviderRegistry:
    """Thread-safe registry of notification provider classes.

    Attributes:
        _providers: Dict mapping provider_type to NotificationProvider classes.
        _lock: Threading lock for thread-safe operations.
    """

    def __init__(self):
        self._providers: Dict[str, Type[NotificationProvider]] = {}
        self._lock = threading.Lock()

    def register(self, provider_class: Type[NotificationProvider]) -> None:
        """Register a provider class under its provider_type.

        Raises:
            ValueError: If the class has no provider_type or the type is
                already registered.
        """
        provider_type = provider_class.provider_type
        if not provider_type:
            raise ValueError(f"{provider_class.__name__} does not define provider_type")

        with self._lock:
            if provider_type in self._providers:
                raise ValueError(
                    f"Provider with provider_type '{provider_type}' is already registered"
                )
            self._providers[provider_type] = provider_class

        logger.debug(
            "notification_provider_registered",
            provider_type=provider_type,
            provider_class=provider_class.__name__,
        )

    def get(self, provider_type: str) -> Optional[Type[NotificationProvider]]:
        with self._lock:
            return self._providers.get(provider_type)

    def is_registered(self, provider_type: str) -> bool:
        with self._lock:
            return provider_type in self._providers

    def provider_types(self) -> List[str]:
        """Registered provider types, sorted."""
        with self._lock:
            return sorted(self._providers)

    def validate(self, config: ProviderConfig) -> ValidationResult:
        """Validate a provider configuration. Pure: no network access.

        An unregistered provider type is reported as a validation error.
        """
        provider_class = self.get(config.provider_type)
        if provider_class is None:
            return ValidationResult.from_errors(
                [f"No provider registered for type '{config.provider_type}'"]
            )
        return provider_class.validate_config(config)

    def create(self, config: ProviderConfig, **options: Any) -> NotificationProvider:
        """Create a provider instance bound to ``config``.

        Args:
            config: Provider configuration
            **options: Passed to the provider constructor (timeout, session)

        Raises:
            KeyError: If no provider is registered for the config's type.
        """
        provider_class = self.get(config.provider_type)
        if provider_class is None:
            raise KeyError(
                f"No provider registered for type '{config.provider_type}'"
            )
        return provider_class(config, **options)


def default_registry() -> ProviderRegistry:
    """Registry with the built-in chat, email and webhook providers."""
    registry = ProviderRegistry()
    for provider_class in (ChatProvider, EmailProvider, WebhookProvider):
        registry.register(provider_class)
    return registry
