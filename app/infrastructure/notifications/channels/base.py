"""Notification provider abstract base class.

All provider implementations (chat, email, webhook) must implement this
interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import urlparse

import requests

from infrastructure.notifications.models import (
    FailureKind,
    NotificationMessage,
    NotificationResult,
    ProviderConfig,
    ValidationResult,
)
from infrastructure.operations import OperationResult, OperationStatus

DEFAULT_PROVIDER_TIMEOUT = 10.0


class NotificationProvider(ABC):
    """Abstract base class for notification providers.

    Each provider delivers rendered messages through one channel type. An
    instance is bound to a single ProviderConfig; the registry creates a new
    instance per dispatch so providers hold no cross-event state, and the
    router calls close() once the send returns.

    Example Implementation:
        class PagerProvider(NotificationProvider):
            provider_type = "pager"

            @classmethod
            def validate_config(cls, config: ProviderConfig) -> ValidationResult:
                errors = require_settings(config, "endpoint")
                return ValidationResult.from_errors(errors)

            def send(self, message: NotificationMessage) -> NotificationResult:
                result = self._page(message.rendered_text)
                return self.result_from_operation(result)

    Args:
        config: Provider configuration (settings are read-only)
        timeout: Per-request network timeout in seconds
        session: Optional requests session for HTTP-based providers
    """

    provider_type: str = ""

    def __init__(
        self,
        config: ProviderConfig,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    @classmethod
    @abstractmethod
    def validate_config(cls, config: ProviderConfig) -> ValidationResult:
        """Check that the configuration has what delivery needs.

        Pure: no network access.

        Args:
            config: Provider configuration to validate

        Returns:
            ValidationResult listing every problem found
        """
        pass

    @abstractmethod
    def send(self, message: NotificationMessage) -> NotificationResult:
        """Deliver one rendered message.

        Must handle errors gracefully and return a failed NotificationResult
        rather than raising exceptions.

        Args:
            message: Rendered message

        Returns:
            NotificationResult for this delivery attempt
        """
        pass

    @property
    def settings(self):
        return self.config.settings

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def close(self) -> None:
        """Close the HTTP session if this provider created it."""
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    def result_from_operation(self, result: OperationResult) -> NotificationResult:
        """Convert an OperationResult from a channel call into a NotificationResult."""
        if result.is_success:
            return NotificationResult.sent(self.provider_type)
        return NotificationResult.failed(
            self.provider_type,
            error_detail=result.message,
            failure=failure_kind_for(result.status),
            error_code=result.error_code,
        )


def failure_kind_for(status: OperationStatus) -> FailureKind:
    """Map an operation status onto the delivery failure taxonomy."""
    if status == OperationStatus.TRANSIENT_ERROR:
        return FailureKind.TRANSIENT
    if status == OperationStatus.UNAUTHORIZED:
        return FailureKind.CONFIGURATION
    if status == OperationStatus.NOT_FOUND:
        return FailureKind.INVALID_TARGET
    return FailureKind.INTERNAL


def require_settings(config: ProviderConfig, *keys: str) -> List[str]:
    """Return an error for each required setting that is missing or blank."""
    return [
        f"Missing required setting '{key}'"
        for key in keys
        if not (config.settings.get(key) or "").strip()
    ]


def check_url(
    config: ProviderConfig, key: str, schemes: tuple = ("https",)
) -> List[str]:
    """Return an error when the setting ``key`` is present but not a usable URL."""
    value = (config.settings.get(key) or "").strip()
    if not value:
        return []
    parsed = urlparse(value)
    if parsed.scheme not in schemes or not parsed.netloc:
        allowed = " or ".join(schemes)
        return [f"Setting '{key}' must be an absolute {allowed} URL"]
    return []
