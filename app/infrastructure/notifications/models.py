"""Notification pipeline core models.

Models flowing through the pipeline: the canonical Event, the enriched
context built from tracker lookups, routing configuration values, and the
messages/results exchanged with providers.

Uses Pydantic BaseModel for:
- Immutability of values shared across concurrent branches (frozen models)
- Runtime input validation of externally supplied configuration
- Serialization of results for audit logging (model_dump(mode="json"))
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Event(BaseModel):
    """Canonical representation of one change notification from the tracker.

    Attributes:
        event_name: Event type (e.g., "task.created")
        occurred_at: When the tracker emitted the event (timezone-aware)
        raw_data: Event-type-specific payload, passed through unmodified
    """

    model_config = ConfigDict(frozen=True)

    event_name: str
    occurred_at: datetime
    raw_data: Any = None


class ProjectSummary(BaseModel):
    """Project fields available to templates."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str = ""
    description: str = ""
    url: str = ""


class TaskSummary(BaseModel):
    """Task fields available to templates."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str = ""
    description: str = ""
    done: bool = False
    due_date: str = ""
    priority: int = 0
    project_id: Optional[int] = None
    url: str = ""


class UserSummary(BaseModel):
    """User fields available to templates."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    username: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        """Display name, falling back to the username."""
        return self.name or self.username


class EnrichedContext(BaseModel):
    """Event plus the related entities fetched from the tracker.

    Optional fields are None when the lookup failed or does not apply to the
    event type. ``degraded`` lists the lookups that were attempted and came
    back absent, so a partially enriched dispatch is visible in logs and
    history without altering the recipient-facing text.
    """

    model_config = ConfigDict(frozen=True)

    event: Event
    project: Optional[ProjectSummary] = None
    task: Optional[TaskSummary] = None
    user: Optional[UserSummary] = None
    assignees: Tuple[str, ...] = ()
    labels: Tuple[str, ...] = ()
    degraded: Tuple[str, ...] = ()

    @property
    def is_degraded(self) -> bool:
        return bool(self.degraded)


class ProviderConfig(BaseModel):
    """Configuration of one delivery channel.

    Attributes:
        provider_type: Registry key of the channel implementation (unique)
        enabled: Disabled providers are never selected
        settings: Channel secrets and endpoints (webhook URL, API key, ...)
    """

    model_config = ConfigDict(frozen=True)

    provider_type: str
    enabled: bool = True
    settings: Dict[str, str] = Field(default_factory=dict)


class NotificationTemplate(BaseModel):
    """Message pattern for one event type.

    Attributes:
        event_type: Event type this template renders
        body: Shared message body with ``{{path}}`` placeholders
        title: Optional title (email subject, chat heading)
        provider_overrides: Per-provider-type body replacing ``body``
    """

    model_config = ConfigDict(frozen=True)

    event_type: str
    body: str
    title: str = ""
    provider_overrides: Dict[str, str] = Field(default_factory=dict)

    def body_for(self, provider_type: Optional[str]) -> str:
        """Return the body to render for ``provider_type``."""
        if provider_type is not None and provider_type in self.provider_overrides:
            return self.provider_overrides[provider_type]
        return self.body


class RoutingTarget(BaseModel):
    """A (provider, template) pair selected for one event."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderConfig
    template: NotificationTemplate

    @property
    def provider_type(self) -> str:
        return self.provider.provider_type


class NotificationMessage(BaseModel):
    """Rendered message handed to one provider."""

    model_config = ConfigDict(frozen=True)

    provider_type: str
    rendered_text: str
    event_name: str
    title: str = ""


class FailureKind(Enum):
    """Why a delivery attempt failed.

    The router only looks at ``success``; the kind is kept for diagnostics
    and audit.
    """

    TRANSIENT = "transient"
    CONFIGURATION = "configuration"
    INVALID_TARGET = "invalid_target"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


class NotificationResult(BaseModel):
    """Outcome of one delivery attempt.

    Attributes:
        provider_type: Provider the attempt was made with
        success: Whether the channel accepted the message
        error_detail: Human-readable failure description
        sent_at: When the attempt finished
        error_code: Machine error code (e.g., "HTTP_403", "TIMEOUT")
        failure: Failure classification, None on success
    """

    model_config = ConfigDict(frozen=True)

    provider_type: str
    success: bool
    error_detail: Optional[str] = None
    sent_at: datetime = Field(default_factory=utc_now)
    error_code: Optional[str] = None
    failure: Optional[FailureKind] = None

    @classmethod
    def sent(cls, provider_type: str) -> "NotificationResult":
        return cls(provider_type=provider_type, success=True)

    @classmethod
    def failed(
        cls,
        provider_type: str,
        error_detail: str,
        failure: FailureKind,
        error_code: Optional[str] = None,
    ) -> "NotificationResult":
        return cls(
            provider_type=provider_type,
            success=False,
            error_detail=error_detail,
            error_code=error_code,
            failure=failure,
        )


class ValidationResult(BaseModel):
    """Outcome of validating a provider configuration."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=list(errors))
