"""Tracker event notification pipeline.

Turns tracker webhook events into notifications delivered through
configurable channels (chat webhooks, GC Notify email, generic HTTP):

- Canonicalization of the raw payload
- Best-effort concurrent enrichment from the tracker API
- Routing to (provider, template) targets with per-provider failure isolation
- Deadline and explicit cancellation of in-flight deliveries
- Bounded in-memory delivery history

Usage:
    from infrastructure.notifications import (
        DispatchConfig,
        EventRouter,
        NotificationService,
        ProviderConfig,
        NotificationTemplate,
    )

    config = DispatchConfig(
        providers=[
            ProviderConfig(
                provider_type="chat",
                settings={"webhook_url": "https://hooks.slack.com/services/..."},
            )
        ],
        templates={
            "task.created": NotificationTemplate(
                event_type="task.created", body="{{task.title}} created"
            )
        },
    )

    service = NotificationService(router=EventRouter(config))
    results = await service.process(payload)
"""

# Models
from infrastructure.notifications.models import (
    Event,
    EnrichedContext,
    FailureKind,
    NotificationMessage,
    NotificationResult,
    NotificationTemplate,
    ProjectSummary,
    ProviderConfig,
    RoutingTarget,
    TaskSummary,
    UserSummary,
    ValidationResult,
)

# Errors
from infrastructure.notifications.errors import (
    DispatchCancelledError,
    MalformedEventError,
)

# Pipeline components
from infrastructure.notifications.canonicalizer import canonicalize
from infrastructure.notifications.cancellation import (
    CancellationToken,
    ConcurrencyLimiter,
)
from infrastructure.notifications.lookup import TrackerLookup
from infrastructure.notifications.enricher import ContextEnricher
from infrastructure.notifications.templates import (
    DEFAULT_TEMPLATES,
    EVENT_TYPES,
    TemplateEngine,
    available_placeholders,
)
from infrastructure.notifications.registry import ProviderRegistry, default_registry
from infrastructure.notifications.config import DispatchConfig, load_dispatch_config
from infrastructure.notifications.router import EventRouter
from infrastructure.notifications.history import DeliveryHistory, DispatchRecord
from infrastructure.notifications.service import NotificationService

# Provider interface and implementations
from infrastructure.notifications.channels import (
    ChatProvider,
    EmailProvider,
    NotificationProvider,
    WebhookProvider,
)

__all__ = [
    # Models
    "Event",
    "EnrichedContext",
    "FailureKind",
    "NotificationMessage",
    "NotificationResult",
    "NotificationTemplate",
    "ProjectSummary",
    "ProviderConfig",
    "RoutingTarget",
    "TaskSummary",
    "UserSummary",
    "ValidationResult",
    # Errors
    "DispatchCancelledError",
    "MalformedEventError",
    # Pipeline
    "canonicalize",
    "CancellationToken",
    "ConcurrencyLimiter",
    "TrackerLookup",
    "ContextEnricher",
    "DEFAULT_TEMPLATES",
    "EVENT_TYPES",
    "TemplateEngine",
    "available_placeholders",
    "ProviderRegistry",
    "default_registry",
    "DispatchConfig",
    "load_dispatch_config",
    "EventRouter",
    "DeliveryHistory",
    "DispatchRecord",
    "NotificationService",
    # Providers
    "NotificationProvider",
    "ChatProvider",
    "EmailProvider",
    "WebhookProvider",
]
