"""Notification service.

Facade over the pipeline: canonicalize the raw payload, enrich it, route it
to providers, and record the outcome in the delivery history.

Usage:
    from infrastructure.notifications import NotificationService, load_dispatch_config
    from infrastructure.services import get_settings
    from integrations.tracker import TrackerApiClient

    settings = get_settings()
    service = NotificationService.from_settings(
        settings,
        config=load_dispatch_config("notifications.json"),
        lookup=TrackerApiClient.from_settings(settings.tracker),
    )
    results = await service.process(payload)
"""

from typing import Any, List, Optional, Tuple, TYPE_CHECKING

import structlog

from infrastructure.logging import bind_dispatch_context
from infrastructure.notifications.cancellation import (
    CancellationToken,
    ConcurrencyLimiter,
)
from infrastructure.notifications.canonicalizer import canonicalize
from infrastructure.notifications.config import DispatchConfig
from infrastructure.notifications.enricher import ContextEnricher
from infrastructure.notifications.errors import MalformedEventError
from infrastructure.notifications.history import DeliveryHistory, DispatchRecord
from infrastructure.notifications.lookup import TrackerLookup
from infrastructure.notifications.models import (
    Event,
    NotificationResult,
    ProviderConfig,
    ValidationResult,
)
from infrastructure.notifications.registry import ProviderRegistry
from infrastructure.notifications.router import EventRouter
from infrastructure.notifications.templates import TemplateEngine

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = structlog.get_logger()


class NotificationService:
    """Runs tracker events through the notification pipeline.

    This is a thin facade: the work is done by the enricher and router.

    Args:
        router: Event router holding the dispatch configuration
        enricher: Context enricher; events are routed unenriched when omitted
        history: Delivery history; a private one is created when omitted
        timeout: Default dispatch deadline in seconds for process()/dispatch()
            calls made without a token. None means no deadline.
    """

    def __init__(
        self,
        router: EventRouter,
        enricher: Optional[ContextEnricher] = None,
        history: Optional[DeliveryHistory] = None,
        timeout: Optional[float] = None,
    ):
        self._router = router
        self._enricher = enricher or ContextEnricher(lookup=None)
        self._history = history if history is not None else DeliveryHistory()
        self._timeout = timeout

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        config: DispatchConfig,
        lookup: Optional[TrackerLookup] = None,
        registry: Optional[ProviderRegistry] = None,
    ) -> "NotificationService":
        """Build a service wired from application settings.

        Enrichment lookups and provider sends share one concurrency limiter.
        """
        dispatch = settings.dispatch
        limiter = ConcurrencyLimiter(dispatch.max_concurrent_connections)
        router = EventRouter(
            config,
            registry=registry,
            limiter=limiter,
            provider_timeout=dispatch.provider_timeout_seconds,
        )
        return cls(
            router=router,
            enricher=ContextEnricher(lookup, limiter=limiter),
            history=DeliveryHistory(dispatch.history_size),
            timeout=dispatch.timeout_seconds,
        )

    @property
    def history(self) -> DeliveryHistory:
        return self._history

    async def process(
        self, payload: Any, token: Optional[CancellationToken] = None
    ) -> List[NotificationResult]:
        """Canonicalize a raw webhook payload and dispatch it.

        Raises:
            MalformedEventError: The payload is not a valid event; nothing
                was delivered.
        """
        try:
            event = canonicalize(payload)
        except MalformedEventError as e:
            logger.warning("event_rejected", error=str(e))
            raise
        return await self.dispatch(event, token)

    async def dispatch(
        self, event: Event, token: Optional[CancellationToken] = None
    ) -> List[NotificationResult]:
        """Enrich a canonical event and deliver it to its routing targets.

        Args:
            event: Canonical event
            token: Cancellation token; one with the default deadline is
                created when omitted

        Returns:
            One NotificationResult per selected target, in selection order
        """
        token = token or CancellationToken(timeout=self._timeout)

        with bind_dispatch_context(event_name=event.event_name) as correlation_id:
            logger.info("dispatch_started")
            context = await self._enricher.enrich(event, token)
            results = await self._router.route(context, token)

            self._history.add(
                DispatchRecord(
                    event_name=event.event_name,
                    occurred_at=event.occurred_at,
                    correlation_id=correlation_id,
                    degraded=context.degraded,
                    results=tuple(results),
                )
            )
            logger.info(
                "dispatch_completed",
                targets=len(results),
                succeeded=sum(1 for r in results if r.success),
                degraded=list(context.degraded),
            )
        return results

    def validate_provider_config(self, config: ProviderConfig) -> ValidationResult:
        return self._router.registry.validate(config)

    def available_placeholders(self, event_type: str) -> Tuple[str, ...]:
        return self._router.engine.available_placeholders(event_type)

    def provider_types(self) -> List[str]:
        return self._router.registry.provider_types()
