"""Event router.

Selects the (provider, template) targets for an enriched event and
delivers to each of them concurrently, one NotificationResult per target.

Selection:
1. The event type's explicit provider list, if configured
2. Otherwise the default provider list
3. Otherwise every configured provider

Provider types that are not configured or are disabled are skipped. When
the event type has no template nothing is dispatched.

Delivery isolates failures: a provider that fails, raises, has an invalid
configuration, or is cancelled produces a failed result and never affects
the others.
"""

import asyncio
from typing import List, Optional

import structlog

from infrastructure.notifications.cancellation import (
    CancellationToken,
    ConcurrencyLimiter,
)
from infrastructure.notifications.channels.base import (
    DEFAULT_PROVIDER_TIMEOUT,
    NotificationProvider,
)
from infrastructure.notifications.config import DispatchConfig
from infrastructure.notifications.errors import DispatchCancelledError
from infrastructure.notifications.models import (
    EnrichedContext,
    FailureKind,
    NotificationMessage,
    NotificationResult,
    RoutingTarget,
)
from infrastructure.notifications.registry import ProviderRegistry, default_registry
from infrastructure.notifications.templates import TemplateEngine

logger = structlog.get_logger()

DEFAULT_MAX_CONCURRENT_CONNECTIONS = 10


class EventRouter:
    """Fans an enriched event out to its configured providers.

    Args:
        config: Dispatch configuration (read-only)
        registry: Provider registry; built-in providers when omitted
        engine: Template engine
        limiter: Shared outbound concurrency limiter
        provider_timeout: Network timeout handed to each provider
    """

    def __init__(
        self,
        config: DispatchConfig,
        registry: Optional[ProviderRegistry] = None,
        engine: Optional[TemplateEngine] = None,
        limiter: Optional[ConcurrencyLimiter] = None,
        provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT,
    ):
        self._config = config
        self._registry = registry or default_registry()
        self._engine = engine or TemplateEngine()
        self._limiter = limiter or ConcurrencyLimiter(
            DEFAULT_MAX_CONCURRENT_CONNECTIONS
        )
        self._provider_timeout = provider_timeout

    @property
    def config(self) -> DispatchConfig:
        return self._config

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def engine(self) -> TemplateEngine:
        return self._engine

    def select_targets(self, context: EnrichedContext) -> List[RoutingTarget]:
        """Return the routing targets for the context's event, in dispatch order."""
        event_type = context.event.event_name
        template = self._config.get_template(event_type)
        if template is None:
            logger.debug("no_template_for_event", event_name=event_type)
            return []

        if event_type in self._config.event_providers:
            provider_types = self._config.event_providers[event_type]
        elif self._config.default_providers:
            provider_types = self._config.default_providers
        else:
            provider_types = [p.provider_type for p in self._config.providers]

        targets = []
        seen = set()
        for provider_type in provider_types:
            if provider_type in seen:
                continue
            seen.add(provider_type)

            provider = self._config.get_provider(provider_type)
            if provider is None:
                logger.warning(
                    "routed_provider_not_configured",
                    event_name=event_type,
                    provider_type=provider_type,
                )
                continue
            if not provider.enabled:
                continue
            targets.append(RoutingTarget(provider=provider, template=template))

        return targets

    async def route(
        self, context: EnrichedContext, token: Optional[CancellationToken] = None
    ) -> List[NotificationResult]:
        """Deliver the event to every selected target concurrently.

        Args:
            context: Enriched event
            token: Dispatch cancellation token. Targets still pending when it
                fires are reported as cancelled; completed results are kept.

        Returns:
            One NotificationResult per selected target, in selection order
        """
        targets = self.select_targets(context)
        if not targets:
            return []

        token = token or CancellationToken()
        results = await asyncio.gather(
            *(self._dispatch(target, context, token) for target in targets)
        )

        logger.info(
            "event_routed",
            event_name=context.event.event_name,
            targets=len(targets),
            succeeded=sum(1 for r in results if r.success),
        )
        return list(results)

    async def _dispatch(
        self,
        target: RoutingTarget,
        context: EnrichedContext,
        token: CancellationToken,
    ) -> NotificationResult:
        try:
            return await token.run(self._deliver(target, context, token))
        except DispatchCancelledError as e:
            logger.info(
                "dispatch_cancelled",
                event_name=context.event.event_name,
                provider_type=target.provider_type,
                reason=str(e),
            )
            return NotificationResult.failed(
                target.provider_type,
                error_detail=str(e),
                failure=FailureKind.CANCELLED,
                error_code="CANCELLED",
            )
        except Exception as e:
            logger.error(
                "dispatch_error",
                event_name=context.event.event_name,
                provider_type=target.provider_type,
                error=str(e),
                exc_info=True,
            )
            return NotificationResult.failed(
                target.provider_type,
                error_detail=f"Unexpected error: {str(e)}",
                failure=FailureKind.INTERNAL,
                error_code="INTERNAL_ERROR",
            )

    async def _deliver(
        self,
        target: RoutingTarget,
        context: EnrichedContext,
        token: CancellationToken,
    ) -> NotificationResult:
        provider_type = target.provider_type
        token.raise_if_cancelled()

        if not self._registry.is_registered(provider_type):
            logger.warning("provider_not_registered", provider_type=provider_type)
            return NotificationResult.failed(
                provider_type,
                error_detail=f"No provider registered for type '{provider_type}'",
                failure=FailureKind.CONFIGURATION,
                error_code="UNKNOWN_PROVIDER",
            )

        validation = self._registry.validate(target.provider)
        if not validation.valid:
            logger.warning(
                "provider_config_invalid",
                provider_type=provider_type,
                errors=validation.errors,
            )
            return NotificationResult.failed(
                provider_type,
                error_detail="; ".join(validation.errors),
                failure=FailureKind.CONFIGURATION,
                error_code="INVALID_CONFIG",
            )

        message = self._engine.render_message(target.template, context, provider_type)
        provider = self._registry.create(target.provider, timeout=self._provider_timeout)
        return await self._limiter.run_in_thread(_send_and_close, provider, message)


def _send_and_close(
    provider: NotificationProvider, message: NotificationMessage
) -> NotificationResult:
    try:
        return provider.send(message)
    finally:
        provider.close()
