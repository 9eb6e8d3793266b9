"""Test fixtures for notification infrastructure tests."""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest

from infrastructure.notifications.cancellation import ConcurrencyLimiter
from infrastructure.notifications.channels.base import NotificationProvider
from infrastructure.notifications.config import DispatchConfig
from infrastructure.notifications.models import (
    EnrichedContext,
    Event,
    NotificationMessage,
    NotificationResult,
    NotificationTemplate,
    ProjectSummary,
    ProviderConfig,
    TaskSummary,
    UserSummary,
    ValidationResult,
)
from infrastructure.notifications.registry import ProviderRegistry

OCCURRED_AT = datetime(2024, 3, 1, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def event_factory():
    """Factory for creating Event instances.

    Example:
        event = event_factory(event_name="task.updated", raw_data={"task": {"id": 1}})
    """

    def _factory(
        event_name: str = "task.created",
        occurred_at: datetime = OCCURRED_AT,
        raw_data: Any = None,
    ) -> Event:
        return Event(event_name=event_name, occurred_at=occurred_at, raw_data=raw_data)

    return _factory


@pytest.fixture
def task_factory():
    def _factory(**overrides) -> TaskSummary:
        values = {
            "id": 42,
            "title": "Write spec",
            "description": "First draft",
            "done": False,
            "project_id": 7,
            "url": "https://tracker.example.com/tasks/42",
        }
        values.update(overrides)
        return TaskSummary(**values)

    return _factory


@pytest.fixture
def project_factory():
    def _factory(**overrides) -> ProjectSummary:
        values = {
            "id": 7,
            "title": "Docs",
            "description": "Documentation project",
            "url": "https://tracker.example.com/projects/7",
        }
        values.update(overrides)
        return ProjectSummary(**values)

    return _factory


@pytest.fixture
def user_factory():
    def _factory(**overrides) -> UserSummary:
        values = {
            "id": 3,
            "name": "Ada Lovelace",
            "username": "ada",
            "email": "ada@example.com",
        }
        values.update(overrides)
        return UserSummary(**values)

    return _factory


@pytest.fixture
def context_factory(event_factory):
    """Factory for creating EnrichedContext instances.

    Example:
        context = context_factory(task=task_factory(), labels=("urgent",))
    """

    def _factory(event: Optional[Event] = None, **fields) -> EnrichedContext:
        return EnrichedContext(event=event or event_factory(), **fields)

    return _factory


@pytest.fixture
def provider_config_factory():
    """Factory for creating ProviderConfig instances."""

    def _factory(
        provider_type: str = "chat",
        enabled: bool = True,
        settings: Optional[Dict[str, str]] = None,
    ) -> ProviderConfig:
        return ProviderConfig(
            provider_type=provider_type, enabled=enabled, settings=settings or {}
        )

    return _factory


@pytest.fixture
def template_factory():
    """Factory for creating NotificationTemplate instances."""

    def _factory(
        event_type: str = "task.created",
        body: str = "{{task.title}} created",
        title: str = "",
        provider_overrides: Optional[Dict[str, str]] = None,
    ) -> NotificationTemplate:
        return NotificationTemplate(
            event_type=event_type,
            body=body,
            title=title,
            provider_overrides=provider_overrides or {},
        )

    return _factory


@pytest.fixture
def dispatch_config_factory(template_factory):
    """Factory for creating DispatchConfig instances.

    Defaults to one template for task.created and no providers.
    """

    def _factory(
        providers: Optional[List[ProviderConfig]] = None,
        default_providers: Optional[List[str]] = None,
        event_providers: Optional[Dict[str, List[str]]] = None,
        templates: Optional[Dict[str, NotificationTemplate]] = None,
    ) -> DispatchConfig:
        if templates is None:
            templates = {"task.created": template_factory()}
        return DispatchConfig(
            providers=providers or [],
            default_providers=default_providers or [],
            event_providers=event_providers or {},
            templates=templates,
        )

    return _factory


@pytest.fixture
def provider_class_factory():
    """Factory for NotificationProvider subclasses with scripted behaviour.

    Every class records the messages it was asked to send in ``sent``.

    Example:
        FakeChat = provider_class_factory("chat")
        FailingMail = provider_class_factory(
            "email", send=lambda message: NotificationResult.failed(...)
        )
    """

    def _factory(
        provider_type: str,
        send: Optional[Callable[[NotificationMessage], NotificationResult]] = None,
        validate: Optional[Callable[[ProviderConfig], List[str]]] = None,
    ):
        sent: List[NotificationMessage] = []

        class ScriptedProvider(NotificationProvider):
            @classmethod
            def validate_config(cls, config: ProviderConfig) -> ValidationResult:
                errors = validate(config) if validate else []
                return ValidationResult.from_errors(errors)

            def send(self, message: NotificationMessage) -> NotificationResult:
                sent.append(message)
                if send is not None:
                    return send(message)
                return NotificationResult.sent(self.provider_type)

        ScriptedProvider.provider_type = provider_type
        ScriptedProvider.sent = sent
        ScriptedProvider.__name__ = f"Scripted{provider_type.title()}Provider"
        return ScriptedProvider

    return _factory


@pytest.fixture
def registry_factory():
    """Factory for ProviderRegistry instances holding the given classes."""

    def _factory(*provider_classes) -> ProviderRegistry:
        registry = ProviderRegistry()
        for provider_class in provider_classes:
            registry.register(provider_class)
        return registry

    return _factory


@pytest.fixture
def limiter():
    """Fresh limiter per test; semaphores bind to the running loop."""
    return ConcurrencyLimiter(10)
