"""Dispatch configuration: providers, routing and templates.

Loaded once from a JSON document and handed to the router read-only:

    {
        "providers": [
            {"provider_type": "chat", "settings": {"webhook_url": "https://..."}}
        ],
        "default_providers": ["chat"],
        "event_providers": {"task.assigned": ["chat", "email"]},
        "templates": {
            "task.created": {"title": "New task", "body": "{{task.title}} created"}
        }
    }

Template entries may omit ``event_type``; it is taken from the mapping key.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, model_validator

from infrastructure.notifications.models import NotificationTemplate, ProviderConfig
from infrastructure.notifications.templates import DEFAULT_TEMPLATES

logger = structlog.get_logger()


class DispatchConfig(BaseModel):
    """Routing configuration for the event router.

    Attributes:
        providers: Configured delivery channels, unique by provider_type
        default_providers: Provider types used when an event type has no
            explicit list. Empty means every configured provider.
        event_providers: Event type to explicit provider type list
        templates: Event type to template (one to one)
    """

    model_config = ConfigDict(frozen=True)

    providers: List[ProviderConfig] = Field(default_factory=list)
    default_providers: List[str] = Field(default_factory=list)
    event_providers: Dict[str, List[str]] = Field(default_factory=dict)
    templates: Dict[str, NotificationTemplate] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _template_event_types_from_keys(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("templates"), dict):
            templates = {}
            for event_type, template in data["templates"].items():
                if isinstance(template, dict) and "event_type" not in template:
                    template = {**template, "event_type": event_type}
                templates[event_type] = template
            data = {**data, "templates": templates}
        return data

    @model_validator(mode="after")
    def _check_consistency(self) -> "DispatchConfig":
        seen = set()
        for provider in self.providers:
            if provider.provider_type in seen:
                raise ValueError(
                    f"Duplicate provider_type '{provider.provider_type}'"
                )
            seen.add(provider.provider_type)

        for event_type, template in self.templates.items():
            if template.event_type != event_type:
                raise ValueError(
                    f"Template registered for '{event_type}' declares "
                    f"event_type '{template.event_type}'"
                )
        return self

    def get_provider(self, provider_type: str) -> Optional[ProviderConfig]:
        for provider in self.providers:
            if provider.provider_type == provider_type:
                return provider
        return None

    def get_template(self, event_type: str) -> Optional[NotificationTemplate]:
        return self.templates.get(event_type)

    def with_default_templates(self) -> "DispatchConfig":
        """Copy of this config with built-in templates for unconfigured event types."""
        templates = {**DEFAULT_TEMPLATES, **self.templates}
        return self.model_copy(update={"templates": templates})


def load_dispatch_config(
    path: Union[str, Path], seed_default_templates: bool = False
) -> DispatchConfig:
    """Load a DispatchConfig from a JSON document.

    Args:
        path: Path to the JSON document
        seed_default_templates: Fill event types without a template from
            the built-in defaults

    Raises:
        OSError: The file cannot be read.
        pydantic.ValidationError: The document is not a valid configuration.
    """
    config_path = Path(path)
    config = DispatchConfig.model_validate_json(config_path.read_text(encoding="utf-8"))
    if seed_default_templates:
        config = config.with_default_templates()

    logger.info(
        "dispatch_config_loaded",
        path=str(config_path),
        providers=[p.provider_type for p in config.providers],
        templates=len(config.templates),
    )
    return config
