"""Template engine for notification messages.

Templates use ``{{dotted.path}}`` placeholders resolved against an
EnrichedContext:

- a path in the event type's placeholder catalogue whose value is absent
  renders as an empty string, so templates still render when enrichment
  was partial;
- a path outside the catalogue is left verbatim, so typos show up in a
  rendered preview;
- sequence values (assignees, labels) are joined with ", ".

The catalogue returned by available_placeholders() is static and is what
an administration surface offers for autocomplete.

Usage:
    engine = TemplateEngine()
    text = engine.render(template, context, provider_type="chat")
"""

import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from infrastructure.notifications.models import (
    EnrichedContext,
    NotificationMessage,
    NotificationTemplate,
)

PLACEHOLDER_PATTERN = re.compile(r"\{\{([a-zA-Z0-9_.]+)\}\}")
LIST_SEPARATOR = ", "
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Event types emitted by the tracker
TASK_CREATED = "task.created"
TASK_UPDATED = "task.updated"
TASK_DELETED = "task.deleted"
TASK_ASSIGNED = "task.assigned"
TASK_COMMENT_CREATED = "task.comment.created"
TASK_COMMENT_UPDATED = "task.comment.updated"
TASK_COMMENT_DELETED = "task.comment.deleted"
TASK_ATTACHMENT_CREATED = "task.attachment.created"
TASK_ATTACHMENT_DELETED = "task.attachment.deleted"
TASK_RELATION_CREATED = "task.relation.created"
TASK_RELATION_DELETED = "task.relation.deleted"
PROJECT_CREATED = "project.created"
PROJECT_UPDATED = "project.updated"
PROJECT_DELETED = "project.deleted"
TEAM_MEMBER_ADDED = "team.member.added"
TEAM_MEMBER_REMOVED = "team.member.removed"

EVENT_TYPES: Tuple[str, ...] = (
    TASK_CREATED,
    TASK_UPDATED,
    TASK_DELETED,
    TASK_ASSIGNED,
    TASK_COMMENT_CREATED,
    TASK_COMMENT_UPDATED,
    TASK_COMMENT_DELETED,
    TASK_ATTACHMENT_CREATED,
    TASK_ATTACHMENT_DELETED,
    TASK_RELATION_CREATED,
    TASK_RELATION_DELETED,
    PROJECT_CREATED,
    PROJECT_UPDATED,
    PROJECT_DELETED,
    TEAM_MEMBER_ADDED,
    TEAM_MEMBER_REMOVED,
)

_EVENT_PLACEHOLDERS = ("event.type", "event.timestamp", "event.url")
_PROJECT_PLACEHOLDERS = (
    "project.title",
    "project.id",
    "project.description",
    "project.url",
)
_USER_PLACEHOLDERS = ("user.name", "user.username", "user.email", "user.id")
_TASK_PLACEHOLDERS = (
    "task.title",
    "task.description",
    "task.id",
    "task.done",
    "task.dueDate",
    "task.priority",
    "task.url",
    "task.assignees",
    "task.labels",
    *_PROJECT_PLACEHOLDERS,
    "assignees",
    "assignee.count",
    "labels",
    "label.count",
)
_COMMENT_PLACEHOLDERS = ("comment.id", "comment.text", "comment.author")
_ATTACHMENT_PLACEHOLDERS = ("attachment.id", "attachment.fileName")
_RELATION_PLACEHOLDERS = (
    "relation.taskId",
    "relation.relatedTaskId",
    "relation.relationType",
)
_TEAM_PLACEHOLDERS = ("team.name", "team.id", "team.description", *_USER_PLACEHOLDERS)
_LABEL_PLACEHOLDERS = ("label.title", "label.id", "label.description")


@lru_cache(maxsize=None)
def available_placeholders(event_type: str) -> Tuple[str, ...]:
    """Return the placeholder paths templates may use for ``event_type``.

    Pure and static: the same tuple is returned for the same event type.
    """
    placeholders = list(_EVENT_PLACEHOLDERS)

    if event_type.startswith("task."):
        placeholders.extend(_TASK_PLACEHOLDERS)
        if event_type == TASK_ASSIGNED:
            placeholders.extend(_USER_PLACEHOLDERS)
        if "comment" in event_type:
            placeholders.extend(_COMMENT_PLACEHOLDERS)
        if "attachment" in event_type:
            placeholders.extend(_ATTACHMENT_PLACEHOLDERS)
        if "relation" in event_type:
            placeholders.extend(_RELATION_PLACEHOLDERS)
    elif event_type.startswith("project."):
        placeholders.extend(_PROJECT_PLACEHOLDERS)
    elif event_type.startswith("team."):
        placeholders.extend(_TEAM_PLACEHOLDERS)
    elif event_type.startswith("label."):
        placeholders.extend(_LABEL_PLACEHOLDERS)
    elif event_type.startswith("user."):
        placeholders.extend(_USER_PLACEHOLDERS)

    return tuple(placeholders)


def _raw(context: EnrichedContext, *keys: str) -> Any:
    value: Any = context.event.raw_data
    for key in keys:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def _first(*values: Any) -> Any:
    for value in values:
        if value not in (None, ""):
            return value
    return None


def _attr(entity: Any, name: str) -> Any:
    return getattr(entity, name) if entity is not None else None


def _done_label(context: EnrichedContext) -> Optional[str]:
    if context.task is None:
        return None
    return "✓ Done" if context.task.done else "○ Not Done"


def _list_or_absent(context: EnrichedContext, name: str) -> Optional[Sequence[str]]:
    if name in context.degraded:
        return None
    return getattr(context, name)


def _count(context: EnrichedContext, name: str) -> Optional[int]:
    values = _list_or_absent(context, name)
    return None if values is None else len(values)


_RESOLVERS: Dict[str, Callable[[EnrichedContext], Any]] = {
    # Event
    "event.type": lambda c: c.event.event_name,
    "event.timestamp": lambda c: c.event.occurred_at.strftime(TIMESTAMP_FORMAT),
    "event.url": lambda c: _first(_attr(c.task, "url"), _attr(c.project, "url")),
    # Task
    "task.title": lambda c: _attr(c.task, "title"),
    "task.description": lambda c: _attr(c.task, "description"),
    "task.id": lambda c: _attr(c.task, "id"),
    "task.done": _done_label,
    "task.dueDate": lambda c: _attr(c.task, "due_date"),
    "task.priority": lambda c: _attr(c.task, "priority"),
    "task.url": lambda c: _attr(c.task, "url"),
    "task.assignees": lambda c: _list_or_absent(c, "assignees"),
    "task.labels": lambda c: _list_or_absent(c, "labels"),
    "assignees": lambda c: _list_or_absent(c, "assignees"),
    "assignee.count": lambda c: _count(c, "assignees"),
    "labels": lambda c: _list_or_absent(c, "labels"),
    "label.count": lambda c: _count(c, "labels"),
    # Project
    "project.title": lambda c: _attr(c.project, "title"),
    "project.id": lambda c: _attr(c.project, "id"),
    "project.description": lambda c: _attr(c.project, "description"),
    "project.url": lambda c: _attr(c.project, "url"),
    # User
    "user.name": lambda c: _attr(c.user, "display_name"),
    "user.username": lambda c: _attr(c.user, "username"),
    "user.email": lambda c: _attr(c.user, "email"),
    "user.id": lambda c: _attr(c.user, "id"),
    # Raw event data
    "comment.id": lambda c: _raw(c, "comment", "id"),
    "comment.text": lambda c: _first(
        _raw(c, "comment", "comment"), _raw(c, "comment", "text")
    ),
    "comment.author": lambda c: _first(
        _raw(c, "comment", "author", "name"), _raw(c, "comment", "author", "username")
    ),
    "attachment.id": lambda c: _raw(c, "attachment", "id"),
    "attachment.fileName": lambda c: _first(
        _raw(c, "attachment", "file", "name"), _raw(c, "attachment", "file_name")
    ),
    "relation.taskId": lambda c: _raw(c, "relation", "task_id"),
    "relation.relatedTaskId": lambda c: _raw(c, "relation", "other_task_id"),
    "relation.relationType": lambda c: _raw(c, "relation", "relation_kind"),
    "team.name": lambda c: _raw(c, "team", "name"),
    "team.id": lambda c: _raw(c, "team", "id"),
    "team.description": lambda c: _raw(c, "team", "description"),
    "label.title": lambda c: _raw(c, "label", "title"),
    "label.id": lambda c: _raw(c, "label", "id"),
    "label.description": lambda c: _raw(c, "label", "description"),
}


def _format(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return LIST_SEPARATOR.join(str(item) for item in value)
    return str(value)


class TemplateEngine:
    """Renders notification templates against enriched contexts."""

    def render(
        self,
        template: NotificationTemplate,
        context: EnrichedContext,
        provider_type: Optional[str] = None,
    ) -> str:
        """Render the template body for ``provider_type``.

        The provider override body is used when one exists for the provider.
        Idempotent: the same inputs always render the same text.
        """
        return self.render_text(template.body_for(provider_type), context)

    def render_title(
        self, template: NotificationTemplate, context: EnrichedContext
    ) -> str:
        return self.render_text(template.title, context)

    def render_text(self, text: str, context: EnrichedContext) -> str:
        """Resolve placeholders in ``text`` for the context's event type."""
        if not text:
            return ""
        known = available_placeholders(context.event.event_name)

        def replace(match: "re.Match[str]") -> str:
            path = match.group(1)
            if path not in known or path not in _RESOLVERS:
                return match.group(0)
            return _format(_RESOLVERS[path](context))

        return PLACEHOLDER_PATTERN.sub(replace, text)

    def available_placeholders(self, event_type: str) -> Tuple[str, ...]:
        return available_placeholders(event_type)

    def render_message(
        self,
        template: NotificationTemplate,
        context: EnrichedContext,
        provider_type: str,
    ) -> NotificationMessage:
        """Render the full message handed to one provider."""
        return NotificationMessage(
            provider_type=provider_type,
            rendered_text=self.render(template, context, provider_type),
            event_name=context.event.event_name,
            title=self.render_title(template, context),
        )


def _template(event_type: str, title: str, body: str) -> NotificationTemplate:
    return NotificationTemplate(event_type=event_type, title=title, body=body)


DEFAULT_TEMPLATES: Dict[str, NotificationTemplate] = {
    t.event_type: t
    for t in (
        _template(
            TASK_CREATED,
            "📝 New Task: {{task.title}}",
            "A new task has been created in {{project.title}}\n\n"
            "Description: {{task.description}}\n"
            "Assignees: {{assignees}}\n"
            "Link: {{event.url}}",
        ),
        _template(
            TASK_UPDATED,
            "✏️ Task Updated: {{task.title}}",
            "Task in {{project.title}} has been updated\n\n"
            "Status: {{task.done}}\n"
            "Link: {{event.url}}",
        ),
        _template(
            TASK_DELETED,
            "🗑️ Task Deleted: {{task.title}}",
            "A task has been deleted from {{project.title}}",
        ),
        _template(
            TASK_ASSIGNED,
            "👤 Task Assigned: {{task.title}}",
            "{{user.name}} was assigned a task in {{project.title}}\n\n"
            "Assignees: {{assignees}}\n"
            "Link: {{event.url}}",
        ),
        _template(
            TASK_COMMENT_CREATED,
            "💬 New Comment on: {{task.title}}",
            "{{comment.author}}: {{comment.text}}\nLink: {{event.url}}",
        ),
        _template(
            TASK_COMMENT_UPDATED,
            "💬 Comment Updated on: {{task.title}}",
            "{{comment.author}}: {{comment.text}}\nLink: {{event.url}}",
        ),
        _template(
            TASK_COMMENT_DELETED,
            "💬 Comment Deleted on: {{task.title}}",
            "A comment has been deleted from a task in {{project.title}}",
        ),
        _template(
            TASK_ATTACHMENT_CREATED,
            "📎 Attachment Added to: {{task.title}}",
            "{{attachment.fileName}} was attached to a task in {{project.title}}\n"
            "Link: {{event.url}}",
        ),
        _template(
            TASK_ATTACHMENT_DELETED,
            "📎 Attachment Removed from: {{task.title}}",
            "{{attachment.fileName}} was removed from a task in {{project.title}}",
        ),
        _template(
            TASK_RELATION_CREATED,
            "🔗 Task Relation Created: {{task.title}}",
            "Task {{relation.taskId}} is now {{relation.relationType}} "
            "task {{relation.relatedTaskId}}",
        ),
        _template(
            TASK_RELATION_DELETED,
            "🔗 Task Relation Removed: {{task.title}}",
            "Task {{relation.taskId}} is no longer {{relation.relationType}} "
            "task {{relation.relatedTaskId}}",
        ),
        _template(
            PROJECT_CREATED,
            "📁 New Project: {{project.title}}",
            "A new project has been created\n\n"
            "Description: {{project.description}}\n"
            "Link: {{event.url}}",
        ),
        _template(
            PROJECT_UPDATED,
            "📁 Project Updated: {{project.title}}",
            "Project {{project.title}} has been updated\nLink: {{event.url}}",
        ),
        _template(
            PROJECT_DELETED,
            "📁 Project Deleted: {{project.title}}",
            "Project {{project.title}} has been deleted",
        ),
        _template(
            TEAM_MEMBER_ADDED,
            "👥 Team Member Added",
            "{{user.name}} has been added to {{team.name}}",
        ),
        _template(
            TEAM_MEMBER_REMOVED,
            "👥 Team Member Removed",
            "{{user.name}} has been removed from {{team.name}}",
        ),
    )
}
