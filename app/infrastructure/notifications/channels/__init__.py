"""Notification provider implementations."""

from infrastructure.notifications.channels.base import NotificationProvider
from infrastructure.notifications.channels.chat import ChatProvider
from infrastructure.notifications.channels.email import EmailProvider
from infrastructure.notifications.channels.webhook import WebhookProvider

__all__ = [
    "NotificationProvider",
    "ChatProvider",
    "EmailProvider",
    "WebhookProvider",
]
