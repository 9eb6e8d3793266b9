"""Notify module for sending emails through the GC Notify API."""

from .client import (
    DEFAULT_NOTIFY_API_URL,
    epoch_seconds,
    parse_api_key,
    create_jwt_token,
    create_authorization_header,
    post_event,
    send_email,
)

__all__ = [
    "DEFAULT_NOTIFY_API_URL",
    "epoch_seconds",
    "parse_api_key",
    "create_jwt_token",
    "create_authorization_header",
    "post_event",
    "send_email",
]
