"""Generic HTTP webhook provider."""

import hashlib
import hmac
import json

import requests
import structlog

from infrastructure.notifications.channels.base import (
    NotificationProvider,
    check_url,
    require_settings,
)
from infrastructure.notifications.models import (
    NotificationMessage,
    NotificationResult,
    ProviderConfig,
    ValidationResult,
)
from infrastructure.operations import (
    OperationResult,
    classify_http_status,
    classify_requests_error,
)

logger = structlog.get_logger()

ALLOWED_METHODS = ("POST", "PUT")
SIGNATURE_HEADER = "X-Signature"


def sign_payload(secret: str, body: bytes) -> str:
    """HMAC-SHA256 signature of a request body, as sent in X-Signature."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


class WebhookProvider(NotificationProvider):
    """Delivers messages as JSON documents to an HTTP endpoint.

    Body: {"event_name", "title", "text"}.

    Settings:
        url: Endpoint URL (http or https)
        method: POST (default) or PUT
        secret: Optional signing secret; adds an X-Signature header
    """

    provider_type = "webhook"

    @classmethod
    def validate_config(cls, config: ProviderConfig) -> ValidationResult:
        errors = require_settings(config, "url")
        errors.extend(check_url(config, "url", schemes=("http", "https")))
        method = (config.settings.get("method") or "POST").strip().upper()
        if method not in ALLOWED_METHODS:
            errors.append(
                f"Setting 'method' must be one of {', '.join(ALLOWED_METHODS)}"
            )
        return ValidationResult.from_errors(errors)

    def send(self, message: NotificationMessage) -> NotificationResult:
        result = self._deliver(message)

        if result.is_success:
            logger.info("webhook_delivered", event_name=message.event_name)
        else:
            logger.error(
                "webhook_delivery_failed",
                event_name=message.event_name,
                error=result.message,
                error_code=result.error_code,
            )
        return self.result_from_operation(result)

    def _deliver(self, message: NotificationMessage) -> OperationResult:
        body = json.dumps(
            {
                "event_name": message.event_name,
                "title": message.title,
                "text": message.rendered_text,
            }
        ).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        secret = self.settings.get("secret")
        if secret:
            headers[SIGNATURE_HEADER] = sign_payload(secret, body)

        method = (self.settings.get("method") or "POST").strip().upper()
        try:
            response = self.session.request(
                method,
                self.settings["url"].strip(),
                data=body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            return classify_requests_error(e, service="Webhook")
        except Exception as e:
            logger.error("webhook_send_error", error=str(e), exc_info=True)
            return OperationResult.transient_error(
                message=f"Webhook send error: {str(e)}",
                error_code="SEND_ERROR",
            )

        return classify_http_status(
            response.status_code,
            response.text,
            retry_after=response.headers.get("Retry-After"),
            service="Webhook",
        )
