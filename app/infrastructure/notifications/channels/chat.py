"""Chat provider using Slack-compatible incoming webhooks."""

from typing import Optional

import structlog
from slack_sdk.webhook import WebhookClient

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
from infrastructure.operations import OperationResult, classify_http_status

logger = structlog.get_logger()


class ChatProvider(NotificationProvider):
    """Posts messages to a chat channel through an incoming webhook.

    Settings:
        webhook_url: Incoming webhook URL (https)
    """

    provider_type = "chat"

    @classmethod
    def validate_config(cls, config: ProviderConfig) -> ValidationResult:
        errors = require_settings(config, "webhook_url")
        errors.extend(check_url(config, "webhook_url"))
        return ValidationResult.from_errors(errors)

    def send(self, message: NotificationMessage) -> NotificationResult:
        """Post the message to the configured webhook.

        Args:
            message: Rendered message; the title is shown in bold above the body.

        Returns:
            NotificationResult for this delivery attempt.
        """
        result = self._post(self._format(message.title, message.rendered_text))

        if result.is_success:
            logger.info("chat_message_sent", event_name=message.event_name)
        else:
            logger.error(
                "chat_message_failed",
                event_name=message.event_name,
                error=result.message,
                error_code=result.error_code,
            )
        return self.result_from_operation(result)

    def _format(self, title: Optional[str], body: str) -> str:
        if title:
            return f"*{title}*\n\n{body}"
        return body

    def _post(self, text: str) -> OperationResult:
        try:
            client = WebhookClient(
                url=self.settings["webhook_url"], timeout=max(1, int(self.timeout))
            )
            response = client.send(text=text)
        except Exception as e:
            logger.warning("chat_webhook_error", error=str(e), exc_info=True)
            return OperationResult.transient_error(
                message=f"Chat webhook error: {str(e)}",
                error_code="SEND_ERROR",
            )

        return classify_http_status(
            response.status_code, response.body, service="Chat webhook"
        )
