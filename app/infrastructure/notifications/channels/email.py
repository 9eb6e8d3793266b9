"""Email provider using the GC Notify email API."""

import requests
import structlog
from pydantic import EmailStr, TypeAdapter, ValidationError

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
from integrations.notify import DEFAULT_NOTIFY_API_URL, parse_api_key, send_email

logger = structlog.get_logger()

_email_adapter = TypeAdapter(EmailStr)


class EmailProvider(NotificationProvider):
    """Sends messages as email through a GC Notify template.

    The Notify template is expected to expose ``subject`` and ``body``
    personalisation fields.

    Settings:
        api_key: GC Notify API key
        template_id: GC Notify email template id
        email_address: Recipient address
        api_url: Optional GC Notify API base URL (https)
    """

    provider_type = "email"

    @classmethod
    def validate_config(cls, config: ProviderConfig) -> ValidationResult:
        errors = require_settings(config, "api_key", "template_id", "email_address")

        api_key = config.settings.get("api_key")
        if api_key:
            try:
                parse_api_key(api_key.strip())
            except ValueError:
                errors.append("Setting 'api_key' is not a valid GC Notify API key")

        email_address = config.settings.get("email_address")
        if email_address:
            try:
                _email_adapter.validate_python(email_address.strip())
            except ValidationError:
                errors.append("Setting 'email_address' is not a valid email address")

        errors.extend(check_url(config, "api_url"))
        return ValidationResult.from_errors(errors)

    def send(self, message: NotificationMessage) -> NotificationResult:
        """Send the message to the configured address.

        Args:
            message: Rendered message; the title becomes the subject.

        Returns:
            NotificationResult for this delivery attempt.
        """
        recipient = self.settings["email_address"].strip()
        result = self._send_email(
            recipient,
            subject=message.title or message.event_name,
            body=message.rendered_text,
        )

        if result.is_success:
            logger.info(
                "email_sent",
                event_name=message.event_name,
                notification_id=(result.data or {}).get("notification_id"),
            )
        else:
            logger.error(
                "email_send_failed",
                event_name=message.event_name,
                error=result.message,
                error_code=result.error_code,
            )
        return self.result_from_operation(result)

    def _send_email(self, recipient: str, subject: str, body: str) -> OperationResult:
        try:
            response = send_email(
                api_key=self.settings["api_key"].strip(),
                template_id=self.settings["template_id"].strip(),
                email_address=recipient,
                personalisation={"subject": subject, "body": body},
                api_url=self.settings.get("api_url") or DEFAULT_NOTIFY_API_URL,
                timeout=self.timeout,
                session=self.session,
            )
        except ValueError as e:
            return OperationResult.unauthorized(
                message=f"GC Notify credentials invalid: {str(e)}",
                error_code="INVALID_API_KEY",
            )
        except requests.RequestException as e:
            return classify_requests_error(e, service="GC Notify")
        except Exception as e:
            logger.error("email_send_error", error=str(e), exc_info=True)
            return OperationResult.transient_error(
                message=f"Email send error: {str(e)}",
                error_code="SEND_ERROR",
            )

        data = None
        if 200 <= response.status_code < 300:
            try:
                data = {"notification_id": response.json().get("id")}
            except (ValueError, AttributeError):
                data = {}
        return classify_http_status(
            response.status_code,
            response.text,
            retry_after=response.headers.get("Retry-After"),
            data=data,
            service="GC Notify",
        )
