"""Unit tests for ChatProvider (incoming webhook implementation)."""

from unittest.mock import MagicMock, patch

import pytest

from infrastructure.notifications.channels.chat import ChatProvider
from infrastructure.notifications.models import FailureKind, ProviderConfig

WEBHOOK_URL = "https://hooks.slack.com/services/T000/B000/XXXX"


@pytest.fixture
def chat_config():
    return ProviderConfig(provider_type="chat", settings={"webhook_url": WEBHOOK_URL})


@pytest.fixture
def mock_webhook_client():
    """Patch WebhookClient; the instance answers send() with HTTP 200."""
    with patch(
        "infrastructure.notifications.channels.chat.WebhookClient"
    ) as webhook_client_class:
        client = webhook_client_class.return_value
        client.send.return_value = MagicMock(status_code=200, body="ok")
        yield webhook_client_class


@pytest.mark.unit
class TestChatProviderValidation:
    """Tests for ChatProvider.validate_config()."""

    def test_valid(self, chat_config):
        assert ChatProvider.validate_config(chat_config).valid is True

    def test_missing_webhook_url(self):
        result = ChatProvider.validate_config(ProviderConfig(provider_type="chat"))

        assert result.valid is False
        assert result.errors == ["Missing required setting 'webhook_url'"]

    def test_insecure_webhook_url(self):
        result = ChatProvider.validate_config(
            ProviderConfig(
                provider_type="chat", settings={"webhook_url": "http://hooks.example.com"}
            )
        )

        assert result.valid is False
        assert "https" in result.errors[0]


@pytest.mark.unit
class TestChatProviderSend:
    """Tests for ChatProvider.send()."""

    def test_send_success(self, chat_config, message_factory, mock_webhook_client):
        provider = ChatProvider(chat_config, timeout=5.0)

        result = provider.send(message_factory())

        assert result.success is True
        assert result.provider_type == "chat"
        mock_webhook_client.assert_called_once_with(url=WEBHOOK_URL, timeout=5)
        mock_webhook_client.return_value.send.assert_called_once_with(
            text="*New task*\n\nWrite spec created"
        )

    def test_send_without_title(self, chat_config, message_factory, mock_webhook_client):
        provider = ChatProvider(chat_config)

        provider.send(message_factory(title=""))

        mock_webhook_client.return_value.send.assert_called_once_with(
            text="Write spec created"
        )

    def test_sub_second_timeout_rounds_up(
        self, chat_config, message_factory, mock_webhook_client
    ):
        ChatProvider(chat_config, timeout=0.2).send(message_factory())

        mock_webhook_client.assert_called_once_with(url=WEBHOOK_URL, timeout=1)

    def test_revoked_webhook(self, chat_config, message_factory, mock_webhook_client):
        mock_webhook_client.return_value.send.return_value = MagicMock(
            status_code=403, body="invalid_token"
        )

        result = ChatProvider(chat_config).send(message_factory())

        assert result.success is False
        assert result.failure == FailureKind.CONFIGURATION
        assert result.error_code == "HTTP_403"
        assert "invalid_token" in result.error_detail

    def test_removed_channel(self, chat_config, message_factory, mock_webhook_client):
        mock_webhook_client.return_value.send.return_value = MagicMock(
            status_code=404, body="channel_not_found"
        )

        result = ChatProvider(chat_config).send(message_factory())

        assert result.failure == FailureKind.INVALID_TARGET

    def test_server_error(self, chat_config, message_factory, mock_webhook_client):
        mock_webhook_client.return_value.send.return_value = MagicMock(
            status_code=503, body=""
        )

        result = ChatProvider(chat_config).send(message_factory())

        assert result.failure == FailureKind.TRANSIENT
        assert result.error_code == "SERVER_ERROR"

    def test_transport_error(self, chat_config, message_factory, mock_webhook_client):
        mock_webhook_client.return_value.send.side_effect = OSError("connection reset")

        result = ChatProvider(chat_config).send(message_factory())

        assert result.success is False
        assert result.failure == FailureKind.TRANSIENT
        assert result.error_code == "SEND_ERROR"
        assert "connection reset" in result.error_detail
