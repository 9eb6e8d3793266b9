"""Feature-level fixtures for notification channel tests."""

from unittest.mock import MagicMock

import pytest

from infrastructure.notifications.models import NotificationMessage

SERVICE_ID = "11111111-1111-1111-1111-111111111111"
SECRET = "22222222-2222-2222-2222-222222222222"
NOTIFY_API_KEY = f"tracker_notify-{SERVICE_ID}-{SECRET}"


@pytest.fixture
def notify_api_key():
    return NOTIFY_API_KEY


@pytest.fixture
def message_factory():
    """Factory for rendered NotificationMessage instances."""

    def _factory(
        provider_type="chat",
        rendered_text="Write spec created",
        event_name="task.created",
        title="New task",
    ):
        return NotificationMessage(
            provider_type=provider_type,
            rendered_text=rendered_text,
            event_name=event_name,
            title=title,
        )

    return _factory


@pytest.fixture
def response_factory():
    """Factory for mocked requests.Response objects.

    Example:
        response = response_factory(201, json_body={"id": "abc"})
    """

    def _factory(status_code=200, text="", json_body=None, headers=None):
        response = MagicMock()
        response.status_code = status_code
        response.text = text
        response.headers = headers or {}
        if json_body is None:
            response.json.side_effect = ValueError("No JSON body")
        else:
            response.json.return_value = json_body
        return response

    return _factory


@pytest.fixture
def mock_session(response_factory):
    """Mocked requests.Session that answers every call with HTTP 200."""
    session = MagicMock()
    session.post.return_value = response_factory(200)
    session.request.return_value = response_factory(200)
    return session
