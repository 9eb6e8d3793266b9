"""Unit tests for error classifiers.

Tests cover:
- HTTP status classification
- requests exception classification
- Retry-After header extraction
- Error code mapping
"""

import pytest
import requests

from infrastructure.operations.classifiers import (
    DEFAULT_RETRY_AFTER_SECONDS,
    classify_http_status,
    classify_requests_error,
)
from infrastructure.operations.status import OperationStatus


class TestClassifyHttpStatus:
    """Tests for classify_http_status() function."""

    @pytest.mark.parametrize("status_code", [200, 201, 204])
    def test_success(self, status_code):
        result = classify_http_status(status_code, data={"id": "abc"}, service="Notify")

        assert result.is_success
        assert result.data == {"id": "abc"}
        assert result.message == f"Notify accepted ({status_code})"

    def test_rate_limit_with_retry_after(self):
        result = classify_http_status(429, retry_after="120")

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "RATE_LIMITED"
        assert result.retry_after == 120
        assert "rate limited" in result.message.lower()

    @pytest.mark.parametrize("retry_after", [None, "", "Wed, 21 Oct 2015 07:28:00 GMT"])
    def test_rate_limit_default_retry_after(self, retry_after):
        result = classify_http_status(429, retry_after=retry_after)

        assert result.retry_after == DEFAULT_RETRY_AFTER_SECONDS

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_unauthorized(self, status_code):
        result = classify_http_status(status_code, "invalid_token", service="Chat webhook")

        assert result.status == OperationStatus.UNAUTHORIZED
        assert result.error_code == f"HTTP_{status_code}"
        assert result.message.startswith("Chat webhook rejected credentials")
        assert result.message.endswith(": invalid_token")

    @pytest.mark.parametrize("status_code", [400, 404, 410])
    def test_target_invalid(self, status_code):
        result = classify_http_status(status_code)

        assert result.status == OperationStatus.NOT_FOUND
        assert result.error_code == f"HTTP_{status_code}"

    @pytest.mark.parametrize("status_code", [500, 502, 503])
    def test_server_error(self, status_code):
        result = classify_http_status(status_code)

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.is_transient
        assert result.error_code == "SERVER_ERROR"

    def test_unexpected_status(self):
        result = classify_http_status(302)

        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.error_code == "HTTP_302"

    def test_body_truncated(self):
        result = classify_http_status(500, "x" * 1000)

        assert result.message.count("x") == 200


class TestClassifyRequestsError:
    """Tests for classify_requests_error() function."""

    def test_timeout(self):
        result = classify_requests_error(requests.ReadTimeout("slow"), service="Tracker")

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "TIMEOUT"
        assert result.message == "Tracker request timed out"

    def test_connect_timeout_is_timeout(self):
        result = classify_requests_error(requests.ConnectTimeout("slow"))

        assert result.error_code == "TIMEOUT"

    def test_connection_error(self):
        result = classify_requests_error(requests.ConnectionError("refused"))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "CONNECTION_ERROR"

    @pytest.mark.parametrize(
        "exc",
        [
            requests.exceptions.InvalidURL("bad"),
            requests.exceptions.MissingSchema("no scheme"),
            requests.exceptions.InvalidSchema("ftp"),
        ],
    )
    def test_misconfigured_endpoint(self, exc):
        result = classify_requests_error(exc)

        assert result.status == OperationStatus.UNAUTHORIZED
        assert result.error_code == "INVALID_URL"

    def test_unknown_error(self):
        result = classify_requests_error(RuntimeError("boom"))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "UNEXPECTED_ERROR"
        assert "RuntimeError" in result.message
