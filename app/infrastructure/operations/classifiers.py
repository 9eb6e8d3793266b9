"""Error classifiers for outbound HTTP calls.

Converts HTTP status codes and ``requests`` exceptions into standardized
OperationResult objects so every channel and the tracker client share one
failure taxonomy:

- transient transport failure (connection errors, timeouts, 429, 5xx)
- authentication/configuration failure (401, 403)
- recipient/target invalid (400, 404, 410)

Usage:
    from infrastructure.operations.classifiers import (
        classify_http_status,
        classify_requests_error,
    )

    try:
        response = session.post(url, json=payload, timeout=10)
    except requests.RequestException as exc:
        return classify_requests_error(exc)
    return classify_http_status(response.status_code, response.text)
"""

from typing import Any, Optional

import requests

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

DEFAULT_RETRY_AFTER_SECONDS = 60


def _parse_retry_after(value: Optional[str]) -> int:
    if not value:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        return int(value)
    except (ValueError, TypeError):
        return DEFAULT_RETRY_AFTER_SECONDS


def classify_http_status(
    status_code: int,
    body: str = "",
    retry_after: Optional[str] = None,
    data: Optional[Any] = None,
    service: str = "HTTP",
) -> OperationResult:
    """Classify an HTTP response status into an OperationResult.

    Status Code Mapping:
    - 2xx: SUCCESS (data passed through)
    - 429: TRANSIENT_ERROR with retry_after
    - 401/403: UNAUTHORIZED (credentials or endpoint configuration)
    - 400/404/410: NOT_FOUND (recipient or target invalid)
    - 5xx: TRANSIENT_ERROR
    - Other: PERMANENT_ERROR

    Args:
        status_code: HTTP status code of the response
        body: Response text, truncated into the error message
        retry_after: Raw Retry-After header value, if any
        data: Parsed response body for successful responses
        service: Name used in messages (e.g. "Slack webhook")

    Returns:
        OperationResult describing the outcome
    """
    detail = body[:200] if body else ""
    suffix = f": {detail}" if detail else ""

    if 200 <= status_code < 300:
        return OperationResult.success(
            data=data, message=f"{service} accepted ({status_code})"
        )

    if status_code == 429:
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            f"{service} rate limited{suffix}",
            error_code="RATE_LIMITED",
            retry_after=_parse_retry_after(retry_after),
        )

    if status_code in (401, 403):
        return OperationResult.unauthorized(
            f"{service} rejected credentials ({status_code}){suffix}",
            error_code=f"HTTP_{status_code}",
        )

    if status_code in (400, 404, 410):
        return OperationResult.not_found(
            f"{service} target invalid ({status_code}){suffix}",
            error_code=f"HTTP_{status_code}",
        )

    if 500 <= status_code < 600:
        return OperationResult.transient_error(
            f"{service} server error ({status_code}){suffix}",
            error_code="SERVER_ERROR",
        )

    return OperationResult.permanent_error(
        f"{service} unexpected status ({status_code}){suffix}",
        error_code=f"HTTP_{status_code}",
    )


def classify_requests_error(exc: Exception, service: str = "HTTP") -> OperationResult:
    """Classify an exception raised while performing an HTTP call.

    Timeouts and connection failures are transient. Invalid URLs and schemes
    are configuration problems. Anything else is treated as transient since
    network issues are usually temporary.

    Args:
        exc: Exception raised by requests (or the transport underneath)
        service: Name used in messages

    Returns:
        OperationResult with a non-success status
    """
    if isinstance(exc, requests.Timeout):
        return OperationResult.transient_error(
            f"{service} request timed out", error_code="TIMEOUT"
        )

    if isinstance(
        exc,
        (
            requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
        ),
    ):
        return OperationResult.unauthorized(
            f"{service} endpoint misconfigured: {exc}", error_code="INVALID_URL"
        )

    if isinstance(exc, requests.ConnectionError):
        return OperationResult.transient_error(
            f"{service} connection error: {exc}", error_code="CONNECTION_ERROR"
        )

    return OperationResult.transient_error(
        f"{service} error: {type(exc).__name__}: {exc}",
        error_code="UNEXPECTED_ERROR",
    )
