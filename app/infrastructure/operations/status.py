"""Operation status enumeration.

Status codes for operation results, used to classify outcomes of lookups
and deliveries so callers can tell transient failures from configuration
and target problems.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, rate limit, 5xx)
        PERMANENT_ERROR: Non-retryable error (bad payload, unexpected response)
        UNAUTHORIZED: Authentication or configuration failure (401/403)
        NOT_FOUND: Recipient or target does not exist (404/410)
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
