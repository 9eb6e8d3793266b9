"""GC Notify client."""

import calendar
import time
from typing import Any, Dict, Optional, Tuple

import jwt
import requests

from infrastructure.logging import get_module_logger

logger = get_module_logger()

DEFAULT_NOTIFY_API_URL = "https://api.notification.canada.ca"
EMAIL_ENDPOINT = "/v2/notifications/email"

# GC Notify keys end with "{service_id}-{secret}", both UUIDs (36 chars)
_UUID_LENGTH = 36
_MIN_API_KEY_LENGTH = 2 * _UUID_LENGTH + 2


# generate the epoch seconds for the jwt token
def epoch_seconds():
    return calendar.timegm(time.gmtime())


def parse_api_key(api_key: str) -> Tuple[str, str]:
    """Split a GC Notify API key into its service id and signing secret.

    Raises:
        ValueError: The key is not in the GC Notify key format.
    """
    if not api_key or len(api_key) < _MIN_API_KEY_LENGTH:
        raise ValueError("Malformed GC Notify API key")
    secret = api_key[-_UUID_LENGTH:]
    service_id = api_key[-(2 * _UUID_LENGTH + 1) : -(_UUID_LENGTH + 1)]
    if api_key[-(_UUID_LENGTH + 1)] != "-":
        raise ValueError("Malformed GC Notify API key")
    return service_id, secret


def create_jwt_token(secret, client_id):
    """
    Generate a JWT Token for the Notify API

    Tokens have a header consisting of:
    {
        "typ": "JWT",
        "alg": "HS256"
    }

    Parameters:
    secret: Application signing secret
    client_id: Identifier for the client (the service id)

    Claims are:
    iss: identifier for the client
    iat: epoch seconds for the token (UTC)

    Returns a JWT token for this request
    """
    if not secret:
        logger.error("jwt_token_creation_failed", error="Missing secret key")
        raise ValueError("Missing secret key")
    if not client_id:
        logger.error("jwt_token_creation_failed", error="Missing client id")
        raise ValueError("Missing client id")

    headers = {"typ": "JWT", "alg": "HS256"}

    claims = {"iss": client_id, "iat": epoch_seconds()}
    t = jwt.encode(payload=claims, key=secret, headers=headers)
    if isinstance(t, str):
        return t
    else:
        return t.decode()


def create_authorization_header(api_key: str) -> Tuple[str, str]:
    """Create the authorization header for the Notify API from an API key."""
    service_id, secret = parse_api_key(api_key)
    token = create_jwt_token(secret=secret, client_id=service_id)
    return "Authorization", "Bearer {}".format(token)


def post_event(
    url: str,
    payload: Dict[str, Any],
    api_key: str,
    timeout: float = 60,
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """Post an api call to Notify.

    Raises:
        ValueError: The API key is malformed.
        requests.RequestException: Transport failure.
    """
    header_key, header_value = create_authorization_header(api_key)
    header = {header_key: header_value, "Content-Type": "application/json"}

    http = session or requests
    return http.post(url, json=payload, headers=header, timeout=timeout)


def send_email(
    api_key: str,
    template_id: str,
    email_address: str,
    personalisation: Dict[str, str],
    api_url: str = DEFAULT_NOTIFY_API_URL,
    timeout: float = 60,
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """Send an email through a GC Notify template.

    A successful response has a status code of 201.
    """
    payload = {
        "email_address": email_address,
        "template_id": template_id,
        "personalisation": personalisation,
    }
    url = api_url.rstrip("/") + EMAIL_ENDPOINT
    return post_event(url, payload, api_key, timeout=timeout, session=session)
