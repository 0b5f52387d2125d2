"""Security utilities for the authorization flow.

Provides the optional ``state`` nonce used for CSRF protection of the
authorization round trip, and validation of the provider endpoint URLs.
"""

from __future__ import annotations

import secrets
import string
from urllib.parse import urlparse

from authflow.models.errors import (
    InvalidEndpointConfiguration,
    RandomnessUnavailable,
    StateValidationError,
)


def generate_state() -> str:
    """Generate cryptographically secure state parameter.

    Returns:
        Cryptographically secure random state string (32 characters)

    Raises:
        RandomnessUnavailable: If the secure random source fails
    """
    alphabet = string.ascii_letters + string.digits + "-._~"
    try:
        return "".join(secrets.choice(alphabet) for _ in range(32))
    except Exception as e:
        raise RandomnessUnavailable(f"Secure random source failed: {e}") from e


def validate_state(expected: str, actual: str | None) -> None:
    """Validate state parameter matches expected value.

    Args:
        expected: State parameter from original authorization request
        actual: State parameter from callback URL

    Raises:
        StateValidationError: If state is missing or doesn't match
    """
    if actual is None:
        raise StateValidationError(
            "Authorization server callback missing required state parameter"
        )
    if not secrets.compare_digest(expected.encode("utf-8"), actual.encode("utf-8")):
        raise StateValidationError("State parameter mismatch - possible CSRF attack")


def validate_endpoint_url(url: str, label: str = "Endpoint") -> None:
    """Validate a provider endpoint is an absolute http(s) URL.

    Args:
        url: Full endpoint URL (base URL + endpoint path)
        label: Name used in error messages

    Raises:
        InvalidEndpointConfiguration: If the URL has no http(s) scheme, no
            host, an invalid port, or contains whitespace
    """
    try:
        parsed = urlparse(url)
        # Reading the port raises ValueError when it is out of range
        parsed.port
    except ValueError as e:
        raise InvalidEndpointConfiguration(
            f"{label} is not a valid URL: {url}"
        ) from e

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidEndpointConfiguration(
            f"{label} is not an absolute http(s) URL: {url}"
        )
    if any(c.isspace() for c in url):
        raise InvalidEndpointConfiguration(f"{label} contains whitespace: {url!r}")
