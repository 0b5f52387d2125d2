"""Authorization request and callback handling.

Builds the URL the user visits and turns the provider's redirect back into
an authorization code.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlparse

from authflow.models.config import AuthConfig
from authflow.models.errors import (
    CallbackParsingError,
    InvalidEndpointConfiguration,
)
from authflow.models.flow import AuthorizationRequest, AuthorizationResponse
from authflow.services.security import validate_endpoint_url, validate_state

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = (
    "base_url",
    "authorize_endpoint",
    "token_endpoint",
    "client_id",
    "redirect_uri",
    "scope",
)


def build_authorization_url(
    config: AuthConfig, code_challenge: str, state: str | None = None
) -> str:
    """Build the authorization URL for one attempt.

    Args:
        config: Provider and client configuration
        code_challenge: S256 challenge of this attempt's verifier
        state: Optional CSRF nonce, appended last when given

    Returns:
        ``{base_url}{authorize_endpoint}?client_id=...&response_type=code&...``

    Raises:
        InvalidEndpointConfiguration: If a field is empty or the authorization
            or token endpoint is not an absolute http(s) URL
    """
    empty = [name for name in _REQUIRED_FIELDS if not getattr(config, name, "")]
    if empty:
        raise InvalidEndpointConfiguration(
            f"Required configuration is empty: {', '.join(empty)}"
        )
    if not code_challenge:
        raise InvalidEndpointConfiguration("Code challenge is empty")

    endpoint = f"{config.base_url}{config.authorize_endpoint}"
    validate_endpoint_url(endpoint, "Authorization endpoint")
    validate_endpoint_url(config.token_url, "Token endpoint")

    auth_request = AuthorizationRequest(
        authorization_endpoint=endpoint,
        client_id=config.client_id,
        redirect_uri=config.redirect_uri,
        scope=config.scope,
        code_challenge=code_challenge,
        code_challenge_method=config.code_challenge_method,
        state=state,
    )
    return auth_request.build_authorization_url()


def handle_callback(callback_url: str, expected_state: str | None = None) -> str:
    """Extract the authorization code from the provider's redirect.

    Args:
        callback_url: Full redirect URL received by the browser session
        expected_state: Nonce sent in the authorization request, if any

    Returns:
        The authorization code

    Raises:
        CallbackParsingError: If the provider reported an error or the code
            is missing
        StateValidationError: If a nonce was sent and the callback's differs,
            checked before any provider error is reported
    """
    auth_response = parse_callback_url(callback_url)

    if expected_state is not None:
        validate_state(expected_state, auth_response.state)

    if auth_response.is_error():
        logger.warning(
            f"Authorization callback contained error: {auth_response.error} - "
            f"{auth_response.error_description}"
        )
        description = (
            f" ({auth_response.error_description})"
            if auth_response.error_description
            else ""
        )
        raise CallbackParsingError(
            f"Authorization failed: {auth_response.error}{description}",
            error_code=auth_response.error,
            error_description=auth_response.error_description,
            error_uri=auth_response.error_uri,
        )

    # parse_qs drops blank values, so "?code=" arrives as a missing code
    if not auth_response.is_success():
        raise CallbackParsingError("Authorization callback missing code parameter")

    logger.info("Authorization callback successful - received authorization code")
    return auth_response.code


def parse_callback_url(callback_url: str) -> AuthorizationResponse:
    """Parse a redirect URL into an AuthorizationResponse.

    Raises:
        CallbackParsingError: If the URL cannot be parsed
    """
    try:
        parsed = urlparse(callback_url)
        query_params = parse_qs(parsed.query)
    except (TypeError, ValueError) as e:
        raise CallbackParsingError(f"Failed to parse callback URL: {e}") from e

    def get_single_param(key: str) -> str | None:
        values = query_params.get(key, [])
        return values[0] if values else None

    return AuthorizationResponse(
        code=get_single_param("code"),
        state=get_single_param("state"),
        error=get_single_param("error"),
        error_description=get_single_param("error_description"),
        error_uri=get_single_param("error_uri"),
    )
