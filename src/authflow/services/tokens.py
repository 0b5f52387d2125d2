"""Authorization code to access token exchange.

Implements the RFC 6749 token endpoint call with the PKCE code_verifier
(RFC 7636). One request per attempt, never retried.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from authflow.models.config import AuthConfig
from authflow.models.errors import (
    InvalidEndpointConfiguration,
    NetworkError,
    TokenExchangeError,
)
from authflow.models.tokens import TokenRequest, TokenResult
from authflow.services.security import validate_endpoint_url

logger = logging.getLogger(__name__)


class TokenExchanger:
    """Exchanges an authorization code for an access token.

    Uses application/x-www-form-urlencoded encoding as required by RFC 6749.
    Transport failures surface as NetworkError; anything the endpoint answers
    that is not a usable token surfaces as TokenExchangeError.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the token exchanger.

        Args:
            timeout: HTTP request timeout in seconds
            http_client: Client to send the request with. Defaults to a new
                ``httpx.AsyncClient`` owned by this exchanger. An injected
                client stays open when the exchanger is closed.
        """
        self.timeout = timeout
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def exchange(
        self, code: str, code_verifier: str, config: AuthConfig
    ) -> TokenResult:
        """Exchange an authorization code for an access token.

        Args:
            code: Authorization code from the callback
            code_verifier: Verifier of the attempt that produced the code
            config: Provider and client configuration

        Returns:
            TokenResult: Access token plus pass-through response fields

        Raises:
            TokenExchangeError: On non-2xx status or malformed success body
            NetworkError: On timeout, DNS or connection failure
            InvalidEndpointConfiguration: If the token URL is not a valid URL
        """
        validate_endpoint_url(config.token_url, "Token endpoint")

        token_request = TokenRequest(
            token_endpoint=config.token_url,
            code=code,
            redirect_uri=config.redirect_uri,
            client_id=config.client_id,
            code_verifier=code_verifier,
        )
        return await self.exchange_code_for_token(token_request)

    async def exchange_code_for_token(self, token_request: TokenRequest) -> TokenResult:
        """Send a prepared token request.

        Raises:
            TokenExchangeError: On non-2xx status or malformed success body
            NetworkError: On timeout, DNS or connection failure
            InvalidEndpointConfiguration: If the token URL is not a valid URL
        """
        logger.debug(f"Exchanging authorization code at {token_request.token_endpoint}")

        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }
        form_data = token_request.to_form_data()

        logger.debug(
            f"Token request: grant_type={form_data['grant_type']}, "
            f"client_id={form_data['client_id']}"
        )

        try:
            response = await self._http_client.post(
                token_request.token_endpoint,
                data=form_data,
                headers=headers,
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidEndpointConfiguration(
                f"Token endpoint is not a valid URL: {token_request.token_endpoint}"
            ) from e
        except httpx.HTTPError as e:
            cause = str(e) or type(e).__name__
            logger.error(f"Token request failed before a response: {cause}")
            raise NetworkError(
                f"HTTP error during token exchange: {cause}", cause=cause
            ) from e

        return self._parse_token_response(response)

    def _parse_token_response(self, response: httpx.Response) -> TokenResult:
        """Parse token endpoint response into TokenResult.

        Raises:
            TokenExchangeError: If the response is not a usable token
        """
        status_code = response.status_code
        body = response.text

        if not 200 <= status_code < 300:
            error_code = self._extract_error_code(response)
            logger.warning(
                f"Token exchange failed with {status_code}: "
                f"{error_code or 'no error code'}"
            )
            raise TokenExchangeError(
                f"Token endpoint returned HTTP {status_code}"
                + (f": {error_code}" if error_code else ""),
                status_code=status_code,
                body=body,
                error_code=error_code,
            )

        try:
            response_data = response.json()
        except ValueError as e:
            raise TokenExchangeError(
                f"Invalid token response format: {e}",
                status_code=status_code,
                body=body,
            ) from e

        if not isinstance(response_data, dict) or not response_data.get(
            "access_token"
        ):
            raise TokenExchangeError(
                "Token response missing required access_token",
                status_code=status_code,
                body=body,
            )

        try:
            token = TokenResult.model_validate(response_data)
        except ValidationError as e:
            raise TokenExchangeError(
                f"Invalid token response format: {e}",
                status_code=status_code,
                body=body,
            ) from e

        logger.info("Token exchange successful")
        return token

    def _extract_error_code(self, response: httpx.Response) -> str | None:
        try:
            error_data = response.json()
        except ValueError:
            return None
        if isinstance(error_data, dict) and isinstance(error_data.get("error"), str):
            return error_data["error"]
        return None

    async def close(self) -> None:
        """Close the HTTP client if this exchanger created it."""
        if self._owns_http_client:
            await self._http_client.aclose()
