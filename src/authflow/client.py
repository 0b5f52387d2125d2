"""PKCE authorization code flow client.

Drives one login attempt at a time from PKCE generation through the browser
session and callback parsing to the token exchange.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from authflow.models.config import AuthConfig
from authflow.models.errors import (
    AuthFlowError,
    FlowAlreadyInProgress,
    SessionError,
)
from authflow.models.flow import AuthSessionState, FlowAttempt
from authflow.models.tokens import TokenResult
from authflow.primitives.pkce import PKCEGenerator
from authflow.services.flow import build_authorization_url, handle_callback
from authflow.services.security import generate_state
from authflow.services.tokens import TokenExchanger
from authflow.sessions.base import BrowserSession

logger = logging.getLogger(__name__)


class AuthFlowClient:
    """Authorization code + PKCE client for a single OAuth provider.

    Owns exactly one AuthSessionState. Each login() runs a fresh attempt
    with its own PKCE pair; a second login() while one is in flight is
    rejected. Use separate instances for concurrent logins.
    """

    def __init__(
        self,
        config: AuthConfig,
        browser_session: BrowserSession,
        token_exchanger: TokenExchanger | None = None,
        pkce_generator: PKCEGenerator | None = None,
        session_timeout: float | None = 300.0,
        on_state_change: Callable[[AuthSessionState], None] | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the flow client.

        Args:
            config: Provider and client configuration, loaded beforehand
            browser_session: Host capability that opens the authorization URL
            token_exchanger: Token endpoint client (created if not given)
            pkce_generator: PKCE source (created if not given)
            session_timeout: Seconds to wait for the browser session, or None
                to wait indefinitely
            on_state_change: Called with the new state after each transition
            timeout: HTTP request timeout for the token exchange
        """
        self.config = config
        self.browser_session = browser_session
        self.token_exchanger = token_exchanger or TokenExchanger(timeout=timeout)
        self.pkce_generator = pkce_generator or PKCEGenerator()
        self.session_timeout = session_timeout
        self.on_state_change = on_state_change

        self._state = AuthSessionState.idle()
        self._attempt: FlowAttempt | None = None

    @property
    def state(self) -> AuthSessionState:
        return self._state

    async def login(self) -> TokenResult:
        """Run one complete authorization attempt.

        Returns:
            TokenResult: The access token (client is then Authenticated)

        Raises:
            FlowAlreadyInProgress: If an attempt is already running; the
                running attempt is left untouched
            AuthFlowError: The error the attempt failed with (client is then
                Failed with the same error)
        """
        if self._state.is_in_progress:
            raise FlowAlreadyInProgress(
                f"Login already in progress ({self._state.status.value})"
            )

        logger.info(f"Starting authorization flow for client {self.config.client_id}")

        try:
            self._attempt = self._start_attempt()
            self._transition(AuthSessionState.awaiting_callback())

            callback_url = await self._open_session(self._attempt.authorization_url)

            logger.debug("Processing authorization callback")
            code = self.handle_callback(callback_url)
            self._transition(AuthSessionState.exchanging_token())

            logger.debug("Exchanging authorization code for tokens")
            token = await self.token_exchanger.exchange(
                code, self._attempt.code_verifier, self.config
            )
        except AuthFlowError as e:
            logger.error(f"Authorization flow failed: {type(e).__name__}: {e}")
            self._finish(AuthSessionState.failed(e))
            raise
        except asyncio.CancelledError:
            logger.warning("Authorization flow cancelled")
            self._finish(AuthSessionState.failed(SessionError("Login was cancelled")))
            raise
        except Exception as e:
            error = AuthFlowError(f"Unexpected error during authorization flow: {e}")
            logger.error(str(error))
            self._finish(AuthSessionState.failed(error))
            raise error from e

        logger.info(f"Successfully authenticated client {self.config.client_id}")
        self._finish(AuthSessionState.authenticated(token))
        return token

    def handle_callback(self, callback_url: str) -> str:
        """Extract the authorization code for the current attempt.

        Raises:
            CallbackParsingError: If the provider reported an error or the
                code is missing
        """
        expected_state = self._attempt.state if self._attempt else None
        return handle_callback(callback_url, expected_state)

    def _start_attempt(self) -> FlowAttempt:
        pkce = self.pkce_generator.generate()
        state = generate_state() if self.config.use_state else None
        authorization_url = build_authorization_url(
            self.config, pkce.code_challenge, state
        )
        return FlowAttempt(pkce=pkce, authorization_url=authorization_url, state=state)

    async def _open_session(self, authorization_url: str) -> str:
        logger.debug("Handling user authorization")
        try:
            return await asyncio.wait_for(
                self.browser_session.open(
                    authorization_url, self.config.redirect_scheme
                ),
                timeout=self.session_timeout,
            )
        except asyncio.TimeoutError as e:
            raise SessionError(
                f"Browser session timed out after {self.session_timeout}s",
                cause="timeout",
            ) from e
        except AuthFlowError:
            raise
        except Exception as e:
            raise SessionError(
                f"Browser session failed: {e}", cause=str(e)
            ) from e

    def _finish(self, state: AuthSessionState) -> None:
        if self._attempt is not None:
            self._attempt.discard()
            self._attempt = None
        self._transition(state)

    def _transition(self, state: AuthSessionState) -> None:
        logger.debug(f"Auth state {self._state.status.value} -> {state.status.value}")
        self._state = state
        if self.on_state_change is not None:
            self.on_state_change(state)

    async def close(self) -> None:
        """Close the token exchanger's HTTP client."""
        await self.token_exchanger.close()

    async def __aenter__(self) -> AuthFlowClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
