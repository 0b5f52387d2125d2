"""Exception hierarchy for the PKCE authorization flow.

Every failure that ends a login attempt is one of these types. Each carries
enough data (kind, provider error code, HTTP status, cause) for the caller to
decide whether to retry, surface the problem to the user, or abort.
"""

from __future__ import annotations


class AuthFlowError(Exception):
    """Base exception for all authorization flow errors."""

    pass


class RandomnessUnavailable(AuthFlowError):
    """Raised when the secure random source cannot supply PKCE bytes."""

    pass


class InvalidEndpointConfiguration(AuthFlowError):
    """Raised when configuration is missing or does not form a valid URL."""

    pass


class FlowAlreadyInProgress(AuthFlowError):
    """Raised when login() is called while an attempt is still running."""

    pass


class SessionError(AuthFlowError):
    """Raised when the interactive browser session fails or is abandoned."""

    def __init__(self, message: str, *, cause: str | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class UserCancelledError(SessionError):
    """Raised when the user closes or cancels the browser session."""

    pass


class CallbackParsingError(AuthFlowError):
    """Raised when the redirect URL carries no usable authorization code.

    When the provider reported an error (``?error=access_denied``) its code,
    description and URI are kept so callers can tell a denial apart from a
    malformed redirect.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        error_description: str | None = None,
        error_uri: str | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.error_description = error_description
        self.error_uri = error_uri


class StateValidationError(CallbackParsingError):
    """Raised when the ``state`` nonce is missing from or differs in the callback.

    This could indicate a CSRF attempt or a redirect from another attempt.
    """

    pass


class TokenExchangeError(AuthFlowError):
    """Raised when the token endpoint rejects the code or answers malformed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.error_code = error_code


class NetworkError(AuthFlowError):
    """Raised when the token request fails below HTTP (timeout, DNS, refused)."""

    def __init__(self, message: str, *, cause: str) -> None:
        super().__init__(message)
        self.cause = cause
