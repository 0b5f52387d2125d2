"""Authorization flow models.

Contains the authorization request, the parsed callback, the per-attempt
value object and the client's session state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlencode

from authflow.models.errors import AuthFlowError
from authflow.models.security import PkcePair
from authflow.models.tokens import TokenResult


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization request parameters for the PKCE flow."""

    authorization_endpoint: str
    client_id: str
    redirect_uri: str
    scope: str
    code_challenge: str
    code_challenge_method: str = "S256"
    state: str | None = None

    def build_authorization_url(self) -> str:
        """Build the complete authorization URL.

        Parameters are emitted in a fixed order so the URL is stable for a
        given challenge.
        """
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "code_challenge": self.code_challenge,
            "code_challenge_method": self.code_challenge_method,
        }

        if self.state:
            params["state"] = self.state

        return f"{self.authorization_endpoint}?{urlencode(params)}"


@dataclass(frozen=True)
class AuthorizationResponse:
    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None
    error_uri: str | None = None

    def is_success(self) -> bool:
        return self.error is None and self.code is not None

    def is_error(self) -> bool:
        return self.error is not None


@dataclass
class FlowAttempt:
    """Secrets and URL belonging to a single login() call.

    Dropped by the client as soon as the attempt reaches a terminal state.
    """

    pkce: PkcePair | None
    authorization_url: str
    state: str | None = None

    @property
    def code_verifier(self) -> str:
        if self.pkce is None:
            raise RuntimeError("Flow attempt has already been discarded")
        return self.pkce.code_verifier

    def discard(self) -> None:
        self.pkce = None
        self.state = None


class FlowStatus(str, Enum):
    IDLE = "idle"
    AWAITING_CALLBACK = "awaiting_callback"
    EXCHANGING_TOKEN = "exchanging_token"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


@dataclass(frozen=True)
class AuthSessionState:
    """Snapshot of where the client is in its current (or last) attempt."""

    status: FlowStatus = FlowStatus.IDLE
    token: TokenResult | None = field(default=None, repr=False)
    error: AuthFlowError | None = None

    @classmethod
    def idle(cls) -> AuthSessionState:
        return cls(FlowStatus.IDLE)

    @classmethod
    def awaiting_callback(cls) -> AuthSessionState:
        return cls(FlowStatus.AWAITING_CALLBACK)

    @classmethod
    def exchanging_token(cls) -> AuthSessionState:
        return cls(FlowStatus.EXCHANGING_TOKEN)

    @classmethod
    def authenticated(cls, token: TokenResult) -> AuthSessionState:
        return cls(FlowStatus.AUTHENTICATED, token=token)

    @classmethod
    def failed(cls, error: AuthFlowError) -> AuthSessionState:
        return cls(FlowStatus.FAILED, error=error)

    @property
    def access_token(self) -> str | None:
        return self.token.access_token if self.token else None

    @property
    def is_in_progress(self) -> bool:
        return self.status in (
            FlowStatus.AWAITING_CALLBACK,
            FlowStatus.EXCHANGING_TOKEN,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in (FlowStatus.AUTHENTICATED, FlowStatus.FAILED)
