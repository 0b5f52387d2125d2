"""Token exchange request and result models."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class TokenRequest:
    """Authorization code to token exchange request (RFC 6749 Section 4.1.3).

    Includes the PKCE code_verifier (RFC 7636).
    """

    token_endpoint: str
    code: str
    redirect_uri: str
    client_id: str
    code_verifier: str
    grant_type: str = "authorization_code"

    def to_form_data(self) -> dict[str, str]:
        """Convert to form data for application/x-www-form-urlencoded request.

        Token requests must use form encoding, not JSON (RFC 6749 Section 4.1.3).
        """
        return {
            "grant_type": self.grant_type,
            "client_id": self.client_id,
            "code": self.code,
            "redirect_uri": self.redirect_uri,
            "code_verifier": self.code_verifier,
        }

    def __repr__(self) -> str:
        return (
            f"TokenRequest(token_endpoint={self.token_endpoint!r}, "
            f"client_id={self.client_id!r}, grant_type={self.grant_type!r})"
        )


class TokenResult(BaseModel):
    """Successful token endpoint response.

    Only ``access_token`` is interpreted. Everything else the provider sends
    (token_type, expires_in, refresh_token, ...) is kept as-is and exposed
    through the accessors below.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    access_token: str = Field(min_length=1, repr=False)

    @property
    def extra(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    @property
    def token_type(self) -> Any:
        return self.extra.get("token_type")

    @property
    def expires_in(self) -> Any:
        return self.extra.get("expires_in")

    @property
    def refresh_token(self) -> Any:
        return self.extra.get("refresh_token")

    @property
    def scope(self) -> Any:
        return self.extra.get("scope")

    def calculate_expires_at(self) -> float | None:
        """Calculate absolute expiry timestamp from expires_in.

        Returns:
            Unix timestamp when token expires, or None if no usable expiry
        """
        try:
            return time.time() + float(self.expires_in)
        except (TypeError, ValueError):
            return None
