"""Static configuration for the authorization flow.

Loaded once, before any login attempt, and never mutated afterwards.
"""

from __future__ import annotations

import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from authflow.models.errors import InvalidEndpointConfiguration

_TRUTHY = {"1", "true", "yes", "on"}


class AuthConfig(BaseModel):
    """Provider endpoints and client registration for one OAuth client."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    authorize_endpoint: str
    token_endpoint: str
    client_id: str
    redirect_uri: str
    scope: str
    response_type: str = "code"
    code_challenge_method: str = "S256"

    # Off by default: the provider flow this mirrors sends no state nonce.
    use_state: bool = False

    @field_validator(
        "base_url",
        "authorize_endpoint",
        "token_endpoint",
        "client_id",
        "redirect_uri",
        "scope",
        "response_type",
        "code_challenge_method",
    )
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("response_type")
    @classmethod
    def validate_response_type(cls, v: str) -> str:
        if v != "code":
            raise ValueError("Only the authorization code response type is supported")
        return v

    @field_validator("code_challenge_method")
    @classmethod
    def validate_challenge_method(cls, v: str) -> str:
        if v != "S256":
            raise ValueError("Only S256 code challenge method is supported")
        return v

    @property
    def authorization_url(self) -> str:
        return f"{self.base_url}{self.authorize_endpoint}"

    @property
    def token_url(self) -> str:
        return f"{self.base_url}{self.token_endpoint}"

    @property
    def redirect_scheme(self) -> str:
        return self.redirect_uri.split(":", 1)[0].lower()

    @classmethod
    def from_env(
        cls, prefix: str = "AUTHFLOW_", dotenv_path: str | None = None
    ) -> AuthConfig:
        """Build a config from environment variables.

        A ``.env`` file is loaded first (without overriding variables that are
        already set), then ``{prefix}BASE_URL``, ``{prefix}AUTHORIZE_ENDPOINT``,
        ``{prefix}TOKEN_ENDPOINT``, ``{prefix}CLIENT_ID``,
        ``{prefix}REDIRECT_URI``, ``{prefix}SCOPE`` and the optional
        ``{prefix}USE_STATE`` are read.

        Raises:
            InvalidEndpointConfiguration: If a variable is missing or empty
        """
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))

        names = (
            "base_url",
            "authorize_endpoint",
            "token_endpoint",
            "client_id",
            "redirect_uri",
            "scope",
        )
        values: dict[str, object] = {}
        missing = []
        for name in names:
            value = os.getenv(f"{prefix}{name.upper()}", "").strip()
            if not value:
                missing.append(f"{prefix}{name.upper()}")
            values[name] = value

        if missing:
            raise InvalidEndpointConfiguration(
                f"Missing configuration: {', '.join(missing)}"
            )

        use_state = os.getenv(f"{prefix}USE_STATE", "")
        values["use_state"] = use_state.strip().lower() in _TRUTHY

        try:
            return cls(**values)
        except ValidationError as e:
            raise InvalidEndpointConfiguration(f"Invalid configuration: {e}") from e
