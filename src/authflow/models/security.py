"""Security-related models for the PKCE flow.

Contains the per-attempt PKCE pair (RFC 7636).
"""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass, field


def s256_challenge(code_verifier: str) -> str:
    """BASE64URL-ENCODE(SHA256(UTF-8(code_verifier))) without padding."""
    digest = hashlib.sha256(code_verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=").strip()


@dataclass(frozen=True)
class PkcePair:
    """PKCE code verifier and its S256 challenge.

    Generated for exactly one login attempt and never reused.
    """

    code_verifier: str = field(repr=False)
    code_challenge: str = field()
    code_challenge_method: str = field(default="S256")

    def __post_init__(self) -> None:
        """Validate PKCE parameters meet RFC 7636 requirements."""
        if not (43 <= len(self.code_verifier) <= 128):
            raise ValueError("code_verifier must be 43-128 characters")
        if self.code_challenge_method != "S256":
            raise ValueError("Only S256 code challenge method is supported")
        if self.code_challenge != s256_challenge(self.code_verifier):
            raise ValueError("code_challenge does not match code_verifier")

    @classmethod
    def from_verifier(cls, code_verifier: str) -> PkcePair:
        return cls(
            code_verifier=code_verifier,
            code_challenge=s256_challenge(code_verifier),
        )
