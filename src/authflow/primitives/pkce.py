"""PKCE (Proof Key for Code Exchange) generator.

Implements RFC 7636 S256 parameter generation to prevent authorization code
interception attacks. Verifiers are never logged.
"""

from __future__ import annotations

import base64
import secrets
from collections.abc import Callable

from authflow.models.errors import RandomnessUnavailable
from authflow.models.security import PkcePair, s256_challenge

VERIFIER_BYTES = 32


class PKCEGenerator:
    """Generates a fresh PKCE pair for every authorization attempt.

    The verifier is 32 bytes from a cryptographically secure source encoded
    as unpadded base64url (43 characters), and the challenge is the S256
    transformation of that verifier.
    """

    def __init__(self, random_bytes: Callable[[int], bytes] | None = None):
        """Initialize the generator.

        Args:
            random_bytes: CSPRNG returning the requested number of bytes.
                Defaults to ``secrets.token_bytes``.
        """
        self._random_bytes = random_bytes or secrets.token_bytes

    def generate(self) -> PkcePair:
        """Generate new PKCE parameters for an authorization flow.

        Returns:
            PkcePair: Immutable verifier/challenge pair

        Raises:
            RandomnessUnavailable: If the secure random source fails
        """
        verifier_bytes = self._read_random_bytes()
        code_verifier = self._encode(verifier_bytes)

        return PkcePair(
            code_verifier=code_verifier,
            code_challenge=s256_challenge(code_verifier),
            code_challenge_method="S256",
        )

    def _read_random_bytes(self) -> bytes:
        try:
            data = self._random_bytes(VERIFIER_BYTES)
        except Exception as e:
            raise RandomnessUnavailable(
                f"Secure random source failed: {e}"
            ) from e

        if not isinstance(data, bytes) or len(data) < VERIFIER_BYTES:
            raise RandomnessUnavailable(
                f"Secure random source returned fewer than {VERIFIER_BYTES} bytes"
            )
        return data[:VERIFIER_BYTES]

    def _encode(self, data: bytes) -> str:
        return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=").strip()
