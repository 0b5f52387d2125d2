import base64
import hashlib

import pytest

from authflow.models.errors import RandomnessUnavailable
from authflow.primitives.pkce import PKCEGenerator


class TestPKCEGenerator:
    def test_generate_parameters_crypto_requirements(self) -> None:
        # Arrange
        generator = PKCEGenerator()

        # Act
        pair = generator.generate()

        # Assert RFC 7636 requirements
        assert 43 <= len(pair.code_verifier) <= 128
        assert pair.code_challenge_method == "S256"

        # Verify code_challenge is base64url(sha256(code_verifier))
        expected_challenge = (
            base64.urlsafe_b64encode(
                hashlib.sha256(pair.code_verifier.encode("utf-8")).digest()
            )
            .decode("ascii")
            .rstrip("=")
        )
        assert pair.code_challenge == expected_challenge

    def test_no_forbidden_characters(self) -> None:
        generator = PKCEGenerator()

        for _ in range(50):
            pair = generator.generate()
            for value in (pair.code_verifier, pair.code_challenge):
                assert "+" not in value
                assert "/" not in value
                assert "=" not in value
                assert value == value.strip()

    def test_verifier_encodes_32_bytes(self) -> None:
        # Arrange - bytes chosen to produce '+' and '/' in standard base64
        raw = bytes([0xFB, 0xFF, 0xBF] * 10 + [0xFB, 0xFF])
        generator = PKCEGenerator(random_bytes=lambda n: raw[:n])

        # Act
        pair = generator.generate()

        # Assert
        assert len(pair.code_verifier) == 43
        assert pair.code_verifier == (
            base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
        )
        assert "-" in pair.code_verifier
        assert "_" in pair.code_verifier

    def test_generate_parameters_uniqueness(self) -> None:
        # Arrange
        generator = PKCEGenerator()

        # Act - Generate multiple parameters
        pair1 = generator.generate()
        pair2 = generator.generate()

        # Assert - Each generation is unique
        assert pair1.code_verifier != pair2.code_verifier
        assert pair1.code_challenge != pair2.code_challenge

    def test_failing_random_source_raises(self) -> None:
        # Arrange
        def broken_source(n: int) -> bytes:
            raise OSError("entropy pool unavailable")

        generator = PKCEGenerator(random_bytes=broken_source)

        # Act & Assert
        with pytest.raises(RandomnessUnavailable) as exc_info:
            generator.generate()

        assert "entropy pool unavailable" in str(exc_info.value)

    def test_short_random_source_raises(self) -> None:
        generator = PKCEGenerator(random_bytes=lambda n: b"\x00" * 8)

        with pytest.raises(RandomnessUnavailable):
            generator.generate()
