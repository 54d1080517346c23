import base64
import hashlib

import pytest

from pushauth.client.models.errors import PKCEError
from pushauth.client.primitives.pkce import (
    PKCEManager,
    derive_code_challenge,
    generate_code_verifier,
)

# RFC 7636 Appendix B
RFC_VERIFIER = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
RFC_CHALLENGE = "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


class TestCodeChallenge:
    def test_derive_matches_rfc_example(self) -> None:
        # Act
        challenge = derive_code_challenge(RFC_VERIFIER)

        # Assert
        assert challenge == RFC_CHALLENGE

    def test_derive_is_deterministic_and_unpadded(self) -> None:
        # Arrange
        verifier = generate_code_verifier()

        # Act
        first = derive_code_challenge(verifier)
        second = derive_code_challenge(verifier)

        # Assert
        assert first == second
        assert "=" not in first
        expected = (
            base64.urlsafe_b64encode(hashlib.sha256(verifier.encode("ascii")).digest())
            .decode("ascii")
            .rstrip("=")
        )
        assert first == expected


class TestCodeVerifier:
    def test_generated_verifier_uses_unreserved_characters(self) -> None:
        # Act
        verifier = generate_code_verifier()

        # Assert
        assert len(verifier) == 64
        allowed = set(
            "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
        )
        assert set(verifier) <= allowed

    @pytest.mark.parametrize("length", [42, 129])
    def test_out_of_range_length_rejected(self, length: int) -> None:
        with pytest.raises(PKCEError):
            generate_code_verifier(length)


class TestPKCEManager:
    def test_generate_parameters_uniqueness(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act
        params1 = pkce_manager.generate_parameters()
        params2 = pkce_manager.generate_parameters()

        # Assert
        assert params1.code_verifier != params2.code_verifier
        assert params1.code_challenge != params2.code_challenge
        assert params1.code_challenge_method == "S256"

    def test_generate_parameters_reuses_supplied_verifier(self) -> None:
        # Act
        params = PKCEManager().generate_parameters(RFC_VERIFIER)

        # Assert
        assert params.code_verifier == RFC_VERIFIER
        assert params.code_challenge == RFC_CHALLENGE

    def test_generate_parameters_rejects_non_ascii_verifier(self) -> None:
        with pytest.raises(PKCEError):
            PKCEManager().generate_parameters("vérifier-" + "a" * 40)
