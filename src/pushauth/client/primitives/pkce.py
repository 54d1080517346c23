"""PKCE (Proof Key for Code Exchange) primitives.

Implements the RFC 7636 S256 method used to bind a pushed authorization
request to the client that will later redeem the authorization code.
"""

from __future__ import annotations

import base64
import hashlib
import re
import secrets
import string
from dataclasses import dataclass, field

from pushauth.client.models.errors import PKCEError

CODE_CHALLENGE_METHOD = "S256"

# RFC 7636 Section 4.1 unreserved characters
_VERIFIER_ALPHABET = string.ascii_letters + string.digits + "-._~"
_VERIFIER_PATTERN = re.compile(r"[A-Za-z0-9\-._~]{43,128}")


def is_valid_code_verifier(code_verifier: str) -> bool:
    """Check a verifier against RFC 7636 Section 4.1 length and alphabet."""
    return _VERIFIER_PATTERN.fullmatch(code_verifier) is not None


@dataclass(frozen=True)
class PKCEParameters:
    """Immutable verifier/challenge pair for one authorization attempt."""

    code_verifier: str = field()
    code_challenge: str = field()
    code_challenge_method: str = field(default=CODE_CHALLENGE_METHOD)

    def __post_init__(self) -> None:
        if not is_valid_code_verifier(self.code_verifier):
            raise ValueError(
                "code_verifier must be 43-128 unreserved characters"
            )
        if self.code_challenge_method != CODE_CHALLENGE_METHOD:
            raise ValueError("Only S256 code challenge method is supported")


def generate_code_verifier(length: int = 64) -> str:
    """Generate a cryptographically secure code verifier.

    RFC 7636 Section 4.1: code verifier must be 43-128 characters long
    and use only unreserved characters:
        [A-Z] / [a-z] / [0-9] / "-" / "." / "_" / "~"

    Args:
        length: Number of characters to generate

    Returns:
        A random code verifier of the requested length

    Raises:
        PKCEError: If length is outside the range RFC 7636 allows
    """
    if not (43 <= length <= 128):
        raise PKCEError(f"code_verifier length must be 43-128, got {length}")
    return "".join(secrets.choice(_VERIFIER_ALPHABET) for _ in range(length))


def derive_code_challenge(code_verifier: str) -> str:
    """Derive the S256 code challenge for a code verifier.

    RFC 7636 Section 4.2: For S256, the code challenge is:
    BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))

    Args:
        code_verifier: The code verifier to hash

    Returns:
        Base64url-encoded SHA256 hash of the code verifier, without padding
    """
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


class PKCEManager:
    """Generates PKCE parameters for authorization attempts."""

    def generate_parameters(self, code_verifier: str | None = None) -> PKCEParameters:
        """Generate PKCE parameters, reusing a caller-supplied verifier if given.

        Raises:
            PKCEError: If parameter generation fails
        """
        try:
            verifier = code_verifier or generate_code_verifier()
            return PKCEParameters(
                code_verifier=verifier,
                code_challenge=derive_code_challenge(verifier),
            )
        except PKCEError:
            raise
        except Exception as e:
            raise PKCEError(f"Failed to generate PKCE parameters: {e}") from e
