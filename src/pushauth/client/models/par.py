"""Pushed Authorization Request models (RFC 9126).

Contains the ordered request parameter set sent to the PAR endpoint and
the result value produced by one PAR attempt.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode

from pushauth.client.models.options import OAuth2Options
from pushauth.client.primitives.pkce import PKCEManager

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=UTF-8"

# Tried in this order; the first key holding a non-null value wins
REQUEST_URI_KEYS = ("request_uri", "requestUri", "request-uri")


def build_par_parameters(options: OAuth2Options) -> dict[str, str]:
    """Assemble the ordered authorization parameters for a PAR body.

    Protocol parameters are written first. Additional parameters are
    appended afterwards and never replace a key that is already set.

    Args:
        options: Client configuration for this attempt

    Returns:
        Insertion-ordered mapping of parameter name to value
    """
    params = {
        "client_id": options.app_id,
        "response_type": options.response_type,
    }

    if options.redirect_url:
        params["redirect_uri"] = options.redirect_url
    if options.scope:
        params["scope"] = options.scope
    if options.state:
        params["state"] = options.state

    if options.pkce_enabled and options.pkce_code_verifier:
        pkce = PKCEManager().generate_parameters(options.pkce_code_verifier)
        params["code_challenge"] = pkce.code_challenge
        params["code_challenge_method"] = pkce.code_challenge_method

    for key, value in options.additional_parameters.items():
        if not key.strip() or not value.strip():
            continue
        # First write wins
        params.setdefault(key, value)

    return params


@dataclass(frozen=True)
class ParRequest:
    """A pushed authorization request ready to be sent."""

    par_endpoint: str
    parameters: dict[str, str]

    @classmethod
    def from_options(cls, options: OAuth2Options) -> ParRequest:
        return cls(
            par_endpoint=options.par_endpoint or "",
            parameters=build_par_parameters(options),
        )

    def to_form_body(self) -> str:
        """Encode the parameters as application/x-www-form-urlencoded (UTF-8)."""
        return urlencode(self.parameters, encoding="utf-8")

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": FORM_CONTENT_TYPE,
            "Accept": "application/json",
        }


@dataclass(frozen=True)
class ParRequestResult:
    """Outcome of one pushed authorization request attempt.

    After a completed attempt exactly one of `request_uri` or
    (`error`, `error_message`) is set. The not-applicable result, returned
    when no PAR endpoint is configured, carries neither.
    """

    error: bool = False
    error_message: str | None = None
    request_uri: str | None = None

    @classmethod
    def success(cls, request_uri: str) -> ParRequestResult:
        return cls(request_uri=request_uri)

    @classmethod
    def failure(cls, error_message: str) -> ParRequestResult:
        return cls(error=True, error_message=error_message)

    @classmethod
    def not_applicable(cls) -> ParRequestResult:
        return cls()

    def is_success(self) -> bool:
        return not self.error and self.request_uri is not None

    def is_error(self) -> bool:
        return self.error

    def is_not_applicable(self) -> bool:
        return not self.error and self.request_uri is None
