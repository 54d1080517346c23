"""Client configuration for one OAuth 2 authorization attempt.

The options are loaded once per attempt from the host configuration
(camelCase keys) and stay frozen for the duration of the pushed
authorization request. The request URI returned by the authorization
server is recorded on a copy, never on the shared instance.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from pushauth.client.models.errors import OAuth2ConfigurationError
from pushauth.client.primitives.pkce import PKCEManager, is_valid_code_verifier

logger = logging.getLogger(__name__)


class OAuth2Options(BaseModel):
    """OAuth 2 client configuration consumed by the PAR step."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    # Required
    app_id: str = Field(min_length=1)
    response_type: str = Field(min_length=1)

    # Optional authorization parameters
    redirect_url: str | None = None
    scope: str | None = None
    state: str | None = None

    # Absent or empty disables PAR
    par_endpoint: str | None = None

    pkce_enabled: bool = False
    pkce_code_verifier: str | None = None

    additional_parameters: dict[str, str] = Field(default_factory=dict)
    logs_enabled: bool = False

    # Used to build the front-channel authorization URL
    authorization_base_url: str | None = None

    # Set after a successful pushed authorization request
    par_request_uri: str | None = None

    @field_validator("additional_parameters", mode="before")
    @classmethod
    def coerce_additional_parameters(cls, v: Any) -> Any:
        """Coerce scalar parameter values to strings, dropping nulls."""
        if v is None:
            return {}
        if not isinstance(v, Mapping):
            return v

        coerced: dict[str, str] = {}
        for key, value in v.items():
            if value is None:
                continue
            if isinstance(value, bool):
                coerced[str(key)] = "true" if value else "false"
            else:
                coerced[str(key)] = str(value)
        return coerced

    @field_validator("pkce_code_verifier")
    @classmethod
    def validate_pkce_code_verifier(cls, v: str | None) -> str | None:
        """Reject verifiers outside the RFC 7636 alphabet or length."""
        if v and not is_valid_code_verifier(v):
            raise ValueError(
                "pkceCodeVerifier must be 43-128 unreserved characters"
            )
        return v

    @property
    def par_enabled(self) -> bool:
        """Whether a pushed authorization request should be sent."""
        return bool(self.par_endpoint)

    def with_par_request_uri(self, request_uri: str | None) -> OAuth2Options:
        """Return a copy of these options carrying the PAR request URI."""
        return self.model_copy(update={"par_request_uri": request_uri})

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> OAuth2Options:
        """Load options from a host configuration mapping.

        Accepts the camelCase keys used by host configuration as well as
        the Python field names. When PKCE is enabled without a verifier,
        a fresh one is generated.

        Args:
            config: Configuration mapping, e.g. {"appId": ..., "parEndpoint": ...}

        Returns:
            OAuth2Options: Validated, frozen options

        Raises:
            OAuth2ConfigurationError: If required values are missing or invalid
        """
        try:
            options = cls.model_validate(dict(config))
        except ValidationError as e:
            raise OAuth2ConfigurationError(
                f"Invalid OAuth2 configuration: {e}"
            ) from e

        if options.pkce_enabled and not options.pkce_code_verifier:
            logger.debug("PKCE enabled without a code verifier, generating one")
            pkce = PKCEManager().generate_parameters()
            options = options.model_copy(
                update={"pkce_code_verifier": pkce.code_verifier}
            )

        return options
