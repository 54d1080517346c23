"""Authorization flow models.

Contains the front-channel authorization request the launcher redirects
the user to once the pushed authorization step has completed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlencode, urlsplit, urlunsplit

from pushauth.client.models.errors import OAuth2ConfigurationError
from pushauth.client.models.options import OAuth2Options
from pushauth.client.models.par import build_par_parameters


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization endpoint redirect for one attempt.

    With a pushed request URI the query carries only `client_id` and
    `request_uri` (RFC 9126 Section 4); otherwise it carries the full
    ordered parameter set.
    """

    authorization_endpoint: str
    client_id: str
    request_uri: str | None = None
    parameters: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_options(cls, options: OAuth2Options) -> AuthorizationRequest:
        """Build the authorization request from client options.

        Raises:
            OAuth2ConfigurationError: If no authorization base URL is configured
        """
        if not options.authorization_base_url:
            raise OAuth2ConfigurationError("authorizationBaseUrl is required")

        return cls(
            authorization_endpoint=options.authorization_base_url,
            client_id=options.app_id,
            request_uri=options.par_request_uri,
            parameters=build_par_parameters(options),
        )

    def build_authorization_url(self) -> str:
        """Build the complete authorization URL."""
        if self.request_uri:
            params = {"client_id": self.client_id, "request_uri": self.request_uri}
        else:
            params = self.parameters

        scheme, netloc, path, query, fragment = urlsplit(self.authorization_endpoint)
        encoded = urlencode(params)
        query = f"{query}&{encoded}" if query else encoded
        return urlunsplit((scheme, netloc, path, query, fragment))
