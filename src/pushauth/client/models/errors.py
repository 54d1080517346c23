"""Exception hierarchy for pushed authorization errors.

Provides specific exception types for different failure modes. The PAR
requester raises these internally and reports them to callers as a failed
ParRequestResult carrying the exception message.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all OAuth 2 related errors."""

    pass


class OAuth2ConfigurationError(OAuth2Error):
    """Raised when client configuration is missing or malformed."""

    pass


class PKCEError(OAuth2Error):
    """Raised when PKCE parameter generation fails."""

    pass


class ParRequestError(OAuth2Error):
    """Base exception for pushed authorization request failures.

    The exception message is the human-readable error reported upward.
    """

    pass


class InvalidParEndpointError(ParRequestError):
    """Raised when the PAR endpoint is not a usable http(s) URL."""

    def __init__(self, message: str = "PAR_FAILED: invalid PAR endpoint url"):
        super().__init__(message)


class ParNetworkError(ParRequestError):
    """Raised on any I/O failure while talking to the PAR endpoint."""

    def __init__(self, message: str = "PAR_FAILED: network error"):
        super().__init__(message)


class ParHTTPError(ParRequestError):
    """Raised when the PAR endpoint answers with a non-2xx status.

    The message is enriched with the upstream `error` and
    `error_description` fields when the body carries them.
    """

    def __init__(
        self,
        status_code: int,
        error: str | None = None,
        error_description: str | None = None,
    ):
        self.status_code = status_code
        self.error = error
        self.error_description = error_description

        message = f"PAR_FAILED: HTTP {status_code}"
        if error:
            message += f" {error}"
            if error_description is not None:
                message += f" - {error_description}"
        super().__init__(message)


class ParResponseError(ParRequestError):
    """Raised when a 2xx PAR response cannot yield a request URI."""

    pass
