"""Pushed Authorization Request service (RFC 9126).

Pushes the authorization request parameters to the authorization server
over the back channel and returns the `request_uri` that the front-channel
authorization redirect will reference.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from pushauth.client.models.errors import (
    InvalidParEndpointError,
    ParHTTPError,
    ParNetworkError,
    ParRequestError,
    ParResponseError,
)
from pushauth.client.models.options import OAuth2Options
from pushauth.client.models.par import REQUEST_URI_KEYS, ParRequest, ParRequestResult

logger = logging.getLogger(__name__)


class OAuth2ParRequester:
    """Performs pushed authorization requests.

    One call to perform_par_request() is one attempt: a single POST to the
    configured PAR endpoint, no retries. Every failure is reported as a
    failed ParRequestResult rather than raised, so callers only have two
    outcomes to route.

    Uses application/x-www-form-urlencoded encoding as required by RFC 9126.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the PAR requester.

        Args:
            timeout: HTTP connect/read timeout in seconds
            http_client: Optional preconfigured client. A client passed in
                here is not closed by close().
        """
        self.timeout = timeout
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def perform_par_request(self, options: OAuth2Options) -> ParRequestResult:
        """Push the authorization parameters described by options.

        Args:
            options: Client configuration for this authorization attempt

        Returns:
            ParRequestResult: The request URI on success, an error message on
            failure, or neither when no PAR endpoint is configured
        """
        if not options.par_enabled:
            logger.debug("No PAR endpoint configured, skipping pushed request")
            return ParRequestResult.not_applicable()

        try:
            request_uri = await self._push_authorization_request(options)
        except ParRequestError as e:
            return ParRequestResult.failure(str(e))

        return ParRequestResult.success(request_uri)

    async def _push_authorization_request(self, options: OAuth2Options) -> str:
        """Send the PAR request and return the issued request URI.

        Raises:
            ParRequestError: If the endpoint, transport or response is unusable
        """
        par_endpoint = options.par_endpoint
        self._validate_endpoint(par_endpoint)

        par_request = ParRequest.from_options(options)
        body = par_request.to_form_body()

        # Parameter names only, values may carry secrets
        logger.debug(f"PAR parameters: {', '.join(par_request.parameters)}")
        if options.logs_enabled:
            logger.info(f"PAR request: POST {par_endpoint}")

        try:
            response = await self._http_client.post(
                par_endpoint,
                content=body.encode("utf-8"),
                headers=par_request.headers(),
            )
        except httpx.HTTPError as e:
            logger.error("Unexpected error during PAR request", exc_info=True)
            raise ParNetworkError() from e

        return self._parse_par_response(response)

    def _validate_endpoint(self, par_endpoint: str) -> None:
        """Ensure the PAR endpoint is an absolute http(s) URL.

        Raises:
            InvalidParEndpointError: If the URL is malformed
        """
        try:
            url = httpx.URL(par_endpoint)
        except httpx.InvalidURL as e:
            logger.error(f"Invalid PAR endpoint url '{par_endpoint}'", exc_info=True)
            raise InvalidParEndpointError() from e

        if url.scheme not in ("http", "https") or not url.host:
            logger.error(f"Invalid PAR endpoint url '{par_endpoint}'")
            raise InvalidParEndpointError()

    def _parse_par_response(self, response: httpx.Response) -> str:
        """Parse the PAR endpoint response into a request URI.

        The body is read as UTF-8 text whatever the status code.

        Raises:
            ParHTTPError: If the status is outside 2xx
            ParResponseError: If a 2xx body has no usable request URI
        """
        body = response.content.decode("utf-8", errors="replace")

        if 200 <= response.status_code < 300:
            return self._extract_request_uri(body)

        error = self._build_http_error(response.status_code, body)
        logger.warning(f"PAR request failed: {error}")
        raise error

    def _extract_request_uri(self, body: str) -> str:
        try:
            data = json.loads(body)
        except (ValueError, RecursionError) as e:
            logger.error("PAR response no valid json.", exc_info=True)
            raise ParResponseError("PAR_FAILED: invalid JSON response") from e

        if not isinstance(data, dict):
            logger.error(f"PAR response is not a JSON object: {type(data).__name__}")
            raise ParResponseError("PAR_FAILED: invalid JSON response")

        request_uri = None
        for key in REQUEST_URI_KEYS:
            if data.get(key) is not None:
                request_uri = _json_text(data[key])
                break

        if request_uri is None or not request_uri.strip():
            raise ParResponseError("PAR_FAILED: missing request_uri in response")

        logger.debug("PAR request successful - received request_uri")
        return request_uri

    def _build_http_error(self, status_code: int, body: str) -> ParHTTPError:
        """Build the error for a non-2xx response.

        An unparseable body leaves the message at the bare HTTP status.
        """
        try:
            data = json.loads(body)
        except (ValueError, RecursionError):
            data = None

        if not isinstance(data, dict) or "error" not in data:
            return ParHTTPError(status_code)

        error_description = None
        if "error_description" in data:
            error_description = _json_text(data["error_description"])

        return ParHTTPError(status_code, _json_text(data["error"]), error_description)

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> OAuth2ParRequester:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def _json_text(value: Any) -> str:
    """Render a JSON member as text; null renders empty."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)
