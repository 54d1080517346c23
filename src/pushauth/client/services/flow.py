"""Pushed authorization step of the authorization code flow.

Runs one PAR attempt as a background task on the caller's event loop and
routes its outcome to exactly one of the external collaborators: the
authorization launcher on success, or the call's rejection sink on failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from pushauth.client.models.options import OAuth2Options
from pushauth.client.models.par import ParRequestResult
from pushauth.client.services.par import OAuth2ParRequester

logger = logging.getLogger(__name__)

ERR_PAR_FAILED = "ERR_PAR_FAILED"


class AuthorizationLauncher(Protocol):
    """Protocol for the step that opens the authorization UI.

    Receives the options with `par_request_uri` set when a pushed request
    was made, and begins the front-channel authorization redirect.
    """

    async def start_authorization(self, options: OAuth2Options) -> None: ...


class CallRejectionSink(Protocol):
    """Protocol for reporting a failed call back to the host."""

    def reject(self, error_code: str, message: str | None = None) -> None: ...


class PushedAuthorizationFlow:
    """Orchestrates the PAR step between configuration and authorization.

    Each attempt owns its own result. The options passed in are never
    mutated; the launcher receives a copy carrying the request URI.
    """

    def __init__(
        self,
        launcher: AuthorizationLauncher,
        requester: OAuth2ParRequester | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the PAR flow step.

        Args:
            launcher: Collaborator that starts authorization on success
            requester: Optional PAR requester; one is created if omitted
            timeout: HTTP timeout for a requester created here
        """
        self.launcher = launcher
        self._owns_requester = requester is None
        self._requester = requester or OAuth2ParRequester(timeout=timeout)

    def start(
        self, options: OAuth2Options, call: CallRejectionSink
    ) -> asyncio.Task[ParRequestResult | None]:
        """Schedule a PAR attempt on the running event loop.

        Returns:
            The task running the attempt and its completion
        """
        return asyncio.create_task(self.run(options, call), name="par_request")

    async def run(
        self, options: OAuth2Options, call: CallRejectionSink
    ) -> ParRequestResult | None:
        """Perform a PAR attempt and complete it exactly once.

        Returns:
            The PAR result, or None if the requester failed unexpectedly
        """
        try:
            result = await self._requester.perform_par_request(options)
        except asyncio.CancelledError:
            call.reject(ERR_PAR_FAILED)
            raise
        except Exception:
            logger.error("Unexpected error during PAR request", exc_info=True)
            result = None

        await self._complete(options, call, result)
        return result

    async def _complete(
        self,
        options: OAuth2Options,
        call: CallRejectionSink,
        result: ParRequestResult | None,
    ) -> None:
        if result is None:
            call.reject(ERR_PAR_FAILED)
            return

        if result.is_error():
            logger.error(result.error_message)
            call.reject(ERR_PAR_FAILED, result.error_message)
            return

        await self.launcher.start_authorization(
            options.with_par_request_uri(result.request_uri)
        )

    async def close(self) -> None:
        """Close the requester if this flow created it."""
        if self._owns_requester:
            await self._requester.close()

    async def __aenter__(self) -> PushedAuthorizationFlow:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
