"""Browser session that defers to a host-supplied handler."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from urllib.parse import urlparse

from authflow.models.errors import SessionError

logger = logging.getLogger(__name__)


class ManualBrowserSession:
    """Browser session that requires manual user interaction.

    Hands the authorization URL to a coroutine and waits for it to return the
    redirect URL. Suitable for CLI tools, tests and custom UI integrations.
    """

    def __init__(self, handler: Callable[[str], Awaitable[str]] | None = None):
        """Initialize manual browser session.

        Args:
            handler: Coroutine function called with the authorization URL.
                Should return the redirect URL.
        """
        self.handler = handler

    async def open(self, url: str, expected_scheme: str) -> str:
        if self.handler is None:
            raise SessionError(
                f"No authorization handler configured. Visit {url} to authorize"
            )

        redirect_url = await self.handler(url)
        if not redirect_url:
            raise SessionError("Authorization handler returned no redirect URL")

        scheme = urlparse(redirect_url).scheme.lower()
        if scheme != expected_scheme.lower():
            raise SessionError(
                f"Redirect scheme {scheme!r} does not match expected "
                f"{expected_scheme!r}"
            )

        logger.debug("Received redirect URL from authorization handler")
        return redirect_url
