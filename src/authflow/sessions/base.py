"""Interactive browser session capability.

The host environment decides how the user reaches the authorization page
(system browser, embedded web view, a human pasting URLs). The flow only
needs a URL opened and the redirect handed back.
"""

from __future__ import annotations

from typing import Protocol


class BrowserSession(Protocol):
    """Protocol for the user authorization step.

    Implementations resolve exactly once per call: either with the redirect
    URL or by raising ``SessionError`` (``UserCancelledError`` when the user
    backed out).
    """

    async def open(self, url: str, expected_scheme: str) -> str:
        """Present the authorization URL and wait for the redirect.

        Args:
            url: Authorization URL for the user to visit
            expected_scheme: Scheme of the registered redirect URI

        Returns:
            Redirect URL received after user authorization
        """
        ...
