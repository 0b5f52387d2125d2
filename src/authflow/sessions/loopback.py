"""Loopback browser session.

Opens the system browser and captures the provider's redirect on a local
HTTP listener (RFC 8252 Section 7.3).
"""

from __future__ import annotations

import asyncio
import logging
import socket
import webbrowser
from collections.abc import Callable
from urllib.parse import urlparse

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, Response
from starlette.routing import Route

from authflow.models.errors import SessionError

logger = logging.getLogger(__name__)

SUCCESS_HTML = """<!doctype html>
<html><head><title>Authorization complete</title></head>
<body><p>Authorization complete. You can close this window.</p></body>
</html>"""


def build_callback_app(
    callback_path: str, on_redirect: Callable[[str], None]
) -> Starlette:
    """Build the app that receives the redirect.

    ``on_redirect`` is called with the full request URL of every GET to
    ``callback_path``; other paths are answered with 404 by Starlette.
    """

    async def handle_callback(request: Request) -> Response:
        on_redirect(str(request.url))
        return HTMLResponse(SUCCESS_HTML)

    return Starlette(routes=[Route(callback_path, handle_callback, methods=["GET"])])


class LoopbackBrowserSession:
    """Browser session backed by the system browser and a local listener.

    The listener only lives while ``open`` is waiting; it is shut down as
    soon as the first redirect arrives or the wait is abandoned.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 8080,
        callback_path: str = "/callback",
        open_browser: Callable[[str], bool] = webbrowser.open,
    ) -> None:
        self.host = host
        self.port = port
        self.callback_path = callback_path
        self._open_browser = open_browser
        # Actual listening port of the last open(), useful with port=0
        self.bound_port: int | None = None

    @classmethod
    def from_redirect_uri(cls, redirect_uri: str, **kwargs) -> LoopbackBrowserSession:
        """Derive host, port and path from an ``http://`` loopback redirect URI."""
        parsed = urlparse(redirect_uri)
        if parsed.scheme != "http" or not parsed.hostname:
            raise SessionError(
                f"Loopback sessions need an http:// redirect URI, got {redirect_uri}"
            )
        return cls(
            host=parsed.hostname,
            port=parsed.port or 80,
            callback_path=parsed.path or "/",
            **kwargs,
        )

    async def open(self, url: str, expected_scheme: str) -> str:
        if expected_scheme.lower() != "http":
            raise SessionError(
                f"Loopback sessions cannot receive {expected_scheme!r} redirects"
            )

        loop = asyncio.get_running_loop()
        redirect: asyncio.Future[str] = loop.create_future()

        def on_redirect(redirect_url: str) -> None:
            if not redirect.done():
                redirect.set_result(redirect_url)

        sock = self._bind()
        self.bound_port = sock.getsockname()[1]
        config = uvicorn.Config(
            app=build_callback_app(self.callback_path, on_redirect),
            log_level="warning",
        )
        server = uvicorn.Server(config)
        serve_task = asyncio.create_task(server.serve(sockets=[sock]))
        logger.info(
            f"Waiting for authorization redirect on "
            f"http://{self.host}:{self.bound_port}{self.callback_path}"
        )

        try:
            opened = await asyncio.to_thread(self._open_browser, url)
            if not opened:
                raise SessionError(f"Could not open a browser. Visit {url} to authorize")
            return await redirect
        finally:
            server.should_exit = True
            await serve_task
            sock.close()

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
            # Listen before serving so an early redirect queues instead of failing
            sock.listen(16)
        except OSError as e:
            sock.close()
            raise SessionError(
                f"Failed to bind {self.host}:{self.port}: {e}", cause=str(e)
            ) from e
        return sock
