"""One-shot loopback HTTP listener for the OAuth authorization-code flow.

The listener binds to the host and port of the configured redirect URI,
waits for a single callback on the redirect path, and shuts itself down.

State machine:

    IDLE --start()--> LISTENING --callback with code--> RESOLVED
                          |
                          +--no code / redeem failure / timeout--> REJECTED

Requests for any other path are left unanswered and the listener keeps
waiting. The listening socket is released by ``close()``, which runs on
every exit path when the server is used as a context manager.
"""

from __future__ import annotations

import errno
import logging
import time
import webbrowser
from collections.abc import Callable
from enum import Enum
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

from okto_mcp.auth.models import ClientSecret
from okto_mcp.utils.errors import (
    AuthenticationError,
    AuthTimeoutError,
    MissingCodeError,
)

logger = logging.getLogger(__name__)

DEFAULT_AUTH_TIMEOUT_SECONDS = 300.0

_SUCCESS_BODY = (
    b"<html><body><h1>Authentication successful!</h1>"
    b"<p>You can close this window and return to the application.</p>"
    b"</body></html>"
)
_MISSING_CODE_BODY = (
    b"<html><body><h1>Authentication failed</h1>"
    b"<p>No authorization code provided. You can close this window.</p>"
    b"</body></html>"
)
_FAILURE_BODY = (
    b"<html><body><h1>Authentication failed</h1>"
    b"<p>The authorization code could not be redeemed. "
    b"Check the server logs for details.</p></body></html>"
)


class ListenerState(str, Enum):
    """Lifecycle of a loopback listener."""

    IDLE = "idle"
    LISTENING = "listening"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class _CallbackHTTPServer(HTTPServer):
    owner: LoopbackAuthServer


class _CallbackHandler(BaseHTTPRequestHandler):
    server: _CallbackHTTPServer

    # Browsers may open idle preconnections; don't block on them forever
    timeout = 10

    def do_GET(self) -> None:  # noqa: N802
        self.server.owner._handle_request(self)

    def log_message(self, format: str, *args: object) -> None:
        logger.debug("OAuth callback server: %s", format % args)


def _respond(handler: BaseHTTPRequestHandler, status: int, body: bytes) -> None:
    handler.send_response(status)
    handler.send_header("Content-Type", "text/html; charset=utf-8")
    handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)


class LoopbackAuthServer:
    """Local HTTP endpoint that captures exactly one OAuth redirect.

    Attributes:
        _host: Interface to bind, from the redirect URI.
        _port: Port to bind, from the redirect URI.
        _callback_path: Path the provider redirects to.
        _redeem: Optional callable run on the code before the browser
            gets its response. Its failure turns into an HTTP 500.

    Example:
        >>> with LoopbackAuthServer("http://localhost:3000/oauth2callback") as server:
        ...     code = server.wait_for_code(timeout=120)
    """

    def __init__(
        self,
        redirect_uri: str,
        redeem: Callable[[str], object] | None = None,
    ) -> None:
        parsed = urlparse(redirect_uri)
        self._host = parsed.hostname or "localhost"
        self._port = parsed.port or 80
        self._callback_path = parsed.path or "/"
        self._redeem = redeem
        self._server: _CallbackHTTPServer | None = None
        self._state = ListenerState.IDLE
        self._code: str | None = None
        self._error: Exception | None = None
        # Set when the error should close the listener (redeem failure)
        self._close_on_error = False

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def callback_path(self) -> str:
        return self._callback_path

    @property
    def port(self) -> int:
        """Port actually bound (differs from the URI only when it asked for 0)."""
        if self._server is not None:
            return int(self._server.server_address[1])
        return self._port

    @property
    def is_listening(self) -> bool:
        return self._server is not None

    def __enter__(self) -> LoopbackAuthServer:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def start(self) -> None:
        """Bind the listener.

        Raises:
            AuthenticationError: If the listener was already used or the
                port cannot be bound.
        """
        if self._state is not ListenerState.IDLE:
            raise AuthenticationError(
                "Loopback listener can only be started once",
                details={"state": self._state.value},
            )

        try:
            server = _CallbackHTTPServer((self._host, self._port), _CallbackHandler)
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                raise AuthenticationError(
                    f"Could not bind OAuth callback port {self._port}: already in use",
                    details={"host": self._host, "port": self._port},
                ) from e
            raise AuthenticationError(
                f"Could not start OAuth callback server: {e}",
                details={"host": self._host, "port": self._port},
            ) from e

        server.owner = self
        self._server = server
        self._state = ListenerState.LISTENING
        logger.debug(
            "OAuth callback server listening on %s:%d%s",
            self._host,
            self.port,
            self._callback_path,
        )

    def close(self) -> None:
        """Release the listening socket. Safe to call more than once."""
        if self._server is None:
            return
        self._server.server_close()
        self._server = None
        logger.debug("OAuth callback server closed")

    def poll(self, timeout: float) -> None:
        """Serve at most one incoming request, waiting up to ``timeout`` seconds."""
        if self._server is None:
            raise AuthenticationError("OAuth callback server is not listening")
        self._server.timeout = timeout
        self._server.handle_request()

    def wait_for_code(self, timeout: float = DEFAULT_AUTH_TIMEOUT_SECONDS) -> str:
        """Block until the callback resolves or rejects.

        Args:
            timeout: Seconds to wait for the browser redirect.

        Returns:
            The authorization code.

        Raises:
            MissingCodeError: If the callback carried no code. The listener
                stays bound until the owner closes it.
            AuthTimeoutError: If no callback arrived in time.
            Exception: Whatever ``redeem`` raised.
        """
        deadline = time.monotonic() + timeout

        while self._state is ListenerState.LISTENING:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self._state = ListenerState.REJECTED
                self._error = AuthTimeoutError(
                    "Authentication timed out waiting for the browser callback",
                    timeout_seconds=timeout,
                    details={"timeout_seconds": timeout},
                )
                self._close_on_error = True
                break
            self.poll(remaining)

        if self._state is ListenerState.RESOLVED:
            self.close()
            assert self._code is not None
            return self._code

        if self._close_on_error:
            self.close()
        assert self._error is not None
        raise self._error

    def _reject(self, error: Exception, close: bool = False) -> None:
        self._state = ListenerState.REJECTED
        self._error = error
        self._close_on_error = close

    def _handle_request(self, handler: BaseHTTPRequestHandler) -> None:
        parsed = urlparse(handler.path)
        if parsed.path != self._callback_path:
            logger.debug("Ignoring request for %s", parsed.path)
            return

        if self._state is not ListenerState.LISTENING:
            return

        params = parse_qs(parsed.query)
        code = params.get("code", [None])[0]

        if not code:
            oauth_error = params.get("error", [None])[0]
            details: dict[str, object] = {"params": sorted(params.keys())}
            if oauth_error:
                details["oauth_error"] = oauth_error
            _respond(handler, 400, _MISSING_CODE_BODY)
            self._reject(MissingCodeError("No code provided", details=details))
            logger.error("OAuth callback received without an authorization code")
            return

        if self._redeem is not None:
            try:
                self._redeem(code)
            except Exception as e:
                logger.error("Failed to redeem authorization code: %s", e)
                _respond(handler, 500, _FAILURE_BODY)
                self._reject(e, close=True)
                return

        _respond(handler, 200, _SUCCESS_BODY)
        self._code = code
        self._state = ListenerState.RESOLVED
        logger.info("Received OAuth authorization code")


def launch_browser(url: str, opener: Callable[[str], bool] = webbrowser.open) -> bool:
    """Try to open ``url`` in the user's browser.

    Failure is logged and swallowed; the URL is also logged so it can be
    opened by hand on a headless machine.

    Returns:
        True if a browser reported success.
    """
    logger.info("Please visit this URL to authenticate: %s", url)
    try:
        opened = bool(opener(url))
    except Exception as e:
        logger.warning("Could not open a browser: %s", e)
        return False
    if not opened:
        logger.warning("No browser available; open the URL above manually")
    return opened


def run_interactive_auth(
    client_secret: ClientSecret,
    build_auth_url: Callable[[], str],
    redeem: Callable[[str], object] | None = None,
    timeout: float = DEFAULT_AUTH_TIMEOUT_SECONDS,
    opener: Callable[[str], bool] = webbrowser.open,
) -> str:
    """Complete one authorization-code round trip through the browser.

    Args:
        client_secret: Application credentials; its redirect URI decides
            where the listener binds.
        build_auth_url: Returns the provider consent URL.
        redeem: Optional callable that exchanges the code before the
            browser is told the login succeeded.
        timeout: Seconds to wait for the callback.
        opener: Browser launcher.

    Returns:
        The authorization code.

    Raises:
        AuthenticationError: On bind failure, missing code, or timeout.
        Exception: Whatever ``redeem`` raised.
    """
    with LoopbackAuthServer(client_secret.redirect_uri, redeem=redeem) as server:
        auth_url = build_auth_url()
        launch_browser(auth_url, opener)
        return server.wait_for_code(timeout)


__all__ = [
    "ListenerState",
    "LoopbackAuthServer",
    "launch_browser",
    "run_interactive_auth",
    "DEFAULT_AUTH_TIMEOUT_SECONDS",
]
