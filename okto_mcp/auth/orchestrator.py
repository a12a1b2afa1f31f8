"""Startup authentication: decide, re-authenticate if needed, log in to Okto.

The orchestrator runs once per process, before the MCP transport starts:

1. Load the OAuth client secret (fatal on failure).
2. Load the cached token record (absent means authentication is needed).
3. In manual mode always run the interactive flow, then stop.
4. Otherwise run the interactive flow only if the record is expired.
5. Hand the identity token to the downstream Okto login (never fatal).
"""

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from okto_mcp.auth.loopback import DEFAULT_AUTH_TIMEOUT_SECONDS, run_interactive_auth
from okto_mcp.auth.models import AuthState, ClientSecret, TokenRecord
from okto_mcp.auth.oauth import DEFAULT_EXPIRY_SKEW, TokenExchangeClient, is_expired
from okto_mcp.auth.storage import CredentialStore
from okto_mcp.utils.errors import (
    AuthenticationError,
    CredentialStoreError,
    DownstreamLoginError,
)

logger = logging.getLogger(__name__)

DOWNSTREAM_PROVIDER = "google"


class DownstreamIdentity(Protocol):
    """Anything that can turn an identity token into a session."""

    def login_using_oauth(self, id_token: str, provider: str = ...) -> object: ...


@dataclass
class AuthSession:
    """In-memory view of the credentials in use for this process."""

    client_secret: ClientSecret
    record: TokenRecord | None = None
    downstream_session: object | None = None

    @property
    def id_token(self) -> str | None:
        return self.record.id_token if self.record else None


class AuthOrchestrator:
    """Drives startup authentication.

    Attributes:
        _store: Credential persistence.
        _downstream: Okto client used for the federated login.
        _timeout: Seconds to wait for the browser callback.
        _skew: Expiry safety margin.

    Example:
        >>> orchestrator = AuthOrchestrator(store, okto_client)
        >>> session = orchestrator.run_startup(manual=False)
        >>> orchestrator.state
        <AuthState.AUTHENTICATED: 'authenticated'>
    """

    def __init__(
        self,
        store: CredentialStore,
        downstream: DownstreamIdentity,
        timeout: float = DEFAULT_AUTH_TIMEOUT_SECONDS,
        skew: timedelta = DEFAULT_EXPIRY_SKEW,
        opener: Callable[[str], bool] = webbrowser.open,
        exchange_client_factory: Callable[[ClientSecret], TokenExchangeClient] = (
            TokenExchangeClient
        ),
    ) -> None:
        self._store = store
        self._downstream = downstream
        self._timeout = timeout
        self._skew = skew
        self._opener = opener
        self._exchange_client_factory = exchange_client_factory
        self._state = AuthState.UNAUTHENTICATED
        self._session: AuthSession | None = None
        self._exchange: TokenExchangeClient | None = None

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def session(self) -> AuthSession | None:
        return self._session

    def run_startup(self, manual: bool = False) -> AuthSession:
        """Run the full startup sequence.

        Args:
            manual: Force the interactive flow and skip the downstream
                login (used by the ``auth`` command).

        Returns:
            The authenticated session.

        Raises:
            ConfigError: If the client secret cannot be loaded.
            AuthenticationError: If the interactive flow fails.
            CredentialStoreError: If new tokens cannot be persisted.
        """
        session = self.authenticate(force=manual)
        if not manual:
            self.login_downstream()
        return session

    def authenticate(self, force: bool = False) -> AuthSession:
        """Reach AUTHENTICATED, running the interactive flow when required."""
        if self._state is not AuthState.UNAUTHENTICATED:
            raise AuthenticationError(
                "Startup authentication already ran for this process",
                details={"state": self._state.value},
            )

        self._store.import_local_client_secret()
        client_secret = self._store.load_client_secret()
        self._exchange = self._exchange_client_factory(client_secret)

        record = self._load_cached_record()
        self._exchange.set_credentials(record)
        self._session = AuthSession(client_secret=client_secret, record=record)

        if force:
            logger.info("Manual authentication requested")
            needs_auth = True
        elif record is None:
            logger.info("No cached credentials, authentication required")
            needs_auth = True
        else:
            needs_auth = is_expired(record, self._skew)
            if needs_auth:
                logger.info("Cached credentials are expired or incomplete")

        if needs_auth:
            self._run_interactive()
        else:
            logger.info("Using cached credentials")

        self._state = AuthState.AUTHENTICATED
        return self._session

    def login_downstream(self) -> bool:
        """Log in to Okto with the current identity token.

        Failures are logged and never raised.

        Returns:
            True if a downstream session was established.
        """
        if self._session is None or self._state is not AuthState.AUTHENTICATED:
            logger.warning("Skipping Okto login: not authenticated")
            return False

        id_token = self._session.id_token
        if not id_token:
            logger.warning("Skipping Okto login: no identity token available")
            return False

        try:
            self._session.downstream_session = self._downstream.login_using_oauth(
                id_token, provider=DOWNSTREAM_PROVIDER
            )
        except DownstreamLoginError as e:
            logger.error("Okto authentication failed: %s", e)
            return False
        except Exception as e:
            logger.error("Unexpected error during Okto authentication: %s", e)
            return False

        logger.info("Okto authentication succeeded")
        return True

    def _load_cached_record(self) -> TokenRecord | None:
        try:
            return self._store.load_token_record()
        except CredentialStoreError as e:
            logger.warning("Ignoring unreadable credentials file: %s", e)
            return None

    def _run_interactive(self) -> None:
        assert self._session is not None and self._exchange is not None
        exchange = self._exchange
        session = self._session
        self._state = AuthState.AUTHENTICATING

        def redeem(code: str) -> TokenRecord:
            record = exchange.exchange_code(code)
            self._store.save_token_record(record)
            session.record = record
            return record

        run_interactive_auth(
            session.client_secret,
            exchange.build_auth_url,
            redeem=redeem,
            timeout=self._timeout,
            opener=self._opener,
        )
        logger.info("Authentication completed and credentials saved")


__all__ = [
    "AuthOrchestrator",
    "AuthSession",
    "DownstreamIdentity",
    "DOWNSTREAM_PROVIDER",
]
