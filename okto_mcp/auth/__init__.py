"""Authentication module for Okto MCP server.

This module provides the local-loopback Google OAuth 2.0 flow whose
identity token is used to log in to Okto:

- Credential persistence for the client secret and cached tokens
- A one-shot loopback HTTP listener for the authorization callback
- Authorization-code exchange and expiry checks
- The startup orchestrator that ties them together

Usage:
    >>> from okto_mcp.auth import AuthOrchestrator, CredentialStore
    >>>
    >>> store = CredentialStore(config_dir)
    >>> orchestrator = AuthOrchestrator(store, okto_client)
    >>> orchestrator.run_startup()
"""

from okto_mcp.auth.loopback import (
    ListenerState,
    LoopbackAuthServer,
    launch_browser,
    run_interactive_auth,
)
from okto_mcp.auth.models import AuthState, ClientSecret, TokenRecord
from okto_mcp.auth.oauth import (
    GOOGLE_AUTH_URI,
    GOOGLE_TOKEN_URI,
    IDENTITY_SCOPES,
    TokenExchangeClient,
    is_expired,
)
from okto_mcp.auth.orchestrator import AuthOrchestrator, AuthSession
from okto_mcp.auth.storage import CredentialStore

__all__ = [
    # Models
    "AuthState",
    "ClientSecret",
    "TokenRecord",
    # Storage
    "CredentialStore",
    # Token exchange
    "TokenExchangeClient",
    "is_expired",
    "IDENTITY_SCOPES",
    "GOOGLE_AUTH_URI",
    "GOOGLE_TOKEN_URI",
    # Loopback
    "ListenerState",
    "LoopbackAuthServer",
    "launch_browser",
    "run_interactive_auth",
    # Orchestration
    "AuthOrchestrator",
    "AuthSession",
]
