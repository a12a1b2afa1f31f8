"""Utility helpers for Okto MCP Server.

This module re-exports the custom exception hierarchy shared by every
other package.
"""

from okto_mcp.utils.errors import (
    AuthenticationError,
    AuthTimeoutError,
    ConfigError,
    CredentialStoreError,
    DownstreamLoginError,
    MissingCodeError,
    OktoAPIError,
    OktoMCPError,
    TokenExchangeError,
    WeatherAPIError,
)

__all__ = [
    "OktoMCPError",
    "ConfigError",
    "AuthenticationError",
    "TokenExchangeError",
    "MissingCodeError",
    "AuthTimeoutError",
    "CredentialStoreError",
    "DownstreamLoginError",
    "OktoAPIError",
    "WeatherAPIError",
]
