"""Custom exception hierarchy for Okto MCP Server.

This module defines a structured exception hierarchy for the error conditions
that may occur while authenticating, persisting credentials, and calling the
Okto and weather APIs.
"""

from __future__ import annotations


class OktoMCPError(Exception):
    """Base exception for all Okto MCP Server errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(OktoMCPError):
    """Exception raised for missing or malformed configuration.

    Raised when the OAuth client secret file is absent or has neither an
    "installed" nor a "web" section, or when an environment setting holds an
    invalid value. The process cannot continue without it.
    """

    pass


class AuthenticationError(OktoMCPError):
    """Exception raised for OAuth flow failures.

    Examples:
        - Authorization code could not be exchanged
        - Callback arrived without a code
        - User never completed consent
    """

    pass


class TokenExchangeError(AuthenticationError):
    """Exception raised when the identity provider rejects a code exchange."""

    pass


class MissingCodeError(AuthenticationError):
    """Exception raised when the OAuth callback carries no authorization code."""

    pass


class AuthTimeoutError(AuthenticationError):
    """Exception raised when no OAuth callback arrives before the deadline.

    Attributes:
        timeout_seconds: How long the listener waited.
    """

    def __init__(
        self,
        message: str,
        timeout_seconds: float | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.timeout_seconds = timeout_seconds


class CredentialStoreError(OktoMCPError):
    """Exception raised when the persisted token record cannot be read or written."""

    pass


class DownstreamLoginError(OktoMCPError):
    """Exception raised when the Okto federated login fails.

    Never fatal: the server still starts and individual tools report
    their own authentication failures.
    """

    pass


class OktoAPIError(OktoMCPError):
    """Exception raised for errors from Okto API calls.

    Attributes:
        status_code: HTTP status code from the API response.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        """Initialize the Okto API error exception.

        Args:
            message: Human-readable error description.
            status_code: HTTP status code from the API response.
            details: Optional dictionary containing additional error context.
        """
        super().__init__(message, details)
        self.status_code = status_code


class WeatherAPIError(OktoMCPError):
    """Exception raised for errors from the weather forecast API."""

    pass


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
