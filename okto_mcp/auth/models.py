"""Pydantic models for OAuth client credentials and cached tokens."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AuthState(str, Enum):
    """Lifecycle of the startup authentication run.

    Attributes:
        UNAUTHENTICATED: No usable credentials have been confirmed yet.
        AUTHENTICATING: The interactive loopback flow is in progress.
        AUTHENTICATED: Credentials are usable for the rest of the process.
    """

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class ClientSecret(BaseModel):
    """Identity-provider application credentials.

    Loaded once at startup from ``gcp-oauth.keys.json`` and never modified.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(..., min_length=1)
    client_secret: str = Field(..., min_length=1)
    redirect_uri: str


class TokenRecord(BaseModel):
    """The persisted credential set.

    Stored on disk with the same snake_case keys Google's token endpoint
    returns. ``expiry_date`` is milliseconds since the Unix epoch.

    Example:
        >>> record = TokenRecord(access_token="ya29...", expiry_date=1767225600000)
        >>> record.has_identity
        False
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str | None = None
    id_token: str | None = None
    refresh_token: str | None = None
    expiry_date: int | None = None
    scope: str | None = None
    token_type: str | None = None

    @property
    def has_identity(self) -> bool:
        """True when an identity token is available for downstream login."""
        return bool(self.id_token)


__all__ = [
    "AuthState",
    "ClientSecret",
    "TokenRecord",
]
