"""Google OAuth 2.0 code exchange and token freshness checks.

The token endpoint call goes through google-auth-oauthlib so that the
identity token returned alongside the access token is preserved for the
downstream Okto login.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import urlencode

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from okto_mcp.auth.models import ClientSecret, TokenRecord
from okto_mcp.utils.errors import TokenExchangeError

logger = logging.getLogger(__name__)

# Minimal identity scopes. Google echoes these back in URL form, so they are
# requested in URL form to keep oauthlib's scope-change check quiet.
IDENTITY_SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

DEFAULT_EXPIRY_SKEW = timedelta(seconds=60)


def _to_epoch_ms(moment: datetime) -> int:
    # google-auth reports expiry as a naive UTC datetime
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp() * 1000)


def is_expired(
    record: TokenRecord,
    skew: timedelta = DEFAULT_EXPIRY_SKEW,
    now: datetime | None = None,
) -> bool:
    """Check whether a token record must be replaced before use.

    A record is expired when any of the access, identity, or refresh tokens
    is missing, or when its expiry falls within ``skew`` of ``now``.

    Args:
        record: Token record to inspect.
        skew: Safety margin before the real expiry. Default 60 seconds.
        now: Reference time. Defaults to the current UTC time.

    Returns:
        True if the record should not be relied on.
    """
    if not record.access_token or not record.id_token or not record.refresh_token:
        return True

    if record.expiry_date is None:
        return False

    now_ms = _to_epoch_ms(now or datetime.now(UTC))
    skew_ms = int(skew.total_seconds() * 1000)
    return now_ms + skew_ms >= record.expiry_date


class TokenExchangeClient:
    """Exchanges authorization codes for tokens and caches the result.

    Attributes:
        _client_secret: OAuth application credentials.
        _credentials: Token record currently in use, if any.

    Example:
        >>> client = TokenExchangeClient(secret)
        >>> url = client.build_auth_url()
        >>> record = client.exchange_code("4/0Ab...")
        >>> client.credentials.id_token is not None
        True
    """

    def __init__(
        self,
        client_secret: ClientSecret,
        scopes: list[str] | None = None,
    ) -> None:
        self._client_secret = client_secret
        self._scopes = list(scopes or IDENTITY_SCOPES)
        self._credentials: TokenRecord | None = None

    @property
    def client_secret(self) -> ClientSecret:
        return self._client_secret

    @property
    def credentials(self) -> TokenRecord | None:
        """The cached token record (None until set or exchanged)."""
        return self._credentials

    def set_credentials(self, record: TokenRecord | None) -> None:
        self._credentials = record

    def is_expired(
        self, record: TokenRecord | None = None, skew: timedelta = DEFAULT_EXPIRY_SKEW
    ) -> bool:
        """Check freshness of ``record`` or of the cached credentials."""
        target = record if record is not None else self._credentials
        if target is None:
            return True
        return is_expired(target, skew)

    def _get_client_config(self) -> dict[str, Any]:
        return {
            "installed": {
                "client_id": self._client_secret.client_id,
                "client_secret": self._client_secret.client_secret,
                "auth_uri": GOOGLE_AUTH_URI,
                "token_uri": GOOGLE_TOKEN_URI,
                "redirect_uris": [self._client_secret.redirect_uri],
            }
        }

    def _record_from_credentials(self, credentials: Credentials) -> TokenRecord:
        granted = credentials.granted_scopes or credentials.scopes or self._scopes
        return TokenRecord(
            access_token=credentials.token,
            id_token=getattr(credentials, "id_token", None),
            refresh_token=credentials.refresh_token,
            expiry_date=_to_epoch_ms(credentials.expiry) if credentials.expiry else None,
            scope=" ".join(granted),
            token_type="Bearer",
        )

    def build_auth_url(self) -> str:
        """Create the Google consent URL for the loopback redirect.

        Requests offline access and forces the consent screen so that a
        refresh token is issued on every interactive login.

        Returns:
            Full authorization URL.
        """
        params = {
            "client_id": self._client_secret.client_id,
            "redirect_uri": self._client_secret.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self._scopes),
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{GOOGLE_AUTH_URI}?{urlencode(params)}"

    def exchange_code(self, code: str) -> TokenRecord:
        """Exchange an authorization code for a fresh token record.

        The result replaces the cached credentials. A missing refresh token
        is not an error.

        Args:
            code: Authorization code from the loopback callback.

        Returns:
            Token record with every field the provider returned.

        Raises:
            TokenExchangeError: If the token endpoint rejects the code or
                cannot be reached.
        """
        flow = Flow.from_client_config(
            self._get_client_config(),
            scopes=self._scopes,
            redirect_uri=self._client_secret.redirect_uri,
        )

        try:
            flow.fetch_token(code=code)
        except Exception as e:
            logger.error("Failed to exchange authorization code: %s", e)
            raise TokenExchangeError(
                f"Failed to exchange authorization code: {e}",
                details={"error_type": type(e).__name__},
            ) from e

        record = self._record_from_credentials(flow.credentials)

        if not record.refresh_token:
            logger.info("Token endpoint returned no refresh token")

        self._credentials = record
        logger.info("Successfully exchanged authorization code for tokens")
        return record


__all__ = [
    "TokenExchangeClient",
    "is_expired",
    "IDENTITY_SCOPES",
    "GOOGLE_AUTH_URI",
    "GOOGLE_TOKEN_URI",
    "DEFAULT_EXPIRY_SKEW",
]
