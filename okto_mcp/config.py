"""Environment-driven settings for Okto MCP Server.

All configuration comes from environment variables (optionally loaded from a
``.env`` file by the entry point). Settings are read once at startup and
passed explicitly to the components that need them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

from okto_mcp.utils.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".okto-mcp"
DEFAULT_REDIRECT_URI = "http://localhost:3000/oauth2callback"
DEFAULT_OAUTH_TIMEOUT_SECONDS = 300.0
DEFAULT_WEATHER_API_URL = "https://api.open-meteo.com/v1/forecast"

OAUTH_KEYS_FILENAME = "gcp-oauth.keys.json"
CREDENTIALS_FILENAME = "credentials.json"

OKTO_ENVIRONMENTS = ("sandbox", "production")


class Settings(BaseModel):
    """Resolved runtime configuration.

    Attributes:
        config_dir: Directory holding the OAuth keys and cached credentials.
        oauth_path: Path to the OAuth client secret file.
        credentials_path: Path to the persisted token record.
        redirect_uri: OAuth loopback redirect URI.
        oauth_timeout_seconds: How long to wait for the browser callback.
        okto_environment: Okto deployment to talk to.
        okto_client_swa: Okto client smart wallet address.
        weather_api_url: Forecast endpoint.
    """

    model_config = ConfigDict(frozen=True)

    config_dir: Path
    oauth_path: Path
    credentials_path: Path
    redirect_uri: str = DEFAULT_REDIRECT_URI
    oauth_timeout_seconds: float = Field(default=DEFAULT_OAUTH_TIMEOUT_SECONDS, gt=0)
    okto_environment: str = "sandbox"
    okto_client_swa: str | None = None
    weather_api_url: str = DEFAULT_WEATHER_API_URL


def _validate_redirect_uri(redirect_uri: str) -> None:
    parsed = urlparse(redirect_uri)
    if parsed.scheme != "http" or not parsed.hostname:
        raise ConfigError(
            "OAUTH_REDIRECT_URI must be an http:// loopback URL",
            details={"redirect_uri": redirect_uri},
        )
    try:
        parsed.port
    except ValueError as e:
        raise ConfigError(
            "OAUTH_REDIRECT_URI has an invalid port",
            details={"redirect_uri": redirect_uri},
        ) from e


def load_settings() -> Settings:
    """Build settings from the process environment.

    Returns:
        Fully resolved Settings.

    Raises:
        ConfigError: If any variable holds an invalid value.
    """
    config_dir = Path(
        os.getenv("OKTO_MCP_CONFIG_DIR", str(DEFAULT_CONFIG_DIR))
    ).expanduser()
    oauth_path = Path(
        os.getenv("OKTO_MCP_OAUTH_PATH", str(config_dir / OAUTH_KEYS_FILENAME))
    ).expanduser()
    credentials_path = Path(
        os.getenv(
            "OKTO_MCP_CREDENTIALS_PATH", str(config_dir / CREDENTIALS_FILENAME)
        )
    ).expanduser()

    redirect_uri = os.getenv("OAUTH_REDIRECT_URI", DEFAULT_REDIRECT_URI)
    _validate_redirect_uri(redirect_uri)

    timeout_raw = os.getenv("OAUTH_TIMEOUT_SECONDS", str(DEFAULT_OAUTH_TIMEOUT_SECONDS))
    try:
        timeout = float(timeout_raw)
    except ValueError as e:
        raise ConfigError(
            "OAUTH_TIMEOUT_SECONDS must be a number",
            details={"value": timeout_raw},
        ) from e
    if timeout <= 0:
        raise ConfigError(
            "OAUTH_TIMEOUT_SECONDS must be positive",
            details={"value": timeout_raw},
        )

    environment = os.getenv("OKTO_ENVIRONMENT", "sandbox").lower()
    if environment not in OKTO_ENVIRONMENTS:
        raise ConfigError(
            f"OKTO_ENVIRONMENT must be one of {', '.join(OKTO_ENVIRONMENTS)}",
            details={"value": environment},
        )

    if not os.getenv("OKTO_CLIENT_SWA"):
        logger.warning(
            "Okto client not configured. Set the OKTO_CLIENT_SWA "
            "environment variable."
        )

    return Settings(
        config_dir=config_dir,
        oauth_path=oauth_path,
        credentials_path=credentials_path,
        redirect_uri=redirect_uri,
        oauth_timeout_seconds=timeout,
        okto_environment=environment,
        okto_client_swa=os.getenv("OKTO_CLIENT_SWA") or None,
        weather_api_url=os.getenv("WEATHER_API_URL", DEFAULT_WEATHER_API_URL),
    )


__all__ = [
    "Settings",
    "load_settings",
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_REDIRECT_URI",
    "OAUTH_KEYS_FILENAME",
    "CREDENTIALS_FILENAME",
]
