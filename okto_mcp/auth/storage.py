"""File-based persistence for OAuth client secrets and cached tokens.

Storage location: ~/.okto-mcp/ (override with OKTO_MCP_CONFIG_DIR)

- gcp-oauth.keys.json: Google OAuth client secret, "installed" or "web" shaped
- credentials.json: last token set returned by the token endpoint

Security considerations:
- credentials.json is written atomically (temp file + rename)
- File permissions are set to 0600 (owner read/write only)
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

from pydantic import ValidationError

from okto_mcp.auth.models import ClientSecret, TokenRecord
from okto_mcp.config import (
    CREDENTIALS_FILENAME,
    DEFAULT_REDIRECT_URI,
    OAUTH_KEYS_FILENAME,
    Settings,
)
from okto_mcp.utils.errors import ConfigError, CredentialStoreError

logger = logging.getLogger(__name__)


class CredentialStore:
    """Reads and writes the OAuth client secret and the token record.

    Attributes:
        _config_dir: Directory that holds both files.
        _oauth_path: Client secret file.
        _credentials_path: Token record file.
        _redirect_uri: Redirect URI attached to the loaded client secret.

    Example:
        >>> store = CredentialStore(Path("/tmp/okto"))
        >>> store.save_token_record(TokenRecord(access_token="ya29..."))
        >>> store.load_token_record().access_token
        'ya29...'
    """

    def __init__(
        self,
        config_dir: Path,
        oauth_path: Path | None = None,
        credentials_path: Path | None = None,
        redirect_uri: str = DEFAULT_REDIRECT_URI,
    ) -> None:
        """Initialize the store and ensure the config directory exists.

        Args:
            config_dir: Directory for both credential files.
            oauth_path: Client secret file. Defaults to
                ``config_dir / gcp-oauth.keys.json``.
            credentials_path: Token record file. Defaults to
                ``config_dir / credentials.json``.
            redirect_uri: Redirect URI used by the loopback flow.
        """
        self._config_dir = config_dir
        self._oauth_path = oauth_path or config_dir / OAUTH_KEYS_FILENAME
        self._credentials_path = credentials_path or config_dir / CREDENTIALS_FILENAME
        self._redirect_uri = redirect_uri
        self._config_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("CredentialStore initialized at %s", self._config_dir)

    @classmethod
    def from_settings(cls, settings: Settings) -> CredentialStore:
        """Create a store from resolved settings."""
        return cls(
            settings.config_dir,
            oauth_path=settings.oauth_path,
            credentials_path=settings.credentials_path,
            redirect_uri=settings.redirect_uri,
        )

    @property
    def oauth_path(self) -> Path:
        return self._oauth_path

    @property
    def credentials_path(self) -> Path:
        return self._credentials_path

    def import_local_client_secret(self, cwd: Path | None = None) -> bool:
        """Copy a client secret file from the working directory into the store.

        Lets users drop ``gcp-oauth.keys.json`` next to where they run the
        server once and have it picked up globally afterwards.

        Args:
            cwd: Directory to look in. Defaults to the current directory.

        Returns:
            True if a file was copied, False otherwise.
        """
        local = (cwd or Path.cwd()) / OAUTH_KEYS_FILENAME
        if not local.is_file():
            return False
        if local.resolve() == self._oauth_path.resolve():
            return False

        self._oauth_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(local, self._oauth_path)
        logger.info("OAuth keys found in %s, copied to %s", local.parent, self._oauth_path)
        return True

    def load_client_secret(self) -> ClientSecret:
        """Load and normalize the OAuth client secret.

        Returns:
            The client secret with the configured redirect URI attached.

        Raises:
            ConfigError: If the file is absent, unreadable, or has neither
                an "installed" nor a "web" section.
        """
        if not self._oauth_path.exists():
            raise ConfigError(
                "OAuth keys file not found",
                details={
                    "path": str(self._oauth_path),
                    "hint": f"Place {OAUTH_KEYS_FILENAME} in the current directory "
                    f"or in {self._config_dir}",
                },
            )

        try:
            content = json.loads(self._oauth_path.read_text())
        except json.JSONDecodeError as e:
            raise ConfigError(
                "OAuth keys file contains invalid JSON",
                details={"path": str(self._oauth_path), "error": str(e)},
            ) from e
        except OSError as e:
            raise ConfigError(
                f"Failed to read OAuth keys file: {e}",
                details={"path": str(self._oauth_path)},
            ) from e

        keys = None
        if isinstance(content, dict):
            keys = content.get("installed") or content.get("web")
        if not isinstance(keys, dict):
            raise ConfigError(
                "Invalid OAuth keys file format. File should contain either "
                '"installed" or "web" credentials.',
                details={"path": str(self._oauth_path)},
            )

        try:
            return ClientSecret(
                client_id=keys.get("client_id", ""),
                client_secret=keys.get("client_secret", ""),
                redirect_uri=self._redirect_uri,
            )
        except ValidationError as e:
            raise ConfigError(
                "OAuth keys file is missing client_id or client_secret",
                details={"path": str(self._oauth_path)},
            ) from e

    def load_token_record(self) -> TokenRecord | None:
        """Load the persisted token record.

        Returns:
            The token record, or None on first run.

        Raises:
            CredentialStoreError: If the file exists but cannot be parsed.
        """
        if not self._credentials_path.exists():
            logger.debug("No credentials file at %s", self._credentials_path)
            return None

        try:
            data = json.loads(self._credentials_path.read_text())
            return TokenRecord.model_validate(data)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in credentials file: %s", e)
            raise CredentialStoreError(
                "Credentials file contains invalid JSON",
                details={"path": str(self._credentials_path), "error": str(e)},
            ) from e
        except ValidationError as e:
            raise CredentialStoreError(
                "Credentials file has an unexpected shape",
                details={"path": str(self._credentials_path), "error": str(e)},
            ) from e
        except OSError as e:
            raise CredentialStoreError(
                f"Failed to read credentials: {e}",
                details={"path": str(self._credentials_path)},
            ) from e

    def save_token_record(self, record: TokenRecord) -> None:
        """Atomically overwrite the persisted token record.

        Args:
            record: Token record to persist. Fields that are None are omitted.

        Raises:
            CredentialStoreError: If the file cannot be written.
        """
        path = self._credentials_path
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = record.model_dump_json(exclude_none=True, indent=2)

        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as tmp:
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, path)
            logger.info("Saved credentials to %s", path)
        except OSError as e:
            logger.error("Failed to save credentials: %s", e)
            Path(tmp_name).unlink(missing_ok=True)
            raise CredentialStoreError(
                f"Failed to save credentials: {e}",
                details={"path": str(path), "error_type": type(e).__name__},
            ) from e


__all__ = [
    "CredentialStore",
]
