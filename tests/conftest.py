"""Pytest configuration and fixtures for Okto MCP server tests."""

from __future__ import annotations

import json
import socket
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from okto_mcp.auth.models import ClientSecret, TokenRecord
from okto_mcp.auth.storage import CredentialStore


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


@pytest.fixture
def client_secret() -> ClientSecret:
    """Fixture providing mock Google OAuth client credentials."""
    return ClientSecret(
        client_id="test-client-id.apps.googleusercontent.com",
        client_secret="test-client-secret",
        redirect_uri="http://localhost:3000/oauth2callback",
    )


@pytest.fixture
def fresh_record() -> TokenRecord:
    """Token record valid for another ten minutes."""
    return TokenRecord(
        access_token="mock-access-token",
        id_token="mock-id-token",
        refresh_token="mock-refresh-token",
        expiry_date=epoch_ms(datetime.now(UTC) + timedelta(minutes=10)),
        scope="openid",
        token_type="Bearer",
    )


@pytest.fixture
def expired_record(fresh_record: TokenRecord) -> TokenRecord:
    """Token record that expired an hour ago."""
    return fresh_record.model_copy(
        update={"expiry_date": epoch_ms(datetime.now(UTC) - timedelta(hours=1))}
    )


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated config directory; cwd moved away so no local keys are imported."""
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return tmp_path / "okto-mcp"


@pytest.fixture
def keys_file(config_dir: Path) -> Path:
    """Write an "installed" shaped OAuth keys file."""
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / "gcp-oauth.keys.json"
    path.write_text(
        json.dumps(
            {
                "installed": {
                    "client_id": "test-client-id.apps.googleusercontent.com",
                    "client_secret": "test-client-secret",
                    "redirect_uris": ["http://localhost"],
                }
            }
        )
    )
    return path


@pytest.fixture
def store(config_dir: Path) -> CredentialStore:
    return CredentialStore(config_dir)


@pytest.fixture
def free_port() -> int:
    """A localhost port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
