"""Tests for the command-line entry point."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from unittest.mock import MagicMock, patch

import pytest

from okto_mcp.__main__ import main
from okto_mcp.utils.errors import ConfigError, MissingCodeError


@dataclass
class EntryPointMocks:
    settings: MagicMock
    context: MagicMock
    store: MagicMock
    orchestrator: MagicMock
    orchestrator_cls: MagicMock
    create_server: MagicMock


@pytest.fixture
def mocks() -> Iterator[EntryPointMocks]:
    with (
        patch("okto_mcp.__main__.load_dotenv"),
        patch("okto_mcp.__main__.configure_logging"),
        patch("okto_mcp.__main__.load_settings") as mock_settings,
        patch("okto_mcp.__main__.AppContext") as mock_context_cls,
        patch("okto_mcp.__main__.CredentialStore") as mock_store_cls,
        patch("okto_mcp.__main__.AuthOrchestrator") as mock_orchestrator_cls,
        patch("okto_mcp.server.create_server") as mock_create_server,
    ):
        mock_settings.return_value.oauth_timeout_seconds = 300.0
        yield EntryPointMocks(
            settings=mock_settings.return_value,
            context=mock_context_cls.from_settings.return_value,
            store=mock_store_cls.from_settings.return_value,
            orchestrator=mock_orchestrator_cls.return_value,
            orchestrator_cls=mock_orchestrator_cls,
            create_server=mock_create_server,
        )


class TestServeMode:
    """Tests for the default startup path."""

    def test_authenticates_then_serves_stdio(self, mocks: EntryPointMocks) -> None:
        main([])

        mocks.orchestrator.run_startup.assert_called_once_with(manual=False)
        mocks.create_server.assert_called_once_with(mocks.context)
        mocks.create_server.return_value.run.assert_called_once_with(transport="stdio")

    def test_orchestrator_wiring(self, mocks: EntryPointMocks) -> None:
        main([])

        mocks.orchestrator_cls.assert_called_once_with(
            mocks.store, mocks.context.okto, timeout=300.0
        )
        assert mocks.context.auth_session is mocks.orchestrator.run_startup.return_value

    def test_unknown_argument_still_serves(self, mocks: EntryPointMocks) -> None:
        main(["--verbose"])

        mocks.orchestrator.run_startup.assert_called_once_with(manual=False)
        mocks.create_server.return_value.run.assert_called_once()


class TestAuthCommand:
    """Tests for ``okto-mcp auth``."""

    def test_exits_without_serving(self, mocks: EntryPointMocks) -> None:
        main(["auth"])

        mocks.orchestrator.run_startup.assert_called_once_with(manual=True)
        mocks.create_server.assert_not_called()

    def test_reads_sys_argv_by_default(
        self, mocks: EntryPointMocks, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("sys.argv", ["okto-mcp", "auth"])

        main()

        mocks.orchestrator.run_startup.assert_called_once_with(manual=True)


class TestStartupFailures:
    """Tests for fatal startup errors."""

    @pytest.mark.parametrize("argv", [[], ["auth"]])
    def test_auth_failure_exits_1(self, mocks: EntryPointMocks, argv: list[str]) -> None:
        mocks.orchestrator.run_startup.side_effect = MissingCodeError("No code provided")

        with pytest.raises(SystemExit) as exc_info:
            main(argv)

        assert exc_info.value.code == 1
        mocks.create_server.assert_not_called()

    def test_config_failure_exits_1(self, mocks: EntryPointMocks) -> None:
        with patch(
            "okto_mcp.__main__.load_settings",
            side_effect=ConfigError("OAUTH_TIMEOUT_SECONDS must be a number"),
        ):
            with pytest.raises(SystemExit) as exc_info:
                main([])

        assert exc_info.value.code == 1
        mocks.orchestrator.run_startup.assert_not_called()

    def test_unexpected_failure_exits_1(self, mocks: EntryPointMocks) -> None:
        mocks.orchestrator.run_startup.side_effect = RuntimeError("boom")

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
