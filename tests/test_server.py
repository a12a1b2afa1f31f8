"""Tests for the Okto MCP server wiring.

Tests cover:
- Server creation and FastMCP instance
- Tool registration (all 9 tools)
- Tool annotations and schemas
- Server lifespan
- Tools delegating to the shared context
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from okto_mcp.context import AppContext
from okto_mcp.server import SERVER_NAME, _make_lifespan, create_server

WALLET_TOOLS = [
    "get-portfolio",
    "get-account",
    "get-chains",
    "get-nft-collections",
    "get-orders-history",
    "get-nft-portfolio",
    "get-tokens",
    "token-transfer",
]

WEATHER_TOOLS = ["get-weather-forecast"]


@pytest.fixture
def context() -> AppContext:
    return AppContext(settings=MagicMock(), okto=MagicMock(), weather=MagicMock())


class TestServerCreation:
    """Tests for server creation and FastMCP instance."""

    def test_create_server_returns_fastmcp_instance(self, context: AppContext) -> None:
        server = create_server(context)

        assert server is not None
        assert server.name == SERVER_NAME == "okto"

    def test_each_call_builds_a_new_server(self, context: AppContext) -> None:
        assert create_server(context) is not create_server(context)


class TestToolRegistration:
    """Tests for tool registration verification."""

    def test_all_nine_tools_registered(self, context: AppContext) -> None:
        tools = create_server(context)._tool_manager.list_tools()

        assert len(tools) == 9

    def test_tool_names(self, context: AppContext) -> None:
        tools = create_server(context)._tool_manager.list_tools()
        tool_names = {tool.name for tool in tools}

        assert tool_names == set(WALLET_TOOLS + WEATHER_TOOLS)

    def test_all_tools_have_descriptions(self, context: AppContext) -> None:
        tools = create_server(context)._tool_manager.list_tools()

        for tool in tools:
            assert tool.description, f"{tool.name} has no description"
            assert len(tool.description) > 10, f"{tool.name} description is too short"


class TestToolAnnotations:
    """Tests for tool annotation verification."""

    def test_read_tools_have_readonly_hint(self, context: AppContext) -> None:
        tools = create_server(context)._tool_manager.list_tools()

        for tool in tools:
            if tool.name == "token-transfer":
                continue
            assert tool.annotations is not None, f"{tool.name} has no annotations"
            assert tool.annotations.readOnlyHint is True
            assert tool.annotations.idempotentHint is True

    def test_transfer_is_destructive(self, context: AppContext) -> None:
        tool = create_server(context)._tool_manager.get_tool("token-transfer")

        assert tool is not None
        assert tool.annotations is not None
        assert tool.annotations.readOnlyHint is False
        assert tool.annotations.destructiveHint is True
        assert tool.annotations.idempotentHint is False


class TestToolSchemas:
    """Tests for tool input schemas."""

    def test_transfer_parameters(self, context: AppContext) -> None:
        tool = create_server(context)._tool_manager.get_tool("token-transfer")

        properties = tool.parameters["properties"]

        assert set(properties) == {"amount", "recipient", "token", "caip2_id"}
        assert set(tool.parameters["required"]) == {
            "amount",
            "recipient",
            "token",
            "caip2_id",
        }

    def test_weather_parameters(self, context: AppContext) -> None:
        tool = create_server(context)._tool_manager.get_tool("get-weather-forecast")

        properties = tool.parameters["properties"]

        assert set(properties) == {"latitude", "longitude", "days"}
        assert properties["days"]["default"] == 7

    def test_explorer_tools_take_no_parameters(self, context: AppContext) -> None:
        server = create_server(context)

        for name in WALLET_TOOLS:
            if name == "token-transfer":
                continue
            tool = server._tool_manager.get_tool(name)
            assert tool.parameters.get("properties", {}) == {}, name


class TestToolDelegation:
    """Tests that registered tools use the shared context."""

    @pytest.mark.asyncio
    async def test_chains_tool_uses_context_client(self, context: AppContext) -> None:
        context.okto.get_chains.return_value = [
            {"networkName": "POLYGON", "caipId": "eip155:137", "chainId": "137"}
        ]
        tool = create_server(context)._tool_manager.get_tool("get-chains")

        result = await tool.fn()

        context.okto.get_chains.assert_called_once()
        assert "POLYGON" in result

    @pytest.mark.asyncio
    async def test_transfer_tool_uses_context_client(self, context: AppContext) -> None:
        context.okto.token_transfer.return_value = "order-1"
        tool = create_server(context)._tool_manager.get_tool("token-transfer")

        result = await tool.fn(
            amount="1000", recipient="0xabc", token="", caip2_id="eip155:137"
        )

        context.okto.token_transfer.assert_called_once_with(
            1000, "0xabc", "", "eip155:137"
        )
        assert "order-1" in result


class TestServerLifespan:
    """Tests for server lifespan."""

    @pytest.mark.asyncio
    async def test_lifespan_warns_without_okto_session(
        self, context: AppContext, caplog: pytest.LogCaptureFixture
    ) -> None:
        context.okto.is_authenticated = False
        caplog.set_level("INFO", logger="okto_mcp.server")

        async with _make_lifespan(context)(MagicMock()) as state:
            assert state == {}

        assert "Okto session not established" in caplog.text
        assert "shutting down" in caplog.text

    @pytest.mark.asyncio
    async def test_lifespan_quiet_with_okto_session(
        self, context: AppContext, caplog: pytest.LogCaptureFixture
    ) -> None:
        context.okto.is_authenticated = True
        caplog.set_level("INFO", logger="okto_mcp.server")

        async with _make_lifespan(context)(MagicMock()):
            pass

        assert "Okto session not established" not in caplog.text
