"""FastMCP server for Okto MCP.

This module builds the FastMCP server instance and registers 9 tools:

- Wallet Tools (8): Okto explorer reads plus token transfer
- Weather Tools (1): daily forecast

Tools close over an AppContext built by the entry point, so there is no
module-level client state.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from okto_mcp.context import AppContext
from okto_mcp.tools import (
    get_account,
    get_chains,
    get_nft_collections,
    get_nft_portfolio,
    get_orders_history,
    get_portfolio,
    get_tokens,
    get_weather_forecast,
    token_transfer,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "okto"

_READ_ONLY = ToolAnnotations(
    readOnlyHint=True,
    destructiveHint=False,
    idempotentHint=True,
)


# =============================================================================
# Lifespan Context Manager
# =============================================================================


def _make_lifespan(context: AppContext):
    @asynccontextmanager
    async def server_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        """Log startup/shutdown and report the Okto session state."""
        logger.info("Okto MCP server starting up...")
        if not context.okto.is_authenticated:
            logger.warning(
                "Okto session not established; wallet tools will report "
                "authentication failures"
            )
        logger.info("Okto MCP server ready")

        yield {}

        logger.info("Okto MCP server shutting down...")

    return server_lifespan


# =============================================================================
# Wallet Tool Wrappers
# =============================================================================


def _register_wallet_tools(mcp: FastMCP, context: AppContext) -> None:
    """Register the Okto wallet tools.

    Args:
        mcp: The FastMCP server instance.
        context: Shared collaborators.
    """
    okto = context.okto

    @mcp.tool(name="get-portfolio", annotations=_READ_ONLY)
    async def get_portfolio_tool() -> str:
        """Get Okto portfolio details.

        Returns aggregated holdings and per-group token balances.
        """
        return await get_portfolio(okto)

    @mcp.tool(name="get-account", annotations=_READ_ONLY)
    async def get_account_tool() -> str:
        """Get Okto account details.

        Lists every wallet address with its network and CAIP identifiers.
        """
        return await get_account(okto)

    @mcp.tool(name="get-chains", annotations=_READ_ONLY)
    async def get_chains_tool() -> str:
        """Get Okto supported chains with their CAIP and chain IDs."""
        return await get_chains(okto)

    @mcp.tool(name="get-nft-collections", annotations=_READ_ONLY)
    async def get_nft_collections_tool() -> str:
        """Get Okto NFT collections for the authenticated user."""
        return await get_nft_collections(okto)

    @mcp.tool(name="get-orders-history", annotations=_READ_ONLY)
    async def get_orders_history_tool() -> str:
        """Get Okto orders history including transaction hashes and status."""
        return await get_orders_history(okto)

    @mcp.tool(name="get-nft-portfolio", annotations=_READ_ONLY)
    async def get_nft_portfolio_tool() -> str:
        """Get Okto NFT portfolio with collection and token metadata."""
        return await get_nft_portfolio(okto)

    @mcp.tool(name="get-tokens", annotations=_READ_ONLY)
    async def get_tokens_tool() -> str:
        """Get tokens supported by Okto across all networks."""
        return await get_tokens(okto)

    @mcp.tool(
        name="token-transfer",
        annotations=ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=False,
        ),
    )
    async def token_transfer_tool(
        amount: str,
        recipient: str,
        token: str,
        caip2_id: str,
    ) -> str:
        """Transfer tokens using Okto.

        Args:
            amount: Amount of tokens to transfer in Wei.
            recipient: Recipient address.
            token: Token address (empty string for native token).
            caip2_id: CAIP2 ID of the network.

        Returns:
            Confirmation with the order ID, or a failure message.
        """
        return await token_transfer(okto, amount, recipient, token, caip2_id)


# =============================================================================
# Weather Tool Wrappers
# =============================================================================


def _register_weather_tools(mcp: FastMCP, context: AppContext) -> None:
    weather = context.weather

    @mcp.tool(name="get-weather-forecast", annotations=_READ_ONLY)
    async def get_weather_forecast_tool(
        latitude: float,
        longitude: float,
        days: int = 7,
    ) -> str:
        """Get a daily weather forecast for a location.

        Args:
            latitude: Latitude in decimal degrees (-90 to 90).
            longitude: Longitude in decimal degrees (-180 to 180).
            days: Number of forecast days (1-16, default 7).

        Returns:
            Daily conditions, temperatures, precipitation and wind.
        """
        return await get_weather_forecast(weather, latitude, longitude, days)


# =============================================================================
# Server Factory
# =============================================================================


def create_server(context: AppContext) -> FastMCP:
    """Create and configure the FastMCP server instance.

    Args:
        context: Collaborators shared by every tool.

    Returns:
        Configured FastMCP server instance.
    """
    server = FastMCP(
        name=SERVER_NAME,
        lifespan=_make_lifespan(context),
    )

    _register_wallet_tools(server, context)
    _register_weather_tools(server, context)

    logger.info("Okto MCP server created with %d tools registered", 9)
    return server


__all__ = [
    "SERVER_NAME",
    "create_server",
]
