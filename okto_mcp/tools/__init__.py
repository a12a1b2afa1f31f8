"""Okto MCP tools package.

Tools are grouped by collaborator:

- Wallet Tools: Okto explorer reads and token transfer
- Weather Tools: Open-Meteo daily forecast
"""

from okto_mcp.tools.base import format_validation_error, run_tool
from okto_mcp.tools.wallet import (
    get_account,
    get_chains,
    get_nft_collections,
    get_nft_portfolio,
    get_orders_history,
    get_portfolio,
    get_tokens,
    token_transfer,
)
from okto_mcp.tools.weather import get_weather_forecast

__all__ = [
    # Base utilities
    "format_validation_error",
    "run_tool",
    # Wallet tools
    "get_account",
    "get_chains",
    "get_nft_collections",
    "get_nft_portfolio",
    "get_orders_history",
    "get_portfolio",
    "get_tokens",
    "token_transfer",
    # Weather tools
    "get_weather_forecast",
]
