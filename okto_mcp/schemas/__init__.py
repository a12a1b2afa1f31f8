"""Pydantic schemas for Okto MCP tool parameters."""

from okto_mcp.schemas.tools import TokenTransferParams, WeatherForecastParams

__all__ = [
    "TokenTransferParams",
    "WeatherForecastParams",
]
