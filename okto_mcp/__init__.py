"""Okto MCP Server: Okto wallet and weather tools over MCP stdio."""

__version__ = "1.0.0"
