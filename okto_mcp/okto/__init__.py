"""Okto wallet API client."""

from okto_mcp.okto.client import OKTO_ENDPOINTS, OktoClient, OktoSession

__all__ = [
    "OktoClient",
    "OktoSession",
    "OKTO_ENDPOINTS",
]
