"""Process-wide collaborators, built once at startup and passed explicitly."""

from __future__ import annotations

from dataclasses import dataclass

from okto_mcp.auth.orchestrator import AuthSession
from okto_mcp.config import Settings
from okto_mcp.okto.client import OktoClient
from okto_mcp.weather.client import WeatherClient


@dataclass
class AppContext:
    """Everything the tool layer needs.

    Attributes:
        settings: Resolved configuration.
        okto: Okto API client (authenticated if the downstream login worked).
        weather: Forecast client.
        auth_session: Result of startup authentication, if it ran.
    """

    settings: Settings
    okto: OktoClient
    weather: WeatherClient
    auth_session: AuthSession | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> AppContext:
        return cls(
            settings=settings,
            okto=OktoClient.from_settings(settings),
            weather=WeatherClient.from_settings(settings),
        )


__all__ = [
    "AppContext",
]
