"""Weather forecast client."""

from okto_mcp.weather.client import DayForecast, WeatherClient

__all__ = [
    "DayForecast",
    "WeatherClient",
]
