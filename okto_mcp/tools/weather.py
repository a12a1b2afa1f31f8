"""Weather forecast tool."""

from __future__ import annotations

from pydantic import ValidationError

from okto_mcp.schemas.tools import WeatherForecastParams
from okto_mcp.tools.base import format_validation_error, run_tool
from okto_mcp.weather.client import DayForecast, WeatherClient


def _value(value: float | None, unit: str) -> str:
    return "n/a" if value is None else f"{value:g}{unit}"


def format_forecast(
    latitude: float, longitude: float, forecasts: list[DayForecast]
) -> str:
    if not forecasts:
        return "No forecast data available."

    title = f"Weather Forecast ({latitude:g}, {longitude:g})"
    out = f"{title}\n{'=' * len(title)}\n\n"
    for day in forecasts:
        out += f"{day.date}: {day.condition}\n"
        out += f"  High / Low    : {_value(day.high_c, '°C')} / {_value(day.low_c, '°C')}\n"
        out += f"  Precipitation : {_value(day.precipitation_mm, ' mm')}\n"
        out += f"  Max Wind      : {_value(day.wind_kmh, ' km/h')}\n\n"
    return out


async def get_weather_forecast(
    client: WeatherClient,
    latitude: float,
    longitude: float,
    days: int = 7,
) -> str:
    try:
        params = WeatherForecastParams(latitude=latitude, longitude=longitude, days=days)
    except ValidationError as e:
        return format_validation_error(e)

    return await run_tool(
        "get-weather-forecast",
        lambda: format_forecast(
            params.latitude,
            params.longitude,
            client.get_forecast(params.latitude, params.longitude, params.days),
        ),
        "Failed to retrieve weather forecast. Please try again later.",
    )


__all__ = [
    "format_forecast",
    "get_weather_forecast",
]
