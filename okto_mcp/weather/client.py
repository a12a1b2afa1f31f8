"""Daily forecasts from the Open-Meteo API (free, no API key)."""

from __future__ import annotations

import logging

import requests
from pydantic import BaseModel

from okto_mcp.config import DEFAULT_WEATHER_API_URL, Settings
from okto_mcp.utils.errors import WeatherAPIError

logger = logging.getLogger(__name__)

MAX_FORECAST_DAYS = 16
REQUEST_TIMEOUT = 10

# WMO weather interpretation codes returned by Open-Meteo
WMO_CODE_TO_CONDITION: dict[int, str] = {
    0: "Clear",
    1: "Mainly Clear",
    2: "Partly Cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing Rime Fog",
    51: "Light Drizzle",
    53: "Moderate Drizzle",
    55: "Dense Drizzle",
    56: "Freezing Drizzle",
    57: "Heavy Freezing Drizzle",
    61: "Slight Rain",
    63: "Moderate Rain",
    65: "Heavy Rain",
    66: "Freezing Rain",
    67: "Heavy Freezing Rain",
    71: "Slight Snow",
    73: "Moderate Snow",
    75: "Heavy Snow",
    77: "Snow Grains",
    80: "Slight Showers",
    81: "Moderate Showers",
    82: "Violent Showers",
    85: "Slight Snow Showers",
    86: "Heavy Snow Showers",
    95: "Thunderstorms",
    96: "Thunderstorms with Hail",
    99: "Heavy Thunderstorms with Hail",
}


class DayForecast(BaseModel):
    """One day of forecast data in metric units."""

    date: str
    high_c: float | None = None
    low_c: float | None = None
    precipitation_mm: float | None = None
    wind_kmh: float | None = None
    condition: str = "Unknown"


class WeatherClient:
    """Fetches daily forecasts for a coordinate pair."""

    def __init__(
        self,
        api_url: str = DEFAULT_WEATHER_API_URL,
        http: requests.Session | None = None,
    ) -> None:
        self._api_url = api_url
        self._http = http or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> WeatherClient:
        return cls(api_url=settings.weather_api_url)

    def get_forecast(
        self, latitude: float, longitude: float, days: int = 7
    ) -> list[DayForecast]:
        """Fetch a daily forecast.

        Args:
            latitude: Latitude in decimal degrees.
            longitude: Longitude in decimal degrees.
            days: Number of days, capped at 16 by Open-Meteo.

        Returns:
            One DayForecast per day, in date order.

        Raises:
            WeatherAPIError: If the API is unreachable or returns an error.
        """
        params: dict[str, str | int | float] = {
            "latitude": latitude,
            "longitude": longitude,
            "daily": "temperature_2m_max,temperature_2m_min,"
            "precipitation_sum,wind_speed_10m_max,weather_code",
            "forecast_days": min(days, MAX_FORECAST_DAYS),
            "timezone": "auto",
        }

        try:
            response = self._http.get(self._api_url, params=params, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            logger.error("Network error fetching forecast: %s", e)
            raise WeatherAPIError(
                f"Network error fetching forecast: {e}",
                details={"error_type": type(e).__name__},
            ) from e

        if response.status_code != 200:
            raise WeatherAPIError(
                f"Forecast request failed: {response.text[:200]}",
                details={"status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise WeatherAPIError("Forecast API returned a non-JSON response") from e

        daily = data.get("daily", {})
        dates = daily.get("time", [])
        highs = daily.get("temperature_2m_max", [])
        lows = daily.get("temperature_2m_min", [])
        precipitation = daily.get("precipitation_sum", [])
        wind = daily.get("wind_speed_10m_max", [])
        codes = daily.get("weather_code", [])

        def at(values: list, i: int) -> float | None:
            return values[i] if i < len(values) else None

        forecasts = []
        for i, date in enumerate(dates):
            code = at(codes, i)
            forecasts.append(
                DayForecast(
                    date=date,
                    high_c=at(highs, i),
                    low_c=at(lows, i),
                    precipitation_mm=at(precipitation, i),
                    wind_kmh=at(wind, i),
                    condition=WMO_CODE_TO_CONDITION.get(int(code), "Unknown")
                    if code is not None
                    else "Unknown",
                )
            )

        logger.debug("Fetched %d forecast days for %s,%s", len(forecasts), latitude, longitude)
        return forecasts


__all__ = [
    "DayForecast",
    "WeatherClient",
    "WMO_CODE_TO_CONDITION",
    "MAX_FORECAST_DAYS",
]
