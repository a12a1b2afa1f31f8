"""Pydantic parameter models for Okto MCP tools.

The explorer tools take no parameters; only the transfer and forecast
tools need validation.
"""

from pydantic import BaseModel, Field


class TokenTransferParams(BaseModel):
    """Parameters for the token-transfer tool."""

    amount: str = Field(
        ...,
        pattern=r"^[0-9]+$",
        description="Amount of tokens to transfer in Wei",
    )
    recipient: str = Field(
        ...,
        min_length=1,
        description="Recipient address",
    )
    token: str = Field(
        default="",
        description="Token address (empty string for native token)",
    )
    caip2_id: str = Field(
        ...,
        min_length=1,
        description="CAIP2 ID of the network",
    )

    @property
    def amount_wei(self) -> int:
        return int(self.amount)


class WeatherForecastParams(BaseModel):
    """Parameters for the get-weather-forecast tool."""

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in degrees")
    days: int = Field(default=7, ge=1, le=16, description="Number of forecast days")
