"""Fixtures for tool tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from okto_mcp.weather.client import DayForecast


@pytest.fixture
def mock_okto_client() -> MagicMock:
    """Mock OktoClient with an established session."""
    client = MagicMock()
    client.is_authenticated = True
    return client


@pytest.fixture
def mock_weather_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def sample_portfolio() -> dict[str, Any]:
    """Sample aggregated portfolio response."""
    return {
        "aggregatedData": {
            "holdingsCount": "2",
            "holdingsPriceInr": "1000",
            "holdingsPriceUsdt": "12",
            "totalHoldingPriceInr": "1000",
            "totalHoldingPriceUsdt": "12",
        },
        "groupTokens": [
            {
                "name": "Polygon",
                "symbol": "POL",
                "tokenAddress": "",
                "balance": "5.2",
                "networkName": "POLYGON",
                "tokens": [
                    {
                        "name": "Polygon",
                        "symbol": "POL",
                        "tokenAddress": "",
                        "balance": "5.2",
                        "networkName": "POLYGON",
                    }
                ],
            }
        ],
    }


@pytest.fixture
def sample_wallets() -> list[dict[str, Any]]:
    return [
        {
            "caipId": "eip155:137:0xabc",
            "networkName": "POLYGON",
            "address": "0xabc",
            "caip2Id": "eip155:137",
            "networkSymbol": "POL",
        }
    ]


@pytest.fixture
def sample_order() -> dict[str, Any]:
    return {
        "intentId": "intent-1",
        "intentType": "TOKEN_TRANSFER",
        "status": "SUCCESSFUL",
        "networkName": "POLYGON",
        "caipId": "eip155:137",
        "transactionHash": ["0xhash1", "0xhash2"],
        "downstreamTransactionHash": [],
        "details": {"amount": "1000"},
    }


@pytest.fixture
def sample_forecast() -> list[DayForecast]:
    return [
        DayForecast(
            date="2026-10-20",
            high_c=21.5,
            low_c=12.0,
            precipitation_mm=0.4,
            wind_kmh=14.2,
            condition="Partly Cloudy",
        ),
        DayForecast(date="2026-10-21"),
    ]
