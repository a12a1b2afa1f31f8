"""Okto wallet tools.

Each tool calls one OktoClient method and renders the JSON result as a
plain-text report.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from okto_mcp.okto.client import OktoClient
from okto_mcp.schemas.tools import TokenTransferParams
from okto_mcp.tools.base import AUTH_HINT, format_validation_error, run_tool

logger = logging.getLogger(__name__)


def _title(text: str) -> str:
    return f"{text}\n{'=' * len(text)}\n\n"


def _enabled(flag: Any) -> str:
    return "Enabled" if flag else "Disabled"


def _joined(values: list[str] | None) -> str:
    return ", ".join(values or [])


# =============================================================================
# Formatters
# =============================================================================


def format_portfolio(portfolio: dict[str, Any]) -> str:
    agg = portfolio.get("aggregatedData") or {}
    out = _title("Okto Portfolio")
    out += "Aggregated Data:\n"
    out += f"  Holdings Count          : {agg.get('holdingsCount')}\n"
    out += f"  Holdings Price INR      : {agg.get('holdingsPriceInr')}\n"
    out += f"  Holdings Price USDT     : {agg.get('holdingsPriceUsdt')}\n"
    out += f"  Total Holding Price INR : {agg.get('totalHoldingPriceInr')}\n"
    out += f"  Total Holding Price USDT: {agg.get('totalHoldingPriceUsdt')}\n\n"

    groups = portfolio.get("groupTokens") or []
    if not groups:
        return out + "No group tokens available.\n"

    out += "Group Tokens:\n"
    for i, group in enumerate(groups, start=1):
        out += f"\nGroup {i}: {group.get('name')} ({group.get('symbol')})\n"
        out += f"  Group Token Address : {group.get('tokenAddress')}\n"
        out += f"  Balance             : {group.get('balance')}\n"
        out += f"  Network             : {group.get('networkName')}\n"
        out += "  Sub Tokens:\n"
        tokens = group.get("tokens") or []
        if not tokens:
            out += "    No sub tokens available.\n"
        for j, token in enumerate(tokens, start=1):
            out += f"    {j}. {token.get('name')} ({token.get('symbol')})\n"
            out += f"       Address : {token.get('tokenAddress')}\n"
            out += f"       Balance : {token.get('balance')}\n"
            out += f"       Network : {token.get('networkName')}\n"
    return out


def format_account(wallets: list[dict[str, Any]]) -> str:
    out = _title("Okto Account")
    out += "Aggregated Data:\n"
    out += f"  Wallet Count : {len(wallets)}\n\n"
    if not wallets:
        return out + "No wallets available.\n"

    out += "Wallets:\n"
    for i, wallet in enumerate(wallets, start=1):
        out += f"\nWallet {i}:\n"
        out += f"  CAIP ID      : {wallet.get('caipId')}\n"
        out += f"  Network Name : {wallet.get('networkName')}\n"
        out += f"  Address      : {wallet.get('address')}\n"
        out += f"  CAIP2 ID     : {wallet.get('caip2Id')}\n"
        out += f"  Network Sym. : {wallet.get('networkSymbol')}\n"
    return out


def format_chains(chains: list[dict[str, Any]]) -> str:
    if not chains:
        return "No chain data available."
    out = _title("Okto Supported Chains")
    for i, chain in enumerate(chains, start=1):
        out += f"Chain {i}:\n"
        out += f"  CAIP ID         : {chain.get('caipId')}\n"
        out += f"  Network Name    : {chain.get('networkName')}\n"
        out += f"  Chain ID        : {chain.get('chainId')}\n"
        out += f"  Network ID      : {chain.get('networkId')}\n"
        out += f"  Logo            : {chain.get('logo')}\n"
        out += f"  Type            : {chain.get('type')}\n"
        out += f"  Sponsorship     : {_enabled(chain.get('sponsorshipEnabled'))}\n"
        out += f"  GSN             : {_enabled(chain.get('gsnEnabled'))}\n\n"
    return out


def _format_orders(title: str, label: str, orders: list[dict[str, Any]]) -> str:
    out = _title(title)
    for i, order in enumerate(orders, start=1):
        details = json.dumps(order.get("details"), indent=2)
        out += f"{label} {i}:\n"
        out += f"  Intent ID            : {order.get('intentId')}\n"
        out += f"  Intent Type          : {order.get('intentType')}\n"
        out += f"  Status               : {order.get('status')}\n"
        out += f"  Network Name         : {order.get('networkName')}\n"
        out += f"  CAIP ID              : {order.get('caipId')}\n"
        out += f"  Transaction Hashes   : {_joined(order.get('transactionHash'))}\n"
        out += (
            "  Downstream Tx Hashes : "
            f"{_joined(order.get('downstreamTransactionHash'))}\n"
        )
        out += f"  Details              : {details}\n\n"
    return out


def format_nft_collections(collections: list[dict[str, Any]]) -> str:
    if not collections:
        return "No NFT Collections available."
    return _format_orders("Okto NFT Collections", "Collection", collections)


def format_orders_history(orders: list[dict[str, Any]]) -> str:
    if not orders:
        return "No orders history available."
    return _format_orders("Okto Orders History", "Order", orders)


def format_nft_portfolio(nfts: list[dict[str, Any]]) -> str:
    if not nfts:
        return "No NFT portfolio available."
    out = _title("Okto NFT Portfolio")
    for i, nft in enumerate(nfts, start=1):
        out += f"NFT {i}:\n"
        out += f"  Collection Name           : {nft.get('collectionName')}\n"
        out += f"  NFT Name                  : {nft.get('nftName')}\n"
        out += f"  Quantity                  : {nft.get('quantity')}\n"
        out += f"  Network Name              : {nft.get('networkName')}\n"
        out += f"  CAIP ID                   : {nft.get('caipId')}\n"
        out += f"  NFT ID                    : {nft.get('nftId')}\n"
        out += f"  Token URI                 : {nft.get('tokenUri')}\n"
        out += f"  Description               : {nft.get('description')}\n"
        out += (
            "  Explorer SmartContract URL: "
            f"{nft.get('explorerSmartContractUrl')}\n"
        )
        out += f"  Image                     : {nft.get('image')}\n"
        out += f"  Collection Image          : {nft.get('collectionImage')}\n\n"
    return out


def format_tokens(tokens: list[dict[str, Any]]) -> str:
    if not tokens:
        return "No tokens available."
    out = _title("Okto Tokens")
    for i, token in enumerate(tokens, start=1):
        out += f"Token {i}:\n"
        out += f"  Name        : {token.get('name')}\n"
        out += f"  Symbol      : {token.get('symbol')}\n"
        out += f"  Short Name  : {token.get('shortName')}\n"
        out += f"  Address     : {token.get('address')}\n"
        out += f"  CAIP ID     : {token.get('caipId')}\n"
        out += f"  Group ID    : {token.get('groupId')}\n"
        out += f"  Is Primary  : {'Yes' if token.get('isPrimary') else 'No'}\n"
        out += f"  CAIP2 ID    : {token.get('caip2Id')}\n"
        out += f"  Network Name: {token.get('networkName')}\n"
        out += f"  Onramp      : {_enabled(token.get('isOnrampEnabled'))}\n"
        out += f"  Image URL   : {token.get('image')}\n\n"
    return out


# =============================================================================
# Tools
# =============================================================================


async def get_portfolio(client: OktoClient) -> str:
    return await run_tool(
        "get-portfolio",
        lambda: format_portfolio(client.get_portfolio()),
        f"Failed to retrieve portfolio data. {AUTH_HINT}",
    )


async def get_account(client: OktoClient) -> str:
    return await run_tool(
        "get-account",
        lambda: format_account(client.get_account()),
        f"Failed to retrieve account data. {AUTH_HINT}",
    )


async def get_chains(client: OktoClient) -> str:
    return await run_tool(
        "get-chains",
        lambda: format_chains(client.get_chains()),
        f"Failed to retrieve chain data. {AUTH_HINT}",
    )


async def get_nft_collections(client: OktoClient) -> str:
    return await run_tool(
        "get-nft-collections",
        lambda: format_nft_collections(client.get_nft_collections()),
        f"Failed to retrieve NFT collections. {AUTH_HINT}",
    )


async def get_orders_history(client: OktoClient) -> str:
    return await run_tool(
        "get-orders-history",
        lambda: format_orders_history(client.get_orders_history()),
        f"Failed to retrieve orders history. {AUTH_HINT}",
    )


async def get_nft_portfolio(client: OktoClient) -> str:
    return await run_tool(
        "get-nft-portfolio",
        lambda: format_nft_portfolio(client.get_portfolio_nft()),
        f"Failed to retrieve NFT portfolio. {AUTH_HINT}",
    )


async def get_tokens(client: OktoClient) -> str:
    return await run_tool(
        "get-tokens",
        lambda: format_tokens(client.get_tokens()),
        f"Failed to retrieve tokens. {AUTH_HINT}",
    )


async def token_transfer(
    client: OktoClient,
    amount: str,
    recipient: str,
    token: str,
    caip2_id: str,
) -> str:
    """Submit a transfer and report the resulting order ID."""
    try:
        params = TokenTransferParams(
            amount=amount, recipient=recipient, token=token, caip2_id=caip2_id
        )
    except ValidationError as e:
        return format_validation_error(e)

    def operation() -> str:
        order_id = client.token_transfer(
            params.amount_wei, params.recipient, params.token, params.caip2_id
        )
        logger.info("Token transfer submitted: order %s", order_id)
        return (
            "Okto Transfer completed successfully.\n"
            f"Transfer of {params.amount} {params.token or 'native token'} "
            f"to {params.recipient} on {params.caip2_id}\n"
            f"Order ID: {order_id}\n"
        )

    return await run_tool(
        "token-transfer",
        operation,
        "Failed to perform token transfer. Please ensure you are authenticated "
        "and have sufficient balance.",
    )


__all__ = [
    "format_account",
    "format_chains",
    "format_nft_collections",
    "format_nft_portfolio",
    "format_orders_history",
    "format_portfolio",
    "format_tokens",
    "get_account",
    "get_chains",
    "get_nft_collections",
    "get_nft_portfolio",
    "get_orders_history",
    "get_portfolio",
    "get_tokens",
    "token_transfer",
]
