"""HTTP client for the Okto wallet API.

Two surfaces are used:

- the gateway JSON-RPC endpoint for federated login and intent execution
- the BFF REST endpoints for read-only explorer data

Every explorer call requires a session obtained from ``login_using_oauth``.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

import requests
from pydantic import BaseModel

from okto_mcp.config import Settings
from okto_mcp.utils.errors import DownstreamLoginError, OktoAPIError

logger = logging.getLogger(__name__)

OKTO_ENDPOINTS: dict[str, dict[str, str]] = {
    "sandbox": {
        "gateway": "https://sandbox-okto-gateway.oktostage.com/rpc",
        "bff": "https://sandbox-api.okto.tech",
    },
    "production": {
        "gateway": "https://okto-gateway.okto.tech/rpc",
        "bff": "https://apigw.okto.tech",
    },
}

PORTFOLIO_PATH = "/api/oc/v1/aggregated-portfolio"
ACCOUNT_PATH = "/api/oc/v1/wallets"
CHAINS_PATH = "/api/oc/v1/supported/networks"
TOKENS_PATH = "/api/oc/v1/supported/tokens"
NFT_PORTFOLIO_PATH = "/api/oc/v1/portfolio/nft"
ORDERS_PATH = "/api/oc/v1/orders"
NFT_COLLECTIONS_PATH = "/api/oc/v1/nft/collections"

REQUEST_TIMEOUT = 30


class OktoSession(BaseModel):
    """Result of a successful federated login."""

    user_swa: str | None = None
    auth_token: str
    provider: str


class OktoClient:
    """Thin wrapper over the Okto gateway and BFF APIs.

    Constructed once at startup and shared with the tool layer.

    Example:
        >>> client = OktoClient.from_settings(settings)
        >>> client.login_using_oauth(id_token, provider="google")
        >>> client.get_account()
        [{'caipId': 'eip155:137:0x...', ...}]
    """

    def __init__(
        self,
        environment: str = "sandbox",
        client_swa: str | None = None,
        http: requests.Session | None = None,
    ) -> None:
        if environment not in OKTO_ENDPOINTS:
            raise OktoAPIError(
                f"Unknown Okto environment: {environment}",
                details={"allowed": list(OKTO_ENDPOINTS)},
            )
        self._environment = environment
        self._endpoints = OKTO_ENDPOINTS[environment]
        self._client_swa = client_swa
        self._http = http or requests.Session()
        self._session: OktoSession | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> OktoClient:
        return cls(
            environment=settings.okto_environment,
            client_swa=settings.okto_client_swa,
        )

    @property
    def environment(self) -> str:
        return self._environment

    @property
    def session(self) -> OktoSession | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    # =========================================================================
    # Federated login
    # =========================================================================

    def login_using_oauth(self, id_token: str, provider: str = "google") -> OktoSession:
        """Exchange an identity token for an Okto session.

        Args:
            id_token: Identity token issued by the OAuth provider.
            provider: Provider tag understood by Okto.

        Returns:
            The new session, also kept on the client.

        Raises:
            DownstreamLoginError: If Okto rejects the token or cannot be
                reached.
        """
        if not self._client_swa:
            raise DownstreamLoginError(
                "Okto client not configured",
                details={"hint": "Set OKTO_CLIENT_SWA"},
            )

        try:
            result = self._rpc(
                "authenticate",
                {
                    "authData": {"idToken": id_token, "provider": provider},
                    "clientSWA": self._client_swa,
                },
            )
        except OktoAPIError as e:
            raise DownstreamLoginError(
                f"Okto login failed: {e.message}",
                details={"provider": provider, "status_code": e.status_code},
            ) from e

        auth_token = result.get("authToken") if isinstance(result, dict) else None
        if not auth_token:
            raise DownstreamLoginError(
                "Okto login response did not include an auth token",
                details={"provider": provider},
            )

        self._session = OktoSession(
            user_swa=result.get("userSWA"),
            auth_token=auth_token,
            provider=provider,
        )
        logger.info("Okto session established for %s", self._session.user_swa)
        return self._session

    # =========================================================================
    # Explorer
    # =========================================================================

    def get_portfolio(self) -> dict[str, Any]:
        return self._get(PORTFOLIO_PATH)

    def get_account(self) -> list[dict[str, Any]]:
        return self._get(ACCOUNT_PATH) or []

    def get_chains(self) -> list[dict[str, Any]]:
        data = self._get(CHAINS_PATH)
        if isinstance(data, dict):
            return data.get("network") or []
        return data or []

    def get_tokens(self) -> list[dict[str, Any]]:
        data = self._get(TOKENS_PATH)
        if isinstance(data, dict):
            return data.get("tokens") or []
        return data or []

    def get_portfolio_nft(self) -> list[dict[str, Any]]:
        data = self._get(NFT_PORTFOLIO_PATH)
        if isinstance(data, dict):
            return data.get("details") or []
        return data or []

    def get_orders_history(self) -> list[dict[str, Any]]:
        return self._get(ORDERS_PATH) or []

    def get_nft_collections(self) -> list[dict[str, Any]]:
        return self._get(NFT_COLLECTIONS_PATH) or []

    # =========================================================================
    # Intents
    # =========================================================================

    def token_transfer(
        self, amount: int, recipient: str, token: str, caip2_id: str
    ) -> str:
        """Submit a token transfer intent and return its order ID.

        Args:
            amount: Amount in the token's smallest unit.
            recipient: Destination address.
            token: Token contract address, empty for the native token.
            caip2_id: CAIP-2 network identifier.

        Raises:
            OktoAPIError: If not authenticated or the intent is rejected.
        """
        result = self._rpc(
            "execute",
            {
                "type": "TOKEN_TRANSFER",
                "jobId": str(uuid.uuid4()),
                "details": {
                    "amount": str(amount),
                    "recipientWalletAddress": recipient,
                    "tokenAddress": token,
                    "caip2Id": caip2_id,
                },
            },
            authenticated=True,
        )
        order_id = result.get("jobId") if isinstance(result, dict) else result
        if not order_id:
            raise OktoAPIError("Okto did not return an order ID for the transfer")
        return str(order_id)

    # =========================================================================
    # Transport
    # =========================================================================

    def _auth_headers(self) -> dict[str, str]:
        if self._session is None:
            raise OktoAPIError(
                "Not authenticated with Okto",
                status_code=401,
                details={"hint": "Run the server's 'auth' command and restart"},
            )
        return {"Authorization": f"Bearer {self._session.auth_token}"}

    def _get(self, path: str) -> Any:
        headers = self._auth_headers()
        url = f"{self._endpoints['bff']}{path}"
        try:
            response = self._http.get(url, headers=headers, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            logger.error("Network error calling Okto %s: %s", path, e)
            raise OktoAPIError(
                f"Network error calling Okto: {e}",
                details={"path": path, "error_type": type(e).__name__},
            ) from e
        return self._unwrap(response, path)

    def _rpc(
        self, method: str, params: dict[str, Any], authenticated: bool = False
    ) -> Any:
        headers = self._auth_headers() if authenticated else {}
        payload = {
            "jsonrpc": "2.0",
            "id": str(uuid.uuid4()),
            "method": method,
            "params": [params],
        }
        try:
            response = self._http.post(
                self._endpoints["gateway"],
                json=payload,
                headers=headers,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error("Network error calling Okto %s: %s", method, e)
            raise OktoAPIError(
                f"Network error calling Okto: {e}",
                details={"method": method, "error_type": type(e).__name__},
            ) from e

        body = self._unwrap(response, method, key="result")
        return body

    @staticmethod
    def _unwrap(response: requests.Response, what: str, key: str = "data") -> Any:
        if response.status_code != 200:
            raise OktoAPIError(
                f"Okto request failed: {response.text[:200]}",
                status_code=response.status_code,
                details={"request": what},
            )
        try:
            body = response.json()
        except ValueError as e:
            raise OktoAPIError(
                "Okto returned a non-JSON response",
                status_code=response.status_code,
                details={"request": what},
            ) from e

        if isinstance(body, dict) and body.get("error"):
            raise OktoAPIError(
                f"Okto error: {body['error']}",
                status_code=response.status_code,
                details={"request": what},
            )
        if isinstance(body, dict) and key in body:
            return body[key]
        return body


__all__ = [
    "OktoClient",
    "OktoSession",
    "OKTO_ENDPOINTS",
]
