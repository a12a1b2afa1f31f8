"""Tests for the Okto API client."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from okto_mcp.okto.client import OKTO_ENDPOINTS, OktoClient, OktoSession
from okto_mcp.utils.errors import DownstreamLoginError, OktoAPIError


def _response(status_code: int = 200, body: Any = None, text: str = "") -> MagicMock:
    response = MagicMock(status_code=status_code, text=text)
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def mock_http(mocker) -> MagicMock:
    """Mock requests.Session shared by the client."""
    return mocker.MagicMock(spec=requests.Session)


@pytest.fixture
def client(mock_http: MagicMock) -> OktoClient:
    return OktoClient(environment="sandbox", client_swa="0xclient", http=mock_http)


@pytest.fixture
def logged_in(client: OktoClient, mock_http: MagicMock) -> OktoClient:
    mock_http.post.return_value = _response(
        body={"result": {"authToken": "okto-token", "userSWA": "0xuser"}}
    )
    client.login_using_oauth("id-token")
    mock_http.post.reset_mock()
    return client


class TestConstruction:
    """Tests for client construction."""

    def test_unknown_environment(self) -> None:
        with pytest.raises(OktoAPIError):
            OktoClient(environment="staging")

    def test_starts_unauthenticated(self, client: OktoClient) -> None:
        assert client.environment == "sandbox"
        assert client.is_authenticated is False
        assert client.session is None


class TestLoginUsingOAuth:
    """Tests for the federated login."""

    def test_success(self, client: OktoClient, mock_http: MagicMock) -> None:
        mock_http.post.return_value = _response(
            body={"result": {"authToken": "okto-token", "userSWA": "0xuser"}}
        )

        session = client.login_using_oauth("id-token", provider="google")

        assert session == OktoSession(
            user_swa="0xuser", auth_token="okto-token", provider="google"
        )
        assert client.is_authenticated is True
        url = mock_http.post.call_args.args[0]
        payload = mock_http.post.call_args.kwargs["json"]
        assert url == OKTO_ENDPOINTS["sandbox"]["gateway"]
        assert payload["method"] == "authenticate"
        assert payload["params"][0]["authData"] == {
            "idToken": "id-token",
            "provider": "google",
        }
        assert payload["params"][0]["clientSWA"] == "0xclient"

    def test_requires_client_swa(self, mock_http: MagicMock) -> None:
        client = OktoClient(http=mock_http)

        with pytest.raises(DownstreamLoginError):
            client.login_using_oauth("id-token")

        mock_http.post.assert_not_called()

    def test_rejected_token(self, client: OktoClient, mock_http: MagicMock) -> None:
        mock_http.post.return_value = _response(status_code=401, text="invalid token")

        with pytest.raises(DownstreamLoginError) as exc_info:
            client.login_using_oauth("id-token")

        assert exc_info.value.details["status_code"] == 401
        assert client.is_authenticated is False

    def test_network_error(self, client: OktoClient, mock_http: MagicMock) -> None:
        mock_http.post.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(DownstreamLoginError):
            client.login_using_oauth("id-token")

    def test_missing_auth_token(self, client: OktoClient, mock_http: MagicMock) -> None:
        mock_http.post.return_value = _response(body={"result": {"userSWA": "0xuser"}})

        with pytest.raises(DownstreamLoginError):
            client.login_using_oauth("id-token")


class TestExplorer:
    """Tests for the read endpoints."""

    def test_requires_session(self, client: OktoClient, mock_http: MagicMock) -> None:
        with pytest.raises(OktoAPIError) as exc_info:
            client.get_portfolio()

        assert exc_info.value.status_code == 401
        mock_http.get.assert_not_called()

    def test_sends_bearer_token(
        self, logged_in: OktoClient, mock_http: MagicMock
    ) -> None:
        mock_http.get.return_value = _response(body={"data": {"groupTokens": []}})

        result = logged_in.get_portfolio()

        assert result == {"groupTokens": []}
        headers = mock_http.get.call_args.kwargs["headers"]
        assert headers == {"Authorization": "Bearer okto-token"}
        assert mock_http.get.call_args.args[0].startswith(
            OKTO_ENDPOINTS["sandbox"]["bff"]
        )

    @pytest.mark.parametrize(
        ("method", "payload", "expected"),
        [
            ("get_chains", {"network": [{"chainId": "137"}]}, [{"chainId": "137"}]),
            ("get_tokens", {"tokens": [{"symbol": "POL"}]}, [{"symbol": "POL"}]),
            ("get_portfolio_nft", {"details": [{"nftId": "1"}]}, [{"nftId": "1"}]),
            ("get_account", [{"address": "0xabc"}], [{"address": "0xabc"}]),
            ("get_orders_history", None, []),
        ],
    )
    def test_unwraps_lists(
        self,
        logged_in: OktoClient,
        mock_http: MagicMock,
        method: str,
        payload: Any,
        expected: Any,
    ) -> None:
        mock_http.get.return_value = _response(body={"data": payload})

        assert getattr(logged_in, method)() == expected

    def test_error_body(self, logged_in: OktoClient, mock_http: MagicMock) -> None:
        mock_http.get.return_value = _response(body={"error": "session expired"})

        with pytest.raises(OktoAPIError) as exc_info:
            logged_in.get_account()

        assert "session expired" in str(exc_info.value)

    def test_non_json_body(self, logged_in: OktoClient, mock_http: MagicMock) -> None:
        mock_http.get.return_value = _response(body=ValueError("not json"))

        with pytest.raises(OktoAPIError):
            logged_in.get_chains()

    def test_http_error(self, logged_in: OktoClient, mock_http: MagicMock) -> None:
        mock_http.get.return_value = _response(status_code=503, text="unavailable")

        with pytest.raises(OktoAPIError) as exc_info:
            logged_in.get_tokens()

        assert exc_info.value.status_code == 503


class TestTokenTransfer:
    """Tests for the transfer intent."""

    def test_returns_order_id(
        self, logged_in: OktoClient, mock_http: MagicMock
    ) -> None:
        mock_http.post.return_value = _response(body={"result": {"jobId": "order-9"}})

        order_id = logged_in.token_transfer(1000, "0xrecipient", "", "eip155:137")

        assert order_id == "order-9"
        payload = mock_http.post.call_args.kwargs["json"]
        details = payload["params"][0]["details"]
        assert payload["method"] == "execute"
        assert details == {
            "amount": "1000",
            "recipientWalletAddress": "0xrecipient",
            "tokenAddress": "",
            "caip2Id": "eip155:137",
        }
        assert mock_http.post.call_args.kwargs["headers"] == {
            "Authorization": "Bearer okto-token"
        }

    def test_requires_session(self, client: OktoClient, mock_http: MagicMock) -> None:
        with pytest.raises(OktoAPIError):
            client.token_transfer(1, "0xrecipient", "", "eip155:137")

        mock_http.post.assert_not_called()
