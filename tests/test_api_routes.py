"""
Tests for the dashboard HTTP API.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from hedger.api.core import APIConfig, create_app
from hedger.config.dashboard_config import DashboardConfig
from hedger.dashboard import Dashboard
from hedger.exchange.bitget.bitget_client import BitgetClient
from hedger.exchange.bitget.bitget_errors import BitgetAPIError
from hedger.exchange.core.exchange_config import (
    ACCOUNT_BALANCE_ENDPOINT,
    ALL_POSITIONS_ENDPOINT,
    PENDING_ORDERS_ENDPOINT,
    CANCEL_ORDER_ENDPOINT,
)
from hedger.services.pricing.price_models import PriceTick

CONFIG = {
    "accounts": [
        {"id": "1", "name": "Main", "apiKey": "bg_key_1", "apiSecret": "secret_1", "passphrase": "pass_1"},
        {"id": "2", "name": "Hedge", "apiKey": "bg_key_2", "apiSecret": "secret_2", "passphrase": "pass_2"},
    ],
    "settings": {"defaultSymbol": "BTCUSDT"},
}


def _exchange_response(account, method, endpoint, params=None, body=None):
    if endpoint == ACCOUNT_BALANCE_ENDPOINT:
        return [{'marginCoin': 'USDT', 'available': '900', 'locked': '100', 'accountEquity': '1000'}]
    if endpoint == ALL_POSITIONS_ENDPOINT:
        return [
            {'symbol': 'BTCUSDT', 'holdSide': 'long', 'total': '0.5'},
            {'symbol': 'ETHUSDT', 'holdSide': 'short', 'total': '0'},
        ]
    if endpoint == PENDING_ORDERS_ENDPOINT:
        return {'entrustedList': [{'orderId': f"{account.id}001", 'symbol': 'BTCUSDT', 'size': '0.01'}]}
    if endpoint == CANCEL_ORDER_ENDPOINT:
        if account.id == "2":
            raise BitgetAPIError("40768", "Order does not exist")
        return {'orderId': body['orderId']}
    raise AssertionError(f"unexpected endpoint {endpoint}")


@pytest.fixture
def dashboard():
    client = BitgetClient()
    client.call = AsyncMock(side_effect=_exchange_response)
    client.public_get = AsyncMock(return_value=[])
    return Dashboard(DashboardConfig.model_validate(CONFIG), price_feed_mode="rest", client=client)


@pytest.fixture
def api(dashboard):
    with TestClient(create_app(dashboard, manage_lifecycle=False)) as test_client:
        yield test_client


def test_root(api):
    response = api.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_reports_degraded_without_price_feed(api):
    response = api.get("/api/v1/health")

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "degraded"
    assert body["data"]["accounts"]["idle"] == 2
    assert body["data"]["price_feed_mode"] == "rest"


def test_refresh_then_read_accounts(api):
    refreshed = api.post("/api/v1/refresh").json()
    assert [account["status"] for account in refreshed["data"]["accounts"]] == ["ready", "ready"]

    account = api.get("/api/v1/accounts/1").json()["data"]["account"]
    assert account["balance"]["equity"] == 1000.0
    assert [position["symbol"] for position in account["positions"]] == ["BTCUSDT"]
    assert "raw" not in account["positions"][0]
    assert "apiSecret" not in str(account)


def test_unknown_account_is_404(api):
    assert api.get("/api/v1/accounts/9").status_code == 404
    assert api.post("/api/v1/accounts/9/refresh").status_code == 404
    assert api.post("/api/v1/accounts/9/orders/1/cancel").status_code == 404


def test_refresh_single_account(api):
    response = api.post("/api/v1/accounts/2/refresh")
    assert response.json()["data"]["account"]["status"] == "ready"
    assert api.get("/api/v1/accounts/1").json()["data"]["account"]["status"] == "idle"


def test_positions_filter_by_symbol(api):
    api.post("/api/v1/refresh")

    positions = api.get("/api/v1/positions", params={"symbol": "ETHUSDT"}).json()["data"]["positions"]
    assert positions == {"1": [], "2": []}

    positions = api.get("/api/v1/positions", params={"account_id": "1"}).json()["data"]["positions"]
    assert list(positions) == ["1"]
    assert len(positions["1"]) == 1


def test_cancel_order(api):
    api.post("/api/v1/refresh")

    assert api.post("/api/v1/accounts/1/orders/1001/cancel").json() == {
        "account_id": "1", "order_id": "1001", "cancelled": True
    }
    assert api.get("/api/v1/accounts/1").json()["data"]["account"]["orders"] == []

    rejected = api.post("/api/v1/accounts/2/orders/2001/cancel")
    assert rejected.status_code == 200
    assert rejected.json()["cancelled"] is False


def test_cancel_all(api):
    api.post("/api/v1/refresh")
    assert api.post("/api/v1/orders/cancel-all").json() == {"cancelled": 1, "failed": 1}


def test_portfolio(api):
    api.post("/api/v1/refresh")

    data = api.get("/api/v1/portfolio").json()["data"]

    assert data["total_equity"] == 2000.0
    assert data["open_positions"] == 2
    assert data["exposures"]["BTCUSDT"]["net_size"] == 1.0


def test_prices(api, dashboard):
    assert api.get("/api/v1/prices/BTCUSDT").status_code == 404

    dashboard.price_store.update(PriceTick("BTCUSDT", 64000.0, 1.5, 100.0, datetime.now(timezone.utc)))

    price = api.get("/api/v1/prices/btcusdt").json()["data"]["price"]
    assert price["price"] == 64000.0
    prices = api.get("/api/v1/prices").json()["data"]
    assert prices["default_symbol"] == "BTCUSDT"
    assert list(prices["prices"]) == ["BTCUSDT"]


def test_unknown_price_feed_mode_rejected():
    with pytest.raises(ValueError):
        Dashboard(DashboardConfig.model_validate(CONFIG), price_feed_mode="carrier-pigeon")


@pytest.mark.parametrize("allowed_credentials,expected", [(True, "true"), (False, None)])
def test_cors_credentials_follow_config(dashboard, allowed_credentials, expected):
    config = APIConfig(allowed_credentials=allowed_credentials)
    with TestClient(create_app(dashboard, config, manage_lifecycle=False)) as test_client:
        response = test_client.get("/", headers={"Origin": "https://dashboard.example"})

    assert response.headers.get("access-control-allow-credentials") == expected
    assert "x-process-time" in response.headers
