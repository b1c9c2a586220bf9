"""
Tests for the account data service: refresh cycle, state table and order actions.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from fakes import wait_until
from hedger.config.dashboard_config import AccountCredential
from hedger.exchange.bitget.bitget_client import BitgetClient
from hedger.exchange.bitget.bitget_errors import BitgetAPIError, BitgetTransportError
from hedger.exchange.bitget.bitget_exchange import BitgetExchange
from hedger.exchange.bitget.bitget_models import BitgetBalance
from hedger.exchange.core.exchange_config import (
    ACCOUNT_BALANCE_ENDPOINT,
    ALL_POSITIONS_ENDPOINT,
    PENDING_ORDERS_ENDPOINT,
    CANCEL_ORDER_ENDPOINT,
)
from hedger.services.account_service import AccountDataService, AccountStatus

BALANCE = [{'marginCoin': 'USDT', 'available': '1000', 'locked': '50', 'accountEquity': '1200', 'unrealizedPL': '12.5'}]
POSITIONS = [
    {'symbol': 'BTCUSDT', 'holdSide': 'long', 'total': '0.5', 'openPriceAvg': '60000', 'unrealizedPL': '12.5'},
    {'symbol': 'ETHUSDT', 'holdSide': 'short', 'total': '0'},
]
ORDERS = {'entrustedList': [
    {'orderId': '1001', 'symbol': 'BTCUSDT', 'side': 'buy', 'size': '0.01', 'price': '59000', 'marginCoin': 'USDT'},
    {'orderId': '1002', 'symbol': 'ETHUSDT', 'side': 'sell', 'size': '0.2', 'price': '4000', 'marginCoin': 'USDT'},
]}


def _routes(account_id, orders=ORDERS, positions=POSITIONS):
    return {
        (account_id, ACCOUNT_BALANCE_ENDPOINT): BALANCE,
        (account_id, ALL_POSITIONS_ENDPOINT): positions,
        (account_id, PENDING_ORDERS_ENDPOINT): orders,
        (account_id, CANCEL_ORDER_ENDPOINT): {'orderId': 'ok'},
    }


def _service(accounts, routes):
    """Service over real exchange wrappers whose client answers from a route table."""
    client = BitgetClient()

    async def call(account, method, endpoint, params=None, body=None):
        result = routes[(account.id, endpoint)]
        if isinstance(result, Exception):
            raise result
        return result

    client.call = AsyncMock(side_effect=call)
    service = AccountDataService(accounts, lambda account: BitgetExchange(client, account))
    return service, client


def _comparable(state):
    result = state.to_dict()
    result.pop('last_updated')
    return result


@pytest.mark.asyncio
async def test_refresh_populates_state(account):
    service, _ = _service([account], _routes("1"))

    state = await service.refresh_account("1")

    assert state.status == AccountStatus.READY
    assert state.balance.equity == 1200.0
    assert [order.order_id for order in state.orders] == ['1001', '1002']
    assert state.error is None
    assert state.last_updated is not None
    assert service.get_state("1") is state


@pytest.mark.asyncio
async def test_zero_size_positions_are_excluded(account):
    service, _ = _service([account], _routes("1"))

    state = await service.refresh_account("1")

    assert [position.symbol for position in state.positions] == ['BTCUSDT']
    assert all(position.total != 0 for position in state.positions)


@pytest.mark.asyncio
async def test_orders_http_500_leaves_balance_and_positions(account):
    routes = _routes("1", orders=BitgetTransportError(500, "Internal Server Error"))
    service, _ = _service([account], routes)

    state = await service.refresh_account("1")

    assert state.status == AccountStatus.READY
    assert state.balance is not None
    assert len(state.positions) == 1
    assert state.orders == ()


@pytest.mark.asyncio
async def test_refresh_is_idempotent(account):
    service, _ = _service([account], _routes("1"))

    first = await service.refresh_account("1")
    second = await service.refresh_account("1")

    assert _comparable(first) == _comparable(second)


@pytest.mark.asyncio
async def test_failed_account_does_not_affect_other(account, second_account):
    routes = {**_routes("1"), **_routes("2", positions=BitgetAPIError("40037", "Apikey does not exist"))}
    service, _ = _service([account, second_account], routes)

    states = await service.refresh_all()

    by_id = {state.account_id: state for state in states}
    assert by_id["1"].status == AccountStatus.READY
    assert len(by_id["1"].orders) == 2
    assert by_id["2"].status == AccountStatus.ERRORED
    assert "40037" in by_id["2"].error


@pytest.mark.asyncio
async def test_error_keeps_last_known_data(account):
    routes = _routes("1")
    service, _ = _service([account], routes)
    await service.refresh_account("1")

    routes[("1", ACCOUNT_BALANCE_ENDPOINT)] = BitgetTransportError(503, "Service Unavailable")
    state = await service.refresh_account("1")

    assert state.status == AccountStatus.ERRORED
    assert state.balance.equity == 1200.0
    assert len(state.orders) == 2


@pytest.mark.asyncio
async def test_unknown_account_refresh_raises(account):
    service, _ = _service([account], _routes("1"))
    with pytest.raises(KeyError):
        await service.refresh_account("missing")


def test_disabled_accounts_are_ignored(account):
    disabled = AccountCredential(id="3", name="Off", apiKey="k", apiSecret="s", passphrase="p", enabled=False)
    service, _ = _service([account, disabled], _routes("1"))

    assert service.account_ids == ["1"]
    assert service.get_state("3") is None
    assert service.get_state("1").status == AccountStatus.IDLE


@pytest.mark.asyncio
async def test_cancel_removes_only_that_order(account):
    service, client = _service([account], _routes("1"))
    await service.refresh_account("1")

    assert await service.cancel_order("1", "1001") is True

    assert [order.order_id for order in service.get_state("1").orders] == ['1002']
    cancel_call = client.call.call_args
    assert cancel_call.args[2] == CANCEL_ORDER_ENDPOINT
    assert cancel_call.kwargs['body']['orderId'] == '1001'
    assert cancel_call.kwargs['body']['symbol'] == 'BTCUSDT'


@pytest.mark.asyncio
async def test_cancel_unknown_order_is_noop(account):
    service, client = _service([account], _routes("1"))
    await service.refresh_account("1")
    before = service.get_state("1")
    calls = client.call.await_count

    assert await service.cancel_order("1", "9999") is False
    assert await service.cancel_order("missing", "1001") is False

    assert service.get_state("1") is before
    assert client.call.await_count == calls


@pytest.mark.asyncio
async def test_cancel_failure_leaves_state(account):
    routes = _routes("1")
    service, _ = _service([account], routes)
    await service.refresh_account("1")
    before = service.get_state("1")

    routes[("1", CANCEL_ORDER_ENDPOINT)] = BitgetAPIError("40768", "Order does not exist")

    assert await service.cancel_order("1", "1001") is False
    assert service.get_state("1") is before


@pytest.mark.asyncio
async def test_cancel_all_counts_results(account, second_account):
    routes = {**_routes("1"), **_routes("2")}
    routes[("2", CANCEL_ORDER_ENDPOINT)] = BitgetTransportError(500, "Internal Server Error")
    service, _ = _service([account, second_account], routes)
    await service.refresh_all()

    result = await service.cancel_all_orders()

    assert result == {'cancelled': 2, 'failed': 2}
    assert service.get_state("1").orders == ()
    assert len(service.get_state("2").orders) == 2


@pytest.mark.asyncio
async def test_active_positions_filters(account, second_account):
    service, _ = _service([account, second_account], {**_routes("1"), **_routes("2")})
    await service.refresh_all()

    assert {k: len(v) for k, v in service.active_positions().items()} == {"1": 1, "2": 1}
    assert service.active_positions(symbol="ETHUSDT") == {"1": [], "2": []}
    assert list(service.active_positions(account_id="2").keys()) == ["2"]


@pytest.mark.asyncio
async def test_newer_refresh_supersedes_in_flight(account):
    stale = BitgetBalance(margin_coin="USDT", equity=1.0)
    fresh = BitgetBalance(margin_coin="USDT", equity=2.0)
    gate = asyncio.Event()
    calls = 0

    async def get_account_balance():
        nonlocal calls
        calls += 1
        if calls == 1:
            await gate.wait()
            return stale
        return fresh

    exchange = MagicMock()
    exchange.get_account_balance = AsyncMock(side_effect=get_account_balance)
    exchange.get_positions = AsyncMock(return_value=[])
    exchange.get_orders = AsyncMock(return_value=[])
    service = AccountDataService([account], lambda _: exchange)

    slow = asyncio.create_task(service.refresh_account("1"))
    await wait_until(lambda: calls == 1)
    assert service.get_state("1").status == AccountStatus.LOADING

    latest = await service.refresh_account("1")
    superseded = await slow

    assert latest.balance is fresh
    assert superseded.status != AccountStatus.ERRORED
    assert service.get_state("1").balance is fresh
    assert service.get_state("1").status == AccountStatus.READY


@pytest.mark.asyncio
async def test_start_and_stop_refresh_loop(account):
    service, _ = _service([account], _routes("1"))

    service.start(interval=60)
    await wait_until(lambda: service.get_state("1").status == AccountStatus.READY)
    await service.stop()

    assert service.running is False


@pytest.mark.asyncio
@pytest.mark.parametrize("orders,expected_orders", [
    (UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"), 0),
    ({'entrustedList': [{'orderId': '1', 'symbol': 'BTCUSDT', 'cTime': '1e400'}]}, 1),
])
async def test_malformed_orders_response_still_settles_ready(account, orders, expected_orders):
    service, _ = _service([account], _routes("1", orders=orders))

    state = await service.refresh_account("1")

    assert state.status == AccountStatus.READY
    assert state.balance.equity == 1200.0
    assert len(state.positions) == 1
    assert len(state.orders) == expected_orders


@pytest.mark.asyncio
async def test_unexpected_orders_exception_settles_ready(account):
    exchange = MagicMock()
    exchange.get_account_balance = AsyncMock(return_value=BitgetBalance(equity=5.0))
    exchange.get_positions = AsyncMock(return_value=[])
    exchange.get_orders = AsyncMock(side_effect=RuntimeError("boom"))
    service = AccountDataService([account], lambda _: exchange)

    state = await service.refresh_account("1")

    assert state.status == AccountStatus.READY
    assert state.balance.equity == 5.0
    assert state.orders == ()


@pytest.mark.asyncio
async def test_stop_during_refresh_leaves_no_account_loading(account):
    gate = asyncio.Event()

    async def get_account_balance():
        await gate.wait()

    exchange = MagicMock()
    exchange.get_account_balance = AsyncMock(side_effect=get_account_balance)
    service = AccountDataService([account], lambda _: exchange)

    pending = asyncio.create_task(service.refresh_account("1"))
    await wait_until(lambda: service.get_state("1").status == AccountStatus.LOADING)

    await service.stop()
    await asyncio.gather(pending, return_exceptions=True)

    assert service.get_state("1").status == AccountStatus.IDLE
