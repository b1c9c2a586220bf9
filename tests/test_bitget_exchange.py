"""
Tests for the per-account Bitget exchange wrapper.
"""

from unittest.mock import AsyncMock

import aiohttp
import pytest

from hedger.exchange.bitget.bitget_client import BitgetClient
from hedger.exchange.bitget.bitget_errors import BitgetAPIError, BitgetTransportError
from hedger.exchange.bitget.bitget_exchange import BitgetExchange
from hedger.exchange.core.exchange_config import CANCEL_ORDER_ENDPOINT, PENDING_ORDERS_ENDPOINT


@pytest.fixture
def exchange(account):
    client = BitgetClient()
    client.call = AsyncMock()
    return BitgetExchange(client, account)


@pytest.mark.asyncio
async def test_balance_uses_first_entry(exchange):
    exchange.client.call.return_value = [
        {'marginCoin': 'USDT', 'available': '1000.5', 'locked': '10', 'accountEquity': '1100',
         'unrealizedPL': '-5.5', 'crossedRiskRate': '0.01'},
        {'marginCoin': 'BTC', 'available': '1'},
    ]

    balance = await exchange.get_account_balance()

    assert balance.margin_coin == 'USDT'
    assert balance.available == 1000.5
    assert balance.equity == 1100.0
    assert balance.unrealized_pl == -5.5
    assert 'raw' not in balance.to_dict()


@pytest.mark.asyncio
async def test_balance_empty_list_is_none(exchange):
    exchange.client.call.return_value = []
    assert await exchange.get_account_balance() is None


@pytest.mark.asyncio
async def test_positions_keep_zero_size_entries(exchange):
    exchange.client.call.return_value = [
        {'symbol': 'BTCUSDT', 'holdSide': 'long', 'total': '0.5', 'openPriceAvg': '60000', 'leverage': '10'},
        {'symbol': 'ETHUSDT', 'holdSide': 'short', 'total': '0'},
    ]

    positions = await exchange.get_positions()

    assert [p.symbol for p in positions] == ['BTCUSDT', 'ETHUSDT']
    assert positions[0].average_open_price == 60000.0
    assert positions[0].is_open is True
    assert positions[1].is_open is False


@pytest.mark.asyncio
async def test_orders_read_entrusted_list(exchange):
    exchange.client.call.return_value = {
        'entrustedList': [
            {'orderId': '1001', 'symbol': 'BTCUSDT', 'side': 'buy', 'orderType': 'limit',
             'price': '59000', 'size': '0.01', 'status': 'live', 'marginCoin': 'USDT', 'cTime': '1700000000000'},
        ],
        'endId': '1001',
    }

    orders = await exchange.get_orders()

    assert len(orders) == 1
    assert orders[0].order_id == '1001'
    assert orders[0].price == 59000.0
    assert orders[0].created_time == 1700000000000
    assert exchange.client.call.call_args.args[2] == PENDING_ORDERS_ENDPOINT


@pytest.mark.asyncio
async def test_orders_null_list_is_empty(exchange):
    exchange.client.call.return_value = {'entrustedList': None}
    assert await exchange.get_orders() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    BitgetTransportError(500, "Internal Server Error"),
    BitgetAPIError("40009", "sign signature error"),
    aiohttp.ClientConnectionError("reset"),
])
async def test_orders_failure_is_empty(exchange, error):
    exchange.client.call.side_effect = error
    assert await exchange.get_orders() == []


@pytest.mark.asyncio
async def test_positions_failure_propagates(exchange):
    exchange.client.call.side_effect = BitgetTransportError(502, "Bad Gateway")
    with pytest.raises(BitgetTransportError):
        await exchange.get_positions()


@pytest.mark.asyncio
async def test_cancel_order_posts_body(exchange):
    exchange.client.call.return_value = {'orderId': '1001'}

    assert await exchange.cancel_order('1001', 'BTCUSDT') is True

    args = exchange.client.call.call_args
    assert args.args[1:3] == ("POST", CANCEL_ORDER_ENDPOINT)
    assert args.kwargs['body'] == {
        'symbol': 'BTCUSDT', 'productType': 'USDT-FUTURES', 'marginCoin': 'USDT', 'orderId': '1001'
    }


@pytest.mark.asyncio
async def test_cancel_order_rejection_raises(exchange):
    exchange.client.call.side_effect = BitgetAPIError("40768", "Order does not exist")
    with pytest.raises(BitgetAPIError):
        await exchange.cancel_order('1001', 'BTCUSDT')


@pytest.mark.asyncio
async def test_orders_undecodable_body_is_empty(exchange):
    exchange.client.call.side_effect = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
    assert await exchange.get_orders() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("created", ["1e400", "nan"])
async def test_orders_out_of_range_created_time(exchange, created):
    exchange.client.call.return_value = {'entrustedList': [{'orderId': '1', 'symbol': 'BTCUSDT', 'cTime': created}]}

    orders = await exchange.get_orders()

    assert [order.order_id for order in orders] == ['1']
    assert orders[0].created_time is None
