"""
Bitget Exchange Implementation

Per-account futures operations on top of the shared BitgetClient: balance,
positions, pending orders and order cancellation.
"""

import asyncio
import logging
from typing import List, Optional

from ..core.exchange_config import (
    ExchangeConfig,
    ACCOUNT_BALANCE_ENDPOINT,
    ALL_POSITIONS_ENDPOINT,
    PENDING_ORDERS_ENDPOINT,
    CANCEL_ORDER_ENDPOINT,
)
from .bitget_client import BitgetClient
from .bitget_errors import BitgetError
from .bitget_models import BitgetBalance, BitgetPosition, BitgetOrder

logger = logging.getLogger(__name__)


class BitgetExchange:
    """
    Bitget futures operations bound to a single account.
    """

    def __init__(self, client: BitgetClient, account, config: Optional[ExchangeConfig] = None):
        """
        Initialize Bitget exchange for one account.

        Args:
            client: Shared REST client
            account: Account credential
            config: Exchange configuration, defaults to the client's
        """
        self.client = client
        self.account = account
        self.config = config or client.config

    # Account Operations
    async def get_account_balance(self) -> Optional[BitgetBalance]:
        """
        Get the futures account balance.

        Returns:
            First balance entry reported by the exchange, or None
        """
        data = await self.client.call(
            self.account, "GET", ACCOUNT_BALANCE_ENDPOINT,
            {'productType': self.config.product_type}
        )
        if not data:
            logger.info(f"No balance entries for account {self.account.name}")
            return None
        return BitgetBalance.from_api(data[0])

    # Position Operations
    async def get_positions(self) -> List[BitgetPosition]:
        """
        Get all positions for the account.

        Returns:
            Every position reported by the exchange, zero-size ones included
        """
        data = await self.client.call(
            self.account, "GET", ALL_POSITIONS_ENDPOINT,
            {'productType': self.config.product_type, 'marginCoin': self.config.margin_coin}
        )
        return [BitgetPosition.from_api(item) for item in (data or [])]

    # Order Operations
    async def get_orders(self) -> List[BitgetOrder]:
        """
        Get pending orders for the account.

        The orders endpoint is less reliable than the others, so any failure
        here yields an empty list instead of an exception.

        Returns:
            Pending orders, or [] on any failure
        """
        try:
            data = await self.client.call(
                self.account, "GET", PENDING_ORDERS_ENDPOINT,
                {'productType': self.config.product_type}
            )
        except asyncio.CancelledError:
            raise
        except BitgetError as e:
            logger.warning(f"Orders fetch failed for account {self.account.name}, treating as empty: {e}")
            return []
        except Exception as e:
            logger.warning(f"Orders request failed for account {self.account.name}, treating as empty: {e}")
            return []

        if isinstance(data, dict):
            items = data.get('entrustedList') or []
        else:
            items = data or []

        try:
            return [BitgetOrder.from_api(item) for item in items]
        except (AttributeError, TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Malformed orders payload for account {self.account.name}: {e}")
            return []

    async def cancel_order(self, order_id: str, symbol: str, margin_coin: Optional[str] = None) -> bool:
        """
        Cancel a pending order.

        Args:
            order_id: Exchange order id
            symbol: Order symbol, e.g. BTCUSDT
            margin_coin: Margin coin, defaults to the configured one

        Returns:
            True once the exchange accepted the cancellation

        Raises:
            BitgetError: If the exchange rejects the request
        """
        await self.client.call(
            self.account, "POST", CANCEL_ORDER_ENDPOINT,
            body={
                'symbol': symbol,
                'productType': self.config.product_type,
                'marginCoin': margin_coin or self.config.margin_coin,
                'orderId': order_id,
            }
        )
        logger.info(f"Cancelled order {order_id} ({symbol}) on account {self.account.name}")
        return True
