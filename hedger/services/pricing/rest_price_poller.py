import asyncio
import logging
from typing import Iterable, List, Optional

from ...exchange.bitget.bitget_client import BitgetClient
from ...exchange.bitget.bitget_errors import BitgetError
from ...exchange.core.exchange_config import TICKER_ENDPOINT
from ...websocket.handlers.ticker_decoder import decode_ticker
from .price_models import PriceStore, DEFAULT_SYMBOLS

logger = logging.getLogger(__name__)


class RestPricePoller:
    """Polling fallback for the price feed: one ticker request per symbol per interval"""

    def __init__(self, client: BitgetClient, symbols: Iterable[str] = DEFAULT_SYMBOLS,
                 store: Optional[PriceStore] = None, interval: float = 2.0,
                 product_type: Optional[str] = None):
        self.client = client
        self.symbols: List[str] = list(symbols)
        self.store = store or PriceStore()
        self.interval = interval
        self.product_type = product_type or client.config.product_type
        self.connected = False
        self.running = False
        self._task: Optional[asyncio.Task] = None

    async def fetch_symbol(self, symbol: str) -> bool:
        """Fetch and store one ticker. Returns False on failure."""
        try:
            data = await self.client.public_get(
                TICKER_ENDPOINT, {'symbol': symbol, 'productType': self.product_type}
            )
            # v2 returns a one-element list, v1 returned the object itself
            item = data[0] if isinstance(data, list) and data else data
            if not item:
                logger.warning(f"Empty ticker response for {symbol}")
                return False
            self.store.update(decode_ticker(item, symbol=symbol))
            return True
        except (BitgetError, asyncio.TimeoutError) as e:
            logger.error(f"Error fetching {symbol} price: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error fetching {symbol} price: {e}")
            return False

    async def poll_once(self) -> int:
        """Fetch every symbol sequentially; returns how many succeeded"""
        successes = 0
        for symbol in self.symbols:
            if await self.fetch_symbol(symbol):
                successes += 1
        self.connected = successes > 0
        return successes

    async def _run(self) -> None:
        while self.running:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    async def start(self) -> None:
        if self.running:
            return
        self.running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"REST price polling started every {self.interval}s for {', '.join(self.symbols)}")

    async def stop(self) -> None:
        self.running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        self.connected = False
        logger.info("REST price polling stopped")
