"""
Live price feed over the Bitget public WebSocket.

A PriceFeedSession owns its connection, keepalive task and subscriptions.
It subscribes to the ticker channel of every configured symbol on each
(re)connect and writes decoded ticks into a PriceStore.
"""

import asyncio
import json
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from ..exchange.bitget.bitget_errors import BitgetParseError
from ..services.pricing.price_models import PriceStore, DEFAULT_SYMBOLS
from .core.connection_manager import ConnectionManager
from .core.websocket_config import WebSocketConfig
from .handlers.ticker_decoder import decode_ticker

logger = logging.getLogger(__name__)

PING_MESSAGE = "ping"
PONG_MESSAGE = "pong"


class PriceFeedSession:
    """
    Streaming ticker session for a fixed symbol set.

    Lifecycle is start() / stop(); ``connected`` reports whether the stream
    is currently up.
    """

    def __init__(self, symbols: Iterable[str] = DEFAULT_SYMBOLS,
                 store: Optional[PriceStore] = None,
                 config: Optional[WebSocketConfig] = None,
                 connect=None):
        """
        Initialize the price feed.

        Args:
            symbols: Instrument ids to subscribe, e.g. BTCUSDT
            store: Tick store to update, a new one if omitted
            config: WebSocket configuration
            connect: Connection factory override (tests)
        """
        self.symbols: List[str] = list(symbols)
        self.store = store or PriceStore()
        self.config = config or WebSocketConfig()
        self.connection = ConnectionManager(
            self.config.ws_url,
            self._handle_message,
            config=self.config,
            on_connect=self._on_connect,
            connect=connect,
            name="bitget_ticker",
        )

        self.last_pong_time: float = 0.0
        self.decode_errors = 0
        self._tasks: List[asyncio.Task] = []
        self.running = False

    @property
    def connected(self) -> bool:
        return self.connection.connected

    def _channel_args(self) -> List[Dict[str, str]]:
        return [
            {'instType': self.config.inst_type, 'channel': self.config.channel, 'instId': symbol}
            for symbol in self.symbols
        ]

    def subscribe_message(self) -> str:
        return json.dumps({'op': 'subscribe', 'args': self._channel_args()})

    def unsubscribe_message(self) -> str:
        return json.dumps({'op': 'unsubscribe', 'args': self._channel_args()})

    async def start(self) -> None:
        """Open the stream and start the keepalive task."""
        if self.running:
            logger.warning("Price feed is already running")
            return

        self.running = True
        self._tasks = [
            asyncio.create_task(self.connection.run()),
            asyncio.create_task(self._keepalive()),
        ]
        logger.info(f"Price feed started for {', '.join(self.symbols)}")

    async def stop(self) -> None:
        """Unsubscribe, close the stream and cancel background tasks."""
        if not self.running:
            return

        self.running = False
        if self.connected:
            await self.connection.send_message(self.unsubscribe_message())
        await self.connection.close()

        for task in self._tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Price feed stopped")

    async def _on_connect(self) -> None:
        await self.connection.send_message(self.subscribe_message())
        logger.info(f"Subscribed to {self.config.channel} for {len(self.symbols)} symbols")

    async def _keepalive(self) -> None:
        """Send a text ping on a fixed interval; recycle a silent connection."""
        while self.running:
            await asyncio.sleep(self.config.PING_INTERVAL)
            if not self.connected:
                continue

            silent_for = time.time() - self.connection.last_message_time
            if silent_for > self.config.PONG_TIMEOUT:
                logger.warning(f"No data for {silent_for:.0f}s, recycling price stream")
                await self.connection.force_reconnect()
                continue

            await self.connection.send_message(PING_MESSAGE)

    async def _handle_message(self, message: Any) -> None:
        if message == PONG_MESSAGE:
            self.last_pong_time = time.time()
            return

        if self.config.LOG_WEBSOCKET_MESSAGES:
            logger.debug(f"Price feed message: {message}")

        try:
            payload = json.loads(message)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-JSON price feed message: {message!r}")
            return

        self.handle_payload(payload)

    def handle_payload(self, payload: Dict[str, Any]) -> int:
        """
        Apply one decoded stream payload.

        Returns:
            Number of ticks written to the store
        """
        if not isinstance(payload, dict):
            return 0

        event = payload.get('event')
        if event == 'error':
            logger.error(f"Price feed error {payload.get('code')}: {payload.get('msg')}")
            return 0
        if event:
            logger.debug(f"Price feed event {event}: {payload.get('arg')}")
            return 0

        arg = payload.get('arg') or {}
        if arg.get('channel') != self.config.channel:
            return 0

        updated = 0
        for item in payload.get('data') or []:
            try:
                tick = decode_ticker(item, symbol=arg.get('instId'))
            except BitgetParseError as e:
                self.decode_errors += 1
                logger.warning(f"Skipping ticker payload: {e}")
                continue
            self.store.update(tick)
            updated += 1
        return updated
