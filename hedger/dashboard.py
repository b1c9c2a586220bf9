"""
Dashboard

Wires the shared REST client, the account data service and the price feed
together and owns their lifecycle.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Union

from .config.dashboard_config import DashboardConfig
from .exchange.bitget.bitget_client import BitgetClient
from .exchange.bitget.bitget_exchange import BitgetExchange
from .exchange.core.exchange_config import ExchangeConfig
from .services.account_service import AccountDataService, AccountStatus
from .services.analytics.portfolio_metrics import PortfolioMetrics, compute_portfolio_metrics
from .services.pricing.price_models import PriceStore, DEFAULT_SYMBOLS
from .services.pricing.rest_price_poller import RestPricePoller
from .websocket.core.websocket_config import WebSocketConfig
from .websocket.price_feed import PriceFeedSession

logger = logging.getLogger(__name__)

PRICE_FEED_MODES = ("websocket", "rest")


class Dashboard:
    """
    Multi-account dashboard service.

    Responsibilities:
    - Build one exchange wrapper per enabled account over a shared client
    - Run the periodic account refresh
    - Run the price feed (streaming, or REST polling fallback)
    - Expose portfolio metrics and the refresh/cancel actions
    """

    def __init__(self, config: DashboardConfig,
                 exchange_config: Optional[ExchangeConfig] = None,
                 ws_config: Optional[WebSocketConfig] = None,
                 symbols: Iterable[str] = DEFAULT_SYMBOLS,
                 price_feed_mode: str = "websocket",
                 price_poll_interval: float = 2.0,
                 client: Optional[BitgetClient] = None):
        if price_feed_mode not in PRICE_FEED_MODES:
            raise ValueError(f"Unknown price feed mode '{price_feed_mode}'. Available: {list(PRICE_FEED_MODES)}")

        self.config = config
        self.exchange_config = exchange_config or ExchangeConfig(base_url=config.settings.api_base_url)
        self.client = client or BitgetClient(self.exchange_config)
        self.symbols = list(symbols)
        self.price_store = PriceStore()

        self.accounts = AccountDataService(
            config.accounts,
            lambda account: BitgetExchange(self.client, account, self.exchange_config)
        )

        self.price_feed_mode = price_feed_mode
        self.price_feed: Union[PriceFeedSession, RestPricePoller]
        if price_feed_mode == "websocket":
            self.price_feed = PriceFeedSession(self.symbols, self.price_store, ws_config)
        else:
            self.price_feed = RestPricePoller(self.client, self.symbols, self.price_store, price_poll_interval)

        self.running = False

    @property
    def default_symbol(self) -> str:
        return self.config.settings.default_symbol

    @property
    def price_feed_connected(self) -> bool:
        return bool(self.price_feed.connected)

    async def start(self) -> None:
        """Start the price feed and the periodic account refresh."""
        if self.running:
            logger.warning("Dashboard is already running")
            return

        self.running = True
        self.exchange_config.log_config()
        await self.price_feed.start()
        self.accounts.start(self.config.settings.refresh_interval)
        logger.info(f"Dashboard started: {len(self.accounts.account_ids)} accounts, "
                    f"{self.price_feed_mode} price feed for {', '.join(self.symbols)}")

    async def stop(self) -> None:
        """Stop background work and close network resources."""
        if not self.running:
            return

        self.running = False
        await self.accounts.stop()
        await self.price_feed.stop()
        await self.client.close()
        logger.info("Dashboard stopped")

    def portfolio_metrics(self) -> PortfolioMetrics:
        return compute_portfolio_metrics(self.accounts.get_states(), self.price_store.snapshot())

    def health(self) -> Dict[str, Any]:
        statuses = {status.value: 0 for status in AccountStatus}
        for state in self.accounts.get_states():
            statuses[state.status.value] += 1
        health = {
            'running': self.running,
            'price_feed_mode': self.price_feed_mode,
            'price_feed_connected': self.price_feed_connected,
            'accounts': statuses,
        }
        if isinstance(self.price_feed, PriceFeedSession):
            health['stream'] = self.price_feed.connection.get_connection_state()
        return health
