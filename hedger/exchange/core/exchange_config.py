"""
Exchange Configuration

Centralized configuration for the Bitget REST API: base URL, product
scope, endpoint paths and request timeouts.
"""

from dataclasses import dataclass
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

BITGET_API_BASE_URL = "https://api.bitget.com"
SUCCESS_CODE = "00000"

# v2 mix (futures) endpoints
ACCOUNT_BALANCE_ENDPOINT = "/api/v2/mix/account/accounts"
ALL_POSITIONS_ENDPOINT = "/api/v2/mix/position/all-position"
PENDING_ORDERS_ENDPOINT = "/api/v2/mix/order/orders-pending"
CANCEL_ORDER_ENDPOINT = "/api/v2/mix/order/cancel-order"
TICKER_ENDPOINT = "/api/v2/mix/market/ticker"


@dataclass
class ExchangeConfig:
    """
    Configuration for exchange operations.

    Shared by every account; credentials live on the account, not here.
    """

    base_url: str = BITGET_API_BASE_URL
    product_type: str = "USDT-FUTURES"
    margin_coin: str = "USDT"
    locale: str = "en-US"

    # Connection Settings
    request_timeout: float = 10.0
    time_offset_ms: int = 0  # server time minus local time

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.base_url:
            raise ValueError("Base URL is required")

        self.base_url = self.base_url.rstrip('/')

        if self.request_timeout <= 0:
            raise ValueError("Request timeout must be positive")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'base_url': self.base_url,
            'product_type': self.product_type,
            'margin_coin': self.margin_coin,
            'locale': self.locale,
            'request_timeout': self.request_timeout,
            'time_offset_ms': self.time_offset_ms,
        }

    def log_config(self) -> None:
        """Log configuration."""
        logger.info(f"Exchange configuration: {self.to_dict()}")
