"""
WebSocket configuration and constants for the Bitget public market-data stream.
"""

from dataclasses import dataclass

BITGET_PUBLIC_WS_URL = "wss://ws.bitget.com/v2/ws/public"


@dataclass
class WebSocketConfig:
    """Configuration for Bitget WebSocket connections."""

    ws_url: str = BITGET_PUBLIC_WS_URL
    inst_type: str = "USDT-FUTURES"
    channel: str = "ticker"

    # Connection settings
    PING_INTERVAL: float = 30.0  # Bitget drops idle connections after 2 minutes
    PONG_TIMEOUT: float = 90.0   # no inbound traffic for this long forces a reconnect
    OPEN_TIMEOUT: float = 10.0

    # Reconnection settings: fixed delay, unbounded attempts
    RECONNECT_DELAY: float = 5.0

    # Logging
    LOG_WEBSOCKET_MESSAGES: bool = False

    def __post_init__(self):
        if self.PING_INTERVAL <= 0:
            raise ValueError("Ping interval must be positive")
        if self.RECONNECT_DELAY < 0:
            raise ValueError("Reconnect delay cannot be negative")
