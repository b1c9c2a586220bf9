import os
from dotenv import load_dotenv


def _symbols(raw):
    return tuple(symbol.strip().upper() for symbol in raw.split(",") if symbol.strip())


# Force reload on import with override=True to ensure fresh values
load_dotenv(override=True)

# Dashboard configuration document
HEDGER_CONFIG_PATH = os.getenv("HEDGER_CONFIG_PATH", "config.json")
HEDGER_CONFIG_BACKUP_PATH = os.getenv("HEDGER_CONFIG_BACKUP_PATH", ".hedger/config.backup.json")

# Bitget endpoints (empty base URL means: use apiBaseUrl from config.json)
BITGET_API_BASE_URL = os.getenv("BITGET_API_BASE_URL", "")
BITGET_WS_URL = os.getenv("BITGET_WS_URL", "wss://ws.bitget.com/v2/ws/public")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))
TIME_OFFSET_MS = int(os.getenv("TIME_OFFSET_MS", "0"))

# Price feed: "websocket" streams tickers, "rest" polls them
PRICE_FEED_MODE = os.getenv("PRICE_FEED_MODE", "websocket").lower()
PRICE_SYMBOLS = _symbols(os.getenv("PRICE_SYMBOLS", "BTCUSDT,ETHUSDT,BNBUSDT"))
PRICE_POLL_INTERVAL = float(os.getenv("PRICE_POLL_INTERVAL", "2"))

# Logging
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# HTTP API
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
API_DEBUG = os.getenv("API_DEBUG", "False").lower() == "true"
