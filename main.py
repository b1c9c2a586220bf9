#!/usr/bin/env python3
"""
Bitget Hedger - Main Entry Point
"""
import logging
import sys

logger = logging.getLogger(__name__)


def setup_logging():
    """Configure logging for the application."""
    from config import settings
    from config.logging_config import setup_production_logging

    setup_production_logging(settings.LOG_DIR, settings.LOG_LEVEL)

    # Reduce noise from third-party libraries
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('uvicorn').setLevel(logging.WARNING)
    logging.getLogger('websockets').setLevel(logging.WARNING)


def build_dashboard():
    """Load configuration and assemble the dashboard."""
    from config import settings
    from hedger.config import load_config_with_backup
    from hedger.dashboard import Dashboard
    from hedger.exchange.core.exchange_config import ExchangeConfig
    from hedger.websocket.core.websocket_config import WebSocketConfig

    config = load_config_with_backup(settings.HEDGER_CONFIG_PATH, settings.HEDGER_CONFIG_BACKUP_PATH)

    exchange_config = ExchangeConfig(
        base_url=settings.BITGET_API_BASE_URL or config.settings.api_base_url,
        request_timeout=settings.REQUEST_TIMEOUT,
        time_offset_ms=settings.TIME_OFFSET_MS,
    )
    ws_config = WebSocketConfig(ws_url=settings.BITGET_WS_URL)

    return Dashboard(
        config,
        exchange_config=exchange_config,
        ws_config=ws_config,
        symbols=settings.PRICE_SYMBOLS,
        price_feed_mode=settings.PRICE_FEED_MODE,
        price_poll_interval=settings.PRICE_POLL_INTERVAL,
    )


def main():
    """Main entry point for the dashboard service."""
    import uvicorn
    from hedger.api.core import APIConfig, create_app
    from hedger.config import ConfigError

    try:
        dashboard = build_dashboard()
    except ConfigError as e:
        logger.error(f"Cannot start without a valid configuration: {e}")
        sys.exit(1)

    api_config = APIConfig.from_settings()
    app = create_app(dashboard, api_config)

    logger.info(f"Service will be available at: http://{api_config.host}:{api_config.port}")
    logger.info(f"API Documentation: http://{api_config.host}:{api_config.port}/docs")

    try:
        uvicorn.run(app, host=api_config.host, port=api_config.port, log_level="info")
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    setup_logging()
    main()
