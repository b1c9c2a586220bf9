"""
Centralized Logging Configuration

Separate handlers for the different log streams of the dashboard service.

Log Categories:
- WebSocket: Console only, reduced verbosity
- Exchange: File-based, REST request failures and order actions
- Accounts: File-based, per-account refresh results
- Errors: File-based, errors from every component
- General: File-based, application-wide logs (also echoed to console)
"""

import logging
import sys
from datetime import datetime
from pathlib import Path


class ProductionLoggingConfig:
    """Production-ready logging configuration with separated log streams."""

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = getattr(logging, level.upper(), logging.INFO)

        # Create timestamped log files for better organization
        timestamp = datetime.now().strftime("%Y%m%d")
        self.log_files = {
            'exchange': self.log_dir / f"exchange_{timestamp}.log",
            'accounts': self.log_dir / f"accounts_{timestamp}.log",
            'errors': self.log_dir / f"errors_{timestamp}.log",
            'general': self.log_dir / f"hedger_{timestamp}.log"
        }

        self._setup_loggers()

    def _setup_loggers(self):
        """Set up all logger configurations."""
        # Clear any existing handlers
        logging.getLogger().handlers.clear()

        root_logger = logging.getLogger()
        root_logger.setLevel(self.level)

        self._create_formatters()
        self._setup_handlers()
        self._configure_specific_loggers()

    def _create_formatters(self):
        """Create formatters for different log types."""
        # Detailed formatter for files
        self.file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Simple formatter for console
        self.console_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

    def _setup_handlers(self):
        """Set up file and console handlers."""
        def file_handler(name: str, level: int) -> logging.FileHandler:
            handler = logging.FileHandler(self.log_files[name], encoding='utf-8')
            handler.setLevel(level)
            handler.setFormatter(self.file_formatter)
            return handler

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.level)
        console_handler.setFormatter(self.console_formatter)

        # WebSocket logs (console only)
        websocket_handler = logging.StreamHandler(sys.stdout)
        websocket_handler.setLevel(logging.WARNING)  # Reduced verbosity
        websocket_handler.setFormatter(self.console_formatter)

        self.handlers = {
            'general': file_handler('general', self.level),
            'exchange': file_handler('exchange', self.level),
            'accounts': file_handler('accounts', self.level),
            'errors': file_handler('errors', logging.ERROR),
            'console': console_handler,
            'websocket': websocket_handler
        }

    def _configure_specific_loggers(self):
        """Configure specific loggers with appropriate handlers."""
        # WebSocket loggers (console only, reduced verbosity)
        websocket_loggers = [
            'hedger.websocket',
        ]

        for logger_name in websocket_loggers:
            logger = logging.getLogger(logger_name)
            logger.setLevel(logging.INFO)
            logger.addHandler(self.handlers['websocket'])
            logger.addHandler(self.handlers['errors'])
            logger.propagate = False

        # Exchange loggers (file only)
        exchange_loggers = [
            'hedger.exchange',
            'hedger.services.pricing',
        ]

        for logger_name in exchange_loggers:
            logger = logging.getLogger(logger_name)
            logger.setLevel(self.level)
            logger.addHandler(self.handlers['exchange'])
            logger.addHandler(self.handlers['errors'])
            logger.propagate = False

        # Account refresh loggers (file only)
        account_loggers = [
            'hedger.services.account_service',
        ]

        for logger_name in account_loggers:
            logger = logging.getLogger(logger_name)
            logger.setLevel(self.level)
            logger.addHandler(self.handlers['accounts'])
            logger.addHandler(self.handlers['errors'])
            logger.propagate = False

        # General application loggers
        root_logger = logging.getLogger()
        root_logger.addHandler(self.handlers['general'])
        root_logger.addHandler(self.handlers['console'])
        root_logger.addHandler(self.handlers['errors'])


def setup_production_logging(log_dir: str = "logs", level: str = "INFO") -> ProductionLoggingConfig:
    """Set up production logging configuration."""
    return ProductionLoggingConfig(log_dir, level)
