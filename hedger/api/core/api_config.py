"""
API Configuration Module

This module contains configuration settings for the API layer.
"""

from dataclasses import dataclass, field
from typing import List

from config import settings


@dataclass
class APIConfig:
    """API configuration settings."""

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # CORS settings
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    allowed_methods: List[str] = field(default_factory=lambda: ["*"])
    allowed_headers: List[str] = field(default_factory=lambda: ["*"])
    allowed_credentials: bool = True

    # Requests slower than this are logged as warnings
    slow_request_threshold: float = 2.0

    # API settings
    title: str = "Bitget Hedger API"
    version: str = "1.0.0"
    description: str = "Multi-account Bitget futures dashboard"

    @classmethod
    def from_settings(cls) -> 'APIConfig':
        """Build configuration from environment settings."""
        return cls(
            host=settings.API_HOST,
            port=settings.API_PORT,
            debug=settings.API_DEBUG,
        )
