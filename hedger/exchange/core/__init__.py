"""
Core Exchange Module

Shared exchange configuration and endpoint constants.
"""

from .exchange_config import ExchangeConfig

__all__ = [
    'ExchangeConfig'
]
