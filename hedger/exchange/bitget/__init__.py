"""
Bitget Exchange Module

This module contains the Bitget REST client, signer, models and errors.
"""

from .bitget_auth import BitgetAuth, generate_signature
from .bitget_client import BitgetClient
from .bitget_errors import (
    BitgetError, BitgetTransportError, BitgetAPIError,
    BitgetParseError, TickerDecodeError
)
from .bitget_exchange import BitgetExchange
from .bitget_models import BitgetBalance, BitgetPosition, BitgetOrder

__all__ = [
    'BitgetAuth',
    'generate_signature',
    'BitgetClient',
    'BitgetExchange',
    'BitgetBalance',
    'BitgetPosition',
    'BitgetOrder',
    'BitgetError',
    'BitgetTransportError',
    'BitgetAPIError',
    'BitgetParseError',
    'TickerDecodeError'
]
