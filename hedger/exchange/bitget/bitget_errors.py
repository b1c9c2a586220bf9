"""
Bitget Error Types

Exception hierarchy for failures talking to the Bitget REST and WebSocket APIs.
"""

from typing import Optional


class BitgetError(Exception):
    """Base class for all Bitget client errors."""


class BitgetTransportError(BitgetError):
    """Raised when the exchange answers with a non-2xx HTTP status."""

    def __init__(self, status_code: int, body: str, url: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(f"HTTP error! status: {status_code}, body: {body}")


class BitgetAPIError(BitgetError):
    """Raised when a 2xx response carries a failure code in its envelope."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"API Error {code}: {message}")


class BitgetParseError(BitgetError):
    """Raised when a response or stream payload cannot be decoded."""


class TickerDecodeError(BitgetParseError):
    """Raised when a ticker payload carries no usable price field."""
