from .ticker_decoder import decode_ticker

__all__ = [
    'decode_ticker'
]
