from .price_models import PriceTick, PriceStore, DEFAULT_SYMBOLS

__all__ = [
    'PriceTick',
    'PriceStore',
    'DEFAULT_SYMBOLS'
]
