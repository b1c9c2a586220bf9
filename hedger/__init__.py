"""
Bitget Hedger

Multi-account dashboard service for Bitget USDT-margined futures.
"""

__version__ = "1.0.0"
