from dataclasses import dataclass, asdict
from typing import Dict, Optional, Any
from datetime import datetime

# Symbols shown by the dashboard, v2 naming (no _UMCBL suffix)
DEFAULT_SYMBOLS = ("BTCUSDT", "ETHUSDT", "BNBUSDT")


@dataclass(frozen=True)
class PriceTick:
    """Latest ticker values for one symbol"""
    symbol: str
    price: float
    change_24h: float  # percent
    volume_24h: float
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['timestamp'] = self.timestamp.isoformat()
        return result


class PriceStore:
    """Holds the latest tick per symbol; every update overwrites the previous one"""

    def __init__(self):
        self._ticks: Dict[str, PriceTick] = {}

    def update(self, tick: PriceTick) -> None:
        self._ticks[tick.symbol] = tick

    def get(self, symbol: str) -> Optional[PriceTick]:
        return self._ticks.get(symbol)

    def get_price(self, symbol: str) -> Optional[float]:
        tick = self._ticks.get(symbol)
        return tick.price if tick else None

    def snapshot(self) -> Dict[str, PriceTick]:
        return dict(self._ticks)
