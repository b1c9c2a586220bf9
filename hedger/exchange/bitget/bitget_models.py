"""
Bitget Data Models

Bitget-specific data models for balances, positions and orders as returned
by the v2 mix (futures) endpoints. Numeric fields arrive as strings.
"""

import math
from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Any
from enum import Enum


def to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Convert an exchange numeric string to float, tolerating blanks."""
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class BitgetHoldSide(Enum):
    """Bitget position side enumeration."""
    LONG = "long"
    SHORT = "short"


@dataclass
class BitgetBalance:
    """Bitget futures account balance for one margin coin."""
    margin_coin: str = ""
    available: float = 0.0
    locked: float = 0.0
    equity: float = 0.0
    usdt_equity: float = 0.0
    unrealized_pl: float = 0.0
    cross_risk_rate: float = 0.0
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'BitgetBalance':
        return cls(
            margin_coin=data.get('marginCoin', ''),
            available=to_float(data.get('available')),
            locked=to_float(data.get('locked')),
            equity=to_float(data.get('accountEquity', data.get('equity'))),
            usdt_equity=to_float(data.get('usdtEquity')),
            unrealized_pl=to_float(data.get('unrealizedPL')),
            cross_risk_rate=to_float(data.get('crossedRiskRate', data.get('crossRiskRate'))),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result.pop('raw')
        return result


@dataclass
class BitgetPosition:
    """Bitget futures position data model."""
    symbol: str = ""
    hold_side: str = ""
    total: float = 0.0
    available: float = 0.0
    average_open_price: float = 0.0
    leverage: float = 0.0
    unrealized_pl: float = 0.0
    margin_coin: str = ""
    mark_price: Optional[float] = None
    liquidation_price: Optional[float] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'BitgetPosition':
        return cls(
            symbol=data.get('symbol', ''),
            hold_side=str(data.get('holdSide', '')).lower(),
            total=to_float(data.get('total')),
            available=to_float(data.get('available')),
            average_open_price=to_float(data.get('openPriceAvg', data.get('averageOpenPrice'))),
            leverage=to_float(data.get('leverage')),
            unrealized_pl=to_float(data.get('unrealizedPL')),
            margin_coin=data.get('marginCoin', ''),
            mark_price=to_float(data.get('markPrice', data.get('marketPrice')), None),
            liquidation_price=to_float(data.get('liquidationPrice'), None),
            raw=dict(data),
        )

    @property
    def is_open(self) -> bool:
        return self.total != 0

    @property
    def signed_size(self) -> float:
        """Size with shorts negative."""
        if self.hold_side == BitgetHoldSide.SHORT.value:
            return -abs(self.total)
        return abs(self.total)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result.pop('raw')
        return result


@dataclass
class BitgetOrder:
    """Bitget pending futures order data model."""
    order_id: str = ""
    symbol: str = ""
    side: str = ""
    order_type: str = ""
    price: Optional[float] = None
    size: float = 0.0
    status: str = ""
    margin_coin: str = ""
    client_oid: Optional[str] = None
    created_time: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'BitgetOrder':
        created = to_float(data.get('cTime'), None)
        return cls(
            order_id=str(data.get('orderId', '')),
            symbol=data.get('symbol', ''),
            side=data.get('side', ''),
            order_type=data.get('orderType', ''),
            price=to_float(data.get('price'), None),
            size=to_float(data.get('size')),
            status=data.get('status', data.get('state', '')),
            margin_coin=data.get('marginCoin', ''),
            client_oid=data.get('clientOid'),
            created_time=int(created) if created is not None and math.isfinite(created) else None,
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result.pop('raw')
        return result
