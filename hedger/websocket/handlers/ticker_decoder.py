"""
Ticker decoder for Bitget market data.

Bitget has renamed ticker fields between API versions and between its REST
and WebSocket payloads. Each value is read through an ordered list of
candidate field names, newest API version first; the first field present
with a parseable value wins.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from ...exchange.bitget.bitget_errors import TickerDecodeError
from ...services.pricing.price_models import PriceTick

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldCandidate:
    """One historical name for a ticker value."""
    name: str
    api_version: str


# Last traded price
PRICE_FIELDS: Sequence[FieldCandidate] = (
    FieldCandidate("lastPr", "v2"),
    FieldCandidate("last", "v1"),
    FieldCandidate("close", "v1-ws"),
)

# 24h change as a ratio (0.0123 == 1.23%)
CHANGE_FIELDS: Sequence[FieldCandidate] = (
    FieldCandidate("change24h", "v2"),
    FieldCandidate("chgUTC", "v1-ws"),
    FieldCandidate("priceChangePercent", "v1-rest"),
)

# 24h volume in base coin
VOLUME_FIELDS: Sequence[FieldCandidate] = (
    FieldCandidate("baseVolume", "v2"),
    FieldCandidate("baseVol", "v1-ws"),
)

TIMESTAMP_FIELDS: Sequence[FieldCandidate] = (
    FieldCandidate("ts", "v2"),
    FieldCandidate("timestamp", "v1"),
)


def extract_float(payload: Dict[str, Any], candidates: Sequence[FieldCandidate]) -> Optional[float]:
    """Return the first candidate field that parses as a float, or None."""
    for candidate in candidates:
        value = payload.get(candidate.name)
        if value is None or value == "":
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.debug(f"Unparseable {candidate.name} ({candidate.api_version}): {value!r}")
    return None


def decode_ticker(payload: Dict[str, Any], symbol: Optional[str] = None,
                  received_at: Optional[datetime] = None) -> PriceTick:
    """
    Decode a single ticker object into a PriceTick.

    Args:
        payload: One ticker object from a REST response or a stream push
        symbol: Symbol to use when the payload does not carry one
        received_at: Fallback timestamp when the payload has none

    Raises:
        TickerDecodeError: No symbol or no usable price field
    """
    if not isinstance(payload, dict):
        raise TickerDecodeError(f"Ticker payload is not an object: {payload!r}")

    resolved_symbol = payload.get("instId") or payload.get("symbol") or symbol
    if not resolved_symbol:
        raise TickerDecodeError("Ticker payload carries no symbol")

    price = extract_float(payload, PRICE_FIELDS)
    if price is None:
        raise TickerDecodeError(f"Ticker for {resolved_symbol} carries no price field")

    change_ratio = extract_float(payload, CHANGE_FIELDS) or 0.0
    volume = extract_float(payload, VOLUME_FIELDS) or 0.0

    timestamp = None
    ts_ms = extract_float(payload, TIMESTAMP_FIELDS)
    if ts_ms is not None:
        try:
            timestamp = datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.debug(f"Out-of-range ticker timestamp for {resolved_symbol}: {ts_ms!r}")
    if timestamp is None:
        timestamp = received_at or datetime.now(timezone.utc)

    return PriceTick(
        symbol=str(resolved_symbol),
        price=price,
        change_24h=change_ratio * 100,
        volume_24h=volume,
        timestamp=timestamp,
    )
