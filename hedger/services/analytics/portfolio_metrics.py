"""
Portfolio Metrics

Aggregates the per-account state table into dashboard-level totals: equity,
available and locked margin, unrealized P&L, and net exposure per symbol.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Any

from ..account_service import AccountState, AccountStatus
from ..pricing.price_models import PriceTick

logger = logging.getLogger(__name__)


@dataclass
class SymbolExposure:
    """Net exposure in one symbol across all accounts."""
    symbol: str
    long_size: float = 0.0
    short_size: float = 0.0
    position_count: int = 0
    unrealized_pl: float = 0.0
    price: Optional[float] = None

    @property
    def net_size(self) -> float:
        return self.long_size - self.short_size

    @property
    def net_notional(self) -> Optional[float]:
        if self.price is None:
            return None
        return self.net_size * self.price

    def to_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'long_size': self.long_size,
            'short_size': self.short_size,
            'net_size': self.net_size,
            'position_count': self.position_count,
            'unrealized_pl': self.unrealized_pl,
            'price': self.price,
            'net_notional': self.net_notional,
        }


@dataclass
class PortfolioMetrics:
    """Aggregate figures across every tracked account."""
    total_equity: float = 0.0
    total_available: float = 0.0
    total_locked: float = 0.0
    total_unrealized_pl: float = 0.0
    accounts_by_status: Dict[str, int] = field(default_factory=dict)
    open_positions: int = 0
    open_orders: int = 0
    exposures: Dict[str, SymbolExposure] = field(default_factory=dict)

    @property
    def account_count(self) -> int:
        return sum(self.accounts_by_status.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_equity': self.total_equity,
            'total_available': self.total_available,
            'total_locked': self.total_locked,
            'total_unrealized_pl': self.total_unrealized_pl,
            'account_count': self.account_count,
            'accounts_by_status': dict(self.accounts_by_status),
            'open_positions': self.open_positions,
            'open_orders': self.open_orders,
            'exposures': {symbol: exposure.to_dict() for symbol, exposure in self.exposures.items()},
        }


def compute_portfolio_metrics(states: Iterable[AccountState],
                              prices: Optional[Mapping[str, PriceTick]] = None) -> PortfolioMetrics:
    """
    Aggregate account states into portfolio metrics.

    Balances count only for accounts whose balance has been fetched at least
    once; an errored account contributes its last known data.

    Args:
        states: Account states from AccountDataService
        prices: Latest ticks by symbol, for notional values

    Returns:
        PortfolioMetrics
    """
    prices = prices or {}
    metrics = PortfolioMetrics(
        accounts_by_status={status.value: 0 for status in AccountStatus}
    )

    for state in states:
        metrics.accounts_by_status[state.status.value] += 1

        if state.balance is not None:
            metrics.total_equity += state.balance.equity
            metrics.total_available += state.balance.available
            metrics.total_locked += state.balance.locked
            metrics.total_unrealized_pl += state.balance.unrealized_pl

        metrics.open_orders += len(state.orders)

        for position in state.positions:
            if not position.is_open:
                continue
            metrics.open_positions += 1
            exposure = metrics.exposures.get(position.symbol)
            if exposure is None:
                exposure = SymbolExposure(symbol=position.symbol)
                metrics.exposures[position.symbol] = exposure
            if position.signed_size < 0:
                exposure.short_size += abs(position.total)
            else:
                exposure.long_size += abs(position.total)
            exposure.position_count += 1
            exposure.unrealized_pl += position.unrealized_pl

    for symbol, exposure in metrics.exposures.items():
        tick = prices.get(symbol)
        if tick is not None:
            exposure.price = tick.price

    return metrics
