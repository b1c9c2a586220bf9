from .portfolio_metrics import PortfolioMetrics, SymbolExposure, compute_portfolio_metrics

__all__ = [
    'PortfolioMetrics',
    'SymbolExposure',
    'compute_portfolio_metrics'
]
