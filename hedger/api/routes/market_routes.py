"""
Market Data API Routes

This module contains API routes for the live price ticks.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..models.response_models import APIResponse
from .dependencies import get_dashboard

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/prices", summary="Get latest prices")
async def get_prices(dashboard=Depends(get_dashboard)):
    """
    Latest tick for every symbol received so far.
    """
    prices = {symbol: tick.to_dict() for symbol, tick in dashboard.price_store.snapshot().items()}
    return APIResponse(
        status="success",
        message="Prices retrieved successfully",
        data={
            "connected": dashboard.price_feed_connected,
            "default_symbol": dashboard.default_symbol,
            "prices": prices,
        }
    )


@router.get("/prices/{symbol}", summary="Get latest price for a symbol")
async def get_price(symbol: str, dashboard=Depends(get_dashboard)):
    """
    Latest tick for one symbol.
    """
    tick = dashboard.price_store.get(symbol.upper())
    if tick is None:
        raise HTTPException(status_code=404, detail=f"No price for {symbol}")

    return APIResponse(
        status="success",
        message="Price retrieved successfully",
        data={"price": tick.to_dict(), "connected": dashboard.price_feed_connected}
    )
