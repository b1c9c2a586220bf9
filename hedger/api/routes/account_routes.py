"""
Account API Routes

This module contains API routes for account state, portfolio metrics and
the refresh/cancel actions.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..models.response_models import APIResponse, CancelOrderResponse, CancelAllResponse
from .dependencies import get_dashboard

logger = logging.getLogger(__name__)
router = APIRouter()


def _require_account(dashboard, account_id: str):
    state = dashboard.accounts.get_state(account_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Unknown account {account_id}")
    return state


@router.get("/accounts", summary="Get all account states")
async def get_accounts(dashboard=Depends(get_dashboard)):
    """
    Balance, positions, orders and refresh status for every enabled account.
    """
    return APIResponse(
        status="success",
        message="Accounts retrieved successfully",
        data={"accounts": [state.to_dict() for state in dashboard.accounts.get_states()]}
    )


@router.get("/accounts/{account_id}", summary="Get one account state")
async def get_account(account_id: str, dashboard=Depends(get_dashboard)):
    state = _require_account(dashboard, account_id)
    return APIResponse(
        status="success",
        message="Account retrieved successfully",
        data={"account": state.to_dict()}
    )


@router.get("/positions", summary="Get open positions")
async def get_positions(
    symbol: Optional[str] = Query(None, description="Filter by symbol"),
    account_id: Optional[str] = Query(None, description="Filter by account"),
    dashboard=Depends(get_dashboard)
):
    """
    Positions with a nonzero size, grouped by account.
    """
    if account_id is not None:
        _require_account(dashboard, account_id)

    positions = dashboard.accounts.active_positions(account_id=account_id, symbol=symbol)
    return APIResponse(
        status="success",
        message="Positions retrieved successfully",
        data={
            "positions": {
                acc_id: [position.to_dict() for position in items]
                for acc_id, items in positions.items()
            }
        }
    )


@router.get("/portfolio", summary="Get aggregate portfolio metrics")
async def get_portfolio(dashboard=Depends(get_dashboard)):
    return APIResponse(
        status="success",
        message="Portfolio metrics retrieved successfully",
        data=dashboard.portfolio_metrics().to_dict()
    )


@router.post("/refresh", summary="Refresh all accounts now")
async def refresh_all(dashboard=Depends(get_dashboard)):
    states = await dashboard.accounts.refresh_all()
    return APIResponse(
        status="success",
        message="Accounts refreshed",
        data={"accounts": [state.to_dict() for state in states]}
    )


@router.post("/accounts/{account_id}/refresh", summary="Refresh one account now")
async def refresh_account(account_id: str, dashboard=Depends(get_dashboard)):
    _require_account(dashboard, account_id)
    state = await dashboard.accounts.refresh_account(account_id)
    return APIResponse(
        status="success",
        message="Account refreshed",
        data={"account": state.to_dict()}
    )


@router.post("/accounts/{account_id}/orders/{order_id}/cancel", summary="Cancel an order")
async def cancel_order(account_id: str, order_id: str, dashboard=Depends(get_dashboard)):
    """
    Cancel one order. Exchange failures are logged, not raised; the result
    reports whether the order was cancelled.
    """
    _require_account(dashboard, account_id)
    cancelled = await dashboard.accounts.cancel_order(account_id, order_id)
    return CancelOrderResponse(account_id=account_id, order_id=order_id, cancelled=cancelled)


@router.post("/orders/cancel-all", summary="Cancel every open order")
async def cancel_all_orders(dashboard=Depends(get_dashboard)):
    result = await dashboard.accounts.cancel_all_orders()
    return CancelAllResponse(**result)
