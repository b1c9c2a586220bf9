"""
API Response Models

This module contains Pydantic models for API response formatting.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class APIResponse(BaseModel):
    """Base API response model."""
    status: str = Field(..., description="Response status")
    message: str = Field(..., description="Response message")
    data: Optional[Dict[str, Any]] = Field(None, description="Response data")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Response timestamp")


class CancelOrderResponse(BaseModel):
    """Model for a single cancel-order result."""
    account_id: str = Field(..., description="Account the order belongs to")
    order_id: str = Field(..., description="Exchange order id")
    cancelled: bool = Field(..., description="Whether the exchange accepted the cancellation")


class CancelAllResponse(BaseModel):
    """Model for cancel-all results."""
    cancelled: int = Field(..., description="Orders cancelled")
    failed: int = Field(..., description="Orders that could not be cancelled")
