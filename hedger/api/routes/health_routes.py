"""
Health Check API Routes

This module contains API routes for health monitoring and system status.
"""

import logging
import time

from fastapi import APIRouter, Depends

from ..models.response_models import APIResponse
from .dependencies import get_dashboard

logger = logging.getLogger(__name__)
router = APIRouter()

# Track startup time for uptime calculation
STARTUP_TIME = time.time()


@router.get("/health", summary="Health check")
async def health_check(dashboard=Depends(get_dashboard)):
    """
    Price feed connectivity and account status counts.
    """
    health = dashboard.health()
    health["uptime_seconds"] = round(time.time() - STARTUP_TIME, 1)

    status = "healthy" if health["price_feed_connected"] else "degraded"
    return APIResponse(
        status=status,
        message="Dashboard health retrieved successfully",
        data=health
    )
