"""
API Server Module

This module contains the FastAPI application factory.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from ...dashboard import Dashboard
from ..routes import account_routes, health_routes, market_routes
from .api_config import APIConfig
from .api_middleware import setup_middleware

logger = logging.getLogger(__name__)


def create_app(dashboard: Dashboard, config: Optional[APIConfig] = None,
               manage_lifecycle: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        dashboard: Dashboard served by this app
        config: API configuration
        manage_lifecycle: Start and stop the dashboard with the app
    """
    api_config = config or APIConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {api_config.title} v{api_config.version}")
        if manage_lifecycle:
            await dashboard.start()
        try:
            yield
        finally:
            if manage_lifecycle:
                await dashboard.stop()
            logger.info(f"Shutting down {api_config.title}")

    app = FastAPI(
        title=api_config.title,
        version=api_config.version,
        description=api_config.description,
        debug=api_config.debug,
        lifespan=lifespan
    )
    app.state.dashboard = dashboard

    setup_middleware(app, api_config)

    app.include_router(health_routes.router, prefix="/api/v1", tags=["health"])
    app.include_router(market_routes.router, prefix="/api/v1", tags=["market"])
    app.include_router(account_routes.router, prefix="/api/v1", tags=["accounts"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": f"{api_config.title} is running",
            "version": api_config.version,
            "status": "healthy"
        }

    return app
