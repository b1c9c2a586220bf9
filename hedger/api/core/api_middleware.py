"""
API Middleware Module

This module contains middleware components for the API layer.
"""

import time
import logging
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from .api_config import APIConfig

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request logging for the dashboard API.

    Health polls are logged at DEBUG. Requests slower than the threshold are
    logged as warnings.
    """

    def __init__(self, app: ASGIApp, slow_request_threshold: float = 2.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.time()
        path = request.url.path
        log = logger.debug if path.endswith("/health") else logger.info

        log(f"Request: {request.method} {path}")
        response = await call_next(request)
        process_time = time.time() - start_time

        if process_time > self.slow_request_threshold:
            logger.warning(f"Slow request: {request.method} {path} took {process_time:.2f}s "
                           f"(status {response.status_code})")
        else:
            log(f"Response: {response.status_code} - {process_time:.4f}s")

        response.headers["X-Process-Time"] = str(process_time)
        return response


def setup_middleware(app: FastAPI, config: APIConfig) -> None:
    """Attach CORS and request logging middleware."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=config.allowed_credentials,
        allow_methods=config.allowed_methods,
        allow_headers=config.allowed_headers,
    )
    app.add_middleware(LoggingMiddleware, slow_request_threshold=config.slow_request_threshold)
