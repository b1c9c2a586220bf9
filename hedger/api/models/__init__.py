"""
API Models Package

Pydantic models for API responses.
"""

from .response_models import APIResponse, CancelOrderResponse, CancelAllResponse

__all__ = [
    'APIResponse',
    'CancelOrderResponse',
    'CancelAllResponse'
]
