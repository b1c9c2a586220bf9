"""
API Core Package

Application factory, configuration and middleware.
"""

from .api_config import APIConfig
from .api_server import create_app

__all__ = [
    'APIConfig',
    'create_app'
]
