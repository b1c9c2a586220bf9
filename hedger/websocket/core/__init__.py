from .connection_manager import ConnectionManager
from .websocket_config import WebSocketConfig

__all__ = [
    'ConnectionManager',
    'WebSocketConfig'
]
