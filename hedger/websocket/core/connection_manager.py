"""
WebSocket connection manager for handling connection lifecycle.
Manages connection establishment, reconnection, and cleanup for one stream.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from .websocket_config import WebSocketConfig

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Any], Awaitable[None]]
ConnectHook = Callable[[], Awaitable[None]]


async def default_connect(url: str, config: WebSocketConfig):
    # Keepalive is the exchange's text ping, not protocol-level pings
    return await websockets.connect(url, ping_interval=None, open_timeout=config.OPEN_TIMEOUT)


class ConnectionManager:
    """
    Manages one WebSocket connection with unconditional reconnection.

    After any close or error the manager waits the fixed reconnect delay and
    connects again, for as long as it is running. ``on_connect`` runs after
    every successful (re)connection.
    """

    def __init__(self, url: str, message_handler: MessageHandler,
                 config: Optional[WebSocketConfig] = None,
                 on_connect: Optional[ConnectHook] = None,
                 connect: Optional[Callable[[str, WebSocketConfig], Awaitable[Any]]] = None,
                 name: str = "market_data"):
        """
        Initialize connection manager.

        Args:
            url: WebSocket URL
            message_handler: Coroutine called with each inbound message
            config: WebSocket configuration
            on_connect: Coroutine called after each successful connect
            connect: Connection factory, defaults to websockets.connect
            name: Connection name for logging
        """
        self.url = url
        self.message_handler = message_handler
        self.config = config or WebSocketConfig()
        self.on_connect = on_connect
        self._connect = connect or default_connect
        self.name = name

        self.websocket = None
        self.connected = False
        self.running = False
        self.connect_count = 0
        self.reconnect_attempts = 0
        self.last_message_time: float = 0.0
        self.connected_at: Optional[datetime] = None

    async def run(self) -> None:
        """Connect and keep reconnecting until stop() is called."""
        self.running = True
        while self.running:
            try:
                websocket = await self._connect(self.url, self.config)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Failed to connect {self.name} to {self.url}: {e}")
            else:
                await self._handle_messages(websocket)

            if not self.running:
                break

            self.reconnect_attempts += 1
            logger.info(f"Reconnecting {self.name} (attempt {self.reconnect_attempts}) "
                        f"in {self.config.RECONNECT_DELAY}s")
            await asyncio.sleep(self.config.RECONNECT_DELAY)

    async def _handle_messages(self, websocket) -> None:
        """Serve one established connection until it closes."""
        self.websocket = websocket
        self.connected = True
        self.connect_count += 1
        self.reconnect_attempts = 0
        self.connected_at = datetime.now()
        self.last_message_time = time.time()
        logger.info(f"Established {self.name} connection: {self.url}")

        try:
            if self.on_connect is not None:
                await self.on_connect()

            async for message in websocket:
                self.last_message_time = time.time()
                try:
                    await self.message_handler(message)
                except Exception as e:
                    logger.error(f"Error handling message from {self.name}: {e}")

            logger.warning(f"Connection closed for {self.name}")
        except ConnectionClosed as e:
            logger.warning(f"Connection closed for {self.name}: {e}")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error in message handling for {self.name}: {e}")
        finally:
            self.connected = False
            self.websocket = None
            await self._close_quietly(websocket)

    @staticmethod
    async def _close_quietly(websocket) -> None:
        try:
            await websocket.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing websocket: {e}")

    async def send_message(self, message: str) -> bool:
        """
        Send a message on the current connection.

        Returns:
            bool: True if message was sent successfully
        """
        if not self.connected or self.websocket is None:
            logger.warning(f"Cannot send message to disconnected connection: {self.name}")
            return False
        try:
            await self.websocket.send(message)
            return True
        except Exception as e:
            logger.error(f"Error sending message to {self.name}: {e}")
            return False

    async def force_reconnect(self) -> None:
        """Close the current connection; run() reconnects after the delay."""
        if self.websocket is not None:
            logger.warning(f"Forcing reconnect of {self.name}")
            await self._close_quietly(self.websocket)

    async def close(self) -> None:
        """Stop reconnecting and close the current connection."""
        self.running = False
        if self.websocket is not None:
            await self._close_quietly(self.websocket)
        self.connected = False
        logger.info(f"Closed connection: {self.name}")

    def get_connection_state(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'connected': self.connected,
            'running': self.running,
            'connect_count': self.connect_count,
            'reconnect_attempts': self.reconnect_attempts,
            'last_message_time': self.last_message_time,
            'connected_at': self.connected_at.isoformat() if self.connected_at else None,
        }
