"""
Account Service WebSocket Transport

This module provides the aiohttp-based Transport used to talk to the remote
account/price service. It handles:
- Opening the WebSocket connection (with heartbeat)
- Turning socket messages into transport events
- Sending text frames
- Optional automatic reconnection with exponential backoff
- Graceful shutdown

The transport knows nothing about the protocol itself: it yields raw text
frames and leaves decoding to the account service.

Usage:
    transport = WebSocketTransport("wss://raicast.lightrai.com:443")
    async for event in transport.events():
        if isinstance(event, TextFrame):
            print(event.text)
"""

import asyncio
from typing import AsyncIterator, Optional

import aiohttp

from core.config import settings
from core.interfaces import (
    TextFrame,
    Transport,
    TransportClosed,
    TransportEvent,
    TransportFailed,
    TransportOpened,
)
from core.logging import get_logger


class WebSocketTransport(Transport):
    """
    Transport over a single aiohttp WebSocket connection.

    Attributes:
        url: WebSocket URL of the account service
        heartbeat: Ping interval in seconds
        connect_timeout: Handshake timeout in seconds
        reconnect: Reconnect after the connection drops
        max_reconnect_delay: Maximum delay between reconnection attempts (seconds)
        session: aiohttp ClientSession owning the connection
        ws: Active WebSocket connection

    Example:
        >>> transport = WebSocketTransport("wss://raicast.lightrai.com:443")
        >>> async for event in transport.events():
        ...     print(event)

    Notes:
        - With reconnect disabled the event stream ends after the first close
        - close() ends the event stream from another task
    """

    def __init__(
        self,
        url: str,
        heartbeat: int = 30,
        connect_timeout: int = 10,
        reconnect: bool = False,
        max_reconnect_delay: int = 30
    ):
        self.url = url
        self.heartbeat = heartbeat
        self.connect_timeout = connect_timeout
        self.reconnect = reconnect
        self.max_reconnect_delay = max_reconnect_delay

        # Connection state
        self.session: Optional[aiohttp.ClientSession] = None
        self.ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._is_running = False
        self._reconnect_attempt = 0

        self.logger = get_logger(__name__)

    @classmethod
    def from_settings(cls) -> "WebSocketTransport":
        """Build a transport from the global settings."""
        return cls(
            settings.service_url,
            heartbeat=settings.ws_heartbeat,
            connect_timeout=settings.ws_connect_timeout,
            reconnect=settings.ws_reconnect,
            max_reconnect_delay=settings.ws_max_reconnect_delay,
        )

    # ============================================
    # WebSocket Connection Management
    # ============================================

    async def connect(self) -> None:
        """
        Establish the WebSocket connection.

        Raises:
            aiohttp.ClientError: If connection fails
        """
        if not self.session or self.session.closed:
            # No total timeout: the connection is long-lived
            timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.connect_timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)

        self.logger.info(f"Connecting to {self.url}")
        self.ws = await self.session.ws_connect(self.url, heartbeat=self.heartbeat)
        self._reconnect_attempt = 0
        self.logger.info(f"✓ Connected to {self.url}")

    async def close(self) -> None:
        """
        Close WebSocket connection and session gracefully.

        Notes:
            - Safe to call multiple times
            - Ends a running events() stream
        """
        self._is_running = False

        if self.ws and not self.ws.closed:
            await self.ws.close()
            self.logger.debug(f"WebSocket closed for {self.url}")

        if self.session and not self.session.closed:
            await self.session.close()
            self.logger.debug(f"Session closed for {self.url}")

    async def send_text(self, payload: str) -> None:
        """
        Send one text frame.

        Raises:
            ConnectionError: If the socket is not open
        """
        if not self.ws or self.ws.closed:
            raise ConnectionError(f"WebSocket to {self.url} is not open")
        await self.ws.send_str(payload)

    # ============================================
    # Event Streaming
    # ============================================

    async def events(self) -> AsyncIterator[TransportEvent]:
        """
        Open the connection and stream its events.

        Yields:
            TransportEvent: TransportOpened, TextFrame, TransportClosed or TransportFailed

        Reconnection Strategy (when enabled):
            - Attempt N: Wait min(2^(N-1), max_reconnect_delay) seconds

        Message Types:
            - WSMsgType.TEXT: yielded as TextFrame
            - WSMsgType.ERROR: yielded as TransportFailed, then closed
            - CLOSE/CLOSING/CLOSED: end aiohttp's iteration, yielded as TransportClosed
            - PING/PONG: handled automatically by aiohttp
        """
        self._is_running = True

        try:
            while self._is_running:
                try:
                    await self.connect()
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    self.logger.error(f"Failed to connect to {self.url}: {e}")
                    yield TransportFailed(e)
                else:
                    yield TransportOpened(self.url)

                    async for msg in self.ws:
                        if msg.type == aiohttp.WSMsgType.TEXT:
                            yield TextFrame(msg.data)

                        elif msg.type == aiohttp.WSMsgType.ERROR:
                            error = self.ws.exception() or ConnectionError(str(msg.data))
                            self.logger.error(f"WebSocket error: {error}")
                            yield TransportFailed(error)
                            break

                        else:
                            self.logger.debug(f"Received message type: {msg.type}")

                    if not self.ws.closed:
                        await self.ws.close()
                    yield TransportClosed(self._close_reason())

                if not (self.reconnect and self._is_running):
                    break

                self._reconnect_attempt += 1
                delay = min(2 ** (self._reconnect_attempt - 1), self.max_reconnect_delay)
                self.logger.warning(
                    f"Reconnecting in {delay}s... (attempt {self._reconnect_attempt})"
                )
                await asyncio.sleep(delay)

        finally:
            await self.close()
            self.logger.info(f"WebSocket event stream stopped for {self.url}")

    def _close_reason(self) -> Optional[str]:
        if self.ws is None or self.ws.close_code is None:
            return None
        return f"code {self.ws.close_code}"
