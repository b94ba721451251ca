"""
Account Service — Connection Manager for the Remote Account/Price Service

This module owns the persistent connection to the account service for one
tracked account. It:

    - Opens the transport and runs its event stream in a background task
    - Sends the four startup requests whenever the connection opens
    - Decodes and classifies every inbound frame
    - Keeps the session's block count up to date from subscribe responses
    - Publishes every classified message to the shared Publisher

Connection States:
    CLOSED -> open() -> OPENING -> transport opened -> OPEN
    OPEN -> close() -> CLOSING -> CLOSED
    OPEN -> transport closed -> CLOSED (no automatic reconnect here)

Errors (see core/errors.py) are reported to the error handler and never stop
the receive loop. Transport failures are also published on `lifecycle`.

Usage:
    publisher = Publisher()
    service = AccountService(publisher, SettingsAccountStore(), SettingsPreferences())
    await service.open()

    async with await publisher.subscribe(CurrentPriceResponse) as prices:
        async for price in prices:
            print(price.currency, price.price)
"""

import asyncio
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel

from core.classifier import decode_frame
from core.errors import (
    AccountServiceError,
    MalformedMessage,
    PreconditionError,
    SendFailure,
    TransportFailure,
    handle_error,
)
from core.interfaces import (
    AccountStore,
    PreferencesStore,
    TextFrame,
    Transport,
    TransportClosed,
    TransportEvent,
    TransportFailed,
    TransportOpened,
)
from core.logging import get_logger, log_outgoing_request, log_websocket_event
from core.requests import build_startup_requests
from core.schemas import Request
from core.session import DEFAULT_BLOCK_COUNT, SessionState
from services.publisher import Publisher


class ConnectionState(str, Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"
    CLOSING = "closing"


# ============================================
# Lifecycle Events
# ============================================

class ConnectionOpened(BaseModel):
    url: Optional[str] = None


class ConnectionClosed(BaseModel):
    reason: Optional[str] = None


class ConnectionFailed(BaseModel):
    error: str


def _default_transport_factory() -> Transport:
    # network imports aiohttp; only pulled in when no factory is injected
    from network.ws_transport import WebSocketTransport
    return WebSocketTransport.from_settings()


class AccountService:
    """
    Connection manager for one tracked account.

    Attributes:
        publisher: Where classified messages are published
        lifecycle: Where connection events (opened/closed/failed) are published
        session: Address and block count for the current session

    Example:
        >>> service = AccountService(publisher, account_store, preferences)
        >>> await service.open()
        >>> ...
        >>> await service.request_update()  # manual refresh
        >>> await service.close()
    """

    def __init__(
        self,
        publisher: Publisher,
        account_store: AccountStore,
        preferences: PreferencesStore,
        transport_factory: Optional[Callable[[], Transport]] = None,
        default_block_count: int = DEFAULT_BLOCK_COUNT,
        error_handler: Optional[Callable[[Exception], None]] = None,
        lifecycle: Optional[Publisher] = None,
    ):
        self.publisher = publisher
        self.lifecycle = lifecycle or Publisher()
        self.session = SessionState(fallback_block_count=default_block_count)

        self._account_store = account_store
        self._preferences = preferences
        self._transport_factory = transport_factory or _default_transport_factory
        self._error_handler = error_handler or handle_error

        self._state = ConnectionState.CLOSED
        self._transport: Optional[Transport] = None
        self._runner: Optional[asyncio.Task] = None

        self.logger = get_logger(__name__)

    # ============================================
    # Public API
    # ============================================

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def address(self) -> Optional[str]:
        return self.session.address()

    @property
    def is_running(self) -> bool:
        """True while a transport event stream is being consumed."""
        return self._runner is not None and not self._runner.done()

    def get_local_currency(self) -> str:
        return self._preferences.get_local_currency()

    async def open(self) -> None:
        """
        Load the account address and open the connection.

        The address is re-read on every call. Calling open() while the
        connection is opening, open or closing does nothing. After the
        transport has reported a close, open() replaces it with a new one even
        if the old transport's event stream has not ended yet. Without a
        stored address the connection still opens but no request is sent.
        """
        address = self._account_store.get_address()
        self.session.set_address(address)
        if not address:
            self.logger.warning("No account address stored; requests will be skipped")

        if self._state != ConnectionState.CLOSED:
            self.logger.debug(f"open() ignored, connection is {self._state.value}")
            return

        if self.is_running:
            self.logger.info("Replacing closed transport whose event stream is still running")
            self._state = ConnectionState.CLOSING
            await self._shutdown()

        self._state = ConnectionState.OPENING
        self._transport = self._transport_factory()
        self._runner = asyncio.create_task(self._run(self._transport), name="account_service")

    async def close(self) -> None:
        """
        Close the connection.

        No further inbound frames are dispatched once close() has been called.
        Calling close() while already closed does nothing.
        """
        if self._transport is None and not self.is_running:
            return
        if self._state == ConnectionState.CLOSING:
            return

        self._state = ConnectionState.CLOSING
        await self._shutdown()
        self._state = ConnectionState.CLOSED
        self.logger.info("Account service closed")

    async def request_update(self) -> List[SendFailure]:
        """
        Send the four startup requests (subscribe, local price, BTC price, history).

        Skipped when no address is set or the connection is not open. Each
        request is sent in order; a failed send is reported and the rest still go out.

        Returns:
            List[SendFailure]: Failed sends (empty if all succeeded or skipped)
        """
        try:
            requests = build_startup_requests(self.session, self.get_local_currency())
        except PreconditionError as e:
            self._report(e)
            return []

        transport = self._transport
        if transport is None or self._state != ConnectionState.OPEN:
            self._report(PreconditionError(f"Connection is {self._state.value}; update skipped"))
            return []

        failures = []
        for request in requests:
            failure = await self._send(transport, request)
            if failure is not None:
                failures.append(failure)
        return failures

    async def __aenter__(self) -> "AccountService":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ============================================
    # Event Loop
    # ============================================

    async def _run(self, transport: Transport) -> None:
        try:
            async for event in transport.events():
                if self._state == ConnectionState.CLOSING:
                    self.logger.debug(f"Dropping {type(event).__name__} received while closing")
                    continue
                await self._dispatch(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            await self._on_failure(e)
        finally:
            if self._transport is transport:
                self._transport = None
                self._runner = None
                if self._state != ConnectionState.CLOSING:
                    self._state = ConnectionState.CLOSED

    async def _dispatch(self, event: TransportEvent) -> None:
        if isinstance(event, TextFrame):
            await self._on_message(event.text)
        elif isinstance(event, TransportOpened):
            await self._on_open(event)
        elif isinstance(event, TransportClosed):
            await self._on_close(event)
        elif isinstance(event, TransportFailed):
            await self._on_failure(event.error)
        else:
            self.logger.warning(f"Ignoring unknown transport event: {event!r}")

    async def _on_open(self, event: TransportOpened) -> None:
        self._state = ConnectionState.OPEN
        log_websocket_event("opened", event.url)
        await self.lifecycle.publish(ConnectionOpened(url=event.url))
        await self.request_update()

    async def _on_message(self, text: str) -> None:
        try:
            message = decode_frame(text)
        except MalformedMessage as e:
            self._report(e)
            return

        # keep track of current block count for more efficient history requests
        self.session.observe(message)
        await self.publisher.publish(message)

    async def _on_close(self, event: TransportClosed) -> None:
        self._state = ConnectionState.CLOSED
        log_websocket_event("closed", details=event.reason)
        await self.lifecycle.publish(ConnectionClosed(reason=event.reason))

    async def _on_failure(self, error: Exception) -> None:
        self._report(TransportFailure(error))
        await self.lifecycle.publish(ConnectionFailed(error=str(error)))

    # ============================================
    # Helpers
    # ============================================

    async def _send(self, transport: Transport, request: Request) -> Optional[SendFailure]:
        payload = request.to_json()
        log_outgoing_request(str(request.action), payload)
        try:
            await transport.send_text(payload)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            failure = SendFailure(request, e)
            self._report(failure)
            return failure
        return None

    async def _shutdown(self) -> None:
        """Close the current transport and wait for its receive task to end."""
        transport, runner = self._transport, self._runner

        if transport is not None:
            try:
                await transport.close()
            except Exception as e:
                self.logger.error(f"Error closing transport: {e}")

        if runner is not None and not runner.done():
            runner.cancel()
            await asyncio.gather(runner, return_exceptions=True)

        self._transport = None
        self._runner = None

    def _report(self, error: AccountServiceError) -> None:
        try:
            self._error_handler(error)
        except Exception as e:
            self.logger.error(f"Error handler raised while reporting {type(error).__name__}: {e}")
