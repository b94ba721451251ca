"""
Collaborator Interfaces — Contracts the Account Service Depends On

The account service does not know how the socket is implemented, where the
account address is stored or how the user's currency preference is kept. It
only relies on the narrow operations defined here:

    - Transport: event stream, send text, close
    - AccountStore: look up the tracked address
    - PreferencesStore: look up the local currency code

Transport Events:
    A transport produces one stream of events, in arrival order:

        TransportOpened   -> the socket is usable
        TextFrame         -> one inbound text message
        TransportClosed   -> the socket closed (reason may be None)
        TransportFailed   -> connection-level error

    The stream ends once the transport is closed for good. A transport that
    reconnects on its own simply emits TransportOpened again.

Example:
    class MyTransport(Transport):
        async def events(self):
            yield TransportOpened()
            yield TextFrame('{"currency": "USD", "price": 1.0}')

        async def send_text(self, payload):
            ...

        async def close(self):
            ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Union


# ============================================
# Transport Events
# ============================================

@dataclass(frozen=True)
class TransportOpened:
    url: Optional[str] = None


@dataclass(frozen=True)
class TextFrame:
    text: str


@dataclass(frozen=True)
class TransportClosed:
    reason: Optional[str] = None


@dataclass(frozen=True)
class TransportFailed:
    error: Exception


TransportEvent = Union[TransportOpened, TextFrame, TransportClosed, TransportFailed]


# ============================================
# Transport
# ============================================

class Transport(ABC):
    """
    Abstract persistent, bidirectional text connection.

    Abstract Methods (MUST be implemented):
        - events: Open the connection and stream its events
        - send_text: Send one text frame
        - close: Tear the connection down
    """

    @abstractmethod
    def events(self) -> AsyncIterator[TransportEvent]:
        """
        Open the connection and yield its events until it is closed.

        Yields:
            TransportEvent: Lifecycle events and inbound text frames
        """
        pass

    @abstractmethod
    async def send_text(self, payload: str) -> None:
        """
        Send one text frame.

        Raises:
            Exception: Any error raised while sending (reported by the caller)
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Safe to call multiple times."""
        pass


# ============================================
# Account & Preferences Stores
# ============================================

class AccountStore(ABC):
    """Read access to the stored account credentials."""

    @abstractmethod
    def get_address(self) -> Optional[str]:
        """Return the tracked account address, or None if no credentials exist."""
        pass


class PreferencesStore(ABC):
    """Read access to user preferences."""

    @abstractmethod
    def get_local_currency(self) -> str:
        """Return the local currency code (e.g., "USD")."""
        pass
