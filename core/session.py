"""
Session State

Holds the tracked account address and the last block count reported by the
server. The block count lets history requests ask for exactly as many entries
as the account has, instead of a fixed guess.

The receive path writes (observe) while the request path reads
(current_block_count), possibly from another thread, so every access goes
through a lock.
"""

import threading
from typing import Optional

from core.schemas import Message, SubscribeResponse


DEFAULT_BLOCK_COUNT = 10


class SessionState:
    """
    Per-session account state.

    Attributes:
        fallback_block_count: Value returned by current_block_count() until a
            subscribe response with a block count has been observed

    Example:
        >>> state = SessionState()
        >>> state.current_block_count()
        10
        >>> state.observe(SubscribeResponse(frontier="ABC", block_count=42))
        >>> state.current_block_count()
        42
    """

    def __init__(self, fallback_block_count: int = DEFAULT_BLOCK_COUNT):
        self.fallback_block_count = fallback_block_count
        self._address: Optional[str] = None
        self._block_count: Optional[int] = None
        self._lock = threading.Lock()

    def set_address(self, address: Optional[str]) -> None:
        """Set the tracked address. Passing None (or "") leaves the session without one."""
        with self._lock:
            self._address = address or None

    def address(self) -> Optional[str]:
        with self._lock:
            return self._address

    def observe(self, message: Message) -> None:
        """
        Record what a classified message says about the session.

        Only subscribe responses matter; their block count is stored verbatim,
        including 0 and None.
        """
        if not isinstance(message, SubscribeResponse):
            return
        with self._lock:
            self._block_count = message.block_count

    def current_block_count(self) -> int:
        with self._lock:
            if self._block_count is None:
                return self.fallback_block_count
            return self._block_count
