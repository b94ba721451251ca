"""
Async Fan-Out Publisher

This module provides a lightweight publish/subscribe utility built on top of
asyncio queues. The account service publishes every classified message and any
number of consumers subscribe and read those messages independently.

- Each subscriber gets its own asyncio.Queue, so a slow consumer never blocks
  the publisher or other consumers.
- There is no replay: a subscriber only sees messages published after it
  subscribed.
- Messages reach each subscriber in publish order.

Usage:
    publisher = Publisher()

    async with await publisher.subscribe(CurrentPriceResponse) as prices:
        async for price in prices:
            print(price.currency, price.price)
"""

import asyncio
from typing import Any, Callable, Optional, Set, Tuple, Union

from core.logging import get_logger


Filter = Union[None, type, Tuple[type, ...], Callable[[Any], bool]]


class SubscriptionClosed(Exception):
    """Raised by Subscription.get() once the subscription has been closed."""


# Queued on unsubscribe to wake a consumer blocked on get()
_CLOSED = object()


class Subscription:
    """
    One subscriber's view of a Publisher.

    Iterate with `async for`, or call `get()` for a single item. Close it (or
    leave its `async with` block) to unsubscribe; a consumer already waiting
    for the next item is woken and its iteration ends.
    """

    def __init__(self, publisher: "Publisher", kind: Filter = None, max_queue_size: int = 0) -> None:
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._publisher = publisher
        self._kind = kind
        self.closed = False

    def accepts(self, item: Any) -> bool:
        """Check an item against this subscription's type or predicate filter."""
        if self._kind is None:
            return True
        if isinstance(self._kind, (type, tuple)):
            return isinstance(item, self._kind)
        return bool(self._kind(item))

    async def get(self) -> Any:
        """
        Wait for the next item.

        Raises:
            SubscriptionClosed: If the subscription is (or gets) closed
        """
        if self.closed and self.queue.empty():
            raise SubscriptionClosed()
        item = await self.queue.get()
        if item is _CLOSED:
            # leave the marker for any other waiter
            self.queue.put_nowait(_CLOSED)
            raise SubscriptionClosed()
        return item

    async def close(self) -> None:
        if not self.closed:
            await self._publisher.unsubscribe(self)

    def _wake(self) -> None:
        """Drop queued items and queue the close marker."""
        while not self.queue.empty():
            self.queue.get_nowait()
        self.queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Any:
        try:
            return await self.get()
        except SubscriptionClosed:
            raise StopAsyncIteration

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class Publisher:
    """
    Async fan-out channel.

    Constructed once by the application and passed to whatever needs it; the
    account service publishes into it, consumers subscribe to it.

    Attributes:
        max_queue_size: Default per-subscriber queue size (0 = unbounded).
            When a bounded queue is full the item is dropped for that subscriber.
    """

    def __init__(self, max_queue_size: int = 0) -> None:
        self._subscribers: Set[Subscription] = set()
        self._max_queue_size = max_queue_size
        self._lock = asyncio.Lock()
        self._logger = get_logger(__name__)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self, kind: Filter = None, max_queue_size: Optional[int] = None) -> Subscription:
        """
        Register a new subscriber.

        Args:
            kind: None for everything, a class (or tuple of classes) to filter
                by type, or a predicate called with each published item
            max_queue_size: Override the default queue size for this subscriber

        Returns:
            Subscription: Async iterator over the matching items
        """
        size = self._max_queue_size if max_queue_size is None else max_queue_size
        subscription = Subscription(self, kind, size)
        async with self._lock:
            self._subscribers.add(subscription)
        self._logger.debug(f"Subscriber added. total={len(self._subscribers)}")
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        """
        Remove a subscriber, drop anything still queued for it and end its iteration.
        """
        async with self._lock:
            self._subscribers.discard(subscription)
        if not subscription.closed:
            subscription.closed = True
            subscription._wake()
        self._logger.debug(f"Subscriber removed. total={len(self._subscribers)}")

    async def publish(self, item: Any) -> int:
        """
        Deliver an item to every matching subscriber without waiting on any of them.

        Returns:
            int: Number of subscribers the item was queued for
        """
        subscribers = list(self._subscribers)
        delivered = 0

        for subscription in subscribers:
            try:
                if not subscription.accepts(item):
                    continue
                subscription.queue.put_nowait(item)
                delivered += 1
            except asyncio.QueueFull:
                self._logger.warning(
                    f"Dropping {type(item).__name__} for a subscriber due to full queue"
                )
            except Exception as e:
                self._logger.error(f"Subscriber filter failed for {type(item).__name__}: {e}")

        return delivered
