"""
Shared fixtures for unit tests.

FakeTransport stands in for the WebSocket: tests push transport events into
it with feed() and inspect what the service sent through `sent`.
"""

import asyncio
import json
from typing import List, Optional, Set

import pytest
import pytest_asyncio

from core.interfaces import Transport
from services.account_service import AccountService
from services.publisher import Publisher
from storage.stores import InMemoryAccountStore, InMemoryPreferences


TEST_ADDRESS = "nano_1abc3xyz8pmyrtjm6xuptfuah1zz7amprdrqmwrtj9o4i9qqe7eaxwm1q1ke"


class FakeTransport(Transport):
    """In-memory transport driven by the test."""

    def __init__(self, fail_actions: Optional[Set[str]] = None):
        self.sent: List[str] = []
        self.closed = False
        self.fail_actions = fail_actions or set()
        self._events: asyncio.Queue = asyncio.Queue()

    async def feed(self, *events) -> None:
        for event in events:
            await self._events.put(event)

    async def end(self) -> None:
        """End the event stream as if the transport gave up."""
        await self._events.put(None)

    async def events(self):
        while True:
            event = await self._events.get()
            if event is None:
                return
            yield event

    async def send_text(self, payload: str) -> None:
        if json.loads(payload).get("action") in self.fail_actions:
            raise ConnectionError("socket write failed")
        self.sent.append(payload)

    async def close(self) -> None:
        self.closed = True
        await self._events.put(None)

    @property
    def sent_documents(self) -> List[dict]:
        return [json.loads(p) for p in self.sent]


async def wait_until(predicate, timeout: float = 1.0) -> None:
    """Let the event loop run until predicate() holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.001)


@pytest.fixture
def wait():
    return wait_until


@pytest.fixture
def transports() -> List[FakeTransport]:
    """Every FakeTransport created by the service, in creation order."""
    return []


@pytest.fixture
def transport_factory(transports):
    def factory() -> FakeTransport:
        transport = FakeTransport()
        transports.append(transport)
        return transport
    return factory


@pytest.fixture
def errors() -> list:
    return []


@pytest.fixture
def address() -> str:
    return TEST_ADDRESS


@pytest.fixture
def account_store(address) -> InMemoryAccountStore:
    return InMemoryAccountStore(address)


@pytest.fixture
def preferences() -> InMemoryPreferences:
    return InMemoryPreferences("USD")


@pytest.fixture
def publisher() -> Publisher:
    return Publisher()


@pytest_asyncio.fixture
async def service(publisher, account_store, preferences, transport_factory, errors):
    """AccountService wired to fake collaborators; closed after the test."""
    svc = AccountService(
        publisher,
        account_store,
        preferences,
        transport_factory=transport_factory,
        error_handler=errors.append,
    )
    yield svc
    await svc.close()
