"""
Unit Tests for the Request Builder and Request Schemas

Run with:
    pytest tests/unit/test_requests.py -v
"""

import json

import pytest
from pydantic import ValidationError

from core.errors import PreconditionError
from core.requests import BTC_CURRENCY, build_startup_requests
from core.schemas import (
    AccountHistoryRequest,
    CurrentPriceRequest,
    SubscribeRequest,
    SubscribeResponse,
)
from core.session import SessionState


@pytest.fixture
def state():
    state = SessionState()
    state.set_address("nano_1abc")
    return state


class TestBuildStartupRequests:
    """The four startup requests"""

    def test_four_requests_in_fixed_order(self, state):
        requests = build_startup_requests(state, "USD")

        assert requests == [
            SubscribeRequest(account="nano_1abc", currency="USD"),
            CurrentPriceRequest(currency="USD"),
            CurrentPriceRequest(currency="BTC"),
            AccountHistoryRequest(account="nano_1abc", count=10),
        ]

    def test_history_uses_current_block_count(self, state):
        state.observe(SubscribeResponse(frontier="F1", block_count=5))

        history = build_startup_requests(state, "EUR")[-1]

        assert history.count == 5

    def test_second_price_is_always_btc(self, state):
        requests = build_startup_requests(state, "JPY")

        assert requests[2].currency == BTC_CURRENCY == "BTC"

    def test_missing_address_raises(self):
        with pytest.raises(PreconditionError):
            build_startup_requests(SessionState(), "USD")


class TestWireFormat:
    """Requests serialize to the documents the server expects"""

    def test_subscribe_document(self):
        doc = json.loads(SubscribeRequest(account="nano_1abc", currency="USD").to_json())

        assert doc == {"action": "subscribe", "account": "nano_1abc", "currency": "USD"}

    def test_price_document(self):
        doc = json.loads(CurrentPriceRequest(currency="BTC").to_json())

        assert doc == {"action": "price", "currency": "BTC"}

    def test_history_document(self):
        doc = json.loads(AccountHistoryRequest(account="nano_1abc", count=42).to_json())

        assert doc == {"action": "history", "account": "nano_1abc", "count": 42}

    def test_requests_are_frozen(self):
        request = CurrentPriceRequest(currency="USD")

        with pytest.raises(ValidationError):
            request.currency = "EUR"
