"""
Unit Tests for the Message Classifier

These tests verify that:
- Each response shape is recognised from the fields it carries
- The rule order decides documents that match several shapes
- The selecting field decides the type even when its value is null or a number
- Unrecognised documents come back as UnknownMessage
- Values that cannot be converted raise MalformedMessage

Run with:
    pytest tests/unit/test_classifier.py -v
"""

import json

import pytest

from core.classifier import classify, decode_frame, message_type
from core.errors import MalformedMessage
from core.schemas import (
    AccountHistoryResponse,
    CurrentPriceResponse,
    SubscribeResponse,
    UnknownMessage,
    WorkResponse,
)
from core.session import SessionState


# ============================================
# Tests for Each Message Kind
# ============================================

class TestKnownShapes:
    """Each response shape maps to its schema"""

    def test_frontier_is_subscribe(self):
        message = classify({
            "frontier": "E8F9A1B2",
            "block_count": 42,
            "balance": "1000000000000000000000000000000",
            "pending": "0",
        })

        assert isinstance(message, SubscribeResponse)
        assert message.frontier == "E8F9A1B2"
        assert message.block_count == 42
        assert message.balance == "1000000000000000000000000000000"

    def test_subscribe_without_block_count_keeps_none(self):
        message = classify({"frontier": "E8F9A1B2"})

        assert isinstance(message, SubscribeResponse)
        assert message.block_count is None

    def test_history(self):
        message = classify({
            "history": [
                {"type": "receive", "account": "nano_1sender", "amount": "100", "hash": "AA"},
                {"type": "send", "account": "nano_1dest", "amount": "40", "hash": "BB"},
            ]
        })

        assert isinstance(message, AccountHistoryResponse)
        assert [entry.hash for entry in message.history] == ["AA", "BB"]
        assert message.history[0].type == "receive"

    def test_empty_string_history_is_empty_list(self):
        message = classify({"history": ""})

        assert isinstance(message, AccountHistoryResponse)
        assert message.history == []

    def test_currency_is_price(self):
        message = classify({"currency": "USD", "price": 1.87})

        assert isinstance(message, CurrentPriceResponse)
        assert message.currency == "USD"
        assert message.price == 1.87

    def test_work(self):
        message = classify({"work": "2bf29ef00786a6bc"})

        assert isinstance(message, WorkResponse)
        assert message.work == "2bf29ef00786a6bc"

    def test_extra_fields_are_kept(self):
        message = classify({"currency": "EUR", "price": 1.2, "volume_24h": 5000})

        assert message.model_dump()["volume_24h"] == 5000


# ============================================
# Tests for Rule Priority
# ============================================

class TestPriority:
    """The first matching rule wins"""

    @pytest.mark.parametrize("extra", [
        {"history": []},
        {"currency": "USD"},
        {"work": "abc"},
        {"history": [], "currency": "USD", "work": "abc"},
    ])
    def test_frontier_wins_over_everything(self, extra):
        message = classify({"frontier": "F1", "block_count": 3, **extra})

        assert isinstance(message, SubscribeResponse)

    def test_history_wins_over_currency(self):
        message = classify({"history": [], "currency": "USD"})

        assert isinstance(message, AccountHistoryResponse)

    def test_currency_wins_over_work(self):
        message = classify({"currency": "BTC", "price": 0.00002, "work": "abc"})

        assert isinstance(message, CurrentPriceResponse)


# ============================================
# Tests for Unknown Documents
# ============================================

class TestUnknown:
    """Anything else is passed through untouched"""

    @pytest.mark.parametrize("raw", [
        {},
        {"ack": "subscribe"},
        {"error": "Account not found"},
        [1, 2, 3],
        "hello",
        42,
        None,
    ])
    def test_unmatched_documents_are_unknown(self, raw):
        message = classify(raw)

        assert isinstance(message, UnknownMessage)
        assert message.payload == raw

    def test_unknown_event_carries_payload(self):
        message = classify({"ack": "subscribe"})

        assert message.to_event() == {"type": "unknown", "payload": {"ack": "subscribe"}}


# ============================================
# Tests for Null and Mistyped Values
# ============================================

class TestFieldPresenceDecides:
    """Presence of the field picks the type, not its value"""

    def test_null_frontier_is_subscribe(self):
        message = classify({"frontier": None, "block_count": 5})

        assert isinstance(message, SubscribeResponse)
        assert message.frontier is None
        assert message.block_count == 5

    def test_null_frontier_block_count_reaches_session(self):
        state = SessionState()

        state.observe(classify({"frontier": None, "block_count": 5}))

        assert state.current_block_count() == 5

    def test_numeric_frontier_is_subscribe(self):
        message = classify({"frontier": 123, "block_count": 2})

        assert isinstance(message, SubscribeResponse)
        assert message.frontier == "123"

    @pytest.mark.parametrize("raw, expected", [
        ({"currency": None}, CurrentPriceResponse),
        ({"currency": 840, "price": "1.25"}, CurrentPriceResponse),
        ({"work": None}, WorkResponse),
        ({"work": 42}, WorkResponse),
        ({"history": None}, AccountHistoryResponse),
    ])
    def test_null_or_numeric_values_keep_their_type(self, raw, expected):
        assert isinstance(classify(raw), expected)

    def test_numeric_price_string_is_converted(self):
        message = classify({"currency": "USD", "price": "1.25"})

        assert message.price == 1.25

    @pytest.mark.parametrize("raw", [
        {"frontier": "F1", "block_count": "not-a-number"},
        {"frontier": {"hash": "F1"}},
        {"history": 7},
        {"currency": "USD", "price": "expensive"},
    ])
    def test_unconvertible_values_are_malformed(self, raw):
        with pytest.raises(MalformedMessage) as exc_info:
            classify(raw)

        assert exc_info.value.raw == raw

    @pytest.mark.parametrize("raw, expected", [
        ({"frontier": {"not": "a hash"}, "history": []}, SubscribeResponse),
        ({"history": 7, "currency": "USD"}, AccountHistoryResponse),
        ({"currency": [], "work": "abc"}, CurrentPriceResponse),
        ({"work": None}, WorkResponse),
        ({"price": 1.0}, UnknownMessage),
        ([{"frontier": "F1"}], UnknownMessage),
    ])
    def test_type_selection_ignores_values(self, raw, expected):
        assert message_type(raw) is expected

    def test_decode_frame_reports_frame_text(self):
        text = json.dumps({"frontier": "F1", "block_count": "abc"})

        with pytest.raises(MalformedMessage) as exc_info:
            decode_frame(text)

        assert exc_info.value.raw == text


# ============================================
# Tests for Frame Decoding
# ============================================

class TestDecodeFrame:
    """decode_frame parses JSON text before classifying"""

    def test_decodes_and_classifies(self):
        message = decode_frame(json.dumps({"currency": "USD", "price": 2.5}))

        assert isinstance(message, CurrentPriceResponse)
        assert message.to_event() == {"type": "price", "currency": "USD", "price": 2.5}

    @pytest.mark.parametrize("text", ["{not json", "", "{\"frontier\": "])
    def test_malformed_text_raises(self, text):
        with pytest.raises(MalformedMessage) as exc_info:
            decode_frame(text)

        assert exc_info.value.raw == text
