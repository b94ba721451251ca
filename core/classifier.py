"""
Message Classifier

The account service sends untyped JSON frames. This module figures out what
each frame is from the fields it carries and returns the matching schema.

Rules (checked in this order, first match wins):
    1. "frontier" present  -> SubscribeResponse
    2. "history" present   -> AccountHistoryResponse
    3. "currency" present  -> CurrentPriceResponse
    4. "work" present      -> WorkResponse
    5. anything else       -> UnknownMessage

The matching field only has to be present; its value may be null.

Usage:
    message = decode_frame('{"currency": "USD", "price": 1.23}')
    # CurrentPriceResponse(currency='USD', price=1.23)
"""

import json
from typing import Any, List, Tuple

from pydantic import ValidationError

from core.errors import MalformedMessage
from core.logging import get_logger
from core.schemas import (
    AccountHistoryResponse,
    CurrentPriceResponse,
    Message,
    SubscribeResponse,
    UnknownMessage,
    WorkResponse,
)


logger = get_logger(__name__)


CLASSIFICATION_RULES: List[Tuple[str, type]] = [
    ("frontier", SubscribeResponse),
    ("history", AccountHistoryResponse),
    ("currency", CurrentPriceResponse),
    ("work", WorkResponse),
]


def message_type(raw: Any) -> type:
    """
    Pick the message type for a decoded JSON document from its fields alone.

    Never raises and never looks at field values.

    Example:
        >>> message_type({"frontier": None, "history": []})
        <class 'core.schemas.SubscribeResponse'>
    """
    if isinstance(raw, dict):
        for field, model in CLASSIFICATION_RULES:
            if field in raw:
                return model
    return UnknownMessage


def classify(raw: Any) -> Message:
    """
    Map a decoded JSON document to its message type.

    The type comes from message_type(), so the first rule whose field is
    present decides it whatever the field's value (a null `frontier` is still
    a subscribe response). Documents that are not JSON objects or that match
    no rule come back as UnknownMessage carrying the original document.

    Args:
        raw: Already-decoded JSON value

    Returns:
        Message: The typed message

    Raises:
        MalformedMessage: If the selected type's fields hold values that cannot
            be converted (e.g. "block_count": "abc")

    Example:
        >>> classify({"frontier": "ABC", "block_count": 42}).block_count
        42
        >>> classify({"foo": 1})
        UnknownMessage(payload={'foo': 1})
    """
    model = message_type(raw)
    if model is UnknownMessage:
        return UnknownMessage(payload=raw)

    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise MalformedMessage(raw, e) from e


def decode_frame(text: str) -> Message:
    """
    Decode one text frame and classify it.

    Args:
        text: Raw frame text from the socket

    Returns:
        Message: The typed message

    Raises:
        MalformedMessage: If the frame is not valid JSON, or its fields do not
            fit the message type they select
    """
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedMessage(text, e) from e

    try:
        message = classify(raw)
    except MalformedMessage as e:
        raise MalformedMessage(text, e.cause) from e.cause

    logger.debug(f"Classified frame as '{message.kind}'")
    return message
