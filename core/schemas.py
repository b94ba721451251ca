"""
Account Service Message Schemas

This module defines Pydantic models for every document exchanged with the
remote account/price service.

Inbound messages (responses and server pushes):
    - SubscribeResponse: account frontier, balance and block count
    - AccountHistoryResponse: list of account history entries
    - CurrentPriceResponse: price of the account currency in one fiat/crypto currency
    - WorkResponse: a proof-of-work value pushed by the server
    - UnknownMessage: anything else, kept as the decoded document

Outbound requests:
    - SubscribeRequest: {"action": "subscribe", "account": ..., "currency": ...}
    - CurrentPriceRequest: {"action": "price", "currency": ...}
    - AccountHistoryRequest: {"action": "history", "account": ..., "count": ...}

The server never tags its responses with a type, so inbound models are selected
by field presence in core/classifier.py. The field that selects a model is
optional on that model: a document carrying `"frontier": null` is still a
subscribe response. Typed messages keep unknown extra fields so newer server
versions do not break decoding.
"""

from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================
# Actions
# ============================================

class Action(str, Enum):
    """Request/response kinds understood by the account service."""

    SUBSCRIBE = "subscribe"
    HISTORY = "history"
    PRICE = "price"
    WORK = "work"

    def __str__(self) -> str:
        return self.value


def number_to_str(v: Any) -> Any:
    """Accept a bare JSON number where a string field is expected."""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


# ============================================
# Inbound Messages
# ============================================

class BaseMessage(BaseModel):
    """
    Base model for all inbound messages.

    Subclasses set `kind`, the string used when the message is forwarded to
    consumers as a JSON event.
    """

    model_config = ConfigDict(extra="allow")

    kind: ClassVar[str] = "unknown"

    def to_event(self) -> Dict[str, Any]:
        """
        Serialize to a JSON-safe dict tagged with the message kind.

        Example:
            >>> CurrentPriceResponse(currency="USD", price=1.5).to_event()
            {'type': 'price', 'currency': 'USD', 'price': 1.5}
        """
        return {"type": self.kind, **self.model_dump(mode="json")}


class SubscribeResponse(BaseMessage):
    """
    Response to an account subscribe request.

    Attributes:
        frontier: Hash of the latest block on the account chain (null for unopened accounts)
        block_count: Number of blocks in the account chain (None when the server omits it)
        open_block: Hash of the account's open block
        representative_block: Hash of the block that set the representative
        balance: Account balance in raw units, as a decimal string
        pending: Pending (receivable) balance in raw units
    """

    kind: ClassVar[str] = Action.SUBSCRIBE.value

    frontier: Optional[str] = Field(default=None, description="Latest block hash")
    block_count: Optional[int] = Field(default=None, description="Blocks in the account chain")
    open_block: Optional[str] = None
    representative_block: Optional[str] = None
    balance: Optional[str] = None
    pending: Optional[str] = None

    @field_validator("frontier", "open_block", "representative_block", "balance", "pending", mode="before")
    @classmethod
    def lenient_strings(cls, v: Any) -> Any:
        return number_to_str(v)


class AccountHistoryEntry(BaseModel):
    """One transaction in an account history response."""

    model_config = ConfigDict(extra="allow")

    type: Optional[str] = Field(default=None, examples=["send", "receive"])
    account: Optional[str] = None
    amount: Optional[str] = None
    hash: Optional[str] = None

    @field_validator("type", "account", "amount", "hash", mode="before")
    @classmethod
    def lenient_strings(cls, v: Any) -> Any:
        return number_to_str(v)


class AccountHistoryResponse(BaseMessage):
    """Response to an account history request."""

    kind: ClassVar[str] = Action.HISTORY.value

    history: List[AccountHistoryEntry] = Field(default_factory=list)

    @field_validator("history", mode="before")
    @classmethod
    def empty_history(cls, v: Any) -> Any:
        """Accounts without history come back as "" or null"""
        return [] if v in ("", None) else v


class CurrentPriceResponse(BaseMessage):
    """
    Response to a price request.

    Attributes:
        currency: Currency code the price is quoted in (e.g., "USD", "BTC")
        price: Price of one unit of the account currency
    """

    kind: ClassVar[str] = Action.PRICE.value

    currency: Optional[str] = None
    price: Optional[float] = None

    @field_validator("currency", mode="before")
    @classmethod
    def lenient_currency(cls, v: Any) -> Any:
        return number_to_str(v)


class WorkResponse(BaseMessage):
    """Proof-of-work value pushed by the server."""

    kind: ClassVar[str] = Action.WORK.value

    work: Optional[str] = None

    @field_validator("work", mode="before")
    @classmethod
    def lenient_work(cls, v: Any) -> Any:
        return number_to_str(v)


class UnknownMessage(BaseMessage):
    """
    Any document that matches none of the known response shapes.

    The decoded JSON value is kept as-is in `payload`.
    """

    kind: ClassVar[str] = "unknown"

    payload: Any = None

    def to_event(self) -> Dict[str, Any]:
        return {"type": self.kind, "payload": self.payload}


Message = Union[
    SubscribeResponse,
    AccountHistoryResponse,
    CurrentPriceResponse,
    WorkResponse,
    UnknownMessage,
]

MESSAGE_TYPES: Dict[str, type] = {
    SubscribeResponse.kind: SubscribeResponse,
    AccountHistoryResponse.kind: AccountHistoryResponse,
    CurrentPriceResponse.kind: CurrentPriceResponse,
    WorkResponse.kind: WorkResponse,
    UnknownMessage.kind: UnknownMessage,
}


# ============================================
# Outbound Requests
# ============================================

class BaseRequest(BaseModel):
    """
    Base model for outbound requests.

    Requests are frozen: once built they are never modified.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    action: Action

    def to_json(self) -> str:
        """Encode the request as the wire text sent over the socket."""
        return self.model_dump_json()


class SubscribeRequest(BaseRequest):
    """Subscribe to updates for an account, quoting balances in `currency`."""

    action: Action = Action.SUBSCRIBE
    account: str
    currency: str


class CurrentPriceRequest(BaseRequest):
    """Ask for the current price in `currency`."""

    action: Action = Action.PRICE
    currency: str


class AccountHistoryRequest(BaseRequest):
    """Ask for the last `count` history entries of an account."""

    action: Action = Action.HISTORY
    account: str
    count: int


Request = Union[SubscribeRequest, CurrentPriceRequest, AccountHistoryRequest]
