"""
Request Builder

Builds the batch of requests sent whenever the connection opens or a refresh
is asked for. The batch is always, in this order:

    1. SubscribeRequest(address, local currency)
    2. CurrentPriceRequest(local currency)
    3. CurrentPriceRequest("BTC")
    4. AccountHistoryRequest(address, current block count)
"""

from typing import List

from core.errors import PreconditionError
from core.schemas import (
    AccountHistoryRequest,
    CurrentPriceRequest,
    Request,
    SubscribeRequest,
)
from core.session import SessionState


BTC_CURRENCY = "BTC"


def build_startup_requests(state: SessionState, local_currency: str) -> List[Request]:
    """
    Build the four startup requests for the current session.

    Args:
        state: Session state supplying the address and block count
        local_currency: Local currency code (e.g., "USD")

    Returns:
        List[Request]: Exactly four requests in send order

    Raises:
        PreconditionError: If the session has no address
    """
    address = state.address()
    if not address:
        raise PreconditionError("No account address set; startup requests not built")

    return [
        SubscribeRequest(account=address, currency=local_currency),
        CurrentPriceRequest(currency=local_currency),
        CurrentPriceRequest(currency=BTC_CURRENCY),
        AccountHistoryRequest(account=address, count=state.current_block_count()),
    ]
