"""
Account Service Errors

Every failure the account service can run into is one of four kinds:

    - MalformedMessage:  an inbound frame could not be decoded (frame dropped)
    - SendFailure:       one outgoing request failed (remaining sends continue)
    - TransportFailure:  the connection reported a fault (no automatic recovery)
    - PreconditionError: a send was attempted without an account address (skipped)

None of them is retried inside the service. They are handed to an error
handler (by default `handle_error`, which logs) and the service stays usable.
"""

from typing import Any, Optional

from core.logging import get_logger


logger = get_logger(__name__)


class AccountServiceError(Exception):
    """Base class for all account service errors."""


class MalformedMessage(AccountServiceError):
    """
    An inbound frame is not valid JSON, or its fields do not fit the message
    type selected for it.

    Attributes:
        raw: The offending frame text
        cause: The underlying decode or validation error
    """

    def __init__(self, raw: str, cause: Optional[Exception] = None):
        self.raw = raw
        self.cause = cause
        preview = raw[:100] if isinstance(raw, str) else repr(raw)
        super().__init__(f"Malformed message: {preview!r} ({cause})")


class SendFailure(AccountServiceError):
    """
    A single outgoing request could not be sent.

    Attributes:
        request: The request that failed
        cause: The exception raised by the transport
    """

    def __init__(self, request: Any, cause: Exception):
        self.request = request
        self.cause = cause
        action = getattr(request, "action", "unknown")
        super().__init__(f"Failed to send '{action}' request: {cause}")


class TransportFailure(AccountServiceError):
    """
    The transport reported a connection-level fault.

    Attributes:
        cause: The error reported by the transport
    """

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Transport failure: {cause}")


class PreconditionError(AccountServiceError):
    """A request was attempted while the account address is unset."""


def handle_error(error: Exception) -> None:
    """
    Default error handler: log the error and carry on.

    PreconditionErrors are expected (no credentials yet) and only logged at DEBUG.
    """
    if isinstance(error, PreconditionError):
        logger.debug(f"Skipped: {error}")
    elif isinstance(error, MalformedMessage):
        logger.warning(str(error))
    else:
        logger.error(str(error))
