"""
Error types raised by the client.

Every expected failure of an endpoint call is one of three kinds:
transport (the request never produced a response), decode (the response
did not match the expected shape) or vendor (the server answered with an
error message).
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    DECODE = "decode"
    VENDOR = "vendor"


class OllamaError(Exception):
    """Base class for all errors raised by the client."""

    kind: ErrorKind


class TransportError(OllamaError):
    """Connection, DNS, timeout or cancellation failure.

    Safe to retry from the caller; the client never retries on its own.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        cancelled: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.cancelled = cancelled


class RequestCancelledError(TransportError):
    """The awaiting task was cancelled while the request was in flight.

    Never raised on its own: the task's ``asyncio.CancelledError`` propagates
    unchanged, with this error as its ``__cause__``. asyncio timeouts and task
    groups only recognise the plain ``CancelledError``.
    """

    def __init__(self, message: str = "Request cancelled"):
        super().__init__(message, cancelled=True)


class DecodeError(OllamaError):
    """Response body did not match the schema expected for an endpoint."""

    kind = ErrorKind.DECODE

    def __init__(self, endpoint: str, detail: str):
        super().__init__(f"Failed to decode {endpoint} response: {detail}")
        self.endpoint = endpoint
        self.detail = detail


class VendorError(OllamaError):
    """The server reported an error; ``message`` is its text verbatim."""

    kind = ErrorKind.VENDOR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status code: {self.status_code})"
