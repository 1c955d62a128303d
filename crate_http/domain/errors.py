from __future__ import annotations

from typing import Optional


# Stable codes carried in synthesized transport error replies.
TRANSPORT_OTHER = 0
TRANSPORT_INVALID_URL = 3
TRANSPORT_CONNECTION = 7
TRANSPORT_TIMEOUT = 28
TRANSPORT_TLS = 35
TRANSPORT_TOO_MANY_REDIRECTS = 47


class ClientError(RuntimeError):
    """Base class for client-side failures."""


class TransportError(ClientError):
    """Raised when a request produced no HTTP status/body pair.

    Fields:
        message: Human-readable transport failure description.
        code: One of the TRANSPORT_* codes.
        status_code: Last observed HTTP status, if any.
    """

    def __init__(self, message: str, code: int = TRANSPORT_OTHER, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class NotConnectedError(ClientError):
    """Raised when a request is dispatched before any node was configured."""

    def __init__(self, message: str = "Client is not connected.") -> None:
        super().__init__(message)
        self.message = message


class ContractError(ValueError):
    """Raised when caller or configuration input violates the documented contract."""
