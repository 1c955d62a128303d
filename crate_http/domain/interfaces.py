from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Optional, Union

from .models import Node, Query
from .raw_result import RawResult
from .result import Result


@dataclass(frozen=True)
class HttpRequest:
    """Transport-neutral request against a node-relative path.

    Fields:
        method: HTTP verb.
        path: Path plus query string appended to the node url (``/_sql?types``).
        body: Request payload; a binary stream is uploaded as-is.
        headers: Extra headers.
        sink: When set, a successful response body is streamed here instead of returned.
    """
    method: str
    path: str
    body: Union[None, str, bytes, BinaryIO] = None
    headers: Dict[str, str] = field(default_factory=dict)
    sink: Optional[BinaryIO] = None


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    body: str = ""


class HttpTransport(ABC):
    """Port for the HTTP client library."""

    @abstractmethod
    def send(self, node: Node, request: HttpRequest) -> HttpResponse:
        """Perform one request against ``node``.

        Raises:
            TransportError: When no HTTP status/body pair was produced (refused,
                timed out, TLS failure, malformed url). Any HTTP status, including
                4xx/5xx, is a normal response.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release connections held by the transport."""


class SqlExecutor(ABC):
    """Port for anything that runs SQL and hands back replies (the client)."""

    @abstractmethod
    def exec(self, query: Union[str, Query]) -> Result:
        raise NotImplementedError

    @abstractmethod
    def exec_raw(self, query: Union[str, Query]) -> RawResult:
        raise NotImplementedError
