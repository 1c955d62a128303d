"""
Node failover.

The executor owns the ordered node list, a cursor into it and the reordering
policy. A request goes to the node at the cursor; on transport failure the next
node is tried until every node was tried once. Server replies, including 4xx and
5xx, are definitive and never retried.

Not thread-safe: ``execute``/``dispatch`` mutate the node order and cursor.
Use one executor per thread or serialize access.
"""
from __future__ import annotations

import json
import random
from typing import Optional, Sequence, Tuple

from ..domain.errors import NotConnectedError, TransportError
from ..domain.interfaces import HttpRequest, HttpResponse, HttpTransport
from ..domain.models import ConnectionPolicy, Node
from ..domain.raw_result import RawResult
from ..infrastructure.logging import get_logger

logger = get_logger("crate_http.executor")


def error_reply(message: str, code: int, component: str) -> str:
    """Client-side error body in the server's ``{"error": {...}}`` shape."""
    return json.dumps(
        {"error": {"message": message, "code": code, "component": component}},
        separators=(",", ":"),
        ensure_ascii=False,
    )


class FailoverExecutor:
    """Sends requests to one live node, failing over on transport errors."""

    def __init__(
        self,
        transport: HttpTransport,
        policy: ConnectionPolicy = ConnectionPolicy.STICKY_LAST_SUCCESSFUL,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._transport = transport
        self._policy = policy
        self._random = rng or random.Random()
        self._nodes: Tuple[Node, ...] = ()
        self._cursor = 0

    # --- connection state ---
    def connect(self, nodes: Sequence[Node], policy: Optional[ConnectionPolicy] = None) -> bool:
        self._nodes = tuple(nodes)
        self._cursor = 0
        if policy is not None:
            self._policy = policy
        logger.info("Connect | nodes=%d | policy=%s", len(self._nodes), self._policy.value)
        return self.is_connected

    def disconnect(self) -> None:
        self._nodes = ()
        self._cursor = 0

    @property
    def is_connected(self) -> bool:
        return bool(self._nodes)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._nodes

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def policy(self) -> ConnectionPolicy:
        return self._policy

    # --- sending ---
    def execute(self, request: HttpRequest) -> RawResult:
        """Send ``request`` and return the reply; never raises for transport problems.

        Not connected and exhausted failover are reported as synthesized error replies
        (components ``client`` and ``transport``).
        """
        try:
            response = self.dispatch(request)
        except NotConnectedError as exc:
            return RawResult(error_reply(exc.message, 0, "client"))
        except TransportError as exc:
            status = exc.status_code if exc.status_code is not None else -1
            return RawResult(error_reply(exc.message, exc.code, "transport"), status)
        return RawResult(response.body, response.status_code)

    def dispatch(self, request: HttpRequest) -> HttpResponse:
        """Send ``request``, trying each node at most once.

        Raises:
            NotConnectedError: No nodes are configured.
            TransportError: Every node failed; carries the last failure.
        """
        if not self._nodes:
            raise NotConnectedError()
        while True:
            node = self._nodes[self._cursor]
            logger.debug("Request | method=%s | path=%s | node=%s", request.method, request.path, node.url)
            try:
                response = self._transport.send(node, request)
            except TransportError as exc:
                logger.warning("Node failed | node=%s | code=%d | error=%s", node.url, exc.code, exc.message)
                if self._advance():
                    continue
                logger.error("All nodes failed | nodes=%d | last_error=%s", len(self._nodes), exc.message)
                raise
            self._on_success()
            return response

    def _advance(self) -> bool:
        """Move to the next node; returns False (and rewinds) when none is left untried."""
        self._cursor += 1
        if self._cursor < len(self._nodes):
            return True
        self._cursor = 0
        return False

    def _on_success(self) -> None:
        pos, self._cursor = self._cursor, 0
        if pos == 0 or self._policy is ConnectionPolicy.ALWAYS_FIRST:
            return
        if self._policy is ConnectionPolicy.STICKY_LAST_SUCCESSFUL:
            self._nodes = self._nodes[pos:] + self._nodes[:pos]
        else:
            self._nodes = tuple(self._random.sample(self._nodes, len(self._nodes)))
        logger.info("Reordered nodes | policy=%s | first=%s", self._policy.value, self._nodes[0].url)
