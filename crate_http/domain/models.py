from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence, Tuple

from .errors import ContractError

DEFAULT_URL = "http://localhost:4200"


@dataclass(frozen=True)
class Node:
    """A single database server the client may talk to.

    Fields:
        url: Base address, e.g. ``http://localhost:4200`` (no trailing path).
        user: HTTP user; empty when unauthenticated.
        password: HTTP password; empty when unauthenticated.
    """
    url: str = DEFAULT_URL
    user: str = ""
    password: str = ""

    @property
    def has_credentials(self) -> bool:
        return bool(self.user or self.password)

    def url_for(self, path: str) -> str:
        return self.url + path

    def __repr__(self) -> str:
        # keep the password out of logs and tracebacks
        return f"Node(url={self.url!r}, user={self.user!r})"


class ConnectionPolicy(Enum):
    """How the node order changes after a request succeeded on a fallback node."""

    ALWAYS_FIRST = "first"
    STICKY_LAST_SUCCESSFUL = "last"
    RANDOM_PER_ATTEMPT = "random"

    @classmethod
    def parse(cls, value: str) -> "ConnectionPolicy":
        key = str(value or "").strip().lower()
        for policy in cls:
            if key in (policy.value, policy.name.lower()):
                return policy
        raise ContractError(f"Unknown connection policy: {value!r} (expected first, last or random)")


class QueryType(Enum):
    SIMPLE = "simple"
    ARGUMENTS = "arguments"
    BULK_ARGUMENTS = "bulk_arguments"


class Query:
    """One SQL statement plus optional single or bulk argument sets.

    Arguments are pre-formed JSON array texts (``'[1, "a"]'``). Single and bulk
    arguments are mutually exclusive: setting one clears the other.
    """

    __slots__ = ("_statement", "_arguments", "_bulk_arguments")

    def __init__(self, statement: str = "", arguments: str = "", bulk_arguments: Iterable[str] = ()) -> None:
        self._statement = statement
        self._arguments = ""
        self._bulk_arguments: Tuple[str, ...] = ()
        bulk = tuple(bulk_arguments)
        if arguments and bulk:
            raise ContractError("A query takes either arguments or bulk arguments, not both")
        if bulk:
            self.bulk_arguments = bulk
        else:
            self.arguments = arguments

    @property
    def statement(self) -> str:
        return self._statement

    @statement.setter
    def statement(self, sql: str) -> None:
        self._statement = sql

    @property
    def arguments(self) -> str:
        return self._arguments

    @arguments.setter
    def arguments(self, args: str) -> None:
        self._arguments = args
        self._bulk_arguments = ()

    @property
    def bulk_arguments(self) -> Tuple[str, ...]:
        return self._bulk_arguments

    @bulk_arguments.setter
    def bulk_arguments(self, bulk_args: Sequence[str]) -> None:
        self._bulk_arguments = tuple(bulk_args)
        self._arguments = ""

    @property
    def type(self) -> QueryType:
        if self.has_arguments():
            return QueryType.ARGUMENTS
        if self.has_bulk_arguments():
            return QueryType.BULK_ARGUMENTS
        return QueryType.SIMPLE

    def has_statement(self) -> bool:
        return bool(self._statement)

    def has_arguments(self) -> bool:
        return bool(self._arguments)

    def has_bulk_arguments(self) -> bool:
        return bool(self._bulk_arguments)

    def is_empty(self) -> bool:
        return not (self._statement or self._arguments or self._bulk_arguments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return (self._statement, self._arguments, self._bulk_arguments) == (
            other._statement,
            other._arguments,
            other._bulk_arguments,
        )

    def __repr__(self) -> str:
        return f"Query(statement={self._statement!r}, type={self.type.value})"
