"""
Pytest configuration and fixtures for crate_http tests.

Provides a scripted in-memory transport so executor, client and blob tests run
without a database.
"""

import os
from typing import Dict, List, Tuple, Union

import pytest

from crate_http.domain.errors import TRANSPORT_CONNECTION, TransportError
from crate_http.domain.interfaces import HttpRequest, HttpResponse, HttpTransport
from crate_http.domain.models import Node

Outcome = Union[HttpResponse, TransportError]


class ScriptedTransport(HttpTransport):
    """Answers per node url from a script; the last outcome of a node repeats.

    Unknown urls fail like a refused connection. Every attempt is recorded in
    ``calls`` as ``(url, request)``.
    """

    def __init__(self, script: Dict[str, List[Outcome]] = None):
        self.script = {url: list(outcomes) for url, outcomes in (script or {}).items()}
        self.calls: List[Tuple[str, HttpRequest]] = []
        self.closed = False

    def send(self, node: Node, request: HttpRequest) -> HttpResponse:
        self.calls.append((node.url, request))
        outcomes = self.script.get(node.url)
        if not outcomes:
            raise TransportError(f"Failed to connect to {node.url}", TRANSPORT_CONNECTION)
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, TransportError):
            raise outcome
        if request.sink is not None and outcome.status_code == 200:
            request.sink.write(outcome.body.encode("utf-8"))
            return HttpResponse(outcome.status_code)
        return outcome

    def close(self) -> None:
        self.closed = True

    @property
    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]


def ok(body: str = '{"cols":[],"col_types":[],"rows":[],"rowcount":0,"duration":1.0}', status: int = 200) -> HttpResponse:
    return HttpResponse(status, body)


def refused(url: str = "") -> TransportError:
    return TransportError(f"Failed to connect to {url or 'node'}", TRANSPORT_CONNECTION)


@pytest.fixture
def three_nodes():
    """Three nodes n1, n2, n3 in configured order."""
    return [Node("http://n1:4200"), Node("http://n2:4200"), Node("http://n3:4200")]


@pytest.fixture
def scripted_transport():
    """Factory for ScriptedTransport instances."""
    return ScriptedTransport


@pytest.fixture
def clean_environment():
    """Clean CRATE_* environment variables for testing."""
    env_vars_to_clean = [
        "CRATE_URL",
        "CRATE_URLS",
        "CRATE_USER",
        "CRATE_PASSWORD",
        "CRATE_DEFAULT_SCHEMA",
        "CRATE_CONNECTION_POLICY",
        "CRATE_HTTP_TIMEOUT",
    ]

    original_env = {}
    for var in env_vars_to_clean:
        if var in os.environ:
            original_env[var] = os.environ[var]
            del os.environ[var]

    yield

    for var in env_vars_to_clean:
        os.environ.pop(var, None)
    for var, value in original_env.items():
        os.environ[var] = value
