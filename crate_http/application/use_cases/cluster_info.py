from __future__ import annotations

from typing import List

from ..dto import RefreshRequest
from ...domain.interfaces import SqlExecutor
from ...domain.models import Node

SCHEMATA_SQL = "SELECT schema_name FROM information_schema.schemata ORDER BY schema_name"
CLUSTER_NODES_SQL = "select rest_url from sys.nodes"


class RefreshTableUseCase:
    """Use-case: force the database to make recent writes of a table visible."""

    def __init__(self, sql: SqlExecutor) -> None:
        self._sql = sql

    def execute(self, req: RefreshRequest) -> bool:
        return not self._sql.exec_raw(f"REFRESH TABLE {req.table}").has_error()


class ListSchemataUseCase:
    """Use-case: list schema names, ordered; empty on error."""

    def __init__(self, sql: SqlExecutor) -> None:
        self._sql = sql

    def execute(self) -> List[str]:
        result = self._sql.exec(SCHEMATA_SQL)
        return [rec.value(0).as_string() for rec in result.records()]


class ClusterNodesUseCase:
    """Use-case: discover every node of the cluster the client talks to.

    ``sys.nodes.rest_url`` carries host:port only; ``http://`` is prefixed when no
    scheme is present so the nodes can be passed straight back to ``connect``.
    """

    def __init__(self, sql: SqlExecutor) -> None:
        self._sql = sql

    def execute(self) -> List[Node]:
        result = self._sql.exec(CLUSTER_NODES_SQL)
        nodes: List[Node] = []
        for rec in result.records():
            url = rec.value(0).as_string().strip()
            if not url:
                continue
            if "://" not in url:
                url = f"http://{url}"
            nodes.append(Node(url))
        return nodes
