from __future__ import annotations

import json
import sys
from typing import Any, Dict, List, Optional, Sequence

from ..application.client import Client
from ..application.use_cases.blob_storage import missing_blob_message
from ..domain.blob import BlobResult
from ..domain.models import ConnectionPolicy, Node, Query
from ..domain.raw_result import RawResult
from ..domain.result import Result
from ..infrastructure import config
from ..infrastructure.logging import get_logger
from .parsers import build_parser

logger = get_logger("crate_http.cli")

EXIT_OK = 0
EXIT_DB_ERROR = 1
EXIT_EXCEPTION = 3


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _build_client(ns) -> Client:
    """Client from command line options, falling back to CRATE_* settings per option."""
    urls = list(ns.url) or config.crate_urls()
    user = ns.user if ns.user is not None else config.crate_user()
    password = ns.password if ns.password is not None else config.crate_password()
    policy = ConnectionPolicy.parse(ns.policy) if ns.policy else config.connection_policy()
    client = Client(policy=policy)
    client.connect([Node(u.rstrip("/"), user, password) for u in urls])
    client.default_schema = ns.schema or config.default_schema()
    return client


def _result_payload(result: Result) -> Dict[str, Any]:
    if result.has_error():
        return {"status": "error", "error": result.error_string}
    return {
        "status": "ok",
        "cols": result.cols,
        "rows": [rec.as_dict() for rec in result.records()],
        "rowcount": result.row_count,
        "duration": result.duration,
    }


def _raw_payload(raw: RawResult) -> Dict[str, Any]:
    return {
        "status": "error" if raw.has_error() else "ok",
        "http_status": raw.http_status_code,
        "reply": raw.reply,
    }


def _blob_payload(result: BlobResult, **extra: Any) -> Dict[str, Any]:
    if result.has_error():
        return {"status": "error", "key": result.key, "error": result.error_string, "error_type": result.error_type.value}
    return {"status": "ok", "key": result.key, **extra}


def _finish(payload: Dict[str, Any]) -> int:
    _emit(payload)
    return EXIT_OK if payload["status"] == "ok" else EXIT_DB_ERROR


def exec_sql(ns, client: Client) -> int:
    query = Query(ns.sql, ns.args, ns.bulk_args)
    if ns.raw:
        return _finish(_raw_payload(client.exec_raw(query)))
    return _finish(_result_payload(client.exec(query)))


def refresh_table(ns, client: Client) -> int:
    if client.refresh(ns.table):
        return _finish({"status": "ok", "table": ns.table})
    return _finish({"status": "error", "table": ns.table, "error": f"Refreshing table '{ns.table}' failed."})


def list_schemata(client: Client) -> int:
    return _finish({"status": "ok", "schemata": client.schemata()})


def list_nodes(client: Client) -> int:
    nodes: List[Node] = client.cluster_nodes()
    return _finish({"status": "ok", "nodes": [n.url for n in nodes]})


def blob_exists(ns, client: Client) -> int:
    result = client.exists_blob(ns.table, ns.key)
    if result.is_crate_error() and result.error_string == missing_blob_message(ns.key):
        return _finish({"status": "ok", "key": ns.key, "exists": False})
    return _finish(_blob_payload(result, exists=True))


def dispatch_commands(ns, client: Client) -> int:
    """Route a parsed command to the client operation and print its JSON report.

    Returns 0 on success and 1 when the database (or the node list) reports a failure.
    """
    if ns.cmd == "exec":
        return exec_sql(ns, client)
    if ns.cmd == "refresh":
        return refresh_table(ns, client)
    if ns.cmd == "schemata":
        return list_schemata(client)
    if ns.cmd == "nodes":
        return list_nodes(client)

    if ns.cmd == "blob-create":
        raw = client.create_blob_storage(ns.table, ns.shards, ns.replicas, ns.path)
        return _finish(_raw_payload(raw))
    if ns.cmd == "blob-drop":
        return _finish(_raw_payload(client.remove_blob_storage(ns.table)))
    if ns.cmd == "blob-upload":
        return _finish(_blob_payload(client.upload_blob(ns.table, ns.file)))
    if ns.cmd == "blob-exists":
        return blob_exists(ns, client)
    if ns.cmd == "blob-download":
        return _finish(_blob_payload(client.download_blob(ns.table, ns.key, ns.out), path=ns.out))
    if ns.cmd == "blob-delete":
        return _finish(_blob_payload(client.delete_blob(ns.table, ns.key)))

    _emit({"status": "error", "error": f"Unknown command: {ns.cmd}"})
    return EXIT_DB_ERROR


def run(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    ns = ap.parse_args(list(argv or []))
    try:
        with _build_client(ns) as client:
            return dispatch_commands(ns, client)
    except Exception as ex:  # keep CLI concise and user-friendly
        logger.error("Command failed | cmd=%s | error=%s", ns.cmd, ex)
        _emit({"status": "error", "error": f"{type(ex).__name__}: {ex}"})
        return EXIT_EXCEPTION


def main() -> int:
    return run(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
