from __future__ import annotations

import json
from typing import Dict, Optional

from ..domain.interfaces import HttpRequest
from ..domain.models import Query

SQL_PATH = "/_sql?types"


def build_sql_body(query: Query) -> str:
    """
    Serialize a query into the ``/_sql`` request body.

    The statement is JSON-escaped. Argument texts are inserted verbatim: ``args``
    takes the single argument array, ``bulk_args`` the comma-joined bulk arrays.
    Malformed argument text yields a malformed body, which the server rejects.

    Args:
        query: Statement plus optional single or bulk arguments.

    Returns:
        str: JSON object text, e.g. ``{"stmt":"select ?","args":[1]}``.
    """
    body = '{"stmt":' + json.dumps(query.statement, ensure_ascii=False)
    if query.has_arguments():
        body += ',"args":' + query.arguments
    elif query.has_bulk_arguments():
        body += ',"bulk_args":[' + ",".join(query.bulk_arguments) + "]"
    return body + "}"


def build_sql_request(query: Query, default_schema: Optional[str] = None) -> HttpRequest:
    headers: Dict[str, str] = {"Content-Type": "application/json"}
    if default_schema:
        headers["Default-Schema"] = default_schema
    return HttpRequest("POST", SQL_PATH, body=build_sql_body(query), headers=headers)


def blob_path(table: str, key: str) -> str:
    return f"/_blobs/{table}/{key}"
