"""
Unit tests for Query and the /_sql request body.
"""

import json

import pytest

from crate_http.application.request_builder import SQL_PATH, blob_path, build_sql_body, build_sql_request
from crate_http.domain.errors import ContractError
from crate_http.domain.models import ConnectionPolicy, Node, Query, QueryType


class TestQuery:
    def test_default_query_is_empty(self):
        q = Query()
        assert q.is_empty()
        assert not q.has_statement()
        assert q.type is QueryType.SIMPLE

    def test_arguments_and_bulk_are_mutually_exclusive(self):
        q = Query("insert into t values (?)", "[1]")
        assert q.type is QueryType.ARGUMENTS

        q.bulk_arguments = ["[1]", "[2]"]
        assert q.type is QueryType.BULK_ARGUMENTS
        assert q.arguments == ""

        q.arguments = "[3]"
        assert q.type is QueryType.ARGUMENTS
        assert q.bulk_arguments == ()

    def test_constructor_rejects_both_argument_kinds(self):
        with pytest.raises(ContractError):
            Query("select ?", "[1]", ["[2]"])

    def test_equality_compares_all_parts(self):
        assert Query("select 1") == Query("select 1")
        assert Query("select ?", "[1]") != Query("select ?", "[2]")
        assert Query("select ?", bulk_arguments=["[1]"]) != Query("select ?", "[1]")

    def test_statement_only_query_is_not_empty(self):
        q = Query("select 1")
        assert q.has_statement()
        assert not q.is_empty()


class TestRequestBody:
    def test_simple_statement_is_escaped(self):
        body = build_sql_body(Query('select "name" from t'))
        assert json.loads(body) == {"stmt": 'select "name" from t'}

    def test_arguments_are_inserted_verbatim(self):
        body = build_sql_body(Query("select ?", '[1.50, "x"]'))
        assert body == '{"stmt":"select ?","args":[1.50, "x"]}'

    def test_bulk_arguments_are_joined(self):
        body = build_sql_body(Query("insert into t values (?)", bulk_arguments=["[1]", "[2]"]))
        assert body == '{"stmt":"insert into t values (?)","bulk_args":[[1],[2]]}'

    def test_request_targets_typed_sql_endpoint(self):
        req = build_sql_request(Query("select 1"))
        assert req.method == "POST"
        assert req.path == SQL_PATH == "/_sql?types"
        assert req.headers == {"Content-Type": "application/json"}

    def test_default_schema_header(self):
        req = build_sql_request(Query("select 1"), "doc")
        assert req.headers["Default-Schema"] == "doc"

    def test_blob_path(self):
        assert blob_path("myblobs", "abc") == "/_blobs/myblobs/abc"


class TestNodeAndPolicy:
    def test_node_defaults_to_local_endpoint(self):
        node = Node()
        assert node.url == "http://localhost:4200"
        assert not node.has_credentials

    def test_node_repr_hides_password(self):
        node = Node("http://n1:4200", "crate", "secret")
        assert node.has_credentials
        assert "secret" not in repr(node)

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("first", ConnectionPolicy.ALWAYS_FIRST),
            ("last", ConnectionPolicy.STICKY_LAST_SUCCESSFUL),
            ("RANDOM", ConnectionPolicy.RANDOM_PER_ATTEMPT),
            ("always_first", ConnectionPolicy.ALWAYS_FIRST),
        ],
    )
    def test_policy_parse(self, name, expected):
        assert ConnectionPolicy.parse(name) is expected

    def test_policy_parse_rejects_unknown(self):
        with pytest.raises(ContractError):
            ConnectionPolicy.parse("round-robin")
