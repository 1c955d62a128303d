"""
Unit tests for the requests-based transport adapter.
"""

import io
from unittest.mock import Mock, patch

import pytest
import requests

from crate_http.domain import errors
from crate_http.domain.interfaces import HttpRequest
from crate_http.domain.models import Node
from crate_http.infrastructure.http.transport import USER_AGENT, RequestsTransport


def fake_response(status=200, content=b"{}", chunks=()):
    response = Mock()
    response.status_code = status
    response.content = content
    response.iter_content.return_value = list(chunks)
    return response


class TestSend:
    def test_posts_body_to_node_url(self):
        transport = RequestsTransport(timeout=5)
        with patch.object(requests.Session, "request", return_value=fake_response(200, b'{"rowcount":1}')) as req:
            response = transport.send(Node("http://n1:4200"), HttpRequest("POST", "/_sql?types", body='{"stmt":"ä"}'))

        assert response.status_code == 200
        assert response.body == '{"rowcount":1}'
        args, kwargs = req.call_args
        assert args == ("POST", "http://n1:4200/_sql?types")
        assert kwargs["data"] == '{"stmt":"ä"}'.encode("utf-8")
        assert kwargs["timeout"] == 5
        assert kwargs["auth"] is None
        assert kwargs["stream"] is False

    def test_sets_user_agent(self):
        transport = RequestsTransport()
        assert transport._session.headers["User-Agent"] == USER_AGENT

    def test_basic_auth_when_node_has_credentials(self):
        transport = RequestsTransport(timeout=5)
        with patch.object(requests.Session, "request", return_value=fake_response()) as req:
            transport.send(Node("http://n1:4200", "crate", "pw"), HttpRequest("POST", "/_sql"))

        auth = req.call_args.kwargs["auth"]
        assert isinstance(auth, requests.auth.HTTPBasicAuth)
        assert (auth.username, auth.password) == ("crate", "pw")

    def test_error_status_is_a_normal_response(self):
        transport = RequestsTransport(timeout=5)
        with patch.object(requests.Session, "request", return_value=fake_response(404, b'{"error":{}}')):
            response = transport.send(Node(), HttpRequest("POST", "/_sql"))
        assert response.status_code == 404
        assert response.body == '{"error":{}}'

    def test_timeout_comes_from_environment(self, clean_environment, monkeypatch):
        monkeypatch.setenv("CRATE_HTTP_TIMEOUT", "2.5")
        transport = RequestsTransport()
        with patch.object(requests.Session, "request", return_value=fake_response()) as req:
            transport.send(Node(), HttpRequest("POST", "/_sql"))
        assert req.call_args.kwargs["timeout"] == 2.5

    def test_stream_body_is_rewound(self):
        transport = RequestsTransport(timeout=5)
        stream = io.BytesIO(b"blob")
        stream.read()
        with patch.object(requests.Session, "request", return_value=fake_response(201, b"")) as req:
            transport.send(Node(), HttpRequest("PUT", "/_blobs/b/k", body=stream))
        assert req.call_args.kwargs["data"] is stream
        assert stream.tell() == 0


class TestDownload:
    def test_chunks_go_to_sink_on_success(self):
        transport = RequestsTransport(timeout=5)
        sink = io.BytesIO()
        response = fake_response(200, chunks=[b"ab", b"cd"])
        with patch.object(requests.Session, "request", return_value=response) as req:
            result = transport.send(Node(), HttpRequest("GET", "/_blobs/b/k", sink=sink))

        assert result.status_code == 200
        assert result.body == ""
        assert sink.getvalue() == b"abcd"
        assert req.call_args.kwargs["stream"] is True
        response.close.assert_called_once()

    def test_sink_untouched_on_not_found(self):
        transport = RequestsTransport(timeout=5)
        sink = io.BytesIO()
        response = fake_response(404, chunks=[b"nope"])
        with patch.object(requests.Session, "request", return_value=response):
            result = transport.send(Node(), HttpRequest("GET", "/_blobs/b/k", sink=sink))
        assert result.status_code == 404
        assert sink.getvalue() == b""


class TestErrors:
    @pytest.mark.parametrize(
        "exc,code",
        [
            (requests.exceptions.ConnectionError("refused"), errors.TRANSPORT_CONNECTION),
            (requests.exceptions.ConnectTimeout("slow"), errors.TRANSPORT_TIMEOUT),
            (requests.exceptions.ReadTimeout("slow"), errors.TRANSPORT_TIMEOUT),
            (requests.exceptions.SSLError("bad cert"), errors.TRANSPORT_TLS),
            (requests.exceptions.MissingSchema("no scheme"), errors.TRANSPORT_INVALID_URL),
            (requests.exceptions.InvalidURL("bad"), errors.TRANSPORT_INVALID_URL),
            (requests.exceptions.TooManyRedirects("loop"), errors.TRANSPORT_TOO_MANY_REDIRECTS),
            (requests.exceptions.ChunkedEncodingError("cut"), errors.TRANSPORT_OTHER),
        ],
    )
    def test_request_exceptions_map_to_codes(self, exc, code):
        transport = RequestsTransport(timeout=5)
        with patch.object(requests.Session, "request", side_effect=exc):
            with pytest.raises(errors.TransportError) as exc_info:
                transport.send(Node(), HttpRequest("POST", "/_sql"))
        assert exc_info.value.code == code
        assert exc_info.value.__cause__ is exc

    def test_close_closes_session(self):
        session = Mock(spec=requests.Session)
        session.headers = {}
        RequestsTransport(session=session).close()
        session.close.assert_called_once()
