from __future__ import annotations

from typing import Optional

import requests
from requests.auth import HTTPBasicAuth

from ...domain import errors
from ...domain.interfaces import HttpRequest, HttpResponse, HttpTransport
from ...domain.models import Node
from ..timeouts import http_timeout_seconds

USER_AGENT = "crate-http"
MAX_REDIRECTS = 25
DOWNLOAD_CHUNK_BYTES = 64 * 1024


def _as_transport_error(exc: requests.exceptions.RequestException) -> errors.TransportError:
    response = getattr(exc, "response", None)
    status = response.status_code if response is not None else None
    if isinstance(exc, (requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema, requests.exceptions.InvalidURL)):
        code = errors.TRANSPORT_INVALID_URL
    elif isinstance(exc, requests.exceptions.SSLError):
        code = errors.TRANSPORT_TLS
    elif isinstance(exc, requests.exceptions.Timeout):
        code = errors.TRANSPORT_TIMEOUT
    elif isinstance(exc, requests.exceptions.ConnectionError):
        code = errors.TRANSPORT_CONNECTION
    elif isinstance(exc, requests.exceptions.TooManyRedirects):
        code = errors.TRANSPORT_TOO_MANY_REDIRECTS
    else:
        code = errors.TRANSPORT_OTHER
    return errors.TransportError(str(exc) or type(exc).__name__, code, status)


class RequestsTransport(HttpTransport):
    """HTTP adapter over one ``requests.Session`` (cookies and keep-alive are shared)."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None) -> None:
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = USER_AGENT
        self._session.max_redirects = MAX_REDIRECTS
        self._timeout = timeout

    def send(self, node: Node, request: HttpRequest) -> HttpResponse:
        timeout = self._timeout or http_timeout_seconds()
        auth = HTTPBasicAuth(node.user, node.password) if node.has_credentials else None
        body = request.body.encode("utf-8") if isinstance(request.body, str) else request.body
        if hasattr(body, "seek"):
            # uploads restart from the beginning on every failover attempt
            body.seek(0)
        streaming = request.sink is not None
        try:
            r = self._session.request(
                request.method,
                node.url_for(request.path),
                data=body,
                headers=request.headers,
                auth=auth,
                timeout=timeout,
                allow_redirects=True,
                stream=streaming,
            )
            try:
                if streaming:
                    if r.status_code == 200:
                        for chunk in r.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
                            request.sink.write(chunk)
                    return HttpResponse(r.status_code)
                return HttpResponse(r.status_code, r.content.decode("utf-8", errors="replace"))
            finally:
                r.close()
        except requests.exceptions.RequestException as exc:
            raise _as_transport_error(exc) from exc

    def close(self) -> None:
        self._session.close()
