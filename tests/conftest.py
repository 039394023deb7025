import faulthandler
import io
import json
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from osrs_prices.data_sources.pricing.wiki_prices import WikiPricesAPI

TEST_USER_AGENT = "osrs-prices-tests/1.0 (pytest)"


# =============================================================================
# In-process transport doubles
# =============================================================================

def make_response(
        status_code: int = 200,
        json_body: Any = None,
        body: bytes = b"",
        raw: Any = None,
) -> requests.Response:
    """Build a real requests.Response backed by an in-memory stream."""
    response = requests.Response()
    response.status_code = status_code
    if json_body is not None:
        body = json.dumps(json_body).encode("utf-8")
    response.raw = raw if raw is not None else io.BytesIO(body)
    return response


class FakeSession(requests.Session):
    """
    Session whose send() hands back queued responses and records every
    prepared request. Queue an Exception to have send() raise it.
    """

    def __init__(self, *responses: Any) -> None:
        super().__init__()
        self.queue: List[Any] = list(responses)
        self.sent: List[requests.PreparedRequest] = []
        self.send_kwargs: List[Dict[str, Any]] = []

    def send(self, request, **kwargs):  # type: ignore[override]
        self.sent.append(request)
        self.send_kwargs.append(kwargs)
        if not self.queue:
            raise AssertionError(f"unexpected request: {request.method} {request.url}")
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def last_query(self) -> Dict[str, List[str]]:
        return parse_qs(urlsplit(self.sent[-1].url).query)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def api(fake_session):
    """WikiPricesAPI wired to a FakeSession."""
    client = WikiPricesAPI(TEST_USER_AGENT, session=fake_session)
    yield client
    client.close()


# =============================================================================
# Local HTTP stub server
# =============================================================================

class StubServer:
    """
    Threaded HTTP server answering canned JSON per path.

    Routes map a path (e.g. "/osrs/latest") to (status, body). A route added
    with hold=True blocks its handler until release() is called. One added
    with stall_after=N sends the headers and N body bytes, then blocks until
    release() and drops the connection.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Tuple[int, bytes, bool, Optional[int]]] = {}
        self.requests: List[Dict[str, Any]] = []
        self.released = threading.Event()
        self.received = threading.Event()
        self.body_started = threading.Event()
        self._server = ThreadingHTTPServer(("127.0.0.1", 0), self._make_handler())
        self._server.daemon_threads = True
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def base_url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}/api/v1"

    def add(self, path: str, json_body: Any = None, status: int = 200,
            body: Optional[bytes] = None, hold: bool = False,
            stall_after: Optional[int] = None) -> None:
        if body is None:
            body = json.dumps(json_body).encode("utf-8")
        self.routes[f"/api/v1{path}"] = (status, body, hold, stall_after)

    def release(self) -> None:
        self.released.set()

    def _make_handler(self):
        stub = self

        class Handler(BaseHTTPRequestHandler):
            def do_GET(self):  # noqa: N802 - http.server naming
                parts = urlsplit(self.path)
                stub.requests.append({
                    "path": parts.path,
                    "query": parts.query,
                    "headers": dict(self.headers),
                })
                stub.received.set()

                status, body, hold, stall_after = stub.routes.get(
                    parts.path, (404, b'{"error":"not found"}', False, None)
                )
                if hold:
                    stub.released.wait(timeout=10)
                try:
                    self.send_response(status)
                    self.send_header("Content-Type", "application/json")
                    self.send_header("Content-Length", str(len(body)))
                    self.end_headers()
                    if stall_after is None:
                        self.wfile.write(body)
                        return
                    self.wfile.write(body[:stall_after])
                    self.wfile.flush()
                    stub.body_started.set()
                    stub.released.wait(timeout=10)
                    self.close_connection = True
                except (BrokenPipeError, ConnectionResetError):
                    pass

            def log_message(self, format, *args):  # silence stderr access log
                pass

        return Handler

    def start(self) -> "StubServer":
        self._thread.start()
        return self

    def stop(self) -> None:
        self.release()
        self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout=5)


@pytest.fixture
def stub_server():
    server = StubServer().start()
    yield server
    server.stop()


@pytest.fixture
def stub_api(stub_server):
    """WikiPricesAPI pointed at the local stub server."""
    client = WikiPricesAPI(TEST_USER_AGENT, base_url=stub_server.base_url, timeout=5)
    yield client
    client.close()


# =============================================================================
# Markers
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """Assign tier markers based on test location."""
    for item in items:
        path = Path(str(item.path)).as_posix()
        if "/tests/integration/" in path:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


def pytest_sessionstart(session):  # pragma: no cover - test harness init
    """Enable faulthandler for the entire test run to aid diagnosing hangs."""
    try:
        faulthandler.enable(file=sys.stderr, all_threads=True)
    except (AttributeError, OSError, ValueError):
        pass
