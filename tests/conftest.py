"""
Test fixtures for sitemap-walker.

Provides a local HTTP server with per-path routes so walks go through the
real curl_cffi transport.
"""

import threading
import time
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List
from urllib.parse import urlparse

import pytest

PROXY_VARIABLES = (
    'http_proxy', 'https_proxy', 'all_proxy',
    'HTTP_PROXY', 'HTTPS_PROXY', 'ALL_PROXY',
)


@dataclass
class Route:
    body: bytes = b''
    status: int = 200
    content_type: str = 'application/xml'
    delay: float = 0.0
    headers: Dict[str, str] = field(default_factory=dict)


class SitemapServer:
    """Threaded HTTP server answering from a route table."""

    def __init__(self):
        self.routes: Dict[str, Route] = {}
        self.requests: List[str] = []
        self._lock = threading.Lock()
        self.httpd = ThreadingHTTPServer(('127.0.0.1', 0), self._make_handler())
        self.httpd.daemon_threads = True
        self._thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)

    @property
    def base_url(self) -> str:
        host, port = self.httpd.server_address[:2]
        return f"http://{host}:{port}"

    def url(self, path: str = '') -> str:
        return self.base_url + path

    def add(self, path: str, body='', status: int = 200,
            content_type: str = 'application/xml', delay: float = 0.0,
            headers: Dict[str, str] = None):
        if isinstance(body, str):
            body = body.encode('utf-8')
        self.routes[path] = Route(body, status, content_type, delay, headers or {})

    def hits(self, path: str) -> int:
        with self._lock:
            return self.requests.count(path)

    def _make_handler(self):
        server = self

        class Handler(BaseHTTPRequestHandler):
            def do_GET(self):
                path = urlparse(self.path).path
                with server._lock:
                    server.requests.append(path)

                route = server.routes.get(path, Route(status=404, content_type='text/plain'))
                if route.delay:
                    time.sleep(route.delay)

                try:
                    self.send_response(route.status)
                    self.send_header('Content-Type', route.content_type)
                    self.send_header('Content-Length', str(len(route.body)))
                    for name, value in route.headers.items():
                        self.send_header(name, value)
                    self.end_headers()
                    self.wfile.write(route.body)
                except (BrokenPipeError, ConnectionResetError):
                    # Client gave up (timeout tests)
                    pass

            def log_message(self, format, *args):
                pass

        return Handler

    def start(self):
        self._thread.start()

    def stop(self):
        self.httpd.shutdown()
        self.httpd.server_close()


@pytest.fixture(autouse=True)
def no_proxy(monkeypatch):
    """Keep requests to the local server off any configured proxy."""
    for name in PROXY_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sitemap_server():
    """Start a local sitemap server for the duration of a test."""
    try:
        server = SitemapServer()
    except OSError as e:
        pytest.skip(f"Cannot open a local listener: {e}")
    server.start()
    yield server
    server.stop()
