"""
pytest configuration and fixtures.
"""

import hashlib
import json
import re
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Generator, List, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpclient.core import RawResponse, Transport
from httpclient.http import Headers, Request


SAMPLE_JSON = '{"key":"value","object":{"key":"value"},"array":[1,2,3,4]}'
SAMPLE_CSV = 'Key1,Key2\nValue1,Value2\n"40.0","Forty"'
SAMPLE_XML = "<xml><name>Nathan</name></xml>"
SAMPLE_VENDOR_TYPE = "application/vnd.example.message+xml"

DIGEST_USER = "nathan"
DIGEST_PASSWORD = "opensesame"
DIGEST_REALM = "testrealm@host.com"
DIGEST_NONCE = "dcd98b7102dd2f0e8b11d0f600bfb0c093"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep proxy/config environment variables and templates out of tests."""
    for name in (
        "http_proxy",
        "HTTP_PROXY",
        "HTTP_CLIENT_TIMEOUT",
        "HTTP_CLIENT_STRICT_SSL",
        "HTTP_CLIENT_USER_AGENT",
        "HTTP_CLIENT_LOG_LEVEL",
        "HTTP_CLIENT_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    Request.reset_ini()
    yield
    Request.reset_ini()


# =============================================================================
# RECORDING TRANSPORT
# =============================================================================

class RecordingTransport(Transport):
    """Transport that records what it was asked to send and replays a canned response."""

    def __init__(self, raw_headers: str = "HTTP/1.1 200 OK\r\n", body: bytes = b""):
        self.raw_headers = raw_headers
        self.body = body
        self.calls: List[dict] = []

    def transmit(self, method, uri, headers, body, options) -> RawResponse:
        self.calls.append({
            "method": method,
            "uri": uri,
            "headers": headers,
            "body": body,
            "options": options,
        })
        return RawResponse(
            status_line=self.raw_headers.splitlines()[0],
            raw_headers=self.raw_headers,
            body=self.body,
        )

    @property
    def last(self) -> dict:
        return self.calls[-1]


@pytest.fixture
def recording_transport() -> RecordingTransport:
    """Transport answering 200 with an empty body."""
    return RecordingTransport()


@pytest.fixture
def json_transport() -> RecordingTransport:
    """Transport answering with the sample JSON document."""
    return RecordingTransport(
        "HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n",
        SAMPLE_JSON.encode(),
    )


# =============================================================================
# LOCAL TEST SERVER
# =============================================================================

@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class _Handler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def log_message(self, format, *args):
        pass

    def _reply(self, status: int, body: bytes, content_type: Optional[str], extra=None):
        self.send_response(status)
        if content_type:
            self.send_header("Content-Type", content_type)
        for name, value in (extra or []):
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Connection", "close")
        self.end_headers()
        self.wfile.write(body)

    def _read_body(self) -> bytes:
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length else b""

    def _echo(self):
        body = self._read_body()
        document = {
            "method": self.command,
            "path": self.path,
            "headers": {name: value for name, value in self.headers.items()},
            "body": body.decode("utf-8", errors="replace"),
        }
        self._reply(200, json.dumps(document).encode(), "application/json")

    def do_GET(self):
        if self.path == "/json":
            self._reply(200, SAMPLE_JSON.encode(), "application/json")
        elif self.path == "/csv":
            self._reply(200, SAMPLE_CSV.encode(), "text/csv")
        elif self.path == "/vendor":
            self._reply(200, SAMPLE_XML.encode(), SAMPLE_VENDOR_TYPE)
        elif self.path == "/missing":
            self._reply(404, b"nothing here", "text/plain; charset=utf-8")
        elif self.path == "/slow":
            time.sleep(1.0)
            self._reply(200, b"late", "text/plain")
        elif self.path == "/repeat":
            self._reply(200, b"twice", "text/plain", [("X-My-Header", "Value1"), ("X-My-Header", "Value2")])
        elif self.path == "/digest":
            self._digest()
        else:
            self._echo()

    def do_POST(self):
        self._echo()

    def do_PUT(self):
        self._echo()

    def do_PATCH(self):
        self._echo()

    def do_DELETE(self):
        self._echo()

    def _digest(self):
        answer = _digest_fields(self.headers.get("Authorization", ""))
        if answer is not None and answer.get("response") == _digest_response(self.command, answer):
            self._reply(200, b'{"authenticated": true}', "application/json")
            return

        challenge = f'Digest realm="{DIGEST_REALM}", qop="auth", nonce="{DIGEST_NONCE}"'
        self._reply(401, b"", None, [("WWW-Authenticate", challenge)])


def _digest_fields(header: str) -> Optional[dict]:
    scheme, _, params = header.partition(" ")
    if scheme.lower() != "digest":
        return None
    return {
        name.lower(): quoted if quoted else bare
        for name, quoted, bare in re.findall(r'(\w+)=(?:"([^"]*)"|([^\s,]+))', params)
    }


def _digest_response(method: str, answer: dict) -> str:
    """RFC 7616 MD5 response with qop=auth, computed from the server's credentials."""
    def md5(text: str) -> str:
        return hashlib.md5(text.encode()).hexdigest()

    ha1 = md5(f"{DIGEST_USER}:{DIGEST_REALM}:{DIGEST_PASSWORD}")
    ha2 = md5(f"{method}:{answer.get('uri', '')}")
    return md5(f"{ha1}:{DIGEST_NONCE}:{answer.get('nc', '')}:{answer.get('cnonce', '')}:auth:{ha2}")


class LocalServer:
    """Threaded http.server instance running in the background."""

    def __init__(self, port: int):
        self.port = port
        self.httpd = ThreadingHTTPServer(("127.0.0.1", port), _Handler)
        self._thread: threading.Thread = None

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)
        self._thread.start()

    def stop(self):
        """Stop the server."""
        self.httpd.shutdown()
        self.httpd.server_close()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def local_server(free_port: int) -> Generator[LocalServer, None, None]:
    """Create a local server for end-to-end exchanges."""
    server = LocalServer(free_port)
    server.start()

    yield server

    server.stop()


@pytest.fixture
def multi_header_block() -> str:
    """Header block with a repeated field."""
    return (
        "HTTP/1.1 200 OK\r\n"
        "Content-Type: text/plain\r\n"
        "X-My-Header:Value1\r\n"
        "X-My-Header:Value2\r\n"
    )


@pytest.fixture
def headers() -> Headers:
    return Headers.from_string("Content-Type: application/json\r\nX-Trace: abc\r\n")
