"""One client connection: reading a request and writing its response."""

from __future__ import annotations

import socket
import time

from .httpcode import HttpCode
from .request import Request, RequestError, parse_request
from .response import Response
from .server import Server

RECV_SIZE = 8192
HEADER_END = b"\r\n\r\n"


def _wants_keep_alive(version: str, connection_header: str) -> bool:
    if version == "HTTP/1.1":
        return connection_header != "close"
    if version == "HTTP/1.0":
        return connection_header == "keep-alive"
    return False


class Connection:
    """State of a client socket across request and response cycles."""

    def __init__(
        self,
        sock: socket.socket,
        server: Server,
        client_addr: tuple,
        log_requests: bool = False,
    ) -> None:
        sock.setblocking(False)
        self.sock: socket.socket | None = sock
        self.server = server
        self.client_addr = client_addr
        self.log_requests = log_requests
        self.last_activity = time.time()
        self.reset_for_next_request()

    @property
    def closed(self) -> bool:
        """True once the socket has been closed."""
        return self.sock is None

    def fileno(self) -> int:
        """Return the client socket's descriptor, or -1 once closed."""
        return self.sock.fileno() if self.sock is not None else -1

    def feed(self, data: bytes) -> bool:
        """Add received bytes; parse once the header terminator arrives.

        Returns whether the request is complete.
        """
        self.raw_request += data
        if not self.request_complete and HEADER_END in self.raw_request:
            self.request_complete = True
            self._parse(bytes(self.raw_request))
        return self.request_complete

    def read_request(self) -> bool:
        """Receive what is available; return False if the connection must close."""
        now = time.time()
        if now - self.last_activity > self.server.timeout:
            return False
        if self.sock is None:
            return False
        try:
            data = self.sock.recv(RECV_SIZE)
        except BlockingIOError:
            return True
        except OSError:
            return False
        if not data:
            return False
        self.last_activity = now
        self.feed(data)
        return True

    def _parse(self, raw: bytes) -> None:
        status = HttpCode(200)
        try:
            request = parse_request(raw)
        except RequestError as exc:
            request, status = exc.request, exc.status
        self.request = request
        if self.log_requests:
            print(request.describe(), end="")
        if status.code != 200:
            self.response.status_code = status.code
            self.response.http_version = request.http_version
            self.response.headers = "Content-Type: text/plain; charset=utf-8"
            self.response.add_header("Connection", "close")
            self.response.body = status.message() + "\n"
            self.keep_alive = False
            return
        self.keep_alive = _wants_keep_alive(
            request.http_version, request.header("Connection")
        )

    def _generate_response(self) -> None:
        self.response.status_code = 200
        self.response.http_version = self.request.http_version
        self.response.add_header(
            "Connection", "keep-alive" if self.keep_alive else "close"
        )
        if self.request.method == "GET":
            self.server.get(self.response, self.request.uri)
        else:
            self.response.status_code = 405
            self.response.body = "405 Method Not Allowed\n"

    def build_response(self) -> bytes:
        """Build the response bytes once per request and return them."""
        if not self.response_built:
            if self.request.is_valid:
                self._generate_response()
            self.raw_response = self.response.serialize()
            self.bytes_written = 0
            self.response_built = True
        return self.raw_response

    def write_response(self) -> bool:
        """Send what the socket takes; return False if the connection must close."""
        self.last_activity = time.time()
        payload = self.build_response()
        if self.sock is None:
            return False
        try:
            sent = self.sock.send(payload[self.bytes_written:])
        except BlockingIOError:
            return True
        except OSError:
            return False
        self.bytes_written += sent
        if self.bytes_written < len(payload):
            return True
        return self.keep_alive

    def reset_for_next_request(self) -> None:
        """Forget the current exchange so the next request can be read."""
        self.raw_request = bytearray()
        self.request = Request()
        self.response = Response()
        self.request_complete = False
        self.response_built = False
        self.raw_response = b""
        self.bytes_written = 0
        self.keep_alive = False

    def close(self) -> None:
        """Close the socket and log the disconnection; safe to call twice."""
        if self.sock is None:
            return
        self.sock.close()
        self.sock = None
        self.server.log_connection(-1, self.client_addr, False)

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()