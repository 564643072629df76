"""A virtual server: listening socket, locations and static file serving."""

from __future__ import annotations

import re
import socket
import sys
from dataclasses import replace
from pathlib import Path

from .config import ServerBlock
from .location import Location
from .response import Response
from .utils import GREEN, RED, RESET, YELLOW, timestamp

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_NAME = "default"
DEFAULT_TIMEOUT = 30
DEFAULT_MAX_BODY_SIZE = 4200
LISTEN_BACKLOG = 10
NOT_FOUND_BODY = "404 Not Found"

_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _warn(message: str) -> None:
    print(f"{YELLOW}WARNING: {message}{RESET}")


class Server:
    """One configured server: its settings, locations and listening socket."""

    def __init__(
        self, block: ServerBlock | None = None, log_connections: bool = False
    ) -> None:
        block = block if block is not None else ServerBlock()
        data = block.data
        self.log_connections = log_connections
        self.listener: socket.socket | None = None

        if "host" in data:
            self.host = data["host"]
        else:
            _warn(f"Host not found, defaulting to: {DEFAULT_HOST}")
            self.host = DEFAULT_HOST

        if "listen" in data:
            self.port = _atoi(data["listen"])
        else:
            _warn(f"Port not found, defaulting to: {DEFAULT_PORT}")
            self.port = DEFAULT_PORT

        if "server_name" in data:
            self.server_name = data["server_name"]
        else:
            _warn(f"Server name not found, defaulting to: {DEFAULT_NAME}")
            self.server_name = DEFAULT_NAME

        self.timeout = _atoi(data["timeout"]) if "timeout" in data else DEFAULT_TIMEOUT
        self.max_body_size = (
            _atoi(data["maxBodySize"])
            if "maxBodySize" in data
            else DEFAULT_MAX_BODY_SIZE
        )

        self.locations: list[Location] = [replace(loc) for loc in block.locations]
        if not self.locations:
            _warn("No locations found, defaulting to: /")
            self.locations.append(Location(path="/", root="./"))

    def setup_socket(self) -> None:
        """Create, bind and listen on a non-blocking socket; raise OSError on failure."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        step = "Socket setup"
        try:
            step = "Setting non-blocking mode"
            sock.setblocking(False)
            step = "setsockopt"
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            step = "Bind"
            sock.bind(("", self.port))
            step = "Listen"
            sock.listen(LISTEN_BACKLOG)
        except (OSError, OverflowError) as exc:
            sock.close()
            reason = getattr(exc, "strerror", None) or str(exc)
            message = f"{step} failed for {self.server_name}: {reason}"
            print(f"{RED}{message}{RESET}", file=sys.stderr)
            raise OSError(getattr(exc, "errno", None), message) from exc
        self.listener = sock
        print(
            f"{GREEN}Server [{self.server_name}] listening on "
            f"{self.host}:{self.port}{RESET}"
        )

    def start(self) -> None:
        """Set up the socket unless it is already listening, reporting failure."""
        if self.listener is not None:
            return
        try:
            self.setup_socket()
        except OSError:
            print(f"{RED}Failed to set up {self.server_name}{RESET}", file=sys.stderr)

    def fileno(self) -> int:
        """Return the listening socket's descriptor, or -1 when not listening."""
        return self.listener.fileno() if self.listener is not None else -1

    def close(self) -> None:
        """Close the listening socket if it is open."""
        if self.listener is not None:
            self.listener.close()
            self.listener = None

    def __enter__(self) -> Server:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def match_location(self, uri: str) -> Location | None:
        """Return the location with the longest path that prefixes ``uri``."""
        best: Location | None = None
        longest = 0
        for location in self.locations:
            if uri.startswith(location.path) and len(location.path) > longest:
                best, longest = location, len(location.path)
        return best

    def get(self, response: Response, uri: str) -> None:
        """Fill ``response`` with the file ``uri`` maps to, or a 404."""
        location = self.match_location(uri)
        if location is None:
            print("No matching location found")
            response.status_code = 404
            response.body = NOT_FOUND_BODY
            return
        filepath = location.root + uri[len(location.path):]
        try:
            content = Path(filepath).read_bytes()
        except OSError:
            response.status_code = 404
            response.body = NOT_FOUND_BODY
            return
        response.status_code = 200
        response.body = content

    def log_connection(
        self, client_fd: int, client_addr: tuple, opened: bool
    ) -> None:
        """Print a line about a client connecting or leaving, if enabled."""
        if not self.log_connections:
            return
        ip, port = client_addr[0], client_addr[1]
        event = (
            f"{GREEN} ➡️  New Connection from "
            if opened
            else f"{RED} ⬅️  Connection Closed from "
        )
        print(
            f"{YELLOW}{timestamp()}{event}{ip}:{port}"
            f" on server [{self.server_name}:{self.port}]"
            f" | fd={client_fd}{RESET}"
        )