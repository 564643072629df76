"""Runs every configured server in one readiness loop."""

from __future__ import annotations

import selectors
import sys
import time

from .config import ServerBlock
from .connection import Connection
from .server import Server
from .utils import GREEN, RED, RESET, ShutdownSignal

POLL_TIMEOUT = 1.0


class ServerManager:
    """Owns the servers, their client connections and the selector watching them."""

    def __init__(self, log_connections: bool = False, log_requests: bool = False) -> None:
        self.log_connections = log_connections
        self.log_requests = log_requests
        self.servers: list[Server] = []
        self.connections: dict[int, Connection] = {}
        self._selector = selectors.DefaultSelector()
        self._closed = False

    def add_server(self, block: ServerBlock) -> None:
        """Create a server from a configuration block."""
        self.servers.append(Server(block, self.log_connections))

    def _listen(self) -> None:
        for server in self.servers:
            if server.listener is not None:
                continue
            try:
                server.setup_socket()
            except OSError:
                print(
                    f"{RED}Failed to set up server {server.server_name} on "
                    f"{server.host}:{server.port}{RESET}",
                    file=sys.stderr,
                )
                continue
            self._selector.register(server.listener, selectors.EVENT_READ, server)

    def start_servers(self, shutdown: ShutdownSignal | None = None) -> None:
        """Start listening on every server.

        With a shutdown signal, run the loop until it asks to stop and then
        close everything; without one, only set up the listening sockets and
        leave driving the loop through :meth:`poll_once` to the caller.
        """
        self._listen()
        if shutdown is None:
            return
        self._selector.register(shutdown.fileno(), selectors.EVENT_READ, shutdown)
        print(f"{GREEN}Entering main poll loop...{RESET}")
        try:
            while not shutdown.stopped:
                try:
                    self.poll_once(POLL_TIMEOUT)
                except OSError as exc:
                    if not shutdown.stopped:
                        print(f"{RED}Poll error: {exc}{RESET}", file=sys.stderr)
                    break
            if shutdown.stopped:
                print(f"{GREEN}Exiting main poll loop...{RESET}")
        finally:
            self.close()

    def poll_once(self, timeout: float | None = POLL_TIMEOUT) -> None:
        """Wait up to ``timeout`` seconds for activity and handle it."""
        for key, mask in self._selector.select(timeout):
            target = key.data
            if isinstance(target, Server):
                if mask & selectors.EVENT_READ:
                    self._accept(target)
            elif isinstance(target, Connection):
                if not target.closed:
                    self._service(target, mask)
            elif isinstance(target, ShutdownSignal):
                target.drain()
        self.check_timeouts()
        self._cleanup_closed()

    def _accept(self, server: Server) -> None:
        listener = server.listener
        if listener is None:
            return
        while True:
            try:
                client, addr = listener.accept()
            except BlockingIOError:
                break
            except OSError as exc:
                print(f"{RED}Accept error: {exc}{RESET}", file=sys.stderr)
                break
            conn = Connection(client, server, addr, self.log_requests)
            fd = conn.fileno()
            self.connections[fd] = conn
            self._selector.register(client, selectors.EVENT_READ, conn)
            server.log_connection(fd, addr, True)

    def _service(self, conn: Connection, mask: int) -> None:
        if mask & selectors.EVENT_READ and not conn.request_complete:
            if not conn.read_request():
                self._drop(conn)
                return
            if conn.request_complete:
                self._selector.modify(conn.sock, selectors.EVENT_WRITE, conn)
        elif mask & selectors.EVENT_WRITE and conn.request_complete:
            if not conn.write_response():
                self._drop(conn)
                return
            if conn.bytes_written >= len(conn.raw_response):
                conn.reset_for_next_request()
                self._selector.modify(conn.sock, selectors.EVENT_READ, conn)

    def _forget(self, fd: int) -> None:
        try:
            self._selector.unregister(fd)
        except (KeyError, ValueError):
            pass
        self.connections.pop(fd, None)

    def _drop(self, conn: Connection) -> None:
        fd = conn.fileno()
        if fd != -1:
            self._forget(fd)
        conn.close()

    def check_timeouts(self, now: float | None = None) -> None:
        """Close connections idle for at least their server's timeout.

        A timeout of zero or less never expires.
        """
        now = time.time() if now is None else now
        expired = [
            conn
            for conn in self.connections.values()
            if conn.server.timeout > 0
            and now - conn.last_activity >= conn.server.timeout
        ]
        for conn in expired:
            self._drop(conn)

    def _cleanup_closed(self) -> None:
        for fd in [fd for fd, conn in self.connections.items() if conn.closed]:
            self._forget(fd)

    def close(self) -> None:
        """Close every connection, every listening socket and the selector."""
        if self._closed:
            return
        for conn in list(self.connections.values()):
            self._drop(conn)
        self.connections.clear()
        for server in self.servers:
            if server.listener is not None:
                try:
                    self._selector.unregister(server.listener)
                except (KeyError, ValueError):
                    pass
            server.close()
        self._selector.close()
        self._closed = True

    def __enter__(self) -> ServerManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()