import re
import signal
import socket
import threading
import time

import pytest

from hajserv.config import ServerBlock
from hajserv.location import Location
from hajserv.manager import ServerManager
from hajserv.utils import ShutdownSignal


def _make_manager(tmp_path, timeout=None):
    data = {"listen": "0", "host": "127.0.0.1", "server_name": "test"}
    if timeout is not None:
        data["timeout"] = timeout
    block = ServerBlock(data=data, locations=[Location("/", f"{tmp_path}/")])
    manager = ServerManager()
    manager.add_server(block)
    manager.start_servers()
    return manager


def _connect(manager):
    port = manager.servers[0].listener.getsockname()[1]
    client = socket.create_connection(("127.0.0.1", port), timeout=2)
    client.settimeout(0.02)
    return client


def _read_response(manager, client):
    data = b""
    for _ in range(300):
        manager.poll_once(0.02)
        try:
            chunk = client.recv(65536)
        except (socket.timeout, BlockingIOError):
            chunk = None
        if chunk:
            data += chunk
        if b"\r\n\r\n" in data:
            head, _, body = data.partition(b"\r\n\r\n")
            length = int(re.search(rb"Content-Length: (\d+)", head).group(1))
            if len(body) >= length:
                return head, body[:length]
    raise AssertionError("no complete response")


def _wait_closed(manager, client):
    for _ in range(300):
        manager.poll_once(0.02)
        try:
            if client.recv(65536) == b"":
                return True
        except (socket.timeout, BlockingIOError):
            continue
        except ConnectionError:
            return True
    return False


def _accept_one(manager):
    for _ in range(100):
        manager.poll_once(0.02)
        if manager.connections:
            return
    raise AssertionError("connection never accepted")


@pytest.fixture
def manager(tmp_path):
    (tmp_path / "index.html").write_bytes(b"<h1>hello</h1>")
    mgr = _make_manager(tmp_path)
    yield mgr
    mgr.close()


def test_get_serves_file_and_closes(manager):
    client = _connect(manager)
    with client:
        client.sendall(
            b"GET /index.html HTTP/1.1\r\nHost: localhost\r\nConnection: close\r\n\r\n"
        )
        head, body = _read_response(manager, client)
        assert head.startswith(b"HTTP/1.1 200\r\n")
        assert b"Server: HajServ/1.0" in head
        assert b"Connection: close" in head
        assert body == b"<h1>hello</h1>"
        assert _wait_closed(manager, client)
    assert manager.connections == {}


def test_missing_file_is_404(manager):
    client = _connect(manager)
    with client:
        client.sendall(
            b"GET /nothing.html HTTP/1.1\r\nHost: localhost\r\nConnection: close\r\n\r\n"
        )
        head, body = _read_response(manager, client)
    assert head.startswith(b"HTTP/1.1 404\r\n")
    assert body == b"404 Not Found"


def test_keep_alive_serves_two_requests(manager):
    client = _connect(manager)
    with client:
        request = b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n"
        client.sendall(request)
        head1, body1 = _read_response(manager, client)
        client.sendall(request)
        head2, body2 = _read_response(manager, client)
        assert b"Connection: keep-alive" in head1
        assert body1 == body2 == b"<h1>hello</h1>"
        assert head2.startswith(b"HTTP/1.1 200\r\n")
        assert len(manager.connections) == 1


def test_not_implemented_method(manager):
    client = _connect(manager)
    with client:
        client.sendall(b"POST / HTTP/1.1\r\nHost: localhost\r\n\r\n")
        head, body = _read_response(manager, client)
        assert head.startswith(b"HTTP/1.1 501\r\n")
        assert body == b"Not Implemented\n"
        assert _wait_closed(manager, client)


def test_check_timeouts_closes_idle_connection(tmp_path):
    manager = _make_manager(tmp_path, timeout="1")
    try:
        client = _connect(manager)
        with client:
            _accept_one(manager)
            manager.check_timeouts(time.time() + 5)
            assert manager.connections == {}
            assert _wait_closed(manager, client)
    finally:
        manager.close()


def test_zero_timeout_never_expires(tmp_path):
    manager = _make_manager(tmp_path, timeout="0")
    try:
        client = _connect(manager)
        with client:
            _accept_one(manager)
            manager.check_timeouts(time.time() + 10_000)
            assert len(manager.connections) == 1
    finally:
        manager.close()


def test_start_servers_stops_and_closes_when_already_stopped(tmp_path):
    manager = ServerManager()
    manager.add_server(ServerBlock(data={"listen": "0"}))
    with ShutdownSignal() as shutdown:
        shutdown.trigger(signal.SIGTERM, None)
        manager.start_servers(shutdown)
    assert manager.servers[0].fileno() == -1


def test_start_servers_loop_ends_on_trigger(tmp_path):
    manager = ServerManager()
    manager.add_server(ServerBlock(data={"listen": "0"}))
    with ShutdownSignal() as shutdown:
        thread = threading.Thread(target=manager.start_servers, args=(shutdown,))
        thread.start()
        time.sleep(0.2)
        shutdown.trigger(signal.SIGINT, None)
        thread.join(timeout=5)
        assert not thread.is_alive()
    assert manager.servers[0].listener is None