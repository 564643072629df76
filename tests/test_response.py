from hajserv.response import Response
from hajserv.utils import http_date


def test_defaults():
    response = Response()
    assert response.status_code == 200
    assert response.http_version == "HTTP/1.1"
    assert response.headers == ""
    assert response.body == ""


def test_add_header_joins_with_crlf():
    response = Response()
    response.add_header("Connection", "close")
    assert response.headers == "Connection: close"
    response.add_header("X-A", "b")
    assert response.headers == "Connection: close\r\nX-A: b"


def test_add_header_after_set_headers():
    response = Response(headers="Content-Type: text/plain; charset=utf-8")
    response.add_header("Connection", "close")
    assert response.headers == "Content-Type: text/plain; charset=utf-8\r\nConnection: close"


def test_serialize_exact_bytes():
    response = Response(status_code=404, body="404 Not Found")
    response.add_header("Connection", "keep-alive")
    expected = (
        "HTTP/1.1 404\r\n"
        "Server: HajServ/1.0\r\n"
        f"Date: {http_date(0)}\r\n"
        "Content-Length: 13\r\n"
        "Connection: keep-alive\r\n\r\n"
        "404 Not Found"
    ).encode()
    assert response.serialize(0) == expected


def test_serialize_splits_head_and_body():
    body = b"\x00\xffbinary"
    response = Response(http_version="HTTP/1.0", body=body)
    response.add_header("Connection", "close")
    head, _, rest = response.serialize(0).partition(b"\r\n\r\n")
    assert rest == body
    lines = head.split(b"\r\n")
    assert lines[0] == b"HTTP/1.0 200"
    assert f"Content-Length: {len(body)}".encode() in lines
    assert lines[-1] == b"Connection: close"


def test_empty_headers_leave_blank_line():
    raw = Response().serialize(0)
    assert raw.endswith(b"Content-Length: 0\r\n\r\n\r\n")