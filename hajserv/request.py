"""HTTP/1.x request parsing.

Raw requests are handled as text in which each character stands for one
byte (bytes input is decoded as Latin-1), so percent-decoded URIs and bodies
keep their exact byte values.
"""

from __future__ import annotations

import re
import string
from dataclasses import dataclass, field
from itertools import islice

from .httpcode import HttpCode
from .utils import CYAN, GREEN, RED, RESET, YELLOW, to_lower

VALID_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"}
)
ALLOWED_METHODS = frozenset({"GET"})
NOT_IMPLEMENTED_METHODS = frozenset({"POST", "PUT", "DELETE"})
SUPPORTED_VERSIONS = ("HTTP/1.0", "HTTP/1.1")

_URI_CHARS = frozenset(string.ascii_letters + string.digits + "-_./~%?&=")
_FORBIDDEN_DECODED = ("..", "\\", "\0", "//")
_SPACE = " \t\n\v\f\r"
_WORDS = re.compile(r"[^ \t\n\v\f\r]+")
_ESCAPE = re.compile(r"%(?:([0-9A-Fa-f]{2}))?")
_BODY_UNIT = re.compile(r"\r\n?|.", re.DOTALL)


def _unescape(match: re.Match[str]) -> str:
    if match.group(1) is None:
        raise ValueError(f"malformed percent escape at offset {match.start()}")
    return chr(int(match.group(1), 16))


def decode_percent_encoding(text: str) -> str:
    """Replace every ``%XX`` escape; raise ValueError on a malformed one."""
    return _ESCAPE.sub(_unescape, text)


def validate_uri(uri: str) -> bool:
    """Check that a request target is a safe absolute path."""
    if not uri.startswith("/") or not set(uri) <= _URI_CHARS:
        return False
    try:
        decoded = decode_percent_encoding(uri)
    except ValueError:
        return False
    return not any(bad in decoded for bad in _FORBIDDEN_DECODED)


@dataclass
class Request:
    """A parsed HTTP request. Header names are stored in lower case."""

    method: str = ""
    uri: str = ""
    http_version: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    is_valid: bool = False

    def has_header(self, key: str) -> bool:
        """Tell whether a header is present, ignoring case."""
        return to_lower(key) in self.headers

    def header(self, key: str) -> str:
        """Return a header's value, ignoring case, or an empty string."""
        return self.headers.get(to_lower(key), "")

    def describe(self) -> str:
        """Return a coloured, multi-line log of the request."""
        rule = "=" * 42
        parts = [
            f"{CYAN}{rule}{RESET}\n",
            f"{CYAN}                HTTP REQUEST              {RESET}\n",
            f"{CYAN}{rule}{RESET}\n",
            f"{GREEN}Method:        {RESET}{self.method}\n",
            f"{GREEN}URI:           {RESET}{self.uri}\n",
            f"{GREEN}HTTP Version:  {RESET}{self.http_version}\n",
            f"{YELLOW}--------------- HEADERS ------------------{RESET}\n",
        ]
        parts.extend(
            f"{YELLOW}{key}: {RESET}{self.headers[key]}\n"
            for key in sorted(self.headers)
        )
        parts.append(f"{YELLOW}---------------- BODY ---------------------{RESET}\n")
        parts.append(f"{GREEN}Body size:     {RESET}{len(self.body)} bytes\n")
        parts.append(f"{RED}{self.body or '(empty)'}{RESET}\n")
        parts.append(f"{CYAN}{rule}{RESET}\n")
        return "".join(parts)


class RequestError(Exception):
    """Raised when a request is rejected; carries the status to answer with.

    ``request`` holds whatever was parsed before the failure.
    """

    def __init__(self, status: HttpCode, request: Request) -> None:
        super().__init__(f"{status.code} {status.message()}")
        self.status = status
        self.request = request


class _Reader:
    """Line and body reader over the raw request text."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def readline(self) -> str | None:
        if self._pos >= len(self._text):
            return None
        end = self._text.find("\n", self._pos)
        if end == -1:
            line, self._pos = self._text[self._pos:], len(self._text)
        else:
            line, self._pos = self._text[self._pos:end], end + 1
        return line

    def read_body(self, length: int) -> str | None:
        """Read ``length`` units, each CR or CRLF becoming LF; None if short."""
        if length > len(self._text) - self._pos:
            return None
        units = [
            match.group()
            for match in islice(_BODY_UNIT.finditer(self._text, self._pos), length)
        ]
        if len(units) != length:
            return None
        return "".join("\n" if unit.startswith("\r") else unit for unit in units)


def _reject(code: int, request: Request) -> RequestError:
    return RequestError(HttpCode(code), request)


def _parse_request_line(reader: _Reader, request: Request) -> None:
    line = reader.readline()
    if not line:
        raise _reject(400, request)
    words = _WORDS.findall(line.removesuffix("\r"))
    request.method, request.uri, request.http_version = (words + ["", "", ""])[:3]
    if len(words) < 3:
        raise _reject(400, request)
    if request.http_version not in SUPPORTED_VERSIONS:
        raise _reject(505, request)
    if request.method not in VALID_METHODS:
        raise _reject(400, request)
    if request.method not in ALLOWED_METHODS:
        raise _reject(
            501 if request.method in NOT_IMPLEMENTED_METHODS else 405, request
        )
    if not validate_uri(request.uri):
        raise _reject(400, request)
    request.uri = decode_percent_encoding(request.uri)


def _parse_headers(reader: _Reader, request: Request) -> None:
    while (line := reader.readline()) is not None:
        if line in ("", "\r"):
            if request.http_version == "HTTP/1.1" and "host" not in request.headers:
                raise _reject(400, request)
            return
        key, sep, value = line.removesuffix("\r").partition(":")
        if not sep:
            raise _reject(400, request)
        key = to_lower(key)
        value = value.lstrip(_SPACE)
        if key and value:
            request.headers[key] = value
    raise _reject(400, request)


def _parse_body(reader: _Reader, request: Request) -> None:
    length_text = request.headers.get("content-length", "")
    if length_text and not all(char in string.digits for char in length_text):
        raise _reject(400, request)
    length = int(length_text) if length_text else 0
    body = reader.read_body(length)
    if body is None:
        raise _reject(400, request)
    request.body = body


def parse_request(raw: str | bytes) -> Request:
    """Parse a raw HTTP request; raise RequestError with the status to send."""
    text = raw.decode("latin-1") if isinstance(raw, (bytes, bytearray)) else raw
    request = Request()
    reader = _Reader(text)
    _parse_request_line(reader, request)
    _parse_headers(reader, request)
    _parse_body(reader, request)
    request.is_valid = True
    return request