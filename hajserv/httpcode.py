"""HTTP status codes and their reason phrases."""

from __future__ import annotations

from dataclasses import dataclass

_REASONS: dict[int, str] = {
    100: "Continue",
    101: "Switching Protocols",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Payload Too Large",
    414: "URI Too Long",
    415: "Unsupported Media Type",
    416: "Range Not Satisfiable",
    417: "Expectation Failed",
    426: "Upgrade Required",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
}

UNKNOWN_STATUS = "Unknown Status"


def reason_phrase(code: int) -> str:
    """Return the reason phrase for a status code, or ``Unknown Status``."""
    return _REASONS.get(code, UNKNOWN_STATUS)


@dataclass(frozen=True)
class HttpCode:
    """An HTTP status code, 200 by default."""

    code: int = 200

    def message(self) -> str:
        """Return this code's reason phrase."""
        return reason_phrase(self.code)