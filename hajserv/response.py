"""An HTTP response and its wire form."""

from __future__ import annotations

from dataclasses import dataclass

from .utils import http_date

SERVER_NAME = "HajServ/1.0"


@dataclass
class Response:
    """Status, version, raw header lines and body of an HTTP response.

    ``headers`` holds header lines joined by CRLF, without a trailing CRLF.
    """

    status_code: int = 200
    http_version: str = "HTTP/1.1"
    headers: str = ""
    body: str | bytes = ""

    def add_header(self, key: str, value: str) -> None:
        """Append a ``key: value`` header line."""
        line = f"{key}: {value}"
        self.headers = line if not self.headers else f"{self.headers}\r\n{line}"

    def serialize(self, now: float | None = None) -> bytes:
        """Return the full response as bytes, stamped with the date ``now``."""
        body = self.body.encode("utf-8") if isinstance(self.body, str) else self.body
        head = (
            f"{self.http_version} {self.status_code}\r\n"
            f"Server: {SERVER_NAME}\r\n"
            f"Date: {http_date(now)}\r\n"
            f"Content-Length: {len(body)}\r\n"
            f"{self.headers}\r\n\r\n"
        )
        return head.encode("utf-8") + body