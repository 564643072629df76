"""A small non-blocking HTTP/1.x static file server."""

__version__ = "1.0.0"