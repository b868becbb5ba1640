"""
=============================================================================
SERVE ERRORS
=============================================================================

Every way a single connection can fail before or while a file is served.

    ServeError
    ├── ConnectionClosedEarly   peer sent EOF before \r\n\r\n
    ├── HeaderTooLarge          buffer filled without \r\n\r\n
    ├── MalformedRequestLine    method / path / version rejected
    └── FileNotFound            open failed, 404 already written
        └── PathOutsideRoot     resolved path escapes the serving root

Anything else (socket resets, timeouts, stat or write failures) is a plain
OSError and propagates unchanged.

The first three happen before a single byte is written, so the client just
sees the connection close. FileNotFound is raised AFTER the 404 response
has been sent, so the caller can still log it.
=============================================================================
"""

from enum import Enum


class ServeError(Exception):
    """Base class for failures while handling one connection."""


class ConnectionClosedEarly(ServeError):
    """The peer closed the connection before a complete header arrived."""

    def __init__(self, received: int = 0):
        super().__init__(f"Connection closed after {received} bytes, before end of header")
        self.received = received


class HeaderTooLarge(ServeError):
    """The header buffer filled up without a \\r\\n\\r\\n terminator."""

    def __init__(self, capacity: int):
        super().__init__(f"No header terminator within {capacity} bytes")
        self.capacity = capacity


class Rejection(Enum):
    """
    Why a request line was rejected.

    The accepted grammar is small enough that every failure falls in
    exactly one of these buckets.
    """
    METHOD = "method is not GET"
    EMPTY_PATH = "path is missing"
    RELATIVE_PATH = "path does not start with /"
    VERSION = "version is not HTTP/1.1"


class MalformedRequestLine(ServeError):
    """The request line does not match ``GET /<path> HTTP/1.1\\r\\n``."""

    def __init__(self, reason: Rejection, token: bytes = b""):
        detail = f": {token!r}" if token else ""
        super().__init__(f"Malformed request line, {reason.value}{detail}")
        self.reason = reason
        self.token = token


class FileNotFound(ServeError):
    """
    The resolved file could not be opened.

    The 404 response has already been written when this is raised.
    The original OSError is available as ``__cause__``.
    """

    def __init__(self, name: str):
        super().__init__(f"File not found: {name}")
        self.name = name


class PathOutsideRoot(FileNotFound):
    """The resolved path points outside the serving root."""
