"""
=============================================================================
REQUEST LINE PARSING
=============================================================================

The server understands exactly one shape of request:

    GET /<path> HTTP/1.1\r\n
    [anything]\r\n
    \r\n

Only the request line is parsed. Header lines after it are tolerated as
opaque bytes and never looked at.

=============================================================================
THE GRAMMAR
=============================================================================

    request   = *SP method 1*SP path 1*SP "HTTP/1.1" CRLF *OCTET
    method    = "GET"
    path      = "/" *( any byte except SP )

Tokens are separated by runs of SP (0x20). Note that CR and LF are NOT
separators, so in "GET /x\r\n\r\n" the path token is "/x\r\n\r\n" and
the version check fails - the line simply has no version.

=============================================================================
REJECTIONS
=============================================================================

Every way a line can fail maps to one Rejection member:

    ┌──────────────────────────────────────┬───────────────────┐
    │ Input                                │ Rejection         │
    ├──────────────────────────────────────┼───────────────────┤
    │ POST / HTTP/1.1\r\n\r\n              │ METHOD            │
    │ get / HTTP/1.1\r\n\r\n               │ METHOD            │
    │ GET                                  │ EMPTY_PATH        │
    │ GET index HTTP/1.1\r\n\r\n           │ RELATIVE_PATH     │
    │ GET / HTTP/1.0\r\n\r\n               │ VERSION           │
    │ GET / HTTP/1.1 \r\n\r\n              │ VERSION           │
    └──────────────────────────────────────┴───────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass

from .errors import MalformedRequestLine, Rejection


SP = b" "
METHOD = b"GET"
VERSION_LINE = b"HTTP/1.1\r\n"


@dataclass(frozen=True)
class RequestLine:
    """
    A parsed request line.

    Attributes:
        method: Always "GET".
        path: Request path, starting with "/". Decoded with the filesystem
              encoding so it can be handed straight to open().
        version: Always "HTTP/1.1".
    """
    method: str
    path: str
    version: str = "HTTP/1.1"


class RequestLineParser:
    """
    Parses the request line out of a buffered request header.

    Stateless; one instance can be shared by every connection.

    Usage:
        parser = RequestLineParser()
        line = parser.parse(b"GET /app HTTP/1.1\\r\\n\\r\\n")
        line.path  # "/app"
    """

    def parse(self, data: bytes) -> RequestLine:
        """
        Parse and validate the request line.

        Args:
            data: The occupied part of the header buffer.

        Returns:
            The parsed RequestLine.

        Raises:
            MalformedRequestLine: If any grammar rule fails. The
                                  exception's ``reason`` says which.
        """
        # ─────────────────────────────────────────────────────────────────
        # METHOD
        # ─────────────────────────────────────────────────────────────────
        method, pos = self._next_token(data, 0)
        if method != METHOD:
            raise MalformedRequestLine(Rejection.METHOD, method)

        # ─────────────────────────────────────────────────────────────────
        # PATH
        # ─────────────────────────────────────────────────────────────────
        path, pos = self._next_token(data, pos)
        if not path:
            raise MalformedRequestLine(Rejection.EMPTY_PATH)
        if not path.startswith(b"/"):
            raise MalformedRequestLine(Rejection.RELATIVE_PATH, path)

        # ─────────────────────────────────────────────────────────────────
        # VERSION
        # ─────────────────────────────────────────────────────────────────
        # Whatever follows the separating spaces must start with the exact
        # literal. Anything after it is other header lines, ignored.
        pos = self._skip_spaces(data, pos)
        if not data.startswith(VERSION_LINE, pos):
            raise MalformedRequestLine(Rejection.VERSION, data[pos:pos + len(VERSION_LINE)])

        return RequestLine(
            method=method.decode("ascii"),
            path=os.fsdecode(path),
        )

    @staticmethod
    def _skip_spaces(data: bytes, pos: int) -> int:
        while data[pos:pos + 1] == SP:
            pos += 1
        return pos

    def _next_token(self, data: bytes, pos: int) -> tuple[bytes, int]:
        """Return the next SP-delimited token and the offset just past it."""
        start = self._skip_spaces(data, pos)
        end = data.find(SP, start)
        if end == -1:
            end = len(data)
        return data[start:end], end


def parse_request_line(data: bytes) -> RequestLine:
    """Convenience wrapper around RequestLineParser().parse()."""
    return RequestLineParser().parse(data)
