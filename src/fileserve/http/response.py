"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

Two responses exist, and both are fixed in shape.

FOUND (file opened):

    HTTP/1.1 200 OK\r\n                    ← Status line
    Connection: close\r\n                  ← Always; one request per connection
    Content-Type: text/html\r\n            ← From the MIME table
    Content-Length: 1234\r\n               ← Exact file size
    \r\n                                   ← End of head
    <1234 bytes of file>                   ← Streamed separately

NOT FOUND (file could not be opened):

    HTTP/1.1 404 Not Found\r\n\r\n404

Note the 404 has no Content-Length: the body is delimited by the
connection closing.

=============================================================================
RESPONSE STATE
=============================================================================

While a file is streamed we track how many body bytes have gone out:

    ┌──────────────────────────────────────────────────────────────────┐
    │  head sent ──► bytes_sent = 0                                    │
    │                  │                                               │
    │                  ▼  sendfile() moves n bytes                     │
    │                bytes_sent += n      (never past content_length)  │
    │                  │                                               │
    │                  ▼                                               │
    │                done when n == 0 or bytes_sent == content_length  │
    └──────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum

from .status_codes import HTTPStatus


NOT_FOUND_RESPONSE = b"HTTP/1.1 404 Not Found\r\n\r\n404"


class ServeState(Enum):
    """
    Lifecycle of one connection's request handling.

        AWAITING_REQUEST → HEADER_PARSED → RESOLVING ─┬─► FOUND → HEADER_SENT → STREAMING ─┐
                                                      │                                   ├─► DONE
                                                      └─► NOT_FOUND → NOT_FOUND_SENT ─────┘
        (any state) ─► FAILED ─► DONE
    """
    AWAITING_REQUEST = "awaiting_request"
    HEADER_PARSED = "header_parsed"
    RESOLVING = "resolving"
    FOUND = "found"
    HEADER_SENT = "header_sent"
    STREAMING = "streaming"
    NOT_FOUND = "not_found"
    NOT_FOUND_SENT = "not_found_sent"
    FAILED = "failed"
    DONE = "done"


@dataclass(frozen=True)
class ResponseHead:
    """
    Status line and headers of a 200 response.

    The body is not part of this object; it is streamed from the file
    after to_bytes() has been written in full.
    """
    content_type: str
    content_length: int
    status: HTTPStatus = HTTPStatus.OK
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def to_bytes(self) -> bytes:
        """Serialize the head, including the blank line that ends it."""
        lines = [
            self.status_line,
            "Connection: close",
            f"Content-Type: {self.content_type}",
            f"Content-Length: {self.content_length}",
            "",
            "",
        ]
        return "\r\n".join(lines).encode("latin-1")


@dataclass
class ResponseState:
    """
    Progress of one request through ServeState, plus body byte accounting.

    Attributes:
        state: Current ServeState.
        content_length: Size of the file being sent (0 until known).
        bytes_sent: Body bytes transferred so far.
    """
    state: ServeState = ServeState.AWAITING_REQUEST
    content_length: int = 0
    bytes_sent: int = 0

    @property
    def remaining(self) -> int:
        return self.content_length - self.bytes_sent

    @property
    def is_complete(self) -> bool:
        return self.bytes_sent >= self.content_length

    def advance(self, sent: int) -> None:
        """Record ``sent`` more body bytes."""
        if sent < 0 or self.bytes_sent + sent > self.content_length:
            raise ValueError(
                f"Sent {self.bytes_sent + sent} body bytes, "
                f"only {self.content_length} allowed"
            )
        self.bytes_sent += sent
