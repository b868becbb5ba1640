"""
=============================================================================
HTTP PROTOCOL
=============================================================================

The slice of HTTP/1.1 this server speaks:

    REQUEST:                          RESPONSE (found):
    ─────────                         ─────────────────
    GET /path HTTP/1.1\r\n            HTTP/1.1 200 OK\r\n
    [ignored header lines]\r\n        Connection: close\r\n
    \r\n                              Content-Type: <mime>\r\n
                                      Content-Length: <n>\r\n
                                      \r\n
                                      <n bytes>

                                      RESPONSE (not found):
                                      ─────────────────────
                                      HTTP/1.1 404 Not Found\r\n\r\n404

=============================================================================
"""

from .errors import (
    ServeError,
    ConnectionClosedEarly,
    HeaderTooLarge,
    MalformedRequestLine,
    Rejection,
    FileNotFound,
    PathOutsideRoot,
)
from .request import RequestLine, RequestLineParser, parse_request_line
from .response import (
    NOT_FOUND_RESPONSE,
    ResponseHead,
    ResponseState,
    ServeState,
)
from .status_codes import HTTPStatus
from .mime_types import MIME_TYPES, DEFAULT_MIME_TYPE, get_mime_type

__all__ = [
    # Errors
    "ServeError",
    "ConnectionClosedEarly",
    "HeaderTooLarge",
    "MalformedRequestLine",
    "Rejection",
    "FileNotFound",
    "PathOutsideRoot",

    # Request parsing
    "RequestLine",
    "RequestLineParser",
    "parse_request_line",

    # Response building
    "NOT_FOUND_RESPONSE",
    "ResponseHead",
    "ResponseState",
    "ServeState",

    # Status codes
    "HTTPStatus",

    # MIME types
    "MIME_TYPES",
    "DEFAULT_MIME_TYPE",
    "get_mime_type",
]
