"""
Unit tests for request line parsing.
"""

import pytest

from fileserve.http.errors import MalformedRequestLine, Rejection
from fileserve.http.request import (
    RequestLine,
    RequestLineParser,
    parse_request_line,
)


class TestRequestLineParser:
    """Tests for RequestLineParser class."""

    def test_parse_simple_get(self):
        """Test parsing the minimal request."""
        parser = RequestLineParser()
        line = parser.parse(b"GET / HTTP/1.1\r\n\r\n")

        assert line == RequestLine(method="GET", path="/", version="HTTP/1.1")

    def test_parse_path(self):
        line = parse_request_line(b"GET /css/main.css HTTP/1.1\r\n\r\n")
        assert line.path == "/css/main.css"

    def test_header_lines_ignored(self):
        """Anything after the version line is opaque."""
        raw = (
            b"GET /app HTTP/1.1\r\n"
            b"Host: localhost:9000\r\n"
            b"User-Agent: pytest\r\n"
            b"Garbage without a colon\r\n"
            b"\r\n"
        )
        assert parse_request_line(raw).path == "/app"

    def test_extra_spaces_between_tokens(self):
        line = parse_request_line(b"  GET   /app    HTTP/1.1\r\n\r\n")
        assert line.method == "GET"
        assert line.path == "/app"

    def test_query_string_kept_in_path(self):
        """There is no query parsing; '?' is just another path byte."""
        line = parse_request_line(b"GET /app?x=1 HTTP/1.1\r\n\r\n")
        assert line.path == "/app?x=1"

    def test_non_ascii_path_round_trips_to_filesystem_name(self):
        import os

        raw_path = "/café.html".encode("utf-8")
        line = parse_request_line(b"GET " + raw_path + b" HTTP/1.1\r\n\r\n")
        assert os.fsencode(line.path) == raw_path

    # =========================================================================
    # REJECTIONS
    # =========================================================================

    @pytest.mark.parametrize("raw", [
        b"POST / HTTP/1.1\r\n\r\n",
        b"HEAD / HTTP/1.1\r\n\r\n",
        b"get / HTTP/1.1\r\n\r\n",
        b"GETX / HTTP/1.1\r\n\r\n",
        b"\r\n\r\n",
        b"",
    ])
    def test_reject_method(self, raw: bytes):
        with pytest.raises(MalformedRequestLine) as exc_info:
            parse_request_line(raw)

        assert exc_info.value.reason is Rejection.METHOD

    @pytest.mark.parametrize("raw", [b"GET", b"GET ", b"GET    "])
    def test_reject_missing_path(self, raw: bytes):
        with pytest.raises(MalformedRequestLine) as exc_info:
            parse_request_line(raw)

        assert exc_info.value.reason is Rejection.EMPTY_PATH

    @pytest.mark.parametrize("raw", [
        b"GET index.html HTTP/1.1\r\n\r\n",
        b"GET http://example.com/ HTTP/1.1\r\n\r\n",
        b"GET \r\n\r\n",
    ])
    def test_reject_relative_path(self, raw: bytes):
        with pytest.raises(MalformedRequestLine) as exc_info:
            parse_request_line(raw)

        assert exc_info.value.reason is Rejection.RELATIVE_PATH

    @pytest.mark.parametrize("raw", [
        b"GET / HTTP/1.0\r\n\r\n",
        b"GET / HTTP/2\r\n\r\n",
        b"GET / http/1.1\r\n\r\n",
        b"GET / HTTP/1.1 \r\n\r\n",
        b"GET / HTTP/1.1\n\n",
        b"GET /\r\n\r\n",
        b"GET / HTTP/1.1",
    ])
    def test_reject_version(self, raw: bytes):
        with pytest.raises(MalformedRequestLine) as exc_info:
            parse_request_line(raw)

        assert exc_info.value.reason is Rejection.VERSION

    def test_error_message_names_reason(self):
        with pytest.raises(MalformedRequestLine) as exc_info:
            parse_request_line(b"DELETE / HTTP/1.1\r\n\r\n")

        assert "not GET" in str(exc_info.value)
        assert exc_info.value.token == b"DELETE"
