"""
Unit tests for HTTP response building.
"""

import pytest

from minihttp.errors import UnknownStatusError
from minihttp.http.mime_types import TEXT_PLAIN, get_content_type
from minihttp.http.response import (
    HTTPResponse,
    HeaderKind,
    HeaderLine,
    ResponseBuilder,
    build_headers,
    not_implemented,
    render,
)
from minihttp.http.status_codes import HTTPStatus


class TestHeaderLine:
    """Tests for header line rendering."""

    def test_status_line(self):
        assert render(HeaderLine.status(200, "OK")) == "HTTP/1.1 200 OK"
        assert render(HeaderLine.status(404, "Not found")) == "HTTP/1.1 404 Not found"

    def test_content_type_line(self):
        line = HeaderLine.content_type(get_content_type("svg"))
        assert line.kind is HeaderKind.CONTENT_TYPE
        assert line.render() == "Content-Type: image/svg+xml"

    def test_content_length_line(self):
        assert render(HeaderLine.content_length(13)) == "Content-Length: 13"

    def test_build_headers_order_and_terminator(self):
        headers = build_headers([
            HeaderLine.status(200, "OK"),
            HeaderLine.content_type(TEXT_PLAIN),
            HeaderLine.content_length(0),
        ])
        assert headers == (
            "HTTP/1.1 200 OK\r\n"
            "Content-Type: text/plain\r\n"
            "Content-Length: 0\r\n"
            "\r\n"
        )


class TestResponseBuilder:
    """Tests for ResponseBuilder."""

    def test_html_response_bytes(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type(get_content_type("html"))
            .body(b"<b>hi!</b>")
            .build())

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/html\r\n"
            b"Content-Length: 10\r\n"
            b"\r\n"
            b"<b>hi!</b>"
        )

    def test_defaults(self):
        response = ResponseBuilder().build()
        assert response.headers == (
            b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 0\r\n\r\n"
        )
        assert response.body == b""

    def test_length_follows_final_body(self):
        """Content-Length is computed from the last body set."""
        response = (ResponseBuilder()
            .body(b"x" * 500)
            .status_body(HTTPStatus.BAD_REQUEST)
            .build())

        assert response.body == b"400 Bad Request"
        assert b"Content-Length: 15\r\n" in response.headers
        assert response.content_length == 15

    def test_length_counts_bytes_not_characters(self):
        response = ResponseBuilder().body("héllo").build()
        assert b"Content-Length: 6\r\n" in response.headers

    def test_explicit_phrase_for_unregistered_code(self):
        response = ResponseBuilder().status_body(504, "Unauthorized").build()
        assert response.headers.startswith(b"HTTP/1.1 504 Unauthorized\r\n")
        assert response.body == b"504 Unauthorized"
        assert response.status_code == 504

    def test_unregistered_code_without_phrase_is_fatal(self):
        with pytest.raises(UnknownStatusError):
            ResponseBuilder().status(504)

    def test_no_extra_headers(self):
        response = ResponseBuilder().body(b"abc").build()
        lines = response.headers.split(b"\r\n")
        assert lines == [
            b"HTTP/1.1 200 OK",
            b"Content-Type: text/plain",
            b"Content-Length: 3",
            b"",
            b"",
        ]


class TestNotImplemented:

    def test_fixed_501(self):
        response = not_implemented()
        assert isinstance(response, HTTPResponse)
        assert response.to_bytes() == (
            b"HTTP/1.1 501 Not Implemented\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 19\r\n"
            b"\r\n"
            b"501 Not Implemented"
        )
