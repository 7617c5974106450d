"""Tests for raw MIME header parsing, multipart splitting and content decoding."""

import pytest

from mailarchive.services.mime.content_decoder import (
    decode_part_text,
    decode_transfer,
    get_charset,
    transcode,
)
from mailarchive.services.mime.header_parser import (
    HeaderMap,
    parse_addresses,
    parse_headers,
    split_message,
)
from mailarchive.services.mime.multipart import detect_boundary, disposition_type, split_multipart


class TestSplitMessage:
    """Test header/body separation."""

    def test_split_lf(self):
        headers, body = split_message(b"Subject: hi\nFrom: a@b.com\n\nbody\n")
        assert headers == b"Subject: hi\nFrom: a@b.com"
        assert body == b"body\n"

    def test_split_crlf(self):
        headers, body = split_message(b"Subject: hi\r\n\r\nline1\r\n\r\nline2")
        assert headers == b"Subject: hi"
        assert body == b"line1\r\n\r\nline2"

    def test_no_blank_line_is_all_headers(self):
        headers, body = split_message(b"Subject: hi\nFrom: a@b.com")
        assert headers == b"Subject: hi\nFrom: a@b.com"
        assert body == b""

    def test_leading_blank_line_means_no_headers(self):
        headers, body = split_message(b"\njust a body")
        assert headers == b""
        assert body == b"just a body"


class TestParseHeaders:
    """Test header block parsing."""

    def test_lookup_is_case_insensitive(self):
        headers = parse_headers(b"Message-ID: <a@b>\nSUBJECT: Hello")
        assert headers["message-id"] == "<a@b>"
        assert headers.get("Subject") == "Hello"
        assert "Message-Id" in headers
        assert "X-Missing" not in headers

    def test_folded_lines_are_joined(self):
        headers = parse_headers(b"Content-Type: multipart/mixed;\n boundary=\"abc\"\n\tcharset=utf-8")
        assert headers["Content-Type"] == 'multipart/mixed; boundary="abc" charset=utf-8'

    def test_duplicate_headers_are_joined(self):
        headers = parse_headers(b"To: a@example.com\nTo: b@example.com")
        assert headers["to"] == "a@example.com, b@example.com"

    def test_line_without_colon_yields_empty_value(self):
        headers = parse_headers("Garbage\nSubject: ok")
        assert headers["garbage"] == ""
        assert headers["subject"] == "ok"

    def test_empty_name_is_dropped(self):
        headers = parse_headers(": no name\nSubject: ok")
        assert dict(headers) == {"subject": "ok"}

    def test_invalid_utf8_is_replaced(self):
        headers = parse_headers(b"Subject: caf\xe9")
        assert headers["subject"] == "caf�"

    def test_header_map_add(self):
        headers = HeaderMap()
        headers.add("X-Tag", " one ")
        headers.add("x-tag", "two")
        assert headers["X-TAG"] == "one, two"


class TestParseAddresses:
    """Test address extraction from header values."""

    def test_display_names_are_dropped(self):
        value = '"Doe, John" <John@Example.com>, jane@example.org'
        assert parse_addresses(value) == ["john@example.com", "jane@example.org"]

    def test_duplicates_are_removed(self):
        assert parse_addresses("a@example.com, A@EXAMPLE.COM") == ["a@example.com"]

    def test_no_address(self):
        assert parse_addresses("undisclosed-recipients:;") == []
        assert parse_addresses(None) == []
        assert parse_addresses("") == []


class TestDetectBoundary:
    """Test boundary detection."""

    def test_quoted_parameter(self):
        assert detect_boundary('multipart/mixed; boundary="==B-1=="', b"") == "==B-1=="

    def test_bare_parameter(self):
        assert detect_boundary("multipart/related; boundary=rel-boundary; type=text/html", b"") == "rel-boundary"

    def test_body_scan_without_header(self):
        body = b"\r\n\r\n--scanned_123\r\nContent-Type: text/plain\r\n\r\nhi\r\n--scanned_123--\r\n"
        assert detect_boundary("multipart/mixed", body) == "scanned_123"

    def test_body_scan_closing_delimiter(self):
        assert detect_boundary(None, b"--only-close--\n") == "only-close"

    def test_body_scan_gives_up_after_limit(self):
        body = b"".join(b"line %d\n" % i for i in range(12)) + b"--late\n"
        assert detect_boundary(None, body) is None

    def test_no_boundary(self):
        assert detect_boundary("text/plain", b"hello\n") is None


class TestSplitMultipart:
    """Test multipart splitting."""

    def test_preamble_and_epilogue_dropped(self):
        body = (
            b"preamble text\n"
            b"--XYZ\n"
            b"Content-Type: text/plain\n\nfirst\n"
            b"--XYZ\n"
            b"Content-Type: text/html\n\n<p>second</p>\n"
            b"--XYZ--\n"
            b"epilogue\n"
        )
        parts = split_multipart(body, "XYZ")
        assert [part.mime_type for part in parts] == ["text/plain", "text/html"]
        assert parts[0].body == b"first"
        assert parts[1].body == b"<p>second</p>"

    def test_crlf_body(self):
        body = b"--b\r\nContent-Type: text/plain\r\n\r\nhello\r\n--b--\r\n"
        parts = split_multipart(body, "b")
        assert len(parts) == 1
        assert parts[0].body == b"hello"

    def test_delimiter_must_start_a_line(self):
        body = b"--b\nContent-Type: text/plain\n\nsee --b inside\n--b--\n"
        parts = split_multipart(body, "b")
        assert len(parts) == 1
        assert parts[0].body == b"see --b inside"

    def test_boundary_with_regex_characters(self):
        body = b"--a.b+c\nContent-Type: text/plain\n\nx\n--a.b+c--\n"
        assert len(split_multipart(body, "a.b+c")) == 1

    def test_missing_delimiter_yields_nothing(self):
        assert split_multipart(b"no parts here\n", "b") == []

    def test_part_properties(self):
        body = (
            b"--b\n"
            b'Content-Type: Application/PDF; name="r.pdf"\n'
            b"Content-Disposition: attachment\n\nx\n--b--\n"
        )
        part = split_multipart(body, "b")[0]
        assert part.mime_type == "application/pdf"
        assert part.disposition == "attachment"
        assert part.disposition_type == "attachment"

    def test_fixture_parts(self, fixture_bytes):
        raw_headers, body = split_message(fixture_bytes("multipart_report.eml"))
        headers = parse_headers(raw_headers)
        boundary = detect_boundary(headers["Content-Type"], body)
        assert boundary == "==BOUNDARY-1=="

        parts = split_multipart(body, boundary)
        assert [part.mime_type for part in parts] == ["text/html", "application/pdf"]


class TestContentDecoder:
    """Test transfer and charset decoding."""

    def test_get_charset(self):
        assert get_charset('text/plain; charset="iso-8859-1"') == "iso-8859-1"
        assert get_charset("text/plain") == "UTF-8"
        assert get_charset(None) == "UTF-8"

    def test_base64_with_whitespace(self):
        headers = {"Content-Transfer-Encoding": "Base64"}
        assert decode_transfer(b"aGVs\r\nbG8=\r\n", headers) == b"hello"

    def test_invalid_base64_keeps_body(self):
        headers = {"Content-Transfer-Encoding": "base64"}
        assert decode_transfer(b"not*base64!", headers) == b"not*base64!"

    def test_quoted_printable(self):
        headers = {"Content-Transfer-Encoding": "quoted-printable"}
        assert decode_transfer(b"caf=C3=A9 soft=\nbreak", headers) == "café softbreak".encode("utf-8")

    @pytest.mark.parametrize("encoding", ["7bit", "8bit", "binary", "x-unknown", None])
    def test_identity_encodings(self, encoding):
        headers = {"Content-Transfer-Encoding": encoding} if encoding else {}
        assert decode_transfer(b"as is", headers) == b"as is"

    def test_transcode_latin1(self):
        assert transcode(b"caf\xe9", "ISO-8859-1") == "café".encode("utf-8")

    def test_transcode_unknown_charset_keeps_bytes(self):
        assert transcode(b"caf\xe9", "x-no-such-charset") == b"caf\xe9"

    def test_transcode_utf8_is_identity(self):
        assert transcode(b"\xff\xfe", "utf-8") == b"\xff\xfe"

    def test_decode_part_text(self):
        headers = {
            "Content-Type": "text/plain; charset=iso-8859-1",
            "Content-Transfer-Encoding": "quoted-printable",
        }
        assert decode_part_text(b"H=E9llo w=F6rld\n", headers) == "Héllo wörld\n"


class TestDispositionType:
    """Test reading the disposition token."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ('attachment; filename="inline-chart.pdf"', "attachment"),
            ('Inline ; filename="attachment.png"', "inline"),
            ("ATTACHMENT", "attachment"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_token_before_parameters(self, value, expected):
        assert disposition_type(value) == expected
