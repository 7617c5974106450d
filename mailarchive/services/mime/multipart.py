"""Boundary detection and one-level multipart splitting."""

import re
from dataclasses import dataclass
from typing import List, Optional

from .header_parser import HeaderMap, parse_headers, split_message

BODY_SCAN_LINES = 10

_QUOTED_BOUNDARY = re.compile(r'boundary\s*=\s*"([^"]+)"', re.IGNORECASE)
_BARE_BOUNDARY = re.compile(r"boundary\s*=\s*([^;\s]+)", re.IGNORECASE)
# RFC 2046 bchars plus token characters, no space; a closing "--" is not part of the token
_DELIMITER_LINE = re.compile(r"^--([!#$%&'()*+,./0-9:=?A-Z^_`a-z{|}~-]{1,70}?)(?:--)?$")
_LINE_ENDINGS = re.compile(rb"\r\n?")


@dataclass
class MimePart:
    """One part of a multipart body: parsed headers plus undecoded body bytes."""

    headers: HeaderMap
    body: bytes

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type") or ""

    @property
    def mime_type(self) -> str:
        """Lowercased ``type/subtype`` without parameters."""
        return self.content_type.split(";", 1)[0].strip().lower()

    @property
    def disposition(self) -> str:
        return self.headers.get("Content-Disposition") or ""

    @property
    def disposition_type(self) -> str:
        return disposition_type(self.disposition)


def disposition_type(value: Optional[str]) -> str:
    """Lowercased disposition token of a Content-Disposition value, e.g. ``attachment``."""
    if not value:
        return ""
    return value.split(";", 1)[0].strip().lower()


def detect_boundary(content_type: Optional[str], body: bytes) -> Optional[str]:
    """
    Find the multipart boundary of a message or part.

    The ``boundary`` parameter of the Content-Type header is used when
    present. Otherwise the first non-empty lines of the body are scanned for
    a ``--token`` delimiter line.

    Args:
        content_type: Content-Type header value (may be None)
        body: Body bytes following the header block

    Returns:
        Boundary token, or None if no boundary can be found
    """
    if content_type:
        match = _QUOTED_BOUNDARY.search(content_type)
        if match:
            return match.group(1)
        match = _BARE_BOUNDARY.search(content_type)
        if match:
            token = match.group(1).strip("\"' \t")
            if token:
                return token

    text = _LINE_ENDINGS.sub(b"\n", body).decode("latin-1")
    scanned = 0
    for line in text.lstrip().split("\n"):
        line = line.rstrip()
        if not line:
            continue
        match = _DELIMITER_LINE.match(line)
        if match:
            return match.group(1)
        scanned += 1
        if scanned >= BODY_SCAN_LINES:
            break

    return None


def split_multipart(body: bytes, boundary: str) -> List[MimePart]:
    """
    Split a multipart body into its parts.

    The preamble before the first delimiter and the epilogue after the
    closing delimiter are discarded. Nested multipart parts are returned as
    single opaque parts.

    Args:
        body: Multipart body bytes
        boundary: Boundary token (without leading dashes)

    Returns:
        Ordered list of MimePart; empty if the delimiter never occurs
    """
    normalized = _LINE_ENDINGS.sub(b"\n", body)
    delimiter = re.compile(
        rb"^--" + re.escape(boundary.encode("utf-8", errors="replace")) + rb"(--)?[ \t]*$",
        re.MULTILINE,
    )
    matches = list(delimiter.finditer(normalized))

    parts = []
    for index, current in enumerate(matches):
        if current.group(1):
            break
        start = current.end() + 1
        following = matches[index + 1] if index + 1 < len(matches) else None
        end = following.start() - 1 if following else len(normalized)
        chunk = normalized[start:end] if start <= end else b""
        if not chunk.strip():
            continue

        raw_headers, part_body = split_message(chunk)
        parts.append(MimePart(headers=parse_headers(raw_headers), body=part_body))

    return parts
