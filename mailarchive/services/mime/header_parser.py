"""Pragmatic RFC 5322 header parsing on raw message bytes."""

import re
from typing import List, Optional, Tuple, Union

_HEADER_BODY_SEPARATOR = re.compile(rb"\r?\n\r?\n")
_LEADING_BLANK_LINE = re.compile(rb"^\r?\n")
_LINE_BREAK = re.compile(r"\r?\n")
_ADDRESS_PATTERN = re.compile(r"[A-Z0-9._%+\-]+@[A-Z0-9.\-]+\.[A-Z]{2,}", re.IGNORECASE)


class HeaderMap(dict):
    """
    Header mapping keyed by lowercased field name.

    Lookups are case-insensitive; repeated fields are stored as one value
    joined with ``", "``.
    """

    def __getitem__(self, name: str) -> str:
        return super().__getitem__(name.lower())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and super().__contains__(name.lower())

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return super().get(name.lower(), default)

    def add(self, name: str, value: str) -> None:
        """Add a field, appending to an existing value of the same name."""
        key = name.strip().lower()
        if not key:
            return
        value = value.strip()
        existing = super().get(key)
        super().__setitem__(key, value if existing is None else f"{existing}, {value}")


def split_message(raw: bytes) -> Tuple[bytes, bytes]:
    """
    Split raw message bytes into header block and body.

    Args:
        raw: Raw message (``\\n`` or ``\\r\\n`` line endings)

    Returns:
        Tuple of (header_bytes, body_bytes). A message without a blank line
        is all headers; a message starting with a blank line has no headers.
    """
    leading = _LEADING_BLANK_LINE.match(raw)
    if leading:
        return b"", raw[leading.end():]

    parts = _HEADER_BODY_SEPARATOR.split(raw, maxsplit=1)
    if len(parts) == 1:
        return parts[0], b""
    return parts[0], parts[1]


def parse_headers(raw_headers: Union[bytes, str]) -> HeaderMap:
    """
    Parse a header block into a :class:`HeaderMap`.

    Folded lines (starting with space or tab) continue the previous field and
    are joined with a single space. Lines without a colon yield a field with
    an empty value; fields with an empty name are dropped.

    Args:
        raw_headers: Header block as bytes (decoded as UTF-8 with replacement)
            or text

    Returns:
        HeaderMap with lowercased names
    """
    if isinstance(raw_headers, bytes):
        raw_headers = raw_headers.decode("utf-8", errors="replace")

    headers = HeaderMap()
    current = ""

    for line in _LINE_BREAK.split(raw_headers):
        if line == "":
            continue
        if line[0] in (" ", "\t"):
            current += " " + line.strip()
            continue
        if current:
            _add_field(headers, current)
        current = line

    if current:
        _add_field(headers, current)

    return headers


def _add_field(headers: HeaderMap, line: str) -> None:
    name, _, value = line.partition(":")
    headers.add(name, value)


def parse_addresses(header_value: Optional[str]) -> List[str]:
    """
    Extract bare email addresses from an address header value.

    Addresses are lowercased and deduplicated, keeping first-seen order.

    Examples:
        >>> parse_addresses('"Doe, John" <John@Example.com>, jane@example.org')
        ['john@example.com', 'jane@example.org']
    """
    if not header_value:
        return []

    found = (match.lower() for match in _ADDRESS_PATTERN.findall(header_value))
    return list(dict.fromkeys(found))
