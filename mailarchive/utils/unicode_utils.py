"""Unicode and email header decoding utilities."""

import codecs
from email.errors import HeaderParseError
from email.header import decode_header
from typing import Optional
from urllib.parse import unquote

from mailarchive.monitoring.logger import get_logger

logger = get_logger(__name__)

CANONICAL_CHARSET = "utf-8"


def decode_email_header(header_value: Optional[str]) -> str:
    """
    Decode RFC 2047 encoded-word header to Unicode string.

    Decoding is best-effort: when an encoded word cannot be decoded (bad
    base64, unknown charset) the original value is returned verbatim.

    Args:
        header_value: Raw header value (may be encoded)

    Returns:
        Decoded Unicode string

    Examples:
        >>> decode_email_header("=?UTF-8?B?VGVzdA==?=")
        'Test'
        >>> decode_email_header("=?UTF-8?B?5Lit5paH?= <test@example.com>")
        '中文 <test@example.com>'
    """
    if not header_value:
        return ""

    if "=?" not in header_value:
        return header_value

    try:
        chunks = decode_header(header_value)
    except (HeaderParseError, ValueError):
        logger.debug("header_decode_failed", value=header_value)
        return header_value

    decoded_parts = []
    for content, encoding in chunks:
        if not isinstance(content, bytes):
            decoded_parts.append(content)
            continue
        try:
            if encoding and encoding != "unknown-8bit":
                decoded_parts.append(content.decode(encoding))
            else:
                decoded_parts.append(content.decode("ascii"))
        except (UnicodeDecodeError, LookupError):
            logger.debug("header_decode_failed", value=header_value, charset=encoding)
            return header_value

    return "".join(decoded_parts)


def is_canonical_charset(charset: str) -> bool:
    """Return True if ``charset`` names the canonical text encoding (UTF-8)."""
    try:
        return codecs.lookup(charset.strip()).name == CANONICAL_CHARSET
    except LookupError:
        return False


def percent_decode(value: str, charset: str = CANONICAL_CHARSET) -> str:
    """
    Percent-decode an RFC 2231/5987 parameter value.

    Unknown charsets fall back to UTF-8; undecodable bytes are replaced.
    """
    try:
        codecs.lookup(charset)
    except LookupError:
        charset = CANONICAL_CHARSET
    return unquote(value, encoding=charset, errors="replace")
