"""Transfer-encoding and charset decoding for MIME part bodies."""

import binascii
import base64
import quopri
import re
from typing import Mapping, Optional

from mailarchive.monitoring.logger import get_logger
from mailarchive.utils.unicode_utils import CANONICAL_CHARSET, is_canonical_charset

logger = get_logger(__name__)

DEFAULT_CHARSET = "UTF-8"

_CHARSET_PARAM = re.compile(r"""charset\s*=\s*["']?([^"';\s]+)["']?""", re.IGNORECASE)
_WHITESPACE = re.compile(rb"\s+")


def get_charset(content_type: Optional[str]) -> str:
    """Return the ``charset`` parameter of a Content-Type value, default UTF-8."""
    if content_type:
        match = _CHARSET_PARAM.search(content_type)
        if match:
            return match.group(1)
    return DEFAULT_CHARSET


def decode_transfer(body: bytes, headers: Mapping[str, str]) -> bytes:
    """
    Reverse the part's Content-Transfer-Encoding.

    ``base64`` and ``quoted-printable`` are decoded; any other value is
    treated as identity. Invalid base64 leaves the body unchanged.
    """
    encoding = (headers.get("Content-Transfer-Encoding") or "").strip().lower()

    if encoding == "base64":
        try:
            return base64.b64decode(_WHITESPACE.sub(b"", body), validate=True)
        except (binascii.Error, ValueError):
            logger.debug("transfer_decode_failed", encoding=encoding, size=len(body))
            return body

    if encoding == "quoted-printable":
        return quopri.decodestring(body)

    return body


def transcode(data: bytes, charset: str) -> bytes:
    """
    Convert ``data`` from ``charset`` to UTF-8.

    Invalid byte sequences are skipped. An unknown charset leaves the bytes
    unchanged.
    """
    if is_canonical_charset(charset):
        return data

    try:
        return data.decode(charset.strip(), errors="ignore").encode(CANONICAL_CHARSET)
    except LookupError:
        logger.debug("charset_transcode_failed", charset=charset)
        return data


def decode_part_body(body: bytes, headers: Mapping[str, str]) -> bytes:
    """Transfer-decode a part body and transcode it to UTF-8 bytes."""
    decoded = decode_transfer(body, headers)
    return transcode(decoded, get_charset(headers.get("Content-Type")))


def decode_part_text(body: bytes, headers: Mapping[str, str]) -> str:
    """Decode a textual part body to a Python string."""
    return decode_part_body(body, headers).decode(CANONICAL_CHARSET, errors="replace")
