"""Byte-level MIME parsing and content decoding."""

from .content_decoder import decode_part_body, decode_part_text, decode_transfer, get_charset, transcode
from .header_parser import HeaderMap, parse_addresses, parse_headers, split_message
from .multipart import MimePart, detect_boundary, disposition_type, split_multipart

__all__ = [
    "HeaderMap",
    "MimePart",
    "decode_part_body",
    "decode_part_text",
    "decode_transfer",
    "detect_boundary",
    "disposition_type",
    "get_charset",
    "parse_addresses",
    "parse_headers",
    "split_message",
    "split_multipart",
    "transcode",
]
