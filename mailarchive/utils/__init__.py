"""Utility functions"""

from .path_utils import DEFAULT_ATTACHMENT_NAME, safe_filename, strip_angle_brackets
from .unicode_utils import decode_email_header, is_canonical_charset, percent_decode

__all__ = [
    "DEFAULT_ATTACHMENT_NAME",
    "safe_filename",
    "strip_angle_brackets",
    "decode_email_header",
    "is_canonical_charset",
    "percent_decode",
]
