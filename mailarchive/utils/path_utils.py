"""Filename and Message-ID normalization utilities."""

import re
from typing import Optional

DEFAULT_ATTACHMENT_NAME = "attachment.bin"
# UTF-8 bytes; leaves room under NAME_MAX (255) for the ordinal prefix and temp-file suffix
MAX_FILENAME_BYTES = 200

_PATH_SEPARATORS = re.compile(r"[\\/]+")
_UNSAFE_CHARS = re.compile(r"[^\w.\-()\[\]\s]")
_SHORT_EXTENSION = re.compile(r"(\.[A-Za-z0-9]{1,8})$")


def strip_angle_brackets(value: Optional[str]) -> Optional[str]:
    """
    Strip line breaks, surrounding whitespace and one pair of angle brackets.

    Used for Message-ID and Content-ID header values.

    Args:
        value: Raw header value (may be None)

    Returns:
        Bare identifier, or None if nothing is left

    Examples:
        >>> strip_angle_brackets("<abc@domain.com>")
        'abc@domain.com'
        >>> strip_angle_brackets("logo1")
        'logo1'
    """
    if value is None:
        return None

    clean_id = value.replace("\r", "").replace("\n", "").strip()

    if len(clean_id) >= 2 and clean_id.startswith("<") and clean_id.endswith(">"):
        clean_id = clean_id[1:-1].strip()

    return clean_id or None


def safe_filename(name: str) -> str:
    """
    Make an attachment name safe to use as a single path component.

    Path separators and anything outside letters, digits, ``. - _ ( ) [ ]``
    and whitespace become ``_``. Empty, ``.`` and ``..`` results are replaced
    by a default name. Names longer than 200 UTF-8 bytes are cut on a
    character boundary, keeping a short trailing extension. Applying the function twice gives the same
    result as applying it once.

    Examples:
        >>> safe_filename("../../etc/passwd")
        '.._.._etc_passwd'
        >>> safe_filename("report:final?.pdf")
        'report_final_.pdf'
    """
    name = _PATH_SEPARATORS.sub("_", name)
    name = _UNSAFE_CHARS.sub("_", name)

    if len(name.encode("utf-8")) > MAX_FILENAME_BYTES:
        match = _SHORT_EXTENSION.search(name)
        ext = match.group(1) if match else ""
        stem = name[: len(name) - len(ext)].encode("utf-8")[: MAX_FILENAME_BYTES - len(ext)]
        name = stem.decode("utf-8", errors="ignore") + ext

    name = name.strip()
    if name in ("", ".", ".."):
        name = DEFAULT_ATTACHMENT_NAME

    return name
