"""Attachment record data model."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Disposition(Enum):
    """How an attachment part was presented in the message."""

    ATTACHMENT = "attachment"
    INLINE = "inline"


@dataclass(frozen=True)
class AttachmentRecord:
    """
    Metadata of one attachment persisted under ``attachments/``.

    Attributes:
        stored_filename: Sanitized filename prefixed with the 1-based ordinal
        original_name: Best-effort recovered filename (may be the default name)
        content_type: MIME type without parameters
        size: Number of bytes actually persisted (after truncation)
        sha256: Hex SHA-256 of the persisted bytes
        disposition: attachment or inline
        content_id: Content-ID without angle brackets, for inline parts
    """

    stored_filename: str
    original_name: str
    content_type: Optional[str]
    size: int
    sha256: str
    disposition: Disposition
    content_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Render the record with the keys used in ``meta.json``."""
        return {
            "filename": self.stored_filename,
            "originalName": self.original_name,
            "contentType": self.content_type,
            "size": self.size,
            "sha256": self.sha256,
            "disposition": self.disposition.value,
            "cid": self.content_id,
        }
