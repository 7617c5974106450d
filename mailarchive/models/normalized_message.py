"""Normalized message data model."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .attachment_record import AttachmentRecord

DEFAULT_TRANSPORT = "default"


class PreviewKind(Enum):
    """Kind of body kept as the human-readable preview."""

    NONE = "none"
    HTML = "html"
    TEXT = "text"


@dataclass
class NormalizedMessage:
    """
    Canonical record of one outgoing message, built once per archive attempt.

    ``size`` and ``content_hash`` describe the exact bytes written to
    ``message.eml``.

    Attributes:
        sent_at: Capture timestamp (timezone-aware)
        size: Byte length of the raw message
        content_hash: Hex SHA-256 of the raw message
        message_id: Transport-provided, header or synthesized Message-ID
        subject: MIME-decoded subject
        from_address: Sender address, lowercased
        to: Recipient addresses, lowercased
        cc: Carbon-copy addresses, lowercased
        bcc: Blind-copy addresses, lowercased
        transport: Transport name
        template: Value of the template-identifying header
        preview_kind: Which body is kept as preview
        preview_body: Decoded preview text
        attachments: Persisted attachments, set by extraction
        attachments_count: Number of attachments
        attachments_bytes: Total persisted attachment bytes
    """

    sent_at: datetime
    size: int
    content_hash: str
    message_id: Optional[str] = None
    subject: Optional[str] = None
    from_address: Optional[str] = None
    to: List[str] = field(default_factory=list)
    cc: List[str] = field(default_factory=list)
    bcc: List[str] = field(default_factory=list)
    transport: str = DEFAULT_TRANSPORT
    template: Optional[str] = None
    preview_kind: PreviewKind = PreviewKind.NONE
    preview_body: Optional[str] = None
    attachments: List[AttachmentRecord] = field(default_factory=list)
    attachments_count: int = 0
    attachments_bytes: int = 0

    @property
    def has_preview(self) -> bool:
        return self.preview_kind is not PreviewKind.NONE

    def set_attachments(self, items: List[AttachmentRecord]) -> None:
        """Replace the attachment list and the derived count and byte total."""
        self.attachments = list(items)
        self.attachments_count = len(self.attachments)
        self.attachments_bytes = sum(item.size for item in self.attachments)
