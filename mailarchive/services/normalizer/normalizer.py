"""Build the canonical NormalizedMessage from a message source."""

import hashlib
import re
from datetime import datetime
from typing import Iterable, List, Optional

from mailarchive.models.normalized_message import DEFAULT_TRANSPORT, NormalizedMessage, PreviewKind
from mailarchive.monitoring.logger import get_logger
from mailarchive.services.mime.content_decoder import decode_part_text
from mailarchive.services.mime.header_parser import HeaderMap, parse_addresses, split_message
from mailarchive.services.mime.multipart import MimePart, detect_boundary, disposition_type, split_multipart
from mailarchive.utils.path_utils import strip_angle_brackets
from mailarchive.utils.unicode_utils import decode_email_header
from .message_source import EmailMessageSource, MessageSource

logger = get_logger(__name__)

TEMPLATE_HEADER = "X-Template-Name"

_FILENAME_PARAM = re.compile(r"filename\*?\s*=", re.IGNORECASE)


class _FirstWriterWins:
    """Fill fields of a NormalizedMessage, never overwriting a supplied one."""

    def __init__(self, record: NormalizedMessage):
        self.record = record
        self.supplied = set()

    def has(self, name: str) -> bool:
        return name in self.supplied

    def fill(self, name: str, value) -> None:
        if name in self.supplied or value is None or value == "" or value == []:
            return
        setattr(self.record, name, value)
        self.supplied.add(name)

    def fill_recipients(self, to: List[str], cc: Iterable[str] = (), bcc: Iterable[str] = ()) -> None:
        """Fill To/Cc/Bcc as one group, keyed on To being supplied."""
        if "to" in self.supplied or not to:
            return
        self.fill("to", to)
        self.fill("cc", list(cc))
        self.fill("bcc", list(bcc))

    def fill_preview(self, kind: PreviewKind, body: Optional[str]) -> None:
        if "preview" in self.supplied or not body:
            return
        self.record.preview_kind = kind
        self.record.preview_body = body
        self.supplied.add("preview")

    def fill_attachment_count(self, count: int) -> None:
        if "attachments_count" in self.supplied:
            return
        self.record.attachments_count = count
        self.supplied.add("attachments_count")


def _lowered(addresses: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(address.strip().lower() for address in addresses if address and address.strip()))


class MessageNormalizer:
    """
    Produce exactly one NormalizedMessage per archive attempt.

    Sources are consulted in order, each only filling fields still unset:
    transport arguments, envelope, object model (when available), raw-byte
    parsing, and finally Message-ID synthesis by the object model.
    """

    def normalize(
        self,
        source: MessageSource,
        transport: Optional[str] = None,
        message_id: Optional[str] = None,
        captured_at: Optional[datetime] = None,
    ) -> NormalizedMessage:
        """
        Normalize a message.

        Args:
            source: Raw or object-model message source
            transport: Transport name (default ``"default"``)
            message_id: Transport-provided Message-ID
            captured_at: Capture timestamp (default: now, local timezone)

        Returns:
            NormalizedMessage with size and hash of ``source.as_bytes()``
        """
        raw = source.as_bytes()
        record = NormalizedMessage(
            sent_at=captured_at or datetime.now().astimezone(),
            size=len(raw),
            content_hash=hashlib.sha256(raw).hexdigest(),
            transport=transport or DEFAULT_TRANSPORT,
        )
        fields = _FirstWriterWins(record)

        fields.fill("message_id", strip_angle_brackets(message_id))

        if source.envelope is not None:
            sender = source.envelope.sender
            fields.fill("from_address", sender.strip().lower() if sender else None)
            fields.fill_recipients(_lowered(source.envelope.recipients))

        if isinstance(source, EmailMessageSource):
            self._apply_object_model(fields, source)

        self._apply_raw(fields, source, raw)

        if isinstance(source, EmailMessageSource):
            fields.fill("message_id", strip_angle_brackets(source.generate_message_id()))

        return record

    def _apply_object_model(self, fields: _FirstWriterWins, source: EmailMessageSource) -> None:
        fields.fill("subject", source.subject)

        template = source.header(TEMPLATE_HEADER)
        fields.fill("template", template.strip() if template else None)

        senders = _lowered(source.addresses("From"))
        fields.fill("from_address", senders[0] if senders else None)
        fields.fill_recipients(
            _lowered(source.addresses("To")),
            _lowered(source.addresses("Cc")),
            _lowered(source.addresses("Bcc")),
        )

        html = source.html_body()
        if html:
            fields.fill_preview(PreviewKind.HTML, html)
        else:
            fields.fill_preview(PreviewKind.TEXT, source.text_body())

        fields.fill_attachment_count(sum(1 for _ in source.attachments()))

    def _apply_raw(self, fields: _FirstWriterWins, source: MessageSource, raw: bytes) -> None:
        headers = source.headers()

        fields.fill("message_id", strip_angle_brackets(headers.get("Message-Id")))

        subject = headers.get("Subject")
        if subject:
            fields.fill("subject", decode_email_header(subject))

        template = headers.get(TEMPLATE_HEADER)
        if template:
            fields.fill("template", decode_email_header(template).strip())

        senders = parse_addresses(headers.get("From"))
        fields.fill("from_address", senders[0] if senders else None)
        fields.fill_recipients(
            parse_addresses(headers.get("To")),
            parse_addresses(headers.get("Cc")),
            parse_addresses(headers.get("Bcc")),
        )

        if fields.has("preview") and fields.has("attachments_count"):
            return

        _, body = split_message(raw)
        self._apply_raw_body(fields, headers, body)

    def _apply_raw_body(self, fields: _FirstWriterWins, headers: HeaderMap, body: bytes) -> None:
        content_type = headers.get("Content-Type") or ""
        mime_type = content_type.lower()

        if disposition_type(headers.get("Content-Disposition")) == "attachment":
            fields.fill_attachment_count(1)

        if mime_type.startswith("text/html"):
            fields.fill_preview(PreviewKind.HTML, decode_part_text(body, headers))
        elif mime_type.startswith("text/plain"):
            fields.fill_preview(PreviewKind.TEXT, decode_part_text(body, headers))
        elif mime_type.startswith("multipart/"):
            boundary = detect_boundary(content_type, body)
            if boundary is None:
                logger.debug("mime_boundary_missing", content_type=content_type)
                return
            parts = split_multipart(body, boundary)
            self._apply_parts(fields, parts)

        fields.fill_attachment_count(0)

    def _apply_parts(self, fields: _FirstWriterWins, parts: List[MimePart]) -> None:
        for kind, mime_type in ((PreviewKind.HTML, "text/html"), (PreviewKind.TEXT, "text/plain")):
            for part in parts:
                if part.mime_type == mime_type:
                    fields.fill_preview(kind, decode_part_text(part.body, part.headers))
                    break
            if fields.has("preview"):
                break

        fields.fill_attachment_count(sum(1 for part in parts if _counts_as_attachment(part)))


def _counts_as_attachment(part: MimePart) -> bool:
    kind = part.disposition_type
    if kind == "attachment":
        return True
    return kind == "inline" and _FILENAME_PARAM.search(part.disposition) is not None
