"""Write one archive entry: raw message, preview, attachments, metadata, index line."""

import json

from mailarchive.models.archive_entry import ArchiveEntry
from mailarchive.models.normalized_message import NormalizedMessage, PreviewKind
from mailarchive.services.attachments.extractor import AttachmentExtractor
from mailarchive.services.normalizer.message_source import MessageSource
from mailarchive.storage.archive_store import ArchiveStore

RAW_FILENAME = "message.eml"
META_FILENAME = "meta.json"
ATTACHMENTS_DIRNAME = "attachments"
PREVIEW_FILENAMES = {
    PreviewKind.HTML: "preview.html",
    PreviewKind.TEXT: "preview.txt",
}
TRUNCATION_MARKER = b"\n<!-- truncated -->"


def build_metadata(message: NormalizedMessage, entry: ArchiveEntry) -> dict:
    """Build the ``meta.json`` document of an entry."""
    return {
        "archiveId": entry.archive_id,
        "messageId": message.message_id,
        "subject": message.subject,
        "from": message.from_address,
        "to": message.to,
        "cc": message.cc,
        "bcc": message.bcc,
        "sentAt": message.sent_at.isoformat(timespec="seconds"),
        "transport": message.transport,
        "size": message.size,
        "hash": message.content_hash,
        "hasPreview": message.has_preview,
        "template": message.template,
        "path": str(entry.relative_path),
        "attachmentsCount": message.attachments_count,
        "attachmentsBytes": message.attachments_bytes,
        "attachmentsMeta": [item.to_dict() for item in message.attachments],
    }


def build_index_record(message: NormalizedMessage, entry: ArchiveEntry) -> dict:
    """Build the daily index summary of an entry (no Bcc, no attachment details)."""
    return {
        "archiveId": entry.archive_id,
        "messageId": message.message_id,
        "subject": message.subject,
        "from": message.from_address,
        "to": message.to,
        "cc": message.cc,
        "sentAt": message.sent_at.isoformat(timespec="seconds"),
        "size": message.size,
        "hasPreview": message.has_preview,
        "template": message.template,
        "path": str(entry.relative_path),
        "attachmentsCount": message.attachments_count,
        "attachmentsBytes": message.attachments_bytes,
    }


class ArchiveWriter:
    """
    Persist a normalized message as an archive entry.

    Any filesystem failure raises :class:`~mailarchive.errors.ArchiveWriteError`
    and aborts the entry; the daily index line is written last, so an entry
    without an index line is incomplete.
    """

    def __init__(self, store: ArchiveStore, extractor: AttachmentExtractor, max_preview_bytes: int):
        """
        Initialize archive writer.

        Args:
            store: Archive root handle
            extractor: Attachment extractor
            max_preview_bytes: Preview size cap before truncation
        """
        self.store = store
        self.extractor = extractor
        self.max_preview_bytes = max_preview_bytes

    def write(self, message: NormalizedMessage, source: MessageSource) -> ArchiveEntry:
        """
        Write the archive entry for ``message``.

        Args:
            message: Normalized message; its attachment fields are updated
            source: The source ``message`` was normalized from

        Returns:
            The written ArchiveEntry

        Raises:
            ArchiveWriteError: If any directory or file cannot be written
        """
        fs = self.store.filesystem
        entry = ArchiveEntry.generate(message.sent_at)

        self.store.ensure_root()
        entry_dir = self.store.entry_dir(entry)
        fs.mkdir(entry_dir)

        fs.dump_file(entry_dir / RAW_FILENAME, source.as_bytes())

        if message.has_preview and message.preview_body:
            payload = message.preview_body.encode("utf-8")
            if len(payload) > self.max_preview_bytes:
                payload = payload[: self.max_preview_bytes] + TRUNCATION_MARKER
            fs.dump_file(entry_dir / PREVIEW_FILENAMES[message.preview_kind], payload)

        result = self.extractor.extract(source, entry_dir / ATTACHMENTS_DIRNAME)
        message.set_attachments(result.items)

        metadata = json.dumps(build_metadata(message, entry), indent=2, ensure_ascii=False)
        fs.dump_file(entry_dir / META_FILENAME, metadata.encode("utf-8"))

        self.store.index.append(entry.day, build_index_record(message, entry))

        return entry
