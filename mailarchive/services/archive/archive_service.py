"""Entry points for archiving outgoing messages."""

from datetime import datetime
from typing import Optional

from mailarchive.config.archive_config import ArchiveConfig
from mailarchive.errors import ArchiveError
from mailarchive.models.ignore_rules import IgnoreRuleSet
from mailarchive.monitoring.logger import get_logger
from mailarchive.services.attachments.extractor import AttachmentExtractor
from mailarchive.services.ignore.rule_evaluator import IgnoreRuleEvaluator
from mailarchive.services.normalizer.message_source import MessageSource
from mailarchive.services.normalizer.normalizer import MessageNormalizer
from mailarchive.storage.archive_store import ArchiveStore
from .archive_writer import ArchiveWriter

logger = get_logger(__name__)

DEFAULT_MAX_PREVIEW_BYTES = 2_000_000
DEFAULT_MAX_ATTACHMENT_BYTES = 50_000_000


class EmailArchiveService:
    """
    Archive outgoing messages under an archive root.

    Each call normalizes the message, applies the ignore rules and, unless
    skipped, writes one archive entry. All I/O is blocking; callers that
    need bounded latency wrap the call in their own timeout.
    """

    def __init__(
        self,
        store: ArchiveStore,
        rules: Optional[IgnoreRuleSet] = None,
        max_preview_bytes: int = DEFAULT_MAX_PREVIEW_BYTES,
        max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES,
        enabled: bool = True,
    ):
        """
        Initialize archive service.

        Args:
            store: Archive root handle
            rules: Ignore rules (default: none)
            max_preview_bytes: Preview size cap
            max_attachment_bytes: Per-attachment size cap
            enabled: When False every call is a no-op
        """
        self.store = store
        self.enabled = enabled
        self.normalizer = MessageNormalizer()
        self.evaluator = IgnoreRuleEvaluator(rules)
        self.writer = ArchiveWriter(
            store,
            AttachmentExtractor(store.filesystem, max_attachment_bytes),
            max_preview_bytes,
        )

    @classmethod
    def from_config(cls, config: ArchiveConfig) -> "EmailArchiveService":
        """Build a service from an :class:`ArchiveConfig`."""
        return cls(
            store=ArchiveStore(config.get_archive_root()),
            rules=IgnoreRuleSet.from_config(config.ignore_rules),
            max_preview_bytes=config.max_preview_bytes,
            max_attachment_bytes=config.max_attachment_bytes,
            enabled=config.enabled,
        )

    def archive_sent(
        self,
        source: MessageSource,
        transport: Optional[str] = None,
        message_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Archive a message that was just sent.

        Args:
            source: The sent message
            transport: Name of the transport that sent it
            message_id: Message-ID reported by the transport

        Returns:
            Archive id, or None if archiving is disabled or the message was skipped

        Raises:
            ArchiveWriteError: If the archive entry cannot be written
        """
        return self._archive(source, transport, message_id)

    def archive_email(self, source: MessageSource) -> Optional[str]:
        """Archive a message without transport metadata."""
        return self._archive(source, None, None)

    def _archive(
        self,
        source: MessageSource,
        transport: Optional[str],
        message_id: Optional[str],
    ) -> Optional[str]:
        if not self.enabled:
            return None

        captured_at = datetime.now().astimezone()
        message = self.normalizer.normalize(source, transport, message_id, captured_at)

        reason = self.evaluator.skip_reason(source, message)
        if reason is not None:
            logger.info("archive_skipped", reason=reason, message_id=message.message_id)
            return None

        try:
            entry = self.writer.write(message, source)
        except ArchiveError:
            logger.error("archive_failed", message_id=message.message_id, exc_info=True)
            raise

        logger.info(
            "archive_written",
            archive_id=entry.archive_id,
            path=str(entry.relative_path),
            size=message.size,
            attachments=message.attachments_count,
        )
        return entry.archive_id
