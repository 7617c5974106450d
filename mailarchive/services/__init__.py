"""Business logic services"""

from .archive import ArchiveWriter, EmailArchiveService
from .attachments import AttachmentExtractor
from .ignore import IgnoreRuleEvaluator
from .normalizer import EmailMessageSource, Envelope, MessageNormalizer, MessageSource, RawMessageSource

__all__ = [
    "ArchiveWriter",
    "EmailArchiveService",
    "AttachmentExtractor",
    "IgnoreRuleEvaluator",
    "EmailMessageSource",
    "Envelope",
    "MessageNormalizer",
    "MessageSource",
    "RawMessageSource",
]
