"""Data models for the email archive"""

from .archive_entry import ArchiveEntry
from .attachment_record import AttachmentRecord, Disposition
from .ignore_rules import IgnoreRuleSet, LiteralPattern, RegexPattern, SubjectPattern, parse_subject_pattern
from .normalized_message import DEFAULT_TRANSPORT, NormalizedMessage, PreviewKind

__all__ = [
    "ArchiveEntry",
    "AttachmentRecord",
    "Disposition",
    "IgnoreRuleSet",
    "LiteralPattern",
    "RegexPattern",
    "SubjectPattern",
    "parse_subject_pattern",
    "DEFAULT_TRANSPORT",
    "NormalizedMessage",
    "PreviewKind",
]
