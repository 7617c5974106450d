"""Message sources and normalization."""

from .message_source import EmailMessageSource, Envelope, MessageSource, ModelAttachment, RawMessageSource
from .normalizer import TEMPLATE_HEADER, MessageNormalizer

__all__ = [
    "EmailMessageSource",
    "Envelope",
    "MessageSource",
    "ModelAttachment",
    "RawMessageSource",
    "TEMPLATE_HEADER",
    "MessageNormalizer",
]
