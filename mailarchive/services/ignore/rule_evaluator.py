"""Decide whether a message is archived at all."""

from typing import Optional

from mailarchive.models.ignore_rules import IgnoreRuleSet
from mailarchive.models.normalized_message import NormalizedMessage
from mailarchive.services.normalizer.message_source import MessageSource

SKIP_HEADER = "X-Archive-Skip"
TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})


def is_truthy(value: Optional[str]) -> bool:
    """Interpret a boolean-like header value (``1``, ``true``, ``yes``, ``on``)."""
    return value is not None and value.strip().lower() in TRUTHY_VALUES


class IgnoreRuleEvaluator:
    """
    Evaluate the skip header and the configured ignore rules.

    Checks run in a fixed order and the first hit wins: skip header, sender,
    recipients, subject patterns, template.
    """

    def __init__(self, rules: Optional[IgnoreRuleSet] = None):
        self.rules = rules or IgnoreRuleSet()

    def skip_reason(self, source: MessageSource, message: NormalizedMessage) -> Optional[str]:
        """
        Return why the message must not be archived, or None to archive it.

        Args:
            source: Message source (for the skip header)
            message: Normalized message

        Returns:
            One of ``"header"``, ``"from"``, ``"to"``, ``"subject"``,
            ``"template"``, or None
        """
        if is_truthy(source.header(SKIP_HEADER)):
            return "header"

        sender = (message.from_address or "").lower()
        if sender and sender in self.rules.from_addresses:
            return "from"

        for address in message.to:
            if address.lower() in self.rules.to_addresses:
                return "to"

        subject = message.subject or ""
        for pattern in self.rules.subject_patterns:
            if pattern.matches(subject):
                return "subject"

        template = (message.template or "").lower()
        if template and template in self.rules.templates:
            return "template"

        return None

    def should_skip(self, source: MessageSource, message: NormalizedMessage) -> bool:
        return self.skip_reason(source, message) is not None
