"""Ignore rule set data model."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

if TYPE_CHECKING:
    from mailarchive.config.archive_config import IgnoreRulesConfig

# /pattern/flags, delimiter is any non-alphanumeric, non-backslash, non-space char
_DELIMITED_REGEX = re.compile(r"^([^\w\s\\])(.+)\1([imsxuADSUXJ]*)$", re.DOTALL)

_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


class SubjectPattern(ABC):
    """A subject ignore rule."""

    @abstractmethod
    def matches(self, subject: str) -> bool:
        pass


@dataclass(frozen=True)
class LiteralPattern(SubjectPattern):
    """Case-insensitive substring rule."""

    text: str

    def matches(self, subject: str) -> bool:
        return self.text.lower() in subject.lower()


@dataclass(frozen=True)
class RegexPattern(SubjectPattern):
    """
    Delimited regular expression rule, e.g. ``/^\\[test\\]/i``.

    Supported flags are ``i m s x`` plus ``A`` (anchor at the start) and
    ``u`` (always on); other flags are ignored. An invalid expression never
    matches.
    """

    source: str
    flags: str = ""
    compiled: Optional[re.Pattern] = field(default=None, compare=False, repr=False)
    anchored: bool = field(default=False, compare=False, repr=False)

    @classmethod
    def build(cls, source: str, flags: str = "") -> "RegexPattern":
        re_flags = 0
        for flag in flags:
            re_flags |= _FLAG_MAP.get(flag, 0)
        try:
            compiled = re.compile(source, re_flags)
        except (re.error, OverflowError, RecursionError):
            compiled = None
        return cls(source=source, flags=flags, compiled=compiled, anchored="A" in flags)

    def matches(self, subject: str) -> bool:
        if self.compiled is None:
            return False
        try:
            if self.anchored:
                return self.compiled.match(subject) is not None
            return self.compiled.search(subject) is not None
        except RecursionError:
            return False


def parse_subject_pattern(raw: str) -> SubjectPattern:
    """
    Turn a configured subject rule into a pattern.

    A value that looks like ``<d>expr<d>flags`` (for example ``/^draft/i``)
    becomes a regex rule, anything else a literal substring rule.
    """
    match = _DELIMITED_REGEX.match(raw)
    if match:
        return RegexPattern.build(match.group(2), match.group(3))
    return LiteralPattern(raw)


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(value for value in values if value))


@dataclass(frozen=True)
class IgnoreRuleSet:
    """
    Normalized ignore rules.

    Attributes:
        from_addresses: Lowercased sender addresses
        to_addresses: Lowercased recipient addresses
        subject_patterns: Subject rules (literal or regex)
        templates: Lowercased template tags
    """

    from_addresses: Tuple[str, ...] = ()
    to_addresses: Tuple[str, ...] = ()
    subject_patterns: Tuple[SubjectPattern, ...] = ()
    templates: Tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        from_addresses: Iterable[str] = (),
        to_addresses: Iterable[str] = (),
        subject_regex: Iterable[str] = (),
        templates: Iterable[str] = (),
    ) -> "IgnoreRuleSet":
        """Normalize raw rule lists: lowercase, trim, dedupe, drop empties."""
        subjects = _unique(value.strip() for value in subject_regex)
        return cls(
            from_addresses=_unique(value.strip().lower() for value in from_addresses),
            to_addresses=_unique(value.strip().lower() for value in to_addresses),
            subject_patterns=tuple(parse_subject_pattern(value) for value in subjects),
            templates=_unique(value.strip().lower() for value in templates),
        )

    @classmethod
    def from_config(cls, config: "IgnoreRulesConfig") -> "IgnoreRuleSet":
        return cls.build(
            from_addresses=config.from_,
            to_addresses=config.to,
            subject_regex=config.subject_regex,
            templates=config.templates,
        )
