"""Extract and persist message attachments."""

import hashlib
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional

from mailarchive.models.attachment_record import AttachmentRecord, Disposition
from mailarchive.services.mime.content_decoder import decode_transfer
from mailarchive.services.mime.header_parser import parse_headers, split_message
from mailarchive.services.mime.multipart import MimePart, detect_boundary, split_multipart
from mailarchive.services.normalizer.message_source import EmailMessageSource, MessageSource
from mailarchive.storage.filesystem import LocalFilesystem
from mailarchive.utils.path_utils import DEFAULT_ATTACHMENT_NAME, safe_filename, strip_angle_brackets
from mailarchive.utils.unicode_utils import decode_email_header, percent_decode

_EXTENDED_FILENAME = re.compile(r'''filename\*\s*=\s*"?([^";\r\n]+)"?''', re.IGNORECASE)
_CONTINUED_FILENAME = re.compile(
    r"""filename\*(\d+)(\*?)\s*=\s*(?:"([^"]*)"|([^;\r\n]*))""", re.IGNORECASE
)
_PLAIN_FILENAME = re.compile(r"""filename\s*=\s*(?:"([^"]+)"|([^;\r\n]+))""", re.IGNORECASE)
_CONTENT_TYPE_NAME = re.compile(r""";\s*name\s*=\s*(?:"([^"]+)"|([^;\r\n]+))""", re.IGNORECASE)
_EXTENDED_VALUE = re.compile(r"^([\w!#$%&+^`{}~-]+)'[\w-]*'(.*)$", re.DOTALL)


@dataclass
class ExtractionResult:
    """Attachments persisted for one archive entry."""

    items: List[AttachmentRecord] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def total_bytes(self) -> int:
        return sum(item.size for item in self.items)


@dataclass
class _Candidate:
    original_name: Optional[str]
    payload: bytes
    content_type: Optional[str]
    disposition: Disposition
    content_id: Optional[str]


def _match_value(match: re.Match) -> str:
    quoted, bare = match.group(1), match.group(2)
    return quoted if quoted else bare.strip()


def _decode_extended(value: str) -> str:
    """Decode an RFC 2231 ``charset'language'percent-encoded`` value."""
    match = _EXTENDED_VALUE.match(value)
    if not match:
        return value
    return percent_decode(match.group(2), match.group(1))


def _continued_filename(disposition: str) -> Optional[str]:
    """Join RFC 2231 ``filename*0*=...; filename*1*=...`` continuations."""
    segments = {}
    encoded = False
    for match in _CONTINUED_FILENAME.finditer(disposition):
        index = int(match.group(1))
        if index == 0:
            encoded = bool(match.group(2))
        segments[index] = match.group(3) if match.group(3) is not None else match.group(4).strip()

    if not segments:
        return None

    value = "".join(segments[index] for index in sorted(segments))
    return _decode_extended(value) if encoded else value


def recover_filename(disposition: str, content_type: str) -> Optional[str]:
    """
    Recover the original filename of a part from its headers.

    Tried in order: ``filename*=`` (RFC 2231/5987), ``filename*0=``
    continuations, ``filename=``, then ``name=`` on the Content-Type. A
    remaining ``charset''value`` form is percent-decoded and RFC 2047 encoded
    words are decoded.

    Args:
        disposition: Content-Disposition header value
        content_type: Content-Type header value

    Returns:
        Filename, or None if the part declares none
    """
    original = None

    match = _EXTENDED_FILENAME.search(disposition)
    if match:
        original = _decode_extended(match.group(1).strip())

    if original is None:
        original = _continued_filename(disposition)

    if original is None:
        match = _PLAIN_FILENAME.search(disposition)
        if match:
            original = _match_value(match)

    if original is None:
        match = _CONTENT_TYPE_NAME.search(content_type)
        if match:
            original = _match_value(match)

    if original is None:
        return None

    if "''" in original:
        charset, _, text = original.partition("''")
        original = percent_decode(text, charset or "utf-8")

    return decode_email_header(original.strip("\"'"))


class AttachmentExtractor:
    """
    Persist attachments of a message and describe them.

    Object-model sources provide decoded attachment parts directly; raw
    sources are scanned part by part. Payloads larger than
    ``max_attachment_bytes`` are truncated, not rejected.
    """

    def __init__(self, filesystem: LocalFilesystem, max_attachment_bytes: int):
        self.filesystem = filesystem
        self.max_attachment_bytes = max_attachment_bytes

    def extract(self, source: MessageSource, target_dir: Path) -> ExtractionResult:
        """
        Write every attachment of ``source`` to ``target_dir``.

        Files are named ``<ordinal>_<sanitized name>`` with a 1-based ordinal.

        Raises:
            ArchiveWriteError: If the directory or a file cannot be written
        """
        self.filesystem.mkdir(target_dir)

        if isinstance(source, EmailMessageSource):
            candidates = self._model_candidates(source)
        else:
            candidates = self._scan_candidates(source.as_bytes())

        result = ExtractionResult()
        for ordinal, candidate in enumerate(candidates, start=1):
            result.items.append(self._persist(target_dir, ordinal, candidate))

        return result

    def _persist(self, target_dir: Path, ordinal: int, candidate: _Candidate) -> AttachmentRecord:
        original = candidate.original_name or DEFAULT_ATTACHMENT_NAME
        filename = f"{ordinal}_{safe_filename(original)}"

        payload = candidate.payload[: self.max_attachment_bytes]
        self.filesystem.dump_file(target_dir / filename, payload)

        return AttachmentRecord(
            stored_filename=filename,
            original_name=original,
            content_type=candidate.content_type,
            size=len(payload),
            sha256=hashlib.sha256(payload).hexdigest(),
            disposition=candidate.disposition,
            content_id=candidate.content_id,
        )

    def _model_candidates(self, source: EmailMessageSource) -> Iterator[_Candidate]:
        for part in source.attachments():
            yield _Candidate(
                original_name=part.filename,
                payload=part.payload,
                content_type=part.content_type,
                disposition=Disposition.INLINE if part.disposition == "inline" else Disposition.ATTACHMENT,
                content_id=strip_angle_brackets(part.content_id),
            )

    def _scan_candidates(self, raw: bytes) -> Iterator[_Candidate]:
        raw_headers, body = split_message(raw)
        if not body:
            return

        headers = parse_headers(raw_headers)
        boundary = detect_boundary(headers.get("Content-Type"), body)
        if boundary is None:
            return

        for part in split_multipart(body, boundary):
            candidate = self._scan_part(part)
            if candidate is not None:
                yield candidate

    def _scan_part(self, part: MimePart) -> Optional[_Candidate]:
        kind = part.disposition_type
        original = recover_filename(part.disposition, part.content_type)

        is_inline = kind == "inline"
        if kind != "attachment" and not (is_inline and original is not None):
            return None

        return _Candidate(
            original_name=original,
            payload=decode_transfer(part.body, part.headers),
            content_type=part.mime_type or None,
            disposition=Disposition.INLINE if is_inline else Disposition.ATTACHMENT,
            content_id=strip_angle_brackets(part.headers.get("Content-Id")),
        )
