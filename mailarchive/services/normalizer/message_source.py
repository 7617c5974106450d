"""Message sources: raw bytes or a parsed email object model."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from email import message_from_bytes
from email.message import EmailMessage, Message
from email.policy import default
from email.utils import getaddresses, make_msgid
from typing import Iterator, List, Optional, Sequence

from mailarchive.services.mime.header_parser import HeaderMap, parse_headers, split_message


@dataclass(frozen=True)
class Envelope:
    """
    Transport-level sender and recipients.

    Attributes:
        sender: Envelope sender (MAIL FROM)
        recipients: Envelope recipients (RCPT TO), covering To, Cc and Bcc
    """

    sender: Optional[str] = None
    recipients: Sequence[str] = ()


class MessageSource(ABC):
    """
    An outgoing message handed to the archive.

    Implementations expose the exact bytes that will be stored and a
    case-insensitive header lookup; richer sources add structured accessors.
    """

    def __init__(self, envelope: Optional[Envelope] = None):
        self.envelope = envelope
        self._headers: Optional[HeaderMap] = None

    @abstractmethod
    def as_bytes(self) -> bytes:
        """Return the serialized message. Repeated calls return the same bytes."""
        pass

    def headers(self) -> HeaderMap:
        """Top-level headers parsed from :meth:`as_bytes`."""
        if self._headers is None:
            raw_headers, _ = split_message(self.as_bytes())
            self._headers = parse_headers(raw_headers)
        return self._headers

    def header(self, name: str) -> Optional[str]:
        """Look up a top-level header value by case-insensitive name."""
        return self.headers().get(name)


class RawMessageSource(MessageSource):
    """A message known only as raw bytes, optionally with an envelope."""

    def __init__(self, raw: bytes, envelope: Optional[Envelope] = None):
        super().__init__(envelope)
        self._raw = raw

    def as_bytes(self) -> bytes:
        return self._raw


@dataclass
class ModelAttachment:
    """An attachment part as exposed by the object model (payload already decoded)."""

    filename: Optional[str]
    payload: bytes
    content_type: Optional[str]
    disposition: Optional[str]
    content_id: Optional[str]


class EmailMessageSource(MessageSource):
    """
    A message backed by the stdlib ``email`` object model.

    A legacy ``compat32`` :class:`~email.message.Message` is re-parsed with
    the ``default`` policy so the modern accessors are available.
    """

    def __init__(self, message: Message, envelope: Optional[Envelope] = None):
        super().__init__(envelope)
        if not isinstance(message, EmailMessage):
            message = message_from_bytes(message.as_bytes(), policy=default)
        self.message = message
        self._raw: Optional[bytes] = None

    def as_bytes(self) -> bytes:
        if self._raw is None:
            self._raw = self.message.as_bytes()
        return self._raw

    def header(self, name: str) -> Optional[str]:
        value = self.message.get(name)
        return None if value is None else str(value)

    @property
    def subject(self) -> Optional[str]:
        return self.header("Subject")

    def addresses(self, name: str) -> List[str]:
        """Bare addresses of an address header (From, To, Cc, Bcc)."""
        values = self.message.get_all(name) or []
        return [addr for _, addr in getaddresses([str(value) for value in values]) if addr]

    def html_body(self) -> Optional[str]:
        return self._body_content("html")

    def text_body(self) -> Optional[str]:
        return self._body_content("plain")

    def _body_content(self, subtype: str) -> Optional[str]:
        part = self.message.get_body(preferencelist=(subtype,))
        if part is None or part.get_content_subtype() != subtype:
            return None
        try:
            return part.get_content()
        except (LookupError, ValueError):
            payload = part.get_payload(decode=True) or b""
            return payload.decode("utf-8", errors="replace")

    def attachments(self) -> Iterator[ModelAttachment]:
        """
        Yield attachment parts in document order.

        A leaf part counts as an attachment when its disposition is
        ``attachment``, or when it carries a filename and is not one of the
        parts chosen as the HTML or plain-text body.
        """
        body_parts = [
            part
            for part in (
                self.message.get_body(preferencelist=("html",)),
                self.message.get_body(preferencelist=("plain",)),
            )
            if part is not None
        ]

        for part in self.message.walk():
            if part.is_multipart():
                continue
            disposition = part.get_content_disposition()
            filename = part.get_filename()
            if disposition != "attachment":
                if filename is None or any(part is body for body in body_parts):
                    continue

            yield ModelAttachment(
                filename=filename,
                payload=part.get_payload(decode=True) or b"",
                content_type=part.get_content_type(),
                disposition=disposition,
                content_id=part.get("Content-ID"),
            )

    def generate_message_id(self) -> str:
        return make_msgid()
