"""Data models for message composition and reply threading."""

import base64
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AddressSpec:
    """A parsed "Name <email>" header value.

    name is empty for bare addresses.
    """

    name: str
    email: str


@dataclass(frozen=True)
class ReplyContext:
    """Everything needed to reply to one prior message.

    Built once per compose operation by the reply resolver and never
    modified afterwards.
    """

    message_id: str  # Gmail API message ID
    thread_id: str
    from_addr: str  # Raw From header, e.g. "John Doe <john@example.com>"
    to: list[str] = field(default_factory=list)  # Bare emails
    cc: list[str] = field(default_factory=list)
    subject: str = ""
    date: str = ""  # RFC 2822 Date header
    plain_body: str = ""
    html_body: str = ""  # Empty when the message has no text/html part
    in_reply_to: str = ""  # RFC 2822 Message-ID of the prior message
    references: str = ""  # Space-joined ancestor chain, ending with in_reply_to


@dataclass(frozen=True)
class DraftIntent:
    """What the caller asked for: recipients, text, attachments, reply target.

    Auto-filled values (recipients, subject, quote) are derived from this
    by the composer and never written back.
    """

    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    subject: str = ""
    body_text: str = ""
    attachments: list[str] = field(default_factory=list)  # File paths
    reply_target: str | None = None  # Thread ID or message ID
    reply_all: bool = False
    include_quote: bool = True


@dataclass(frozen=True)
class Attachment:
    """An attachment file read into memory."""

    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class ComposedMessage:
    """Final RFC 2822 message, ready to hand to the Gmail API.

    Headers keep their insertion order. thread_id is the Gmail thread the
    message should join, if any.
    """

    headers: list[tuple[str, str]]
    body_bytes: bytes
    thread_id: str | None = None

    def header(self, name: str) -> str | None:
        """Look up a header value (case-insensitive)."""
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None

    def to_bytes(self) -> bytes:
        """Serialize headers and body with CRLF framing."""
        head = "\r\n".join(f"{key}: {value}" for key, value in self.headers)
        return head.encode("utf-8") + b"\r\n\r\n" + self.body_bytes

    def to_raw(self) -> str:
        """Encode the message as the base64url string Gmail expects in 'raw'."""
        return encode_raw(self.to_bytes())


def encode_raw(message_bytes: bytes) -> str:
    """Encode message bytes in URL-safe base64 for the Gmail API."""
    return base64.urlsafe_b64encode(message_bytes).decode("ascii")
