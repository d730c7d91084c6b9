"""MIME message composition for new messages and replies.

Builds the RFC 2822 message handed to the Gmail API. The body layout
depends on two things, checked in this order:

1. Attachments present -> multipart/mixed. The first part is a
   multipart/alternative (text + HTML) when quoting a reply, otherwise
   a single text/plain part. Each attachment follows, base64-encoded.
2. Quoting a reply, no attachments -> multipart/alternative with a
   text/plain and a text/html part.
3. Otherwise -> a flat text/plain body.

The HTML alternative exists so Gmail shows the quote collapsed behind its
"..." toggle, the same way as replies written in Gmail.
"""

import email.charset
import logging
import mimetypes
import secrets
import time
from email import encoders
from email.generator import BytesGenerator
from email.header import Header
from email.message import Message
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.policy import compat32
from io import BytesIO
from pathlib import Path

from gmcli.errors import AttachmentError

from .addresses import filter_self, parse_address
from .models import Attachment, ComposedMessage, DraftIntent, ReplyContext
from .quoting import format_gmail_quote, format_html_reply_body, format_reply_subject

logger = logging.getLogger(__name__)

# UTF-8 text parts with quoted-printable bodies: readable in raw form and
# safe for any content
_utf8_qp = email.charset.Charset("utf-8")
_utf8_qp.body_encoding = email.charset.QP

_CRLF_POLICY = compat32.clone(linesep="\r\n")


def make_boundary(prefix: str) -> str:
    """Generate a MIME boundary: prefix, millisecond time, random suffix."""
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(6)}"


def guess_content_type(filename: str) -> str:
    """Guess an attachment's MIME type from its filename."""
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


def load_attachments(paths: list[str]) -> list[Attachment]:
    """Read attachment files into memory.

    Raises:
        AttachmentError: If any file cannot be read. Nothing is returned
            for the other files in that case.
    """
    attachments = []
    for path_str in paths:
        path = Path(path_str).expanduser()
        try:
            data = path.read_bytes()
        except OSError as e:
            raise AttachmentError(path_str, e.strerror or str(e)) from e
        attachments.append(
            Attachment(
                filename=path.name,
                content_type=guess_content_type(path.name),
                data=data,
            )
        )
    return attachments


def _text_part(text: str, subtype: str) -> MIMEText:
    return MIMEText(text, subtype, _charset=_utf8_qp)  # type: ignore[arg-type]


def _alternative_part(plain: str, html: str) -> MIMEMultipart:
    alternative = MIMEMultipart("alternative", boundary=make_boundary("alt"))
    alternative.attach(_text_part(plain, "plain"))
    alternative.attach(_text_part(html, "html"))
    return alternative


def _attachment_part(attachment: Attachment) -> MIMEBase:
    maintype, _, subtype = attachment.content_type.partition("/")
    part = MIMEBase(maintype, subtype or "octet-stream")
    part.set_payload(attachment.data)
    encoders.encode_base64(part)
    part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
    return part


def _build_body(
    plain: str,
    html: str | None,
    attachments: list[Attachment],
) -> Message:
    """Build the MIME body tree. html is None when no quote is included."""
    if attachments:
        logger.debug("Composing multipart/mixed with %d attachment(s)", len(attachments))
        mixed = MIMEMultipart("mixed", boundary=make_boundary("boundary"))
        if html is not None:
            mixed.attach(_alternative_part(plain, html))
        else:
            mixed.attach(_text_part(plain, "plain"))
        for attachment in attachments:
            mixed.attach(_attachment_part(attachment))
        return mixed

    if html is not None:
        logger.debug("Composing multipart/alternative reply with quote")
        return _alternative_part(plain, html)

    logger.debug("Composing text/plain message")
    return _text_part(plain, "plain")


def _serialize(body: Message) -> tuple[list[tuple[str, str]], bytes]:
    """Split a generated MIME tree into its top-level headers and body bytes."""
    buffer = BytesIO()
    BytesGenerator(buffer, mangle_from_=False, policy=_CRLF_POLICY).flatten(body)
    _, _, body_bytes = buffer.getvalue().partition(b"\r\n\r\n")

    content_headers = [
        (key, str(value)) for key, value in body.items() if key.lower() != "mime-version"
    ]
    return content_headers, body_bytes


def _clean_header(value: str) -> str:
    """Keep user-supplied header values on a single line."""
    return " ".join(value.splitlines())


def _join_addresses(addresses: list[str]) -> str:
    return ", ".join(_clean_header(address) for address in addresses)


def _encode_subject(subject: str) -> str:
    """RFC 2047-encode non-ASCII subjects; leave ASCII untouched."""
    if subject.isascii():
        return subject
    return Header(subject, "utf-8").encode(linesep="\r\n")


def compose_message(
    intent: DraftIntent,
    sender: str,
    reply: ReplyContext | None = None,
    attachments: list[Attachment] | None = None,
) -> ComposedMessage:
    """Compose the final message for an intent.

    Args:
        intent: What the caller asked for. Not modified.
        sender: Address of the sending account (From, reply-all filtering).
        reply: Context of the message being replied to, if any.
        attachments: Pre-loaded attachments. Loaded from intent.attachments
            when None.

    Returns:
        ComposedMessage with ordered headers, body bytes, and the thread to
        join when replying.

    Raises:
        AttachmentError: If an attachment file cannot be read.
    """
    if attachments is None:
        attachments = load_attachments(intent.attachments)

    to = [address for address in intent.to if address.strip()]
    cc = list(intent.cc)
    subject = intent.subject
    plain_body = intent.body_text
    html_body = None

    if reply is not None:
        if not to:
            to = [parse_address(reply.from_addr).email]
            if intent.reply_all:
                cc = cc + filter_self(reply.to + reply.cc, sender)

        if not subject:
            subject = format_reply_subject(reply.subject)

        if intent.include_quote:
            plain_body = plain_body + format_gmail_quote(reply.date, reply.from_addr, reply.plain_body)
            html_body = format_html_reply_body(
                intent.body_text,
                reply.date,
                reply.from_addr,
                reply.plain_body,
                reply.html_body,
            )

    headers = [("From", _clean_header(sender)), ("To", _join_addresses(to))]
    if cc:
        headers.append(("Cc", _join_addresses(cc)))
    if intent.bcc:
        headers.append(("Bcc", _join_addresses(intent.bcc)))
    headers.append(("Subject", _encode_subject(_clean_header(subject))))

    # Messages without a Message-ID can't be threaded by header
    if reply is not None and reply.in_reply_to:
        headers.append(("In-Reply-To", _clean_header(reply.in_reply_to)))
        headers.append(("References", _clean_header(reply.references)))

    content_headers, body_bytes = _serialize(_build_body(plain_body, html_body, attachments))
    headers.append(("MIME-Version", "1.0"))
    headers.extend(content_headers)

    return ComposedMessage(
        headers=headers,
        body_bytes=body_bytes,
        thread_id=reply.thread_id if reply is not None and reply.thread_id else None,
    )
