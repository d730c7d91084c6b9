"""MIME part tree for Gmail API message payloads.

The Gmail API returns a message's body as nested JSON ("payload" with
optional "parts"). We convert it once into a small tagged tree so the
body search works on typed values instead of optional dict lookups:

    MimeNode("multipart/mixed", (
        MimeNode("multipart/alternative", (
            MimeLeaf("text/plain", b"Hello"),
            MimeLeaf("text/html", b"<p>Hello</p>"),
        )),
        MimeLeaf("application/pdf", b"", filename="report.pdf"),
    ))
"""

import base64
from dataclasses import dataclass, field
from email.message import Message


@dataclass(frozen=True)
class MimeLeaf:
    """A content part: declared type plus decoded body bytes.

    Attachments stored server-side (body.attachmentId) have empty data.
    """

    content_type: str
    data: bytes = b""
    filename: str = ""
    charset: str = "utf-8"

    def text(self) -> str:
        """Decode the body using the part's charset."""
        try:
            return self.data.decode(self.charset, errors="replace")
        except LookupError:
            # Unknown charset name in the Content-Type header
            return self.data.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class MimeNode:
    """A multipart container with ordered child parts."""

    content_type: str
    parts: tuple["MimePart", ...] = field(default_factory=tuple)


MimePart = MimeLeaf | MimeNode


def _decode_body_data(data: str) -> bytes:
    """Decode base64url body data, tolerating missing padding."""
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def _header_charset(headers: list[dict]) -> str:
    """Extract the charset parameter from a payload's Content-Type header."""
    for header in headers:
        if header.get("name", "").lower() == "content-type":
            msg = Message()
            msg["Content-Type"] = header.get("value", "")
            return msg.get_content_charset() or "utf-8"
    return "utf-8"


def part_from_payload(payload: dict) -> MimePart:
    """Convert a Gmail API payload dict into a MimePart tree.

    Args:
        payload: The "payload" object of a message fetched with format="full".

    Returns:
        MimeNode when the payload has child parts, MimeLeaf otherwise.
    """
    content_type = (payload.get("mimeType") or "").lower()
    children = payload.get("parts")

    if children:
        return MimeNode(
            content_type=content_type,
            parts=tuple(part_from_payload(child) for child in children),
        )

    data = payload.get("body", {}).get("data")
    return MimeLeaf(
        content_type=content_type,
        data=_decode_body_data(data) if data else b"",
        filename=payload.get("filename", ""),
        charset=_header_charset(payload.get("headers", [])),
    )


def find_part(part: MimePart, content_type: str) -> MimeLeaf | None:
    """Depth-first search for the first non-empty leaf of content_type.

    At each node the direct children are checked before descending, so a
    text/plain sitting next to a nested multipart wins over one inside it.

    Returns:
        The matching leaf, or None if there is none.
    """
    match part:
        case MimeLeaf():
            if part.content_type == content_type and part.data:
                return part
            return None

        case MimeNode(parts=children):
            for child in children:
                if isinstance(child, MimeLeaf) and child.content_type == content_type and child.data:
                    return child
            for child in children:
                found = find_part(child, content_type)
                if found is not None:
                    return found
            return None
