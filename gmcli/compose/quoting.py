"""Gmail-style quoting of a prior message in a reply.

Gmail recognizes a quoted reply by the exact shape of its attribution line
and of the HTML quote container. Matching that shape makes nested reply
chains collapse and render the same way as replies written in Gmail itself.

Example plain-text quote:

    On Mon, Jan 6, 2025 at 6:30 PM John Doe <john@example.com> wrote:

    > Hello
    > World

All functions are pure and never raise.
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from .addresses import parse_address

_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# Gmail puts a narrow no-break space between the time and AM/PM
NARROW_NBSP = "\u202f"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Inline style Gmail uses on its quote blockquote
_BLOCKQUOTE_STYLE = "margin:0px 0px 0px 0.8ex;border-left:1px solid rgb(204,204,204);padding-left:1ex"


def _parse_local_date(date: str) -> datetime:
    """Parse an RFC 2822 date into local time, falling back to the epoch."""
    if not date:
        return _EPOCH.astimezone()
    try:
        parsed = parsedate_to_datetime(date)
    except (ValueError, TypeError, IndexError):
        return _EPOCH.astimezone()

    # "-0000" means "zone unknown"; treat it as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone()


def _format_when(date: str) -> str:
    """Render "Mon, Jan 6, 2025 at 6:30 PM" (with U+202F) in local time."""
    local = _parse_local_date(date)

    hour = local.hour % 12 or 12
    meridiem = "PM" if local.hour >= 12 else "AM"

    return (
        f"{_DAYS[local.weekday()]}, {_MONTHS[local.month - 1]} {local.day}, {local.year}"
        f" at {hour}:{local.minute:02d}{NARROW_NBSP}{meridiem}"
    )


def format_attribution_line(date: str, sender: str) -> str:
    """Build the plain-text "On ... wrote:" line.

    Args:
        date: RFC 2822 date, e.g. "Mon, 6 Jan 2025 10:30:00 -0800".
        sender: From header, e.g. "John Doe <john@example.com>".

    Returns:
        Attribution line. A sender without a display name is shown as
        "<email>", otherwise the header is used verbatim.
    """
    address = parse_address(sender)
    display = sender if address.name else f"<{address.email}>"

    # No comma between the time and the sender
    return f"On {_format_when(date)} {display} wrote:"


def format_quoted_body(text: str) -> str:
    """Prefix every line of text with "> "."""
    if not text:
        return ""

    return "\n".join(f"> {line}" for line in text.split("\n"))


def format_gmail_quote(date: str, sender: str, body: str) -> str:
    """Build the plain-text quote appended after the reply text."""
    attribution = format_attribution_line(date, sender)
    quoted = format_quoted_body(body)

    return f"\n\n{attribution}\n\n{quoted}"


def escape_html(text: str) -> str:
    """Escape &, <, > and double quotes. Ampersand goes first."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def text_to_html(text: str) -> str:
    """Escape text and turn newlines into <br>."""
    return escape_html(text).replace("\n", "<br>")


def format_html_attribution_line(date: str, sender: str) -> str:
    """Build the HTML attribution line with a mailto link for the sender."""
    address = parse_address(sender)
    email = escape_html(address.email)
    link = f'<a href="mailto:{email}">{email}</a>'

    if address.name:
        display = f"{escape_html(address.name)} &lt;{link}&gt;"
    else:
        display = f"&lt;{link}&gt;"

    return f"On {_format_when(date)} {display} wrote:"


def format_html_gmail_quote(date: str, sender: str, body: str, html_body: str = "") -> str:
    """Build Gmail's quote container for the HTML part.

    Args:
        date: RFC 2822 date of the quoted message.
        sender: From header of the quoted message.
        body: Plain-text body, escaped and used when html_body is empty.
        html_body: HTML body of the quoted message. Embedded verbatim so
            earlier quote levels keep their own blockquotes.
    """
    attribution = format_html_attribution_line(date, sender)
    content = html_body if html_body else escape_html(body)

    return (
        '<div class="gmail_quote gmail_quote_container">'
        f'<div dir="ltr" class="gmail_attr">{attribution}<br></div>'
        f'<blockquote class="gmail_quote" style="{_BLOCKQUOTE_STYLE}">'
        f"{content}</blockquote></div>"
    )


def format_html_reply_body(
    reply_text: str,
    date: str,
    sender: str,
    original_body: str,
    original_html_body: str = "",
) -> str:
    """Build the complete HTML body: reply text followed by the quote."""
    reply_html = text_to_html(reply_text)
    quote_html = format_html_gmail_quote(date, sender, original_body, original_html_body)

    return f'<div dir="ltr"><div>{reply_html}</div><br>{quote_html}</div>'


def format_reply_subject(subject: str) -> str:
    """Add "Re: " unless the subject already starts with "re:" (any case)."""
    trimmed = subject.strip()

    if trimmed.lower().startswith("re:"):
        return trimmed

    # No trailing space, so the result is its own fixed point
    if not trimmed:
        return "Re:"

    return f"Re: {trimmed}"
