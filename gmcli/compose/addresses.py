"""Parsing of sender/recipient header values.

These are deliberately simple: no RFC 5322 quoted-comma handling. Every
function is total, so a malformed header degrades to a bare address
instead of raising.
"""

import re

from .models import AddressSpec

# "Display Name <email>" with optional whitespace before the bracket
_NAME_ADDR_RE = re.compile(r"^(.+?)\s*<([^>]+)>$")


def parse_address(header: str) -> AddressSpec:
    """Parse a single address header value.

    Args:
        header: Value like "John Doe <john@example.com>" or "john@example.com".

    Returns:
        AddressSpec. The display name is trimmed but keeps any quotes.
    """
    trimmed = header.strip()

    match = _NAME_ADDR_RE.match(trimmed)
    if match:
        return AddressSpec(name=match.group(1).strip(), email=match.group(2).strip())

    return AddressSpec(name="", email=trimmed)


def parse_address_list(header: str) -> list[str]:
    """Split a comma-separated address header into bare email addresses.

    Returns an empty list for empty/whitespace-only headers.
    """
    if not header or not header.strip():
        return []

    emails = [parse_address(entry).email for entry in header.split(",")]
    return [email for email in emails if email]


def filter_self(addresses: list[str], self_email: str) -> list[str]:
    """Remove every occurrence of self_email (case-insensitive).

    Order and duplicates of the remaining addresses are preserved.
    """
    self_lower = self_email.lower()
    return [address for address in addresses if address.lower() != self_lower]
