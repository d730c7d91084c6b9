"""Resolve a reply target into a ReplyContext.

Users pass either a thread ID or a message ID (Gmail thread IDs are often
equal to the ID of the thread's first message). We try the ID as a thread
first and reply to its *last* message, so the reply lands at the end of
the conversation. If no thread has that ID, it is used as a message ID.
"""

import logging
from typing import Protocol

from googleapiclient.errors import HttpError

from .addresses import parse_address_list
from .models import ReplyContext
from .parts import MimeLeaf, find_part, part_from_payload

logger = logging.getLogger(__name__)

# Thread lookups failing with these statuses mean "not a thread ID".
# Anything else (auth, quota, server errors) is a real failure.
_NOT_A_THREAD_STATUSES = {400, 404}


class MessageSource(Protocol):
    """The two transport calls reply resolution needs."""

    def get_thread(self, thread_id: str, format: str = "minimal") -> dict: ...

    def get_message(self, message_id: str, format: str = "full") -> dict: ...


def _latest_message_id(client: MessageSource, identifier: str) -> str:
    """Map a thread ID to its last message ID; pass message IDs through."""
    try:
        thread = client.get_thread(identifier, format="minimal")
    except HttpError as e:
        if e.resp.status not in _NOT_A_THREAD_STATUSES:
            raise
        logger.debug("%s is not a thread ID (HTTP %s), using it as a message ID", identifier, e.resp.status)
        return identifier

    messages = thread.get("messages", [])
    if not messages:
        return identifier

    latest = messages[-1]["id"]
    logger.debug("Thread %s has %d messages, replying to %s", identifier, len(messages), latest)
    return latest


def _header_lookup(payload: dict):
    headers = payload.get("headers", [])

    def get(name: str) -> str:
        for header in headers:
            if header.get("name", "").lower() == name.lower():
                return header.get("value", "")
        return ""

    return get


def build_references(existing: str, message_id: str) -> str:
    """Append message_id to an existing References chain."""
    if existing and message_id:
        return f"{existing} {message_id}"
    return existing or message_id


def context_from_message(message: dict) -> ReplyContext:
    """Build a ReplyContext from a message fetched with format="full"."""
    payload = message.get("payload", {})
    get_header = _header_lookup(payload)

    root = part_from_payload(payload)

    plain = find_part(root, "text/plain")
    if plain is None and isinstance(root, MimeLeaf):
        # Single-part message of another type: its body is all there is
        plain = root
    html = find_part(root, "text/html")

    rfc822_message_id = get_header("Message-ID")

    return ReplyContext(
        message_id=message.get("id", ""),
        thread_id=message.get("threadId", ""),
        from_addr=get_header("From"),
        to=parse_address_list(get_header("To")),
        cc=parse_address_list(get_header("Cc")),
        subject=get_header("Subject"),
        date=get_header("Date"),
        plain_body=plain.text() if plain is not None else "",
        html_body=html.text() if html is not None else "",
        in_reply_to=rfc822_message_id,
        references=build_references(get_header("References"), rfc822_message_id),
    )


def resolve_reply_context(client: MessageSource, identifier: str) -> ReplyContext:
    """Fetch the message to reply to and extract its reply context.

    Args:
        client: Transport providing get_thread and get_message.
        identifier: Thread ID or message ID.

    Returns:
        ReplyContext for the last message of the thread, or for the
        message itself.

    Raises:
        HttpError: If the message cannot be fetched (e.g. 404), or if the
            thread lookup fails for a reason other than "not found".
    """
    message_id = _latest_message_id(client, identifier)
    message = client.get_message(message_id, format="full")
    return context_from_message(message)
