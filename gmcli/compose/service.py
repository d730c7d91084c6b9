"""Draft and send operations for one account.

Each operation is a straight pipeline:

    load attachments -> resolve reply target -> compose -> submit

Attachments are read first so an unreadable file aborts before any
Gmail API call is made.
"""

import logging

from gmcli.errors import DraftError
from gmcli.gmail.client import GmailClient, decode_raw

from .mime import compose_message, load_attachments
from .models import ComposedMessage, DraftIntent, encode_raw
from .reply import resolve_reply_context

logger = logging.getLogger(__name__)


class MailService:
    """Compose and submit messages for one Gmail account.

    Example:
        service = MailService(handle.client, handle.email)
        draft = service.create_draft(DraftIntent(body_text="Thanks!", reply_target="18c2f..."))
    """

    def __init__(self, client: GmailClient, account_email: str):
        """Initialize the service.

        Args:
            client: Gmail API client for the account.
            account_email: Mailbox address, used as From.
        """
        self._client = client
        self._email = account_email

    def compose(self, intent: DraftIntent) -> ComposedMessage:
        """Build the message for an intent without submitting it.

        Raises:
            AttachmentError: If an attachment cannot be read.
            HttpError: If the reply target cannot be fetched.
        """
        attachments = load_attachments(intent.attachments)

        reply = None
        if intent.reply_target:
            reply = resolve_reply_context(self._client, intent.reply_target)

        return compose_message(intent, self._email, reply=reply, attachments=attachments)

    def create_draft(self, intent: DraftIntent) -> dict:
        """Compose a message and save it as a draft."""
        message = self.compose(intent)
        draft = self._client.create_draft(message.to_raw(), thread_id=message.thread_id)
        logger.info("Created draft %s", draft.get("id"))
        return draft

    def send(self, intent: DraftIntent) -> dict:
        """Compose a message and send it immediately."""
        message = self.compose(intent)
        sent = self._client.send_message(message.to_raw(), thread_id=message.thread_id)
        logger.info("Sent message %s", sent.get("id"))
        return sent

    def update_draft(self, draft_id: str, body: str) -> dict:
        """Replace a draft's body, keeping its headers and thread.

        Only useful for flat text/plain drafts: the new body replaces
        everything after the header block.

        Raises:
            DraftError: If the draft has no message.
        """
        draft = self._client.get_draft(draft_id, format="raw")
        message = draft.get("message")
        if not message:
            raise DraftError(f"Draft '{draft_id}' has no message")

        existing = decode_raw(message.get("raw", ""))
        head = _header_block(existing)

        updated = head + b"\r\n\r\n" + body.encode("utf-8")
        result = self._client.update_draft(
            draft_id,
            encode_raw(updated),
            thread_id=message.get("threadId"),
        )
        logger.info("Updated draft %s", draft_id)
        return result

    def list_drafts(self, max_results: int = 100) -> list[dict]:
        return self._client.list_drafts(max_results=max_results)

    def get_draft(self, draft_id: str) -> dict:
        return self._client.get_draft(draft_id)

    def delete_draft(self, draft_id: str) -> None:
        self._client.delete_draft(draft_id)
        logger.info("Deleted draft %s", draft_id)

    def send_draft(self, draft_id: str) -> dict:
        sent = self._client.send_draft(draft_id)
        logger.info("Sent draft %s as message %s", draft_id, sent.get("id"))
        return sent


def _header_block(raw: bytes) -> bytes:
    """Return the header block of a raw message (without the blank line)."""
    for separator in (b"\r\n\r\n", b"\n\n"):
        head, found, _ = raw.partition(separator)
        if found:
            return head.replace(b"\r\n", b"\n").replace(b"\n", b"\r\n")
    return raw.rstrip(b"\r\n")
