"""Message composition and reply threading.

Usage:
    from gmcli.compose import DraftIntent, MailService

    service = MailService(client, "me@gmail.com")
    service.create_draft(DraftIntent(body_text="Sounds good.", reply_target=thread_id))
"""

from .addresses import filter_self, parse_address, parse_address_list
from .mime import compose_message, load_attachments
from .models import (
    AddressSpec,
    Attachment,
    ComposedMessage,
    DraftIntent,
    ReplyContext,
    encode_raw,
)
from .reply import resolve_reply_context
from .service import MailService

__all__ = [
    "AddressSpec",
    "Attachment",
    "ComposedMessage",
    "DraftIntent",
    "MailService",
    "ReplyContext",
    "compose_message",
    "encode_raw",
    "filter_self",
    "load_attachments",
    "parse_address",
    "parse_address_list",
    "resolve_reply_context",
]
