"""Tests for MailService draft and send operations."""

import email
from email import policy
from email.message import EmailMessage
from unittest.mock import MagicMock

import pytest

from gmcli.compose.models import DraftIntent, encode_raw
from gmcli.compose.service import MailService
from gmcli.errors import AttachmentError, DraftError
from gmcli.gmail.client import decode_raw

HEADERS = {
    "From": "Alice <alice@example.com>",
    "To": "me@example.com",
    "Subject": "Lunch?",
    "Date": "Mon, 6 Jan 2025 18:30:00 +0000",
    "Message-ID": "<lunch3@mail.example.com>",
    "References": "<lunch1@mail.example.com>",
}


@pytest.fixture
def client(make_message):
    client = MagicMock()
    client.get_thread.return_value = {
        "id": "thread1",
        "messages": [{"id": "m1"}, {"id": "m2"}, {"id": "m3"}],
    }
    client.get_message.return_value = make_message("m3", "thread1", HEADERS, plain="Noon?")
    client.create_draft.return_value = {"id": "r1", "message": {"id": "m4", "threadId": "thread1"}}
    client.send_message.return_value = {"id": "m5", "threadId": "thread1"}
    return client


@pytest.fixture
def service(client):
    return MailService(client, "me@example.com")


def submitted(call) -> EmailMessage:
    """Parse the raw message passed to a client call."""
    return email.message_from_bytes(decode_raw(call.args[0]), policy=policy.default)


class TestCreateDraft:
    """Tests for create_draft."""

    def test_reply_to_thread_targets_last_message(self, service, client):
        """Replying to a thread quotes its last message and joins the thread."""
        draft = service.create_draft(DraftIntent(body_text="Sure", reply_target="thread1"))

        assert draft["id"] == "r1"
        client.get_message.assert_called_once_with("m3", format="full")

        call = client.create_draft.call_args
        assert call.kwargs["thread_id"] == "thread1"

        message = submitted(call)
        assert message["To"] == "alice@example.com"
        assert message["Subject"] == "Re: Lunch?"
        assert message["In-Reply-To"] == "<lunch3@mail.example.com>"
        assert message["References"] == "<lunch1@mail.example.com> <lunch3@mail.example.com>"
        assert message.get_content_type() == "multipart/alternative"

    def test_new_message_has_no_thread(self, service, client):
        """Messages without a reply target are not threaded."""
        service.create_draft(DraftIntent(to=["bob@example.com"], subject="Hi", body_text="Hello"))

        client.get_thread.assert_not_called()
        assert client.create_draft.call_args.kwargs["thread_id"] is None
        assert submitted(client.create_draft.call_args)["From"] == "me@example.com"

    def test_attachment_error_aborts_before_api_calls(self, service, client, tmp_path):
        """An unreadable attachment stops everything before Gmail is contacted."""
        intent = DraftIntent(
            body_text="See attached",
            reply_target="thread1",
            attachments=[str(tmp_path / "missing.pdf")],
        )

        with pytest.raises(AttachmentError) as exc_info:
            service.create_draft(intent)

        assert exc_info.value.path.endswith("missing.pdf")
        client.get_thread.assert_not_called()
        client.get_message.assert_not_called()
        client.create_draft.assert_not_called()


class TestSend:
    """Tests for send."""

    def test_sends_reply_in_thread(self, service, client):
        """send submits the composed message with its thread ID."""
        sent = service.send(DraftIntent(body_text="Sure", reply_target="thread1", include_quote=False))

        assert sent == {"id": "m5", "threadId": "thread1"}
        call = client.send_message.call_args
        assert call.kwargs["thread_id"] == "thread1"
        assert submitted(call).get_content_type() == "text/plain"


class TestUpdateDraft:
    """Tests for update_draft."""

    def test_keeps_headers_and_replaces_body(self, service, client):
        """The header block is kept; the body is replaced."""
        existing = (
            b"From: me@example.com\r\n"
            b"To: bob@example.com\r\n"
            b"Subject: Plans\r\n"
            b"Content-Type: text/plain; charset=utf-8\r\n"
            b"\r\n"
            b"Old body"
        )
        client.get_draft.return_value = {
            "id": "r1",
            "message": {"id": "m1", "threadId": "t7", "raw": encode_raw(existing)},
        }

        service.update_draft("r1", "New body")

        client.get_draft.assert_called_once_with("r1", format="raw")
        call = client.update_draft.call_args
        assert call.args[0] == "r1"
        assert call.kwargs["thread_id"] == "t7"

        updated = decode_raw(call.args[1])
        assert updated == (
            b"From: me@example.com\r\n"
            b"To: bob@example.com\r\n"
            b"Subject: Plans\r\n"
            b"Content-Type: text/plain; charset=utf-8\r\n"
            b"\r\n"
            b"New body"
        )

    def test_normalizes_bare_newlines(self, service, client):
        """Headers stored with LF line endings are rewritten with CRLF."""
        existing = b"To: bob@example.com\nSubject: Plans\n\nOld"
        client.get_draft.return_value = {"id": "r1", "message": {"raw": encode_raw(existing)}}

        service.update_draft("r1", "New")

        updated = decode_raw(client.update_draft.call_args.args[1])
        assert updated == b"To: bob@example.com\r\nSubject: Plans\r\n\r\nNew"

    def test_missing_message_raises(self, service, client):
        """A draft without a message cannot be updated."""
        client.get_draft.return_value = {"id": "r1"}

        with pytest.raises(DraftError, match="r1"):
            service.update_draft("r1", "New")

        client.update_draft.assert_not_called()


class TestDraftPassThrough:
    """Tests for list, get, delete and send of existing drafts."""

    def test_list_drafts(self, service, client):
        client.list_drafts.return_value = [{"id": "r1"}]

        assert service.list_drafts(max_results=5) == [{"id": "r1"}]
        client.list_drafts.assert_called_once_with(max_results=5)

    def test_delete_draft(self, service, client):
        service.delete_draft("r1")

        client.delete_draft.assert_called_once_with("r1")

    def test_send_draft(self, service, client):
        client.send_draft.return_value = {"id": "m9"}

        assert service.send_draft("r1") == {"id": "m9"}
