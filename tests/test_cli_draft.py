"""Tests for draft and send CLI commands.

Uses typer.testing.CliRunner for CLI tests.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from gmcli.cli.main import app
from gmcli.errors import AttachmentError, NotAuthenticatedError


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def mock_config():
    """Mock configuration for tests."""
    return {
        "defaults": {"account": "personal", "include_quote": True},
        "accounts": {
            "personal": {
                "email": "me@gmail.com",
                "client_id": "test-client-id.apps.googleusercontent.com",
            }
        },
    }


@pytest.fixture
def service(mock_config):
    """Patch connect() in the command modules to return a mock MailService."""
    service = MagicMock()
    with (
        patch("gmcli.cli.commands._common.load_config", return_value=mock_config),
        patch("gmcli.cli.commands.draft.connect", return_value=service),
        patch("gmcli.cli.commands.send.connect", return_value=service),
    ):
        yield service


class TestDraftCreate:
    """Tests for draft create."""

    def test_requires_recipient_without_reply(self, runner: CliRunner, service):
        """A new draft needs --to."""
        result = runner.invoke(app, ["draft", "create", "--body", "Hi"])

        assert result.exit_code == 1
        assert "--to is required unless --reply-to is given" in result.output
        service.create_draft.assert_not_called()

    def test_creates_reply_draft(self, runner: CliRunner, service):
        """--reply-to builds a reply intent with the configured quote default."""
        service.create_draft.return_value = {"id": "r123"}

        result = runner.invoke(
            app, ["draft", "create", "--reply-to", "thread1", "--body", "Thanks!"]
        )

        assert result.exit_code == 0
        assert "Draft created: r123" in result.output

        intent = service.create_draft.call_args.args[0]
        assert intent.reply_target == "thread1"
        assert intent.to == []
        assert intent.body_text == "Thanks!"
        assert intent.include_quote is True
        assert intent.reply_all is False

    def test_no_quote_and_reply_all(self, runner: CliRunner, service):
        """--no-quote and --reply-all reach the intent."""
        service.create_draft.return_value = {"id": "r1"}

        runner.invoke(
            app,
            ["draft", "create", "--reply-to", "t1", "--body", "x", "--no-quote", "--reply-all"],
        )

        intent = service.create_draft.call_args.args[0]
        assert intent.include_quote is False
        assert intent.reply_all is True

    def test_splits_recipients(self, runner: CliRunner, service):
        """Comma-separated and repeated --to values are flattened."""
        service.create_draft.return_value = {"id": "r1"}

        runner.invoke(
            app,
            [
                "draft", "create",
                "--to", "a@x.com, b@x.com",
                "--to", "c@x.com",
                "--subject", "Hi",
                "--body", "x",
                "--attach", "report.pdf",
            ],
        )

        intent = service.create_draft.call_args.args[0]
        assert intent.to == ["a@x.com", "b@x.com", "c@x.com"]
        assert intent.subject == "Hi"
        assert intent.attachments == ["report.pdf"]

    def test_reads_body_from_stdin(self, runner: CliRunner, service):
        """The body is read from stdin when --body is omitted."""
        service.create_draft.return_value = {"id": "r1"}

        runner.invoke(app, ["draft", "create", "--to", "a@x.com"], input="Piped body\n")

        assert service.create_draft.call_args.args[0].body_text == "Piped body\n"

    def test_json_output(self, runner: CliRunner, service):
        """--json prints the draft resource."""
        service.create_draft.return_value = {"id": "r1", "message": {"id": "m1"}}

        result = runner.invoke(
            app, ["draft", "create", "--to", "a@x.com", "--body", "x", "--json"]
        )

        assert json.loads(result.output) == {"id": "r1", "message": {"id": "m1"}}

    def test_attachment_error(self, runner: CliRunner, service):
        """Unreadable attachments are reported and exit 1."""
        service.create_draft.side_effect = AttachmentError("missing.pdf", "No such file or directory")

        result = runner.invoke(
            app, ["draft", "create", "--to", "a@x.com", "--body", "x", "--attach", "missing.pdf"]
        )

        assert result.exit_code == 1
        assert "Cannot read attachment 'missing.pdf'" in result.output

    def test_error_as_json(self, runner: CliRunner, service):
        """Errors are JSON objects with --json."""
        service.create_draft.side_effect = NotAuthenticatedError("Account 'personal' is not authenticated")

        result = runner.invoke(
            app, ["draft", "create", "--to", "a@x.com", "--body", "x", "--json"]
        )

        assert result.exit_code == 1
        assert json.loads(result.output) == {"error": "Account 'personal' is not authenticated"}


class TestDraftManagement:
    """Tests for draft list, update, delete and send."""

    def test_list(self, runner: CliRunner, service):
        """Drafts are listed one per line."""
        service.list_drafts.return_value = [
            {"id": "r1", "message": {"id": "m1", "threadId": "t1"}},
        ]

        result = runner.invoke(app, ["draft", "list", "--max", "10"])

        assert result.exit_code == 0
        assert "r1\tm1\tt1" in result.output
        service.list_drafts.assert_called_once_with(max_results=10)

    def test_list_empty(self, runner: CliRunner, service):
        service.list_drafts.return_value = []

        result = runner.invoke(app, ["draft", "list"])

        assert "No drafts" in result.output

    def test_update(self, runner: CliRunner, service):
        """update replaces the body of the given draft."""
        service.update_draft.return_value = {"id": "r1"}

        result = runner.invoke(app, ["draft", "update", "r1", "--body", "New text"])

        assert result.exit_code == 0
        service.update_draft.assert_called_once_with("r1", "New text")

    def test_delete(self, runner: CliRunner, service):
        result = runner.invoke(app, ["draft", "delete", "r1"])

        assert result.exit_code == 0
        assert "Draft deleted: r1" in result.output
        service.delete_draft.assert_called_once_with("r1")

    def test_send(self, runner: CliRunner, service):
        service.send_draft.return_value = {"id": "m9", "threadId": "t1"}

        result = runner.invoke(app, ["draft", "send", "r1"])

        assert "Sent: m9 (thread t1)" in result.output


class TestSendCommand:
    """Tests for the top-level send command."""

    def test_sends_reply(self, runner: CliRunner, service):
        """send composes and submits immediately."""
        service.send.return_value = {"id": "m5", "threadId": "t1"}

        result = runner.invoke(app, ["send", "--reply-to", "t1", "--body", "On my way"])

        assert result.exit_code == 0
        assert "Sent: m5 (thread t1)" in result.output
        assert service.send.call_args.args[0].reply_target == "t1"

    def test_quote_default_from_config(self, runner: CliRunner, service, mock_config):
        """defaults.include_quote applies when neither flag is given."""
        mock_config["defaults"]["include_quote"] = False
        service.send.return_value = {"id": "m5"}

        runner.invoke(app, ["send", "--reply-to", "t1", "--body", "x"])

        assert service.send.call_args.args[0].include_quote is False

    def test_requires_recipient(self, runner: CliRunner, service):
        result = runner.invoke(app, ["send", "--body", "x"])

        assert result.exit_code == 1
        service.send.assert_not_called()


class TestVersion:
    def test_version(self, runner: CliRunner):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "gmcli version" in result.output
