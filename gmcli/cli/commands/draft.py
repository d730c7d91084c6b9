"""Draft command implementation."""

import typer
from googleapiclient.errors import HttpError
from typing_extensions import Annotated

from gmcli.errors import GmcliError

from ._common import build_intent, connect, fail, output, read_body

app = typer.Typer(help="Create, reply to, and manage drafts", no_args_is_help=True)

AccountOption = Annotated[
    str | None, typer.Option("--account", "-a", help="Account name from config")
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output JSON")]


@app.command()
def create(
    to: Annotated[list[str] | None, typer.Option("--to", help="Recipient(s), comma-separated or repeated")] = None,
    cc: Annotated[list[str] | None, typer.Option("--cc", help="CC recipient(s)")] = None,
    bcc: Annotated[list[str] | None, typer.Option("--bcc", help="BCC recipient(s)")] = None,
    subject: Annotated[str | None, typer.Option("--subject", help="Email subject")] = None,
    body: Annotated[str | None, typer.Option("--body", help="Email body (or read from stdin)")] = None,
    reply_to: Annotated[str | None, typer.Option("--reply-to", help="Thread or message ID to reply to")] = None,
    reply_all: Annotated[bool, typer.Option("--reply-all", help="Copy the original recipients")] = False,
    quote: Annotated[
        bool | None, typer.Option("--quote/--no-quote", help="Quote the original message")
    ] = None,
    attach: Annotated[list[str] | None, typer.Option("--attach", help="Attach file(s)")] = None,
    account: AccountOption = None,
    as_json: JsonOption = False,
):
    """Create a draft, optionally as a reply.

    With --reply-to, recipients and subject are filled in from the original
    message unless given, and the original is quoted below the body.
    """
    text = read_body(body)
    if text is None:
        raise fail("Provide --body or pipe the body on stdin", as_json)
    if not reply_to and not to:
        raise fail("--to is required unless --reply-to is given", as_json)

    intent = build_intent(to, cc, bcc, subject, text, reply_to, reply_all, quote, attach)

    try:
        draft = connect(account).create_draft(intent)
    except (GmcliError, HttpError) as e:
        raise fail(str(e), as_json)

    if as_json:
        output(draft, as_json)
    else:
        output(f"Draft created: {draft.get('id')}")


@app.command("list")
def list_drafts(
    max_results: Annotated[int, typer.Option("--max", help="Maximum drafts to list")] = 50,
    account: AccountOption = None,
    as_json: JsonOption = False,
):
    """List drafts."""
    try:
        drafts = connect(account).list_drafts(max_results=max_results)
    except (GmcliError, HttpError) as e:
        raise fail(str(e), as_json)

    if as_json:
        output(drafts, as_json)
        return

    if not drafts:
        output("No drafts")
        return

    for draft in drafts:
        message = draft.get("message", {})
        output(f"{draft.get('id')}\t{message.get('id', '')}\t{message.get('threadId', '')}")


@app.command()
def get(
    draft_id: Annotated[str, typer.Argument(help="Draft ID")],
    account: AccountOption = None,
    as_json: JsonOption = False,
):
    """Show a draft's headers and snippet."""
    try:
        draft = connect(account).get_draft(draft_id)
    except (GmcliError, HttpError) as e:
        raise fail(str(e), as_json)

    if as_json:
        output(draft, as_json)
        return

    message = draft.get("message", {})
    headers = message.get("payload", {}).get("headers", [])
    output(f"Draft: {draft.get('id')}")
    output(f"Thread: {message.get('threadId', '')}")
    for header in headers:
        if header.get("name", "").lower() in ("from", "to", "cc", "bcc", "subject"):
            output(f"{header['name']}: {header.get('value', '')}")
    snippet = message.get("snippet")
    if snippet:
        output("")
        output(snippet)


@app.command()
def update(
    draft_id: Annotated[str, typer.Argument(help="Draft ID")],
    body: Annotated[str | None, typer.Option("--body", help="New body (or read from stdin)")] = None,
    account: AccountOption = None,
    as_json: JsonOption = False,
):
    """Replace a draft's body, keeping its headers."""
    text = read_body(body)
    if text is None:
        raise fail("Provide --body or pipe the body on stdin", as_json)

    try:
        draft = connect(account).update_draft(draft_id, text)
    except (GmcliError, HttpError) as e:
        raise fail(str(e), as_json)

    if as_json:
        output(draft, as_json)
    else:
        output(f"Draft updated: {draft.get('id', draft_id)}")


@app.command()
def delete(
    draft_id: Annotated[str, typer.Argument(help="Draft ID")],
    account: AccountOption = None,
    as_json: JsonOption = False,
):
    """Delete a draft."""
    try:
        connect(account).delete_draft(draft_id)
    except (GmcliError, HttpError) as e:
        raise fail(str(e), as_json)

    if as_json:
        output({"deleted": draft_id}, as_json)
    else:
        output(f"Draft deleted: {draft_id}")


@app.command("send")
def send_draft(
    draft_id: Annotated[str, typer.Argument(help="Draft ID")],
    account: AccountOption = None,
    as_json: JsonOption = False,
):
    """Send an existing draft."""
    try:
        sent = connect(account).send_draft(draft_id)
    except (GmcliError, HttpError) as e:
        raise fail(str(e), as_json)

    if as_json:
        output(sent, as_json)
    else:
        output(f"Sent: {sent.get('id')} (thread {sent.get('threadId', '')})")
