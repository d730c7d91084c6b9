"""Send command implementation."""

import typer
from googleapiclient.errors import HttpError
from typing_extensions import Annotated

from gmcli.errors import GmcliError

from ._common import build_intent, connect, fail, output, read_body


def send(
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
    account: Annotated[
        str | None, typer.Option("--account", "-a", help="Account name from config")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output JSON")] = False,
):
    """Send a message immediately, optionally as a reply."""
    text = read_body(body)
    if text is None:
        raise fail("Provide --body or pipe the body on stdin", as_json)
    if not reply_to and not to:
        raise fail("--to is required unless --reply-to is given", as_json)

    intent = build_intent(to, cc, bcc, subject, text, reply_to, reply_all, quote, attach)

    try:
        sent = connect(account).send(intent)
    except (GmcliError, HttpError) as e:
        raise fail(str(e), as_json)

    if as_json:
        output(sent, as_json)
    else:
        output(f"Sent: {sent.get('id')} (thread {sent.get('threadId', '')})")
