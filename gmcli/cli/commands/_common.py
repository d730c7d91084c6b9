"""Helpers shared by the draft and send commands."""

import json
import sys

import typer

from gmcli.compose import DraftIntent, MailService
from gmcli.config import get_defaults, load_config
from gmcli.gmail import ClientRegistry


def fail(message: str, as_json: bool = False) -> typer.Exit:
    """Report an error and return the Exit to raise.

    Usage:
        raise fail("Draft not found")
    """
    if as_json:
        typer.echo(json.dumps({"error": message}))
    else:
        typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def output(data, as_json: bool = False) -> None:
    """Print a result as JSON or as plain text."""
    if as_json or not isinstance(data, str):
        typer.echo(json.dumps(data, indent=2))
    else:
        typer.echo(data)


def connect(account: str | None) -> MailService:
    """Open a MailService for an account.

    Raises:
        GmcliError: If the account is missing or not authenticated.
    """
    handle = ClientRegistry(load_config()).get(account)
    return MailService(handle.client, handle.email)


def split_recipients(values: list[str] | None) -> list[str]:
    """Flatten repeated and comma-separated recipient options."""
    recipients = []
    for value in values or []:
        recipients.extend(part.strip() for part in value.split(",") if part.strip())
    return recipients


def read_body(body: str | None) -> str | None:
    """Return --body, or stdin when it is piped. None if neither."""
    if body is not None:
        return body
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return None


def default_include_quote() -> bool:
    return get_defaults(load_config()).get("include_quote", True)


def build_intent(
    to: list[str] | None,
    cc: list[str] | None,
    bcc: list[str] | None,
    subject: str | None,
    body: str,
    reply_to: str | None,
    reply_all: bool,
    quote: bool | None,
    attach: list[str] | None,
) -> DraftIntent:
    """Assemble a DraftIntent from CLI options."""
    return DraftIntent(
        to=split_recipients(to),
        cc=split_recipients(cc),
        bcc=split_recipients(bcc),
        subject=subject or "",
        body_text=body,
        attachments=list(attach or []),
        reply_target=reply_to,
        reply_all=reply_all,
        include_quote=default_include_quote() if quote is None else quote,
    )
