"""Config command implementation.

Sets up config.toml and manages per-account OAuth tokens.
"""

import typer
from typing_extensions import Annotated

from gmcli.auth import authenticate, is_authenticated, logout as forget_token
from gmcli.config import (
    CONFIG_FILE,
    get_account,
    init_config,
    load_config,
    resolve_account_name,
    set_config_value,
)
from gmcli.config.schema import AccountConfig

from ._common import fail, output

app = typer.Typer(help="Manage configuration and authentication", no_args_is_help=True)

AccountOption = Annotated[
    str | None, typer.Option("--account", "-a", help="Account name from config")
]

REDACTED = "***REDACTED***"


@app.command()
def init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing config")
    ] = False,
):
    """Write a commented config.toml template."""
    if not init_config(overwrite=force):
        typer.echo(f"{CONFIG_FILE} already exists (use --force to overwrite)")
        return

    typer.echo(f"Wrote {CONFIG_FILE}")
    typer.echo("Add an [accounts.<name>] table, then run 'gmcli config auth'.")


def _prompt_redirect(auth_url: str) -> str:
    typer.echo("Open this URL in a browser and authorize access:")
    typer.echo()
    typer.echo(auth_url)
    typer.echo()
    return typer.prompt("Paste the URL you were redirected to")


@app.command()
def auth(
    account: AccountOption = None,
    manual: Annotated[
        bool, typer.Option("--manual", help="Paste the redirect URL instead of using a local server")
    ] = False,
):
    """Authorize gmcli to use a Gmail account.

    Opens Google's consent page in a browser. The token is cached under
    the config directory and refreshed automatically afterwards.
    """
    config = load_config()
    name = resolve_account_name(config, account)
    account_config = get_account(config, name)
    if name is None or account_config is None:
        raise fail(
            f"Account '{name}' not found in {CONFIG_FILE}" if name else "No account configured"
        )

    typer.echo(f"Authenticating '{name}'...")
    result = authenticate(name, account_config, manual=manual, prompt=_prompt_redirect)

    if "access_token" not in result:
        reason = result.get("error_description") or result.get("error", "Unknown error")
        raise fail(f"Authentication failed: {reason}")

    typer.echo(f"Authenticated {account_config.get('email', name)}")


@app.command()
def logout(account: AccountOption = None):
    """Delete the cached token for an account."""
    name = resolve_account_name(load_config(), account)
    if name is None:
        raise fail("No account configured")

    if forget_token(name):
        typer.echo(f"Logged out of '{name}'")
    else:
        typer.echo(f"No cached token for '{name}'")


def _redact(account: AccountConfig) -> dict:
    shown = dict(account)
    if "client_secret" in shown:
        shown["client_secret"] = REDACTED if shown["client_secret"] else "(not set)"
    return shown


@app.command()
def show(
    account: AccountOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output JSON")] = False,
):
    """Print the configuration with secrets redacted."""
    config = load_config()
    if not config:
        typer.echo(f"No configuration found. Run 'gmcli config init' to create {CONFIG_FILE}")
        return

    accounts = config.get("accounts", {})
    if account is not None:
        if account not in accounts:
            raise fail(f"Account '{account}' not found", as_json)
        accounts = {account: accounts[account]}

    view = {
        "defaults": dict(config.get("defaults", {})),
        "accounts": {
            name: {**_redact(acct), "authenticated": is_authenticated(name)}
            for name, acct in accounts.items()
        },
    }

    if as_json:
        output(view, as_json)
        return

    if view["defaults"]:
        typer.echo("[defaults]")
        for key, value in view["defaults"].items():
            typer.echo(f"  {key} = {value}")
        typer.echo()

    if not view["accounts"]:
        typer.echo("No accounts configured.")
        return

    for name, fields in view["accounts"].items():
        status = "authenticated" if fields.pop("authenticated") else "not authenticated"
        typer.echo(f"[accounts.{name}]  # {status}")
        for key, value in fields.items():
            typer.echo(f"  {key} = {value}")
        typer.echo()


@app.command("set")
def set_value(
    key: Annotated[
        str,
        typer.Argument(help="Dotted key, e.g. 'defaults.include_quote'"),
    ],
    value: Annotated[str, typer.Argument(help="New value")],
):
    """Set one config value.

    Examples:
        gmcli config set defaults.account personal
        gmcli config set defaults.include_quote false
        gmcli config set accounts.personal.email me@gmail.com
    """
    try:
        set_config_value(key, value)
    except ValueError as e:
        raise fail(str(e))

    typer.echo(f"Set {key} = {value}")
