"""Main CLI entry point for gmcli."""

import logging

import typer
from typing_extensions import Annotated

from gmcli import __version__
from gmcli.cli import commands

app = typer.Typer(
    name="gmcli",
    help="Gmail CLI with Gmail-style replies and threading",
    no_args_is_help=True,
)

# Register command groups
app.add_typer(commands.config.app, name="config")
app.add_typer(commands.draft.app, name="draft")
app.command("send")(commands.send.send)


@app.callback()
def setup(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logging")
    ] = False,
):
    """Gmail CLI with Gmail-style replies and threading."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # googleapiclient logs every request at DEBUG
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)


@app.command()
def version():
    """Show version information."""
    typer.echo(f"gmcli version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
