"""Main Typer application — imports and registers all CLI commands.

Entry point: ``artreg`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from artreg import __version__
from artreg.cli.commands.add import add_cmd
from artreg.cli.commands.listing import list_cmd
from artreg.cli.commands.remote import pull_cmd, push_cmd
from artreg.cli.commands.remove import remove_cmd
from artreg.cli.commands.tag import tag_cmd
from artreg.cli.commands.untag import untag_cmd
from artreg.config import settings

app = typer.Typer(
    name="artreg",
    help="artreg: local artifact registry with push/pull to remote registries.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="add", help="Add a built artifact to the local registry.")(add_cmd)
app.command(name="tag", help="Give an artifact another name.")(tag_cmd)
app.command(name="rm", help="Remove artifacts or tags.")(remove_cmd)
app.command(name="ls", help="List artifacts in the local registry.")(list_cmd)
app.command(name="untag", help="Strip all tags in a repository.")(untag_cmd)
app.command(name="push", help="Upload an artifact to a remote registry.")(push_cmd)
app.command(name="pull", help="Download an artifact from a remote registry.")(pull_cmd)


def configure_logging(level: str) -> None:
    """Send log records to stderr through Rich."""
    root = logging.getLogger("artreg")
    root.handlers.clear()
    root.addHandler(
        RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
    )
    root.setLevel(level.upper())
    root.propagate = False


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"artreg {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log debug output to stderr."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Local artifact registry."""
    configure_logging("DEBUG" if verbose else settings.log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
