"""Helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from artreg.config import settings
from artreg.core.errors import RegistryError
from artreg.core.registry import LocalRegistry
from artreg.models.names import ArtifactName

console = Console()
err_console = Console(stderr=True)

REGISTRY_OPTION_HELP = "Registry directory (defaults to $ARTREG_HOME or ~/.artreg)."


def registry_option() -> Optional[Path]:
    return typer.Option(
        None,
        "--registry",
        "-r",
        help=REGISTRY_OPTION_HELP,
    )


def fail(message: str, exc: BaseException | None = None) -> NoReturn:
    """Print an error and exit with status 1."""
    detail = f" {escape(str(exc))}" if exc is not None else ""
    err_console.print(
        f"[bold red]{message}[/bold red]{detail}", highlight=False, soft_wrap=True
    )
    raise typer.Exit(code=1)


def open_registry(root: Optional[Path]) -> LocalRegistry:
    try:
        return LocalRegistry.from_settings(settings, root)
    except RegistryError as exc:
        fail("Cannot open local registry:", exc)


def parse_name(reference: str) -> ArtifactName:
    try:
        return ArtifactName.parse(reference)
    except RegistryError as exc:
        fail("Invalid artifact name:", exc)
