"""``artreg rm NAME...`` — remove tags or artifacts from the local registry.

Every name is processed even if an earlier one is not found; an ambiguous
id fragment stops the batch after reporting what was already removed.  The
command exits with status 1 when any name was not removed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from artreg.cli.commands._common import (
    console,
    err_console,
    fail,
    open_registry,
    parse_name,
    registry_option,
)
from artreg.core.errors import RegistryError
from artreg.models.results import RemoveStatus


def remove_cmd(
    names: list[str] = typer.Argument(
        ...,
        help="Artifact names (name:tag) or id fragments to remove.",
    ),
    registry: Optional[Path] = registry_option(),
) -> None:
    """Remove one or more artifacts from the local registry."""
    artifact_names = [parse_name(n) for n in names]
    local = open_registry(registry)
    try:
        with local.locked():
            outcomes = local.remove(artifact_names)
    except RegistryError as exc:
        fail("Remove aborted:", exc)

    failed = 0
    for outcome in outcomes:
        if outcome.removed:
            console.print(outcome.artifact_id, highlight=False)
            continue
        failed += 1
        if outcome.status is RemoveStatus.AMBIGUOUS:
            err_console.print(
                f"[bold red]Remove aborted:[/bold red] {escape(outcome.detail)}",
                highlight=False,
                soft_wrap=True,
            )
        else:
            err_console.print(
                f"[yellow]name {escape(outcome.reference)} not found[/yellow]",
                highlight=False,
                soft_wrap=True,
            )
    if failed:
        raise typer.Exit(code=1)
