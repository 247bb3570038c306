"""``artreg tag SOURCE TARGET`` — give an existing artifact another name."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from artreg.cli.commands._common import (
    console,
    fail,
    open_registry,
    parse_name,
    registry_option,
)
from artreg.core.errors import RegistryError
from artreg.models.results import TagResult


def tag_cmd(
    source: str = typer.Argument(..., help="Existing artifact name or id fragment."),
    target: str = typer.Argument(..., help="New name: [[domain/]group/]name[:tag]."),
    registry: Optional[Path] = registry_option(),
) -> None:
    """Create a tag TARGET that refers to SOURCE.

    If TARGET's tag is already taken in its repository nothing changes.
    """
    source_name = parse_name(source)
    target_name = parse_name(target)
    local = open_registry(registry)
    try:
        with local.locked():
            result = local.tag(source_name, target_name)
    except RegistryError as exc:
        fail(f"Cannot tag {source_name}:", exc)

    if result is TagResult.ALREADY_TAGGED:
        console.print(f"[dim]{target_name} already tagged[/dim]", highlight=False)
    else:
        console.print(f"tagged [bold]{target_name}[/bold]", highlight=False)
