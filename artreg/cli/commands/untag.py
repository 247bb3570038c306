"""``artreg untag NAME`` — strip every tag in a repository, keeping the records."""

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


def untag_cmd(
    name: str = typer.Argument(..., help="Repository name: [[domain/]group/]name."),
    registry: Optional[Path] = registry_option(),
) -> None:
    """Leave every artifact of a repository dangling."""
    artifact_name = parse_name(name)
    local = open_registry(registry)
    try:
        with local.locked():
            cleared = local.purge_tags(artifact_name)
    except RegistryError as exc:
        fail(f"Cannot untag {artifact_name.fully_qualified_name}:", exc)

    console.print(
        f"cleared {cleared} tag(s) in [bold]{artifact_name.fully_qualified_name}[/bold]",
        highlight=False,
    )
