"""``artreg add FILE NAME`` — move a built package into the local registry.

The package must be a ``.zip`` with its seal (``.json``, same stem) next to
it.  Both files are moved, not copied.
"""

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


def add_cmd(
    package: Path = typer.Argument(
        ...,
        help="Path to the built .zip package (its .json seal must sit next to it).",
    ),
    name: str = typer.Argument(
        ...,
        help="Name to register it under: [[domain/]group/]name[:tag].",
    ),
    registry: Optional[Path] = registry_option(),
) -> None:
    """Add a built artifact to the local registry."""
    artifact_name = parse_name(name)
    local = open_registry(registry)
    try:
        with local.locked():
            artifact = local.add(package, artifact_name)
    except RegistryError as exc:
        fail(f"Cannot add {artifact_name}:", exc)

    console.print(f"added [bold]{artifact_name}[/bold] ({artifact.short_id})", highlight=False)
