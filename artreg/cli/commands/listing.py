"""``artreg ls`` — list the artifacts in the local registry."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from artreg.cli.commands._common import console, open_registry, registry_option
from artreg.listing.renderer import ListingRenderer


def list_cmd(
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only print artifact ids, one per artifact.",
    ),
    registry: Optional[Path] = registry_option(),
) -> None:
    """List artifacts: one row per tag, dangling artifacts as <none>."""
    local = open_registry(registry)
    renderer = ListingRenderer(console=console)
    if quiet:
        renderer.print_quiet(local.quiet_ids())
    else:
        renderer.print_rows(local.rows())
