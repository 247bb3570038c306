"""``artreg push NAME`` and ``artreg pull NAME`` — sync with a remote registry.

The remote host is the domain part of NAME unless ``--url`` is given.
Certificate verification is always on unless
``--insecure-skip-tls-verify`` is passed explicitly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from artreg.bridge.remote import RemoteRegistry, TransportError
from artreg.cli.commands._common import (
    console,
    fail,
    open_registry,
    parse_name,
    registry_option,
)
from artreg.config import settings
from artreg.core.errors import RegistryError


def _credentials_option() -> Optional[str]:
    return typer.Option(
        None,
        "--credentials",
        "-u",
        help="Remote credentials as user:password.",
    )


def _url_option() -> Optional[str]:
    return typer.Option(
        None,
        "--url",
        help="Remote registry base URL (default: https://<domain of NAME>).",
    )


def _insecure_option() -> bool:
    return typer.Option(
        False,
        "--insecure-skip-tls-verify",
        help="INSECURE: do not verify the remote's TLS certificate.",
    )


def _remote(url: Optional[str], insecure: bool) -> RemoteRegistry:
    config = settings.remote_config(insecure=insecure)
    if url:
        config = config.model_copy(update={"base_url": url})
    return RemoteRegistry(config)


def push_cmd(
    name: str = typer.Argument(..., help="Artifact to push: [[domain/]group/]name[:tag]."),
    credentials: Optional[str] = _credentials_option(),
    url: Optional[str] = _url_option(),
    insecure: bool = _insecure_option(),
    registry: Optional[Path] = registry_option(),
) -> None:
    """Upload an artifact from the local registry to a remote registry."""
    artifact_name = parse_name(name)
    local = open_registry(registry)
    try:
        local.push(artifact_name, _remote(url, insecure), credentials or settings.credentials)
    except (RegistryError, TransportError) as exc:
        fail(f"Push of {artifact_name} failed:", exc)

    console.print(f"pushed {artifact_name}", highlight=False)


def pull_cmd(
    name: str = typer.Argument(..., help="Artifact to pull: [[domain/]group/]name[:tag]."),
    credentials: Optional[str] = _credentials_option(),
    url: Optional[str] = _url_option(),
    insecure: bool = _insecure_option(),
    registry: Optional[Path] = registry_option(),
) -> None:
    """Download an artifact from a remote registry into the local registry."""
    artifact_name = parse_name(name)
    local = open_registry(registry)
    try:
        with local.locked():
            artifact = local.pull(
                artifact_name, _remote(url, insecure), credentials or settings.credentials
            )
    except (RegistryError, TransportError) as exc:
        fail(f"Pull of {artifact_name} failed:", exc)

    console.print(f"pulled {artifact_name} ({artifact.short_id})", highlight=False)
