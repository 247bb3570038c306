"""Shared test fixtures for artreg."""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import httpx
import pytest

from artreg.core.hasher import file_sha256
from artreg.core.index_store import InMemoryIndex
from artreg.core.registry import LocalRegistry
from artreg.listing.projection import format_created
from artreg.models.names import ArtifactName
from artreg.models.registry import Artifact, RegistryIndex, Repository
from artreg.models.seal import Seal


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def build_dir(tmp_dir: Path) -> Path:
    """Where 'built' packages are written before being added."""
    path = tmp_dir / "build"
    path.mkdir()
    return path


@pytest.fixture
def index_store() -> InMemoryIndex:
    return InMemoryIndex()


@pytest.fixture
def registry(tmp_dir: Path, index_store: InMemoryIndex) -> LocalRegistry:
    """A LocalRegistry whose files live in a temp dir and index in memory."""
    return LocalRegistry(tmp_dir / "registry", index_store)


@pytest.fixture
def file_registry(tmp_dir: Path) -> LocalRegistry:
    """A LocalRegistry persisted to repository.json in a temp dir."""
    return LocalRegistry(tmp_dir / "registry")


@pytest.fixture
def make_package(build_dir: Path) -> Callable[..., tuple[Path, Seal]]:
    """Factory fixture: write a .zip package plus its .json seal.

    Distinct *content* gives distinct seals and therefore distinct ids.
    """
    counter = {"n": 0}

    def _factory(
        content: str | None = None,
        *,
        stem: str | None = None,
        artifact_type: str = "java-archive",
        created: datetime | None = None,
        **manifest_overrides: Any,
    ) -> tuple[Path, Seal]:
        counter["n"] += 1
        stem = stem or f"pkg-{counter['n']}"
        content = content if content is not None else f"payload {counter['n']}"
        package = build_dir / f"{stem}.zip"
        package.write_bytes(content.encode("utf-8"))
        created = created or datetime.now(timezone.utc) - timedelta(hours=2)
        manifest: dict[str, Any] = {
            "type": artifact_type,
            "size": f"{len(content)} B",
            "time": format_created(created),
            "ref": content,
        }
        manifest.update(manifest_overrides)
        seal_doc = {"manifest": manifest, "digest": file_sha256(package)}
        (build_dir / f"{stem}.json").write_text(json.dumps(seal_doc), encoding="utf-8")
        return package, Seal.model_validate(seal_doc)

    return _factory


@pytest.fixture
def name() -> Callable[[str], ArtifactName]:
    """Shorthand for ArtifactName.parse."""
    return ArtifactName.parse


def _index(*repos: tuple[str, list[Artifact]]) -> RegistryIndex:
    return RegistryIndex(
        repositories=[Repository(repository=r, artifacts=a) for r, a in repos]
    )


def _artifact(artifact_id: str, *tags: str, file_ref: str = "") -> Artifact:
    return Artifact(
        id=artifact_id,
        type="java-archive",
        file_ref=file_ref or artifact_id[7:19],
        tags=list(tags),
        size="1 KiB",
        created="Monday, 19-Oct-26 10:00:00 UTC",
    )


@pytest.fixture
def make_index() -> Callable[..., RegistryIndex]:
    """Factory fixture: build a RegistryIndex from (repository, artifacts) pairs."""
    return _index


@pytest.fixture
def make_artifact() -> Callable[..., Artifact]:
    """Factory fixture: an Artifact record with fixed metadata and given tags."""
    return _artifact


def _multipart_parts(request: httpx.Request) -> dict[str, bytes]:
    """Split a multipart/form-data request body into ``{field name: bytes}``."""
    boundary = request.headers["content-type"].split("boundary=")[1].encode()
    parts: dict[str, bytes] = {}
    for chunk in request.read().split(b"--" + boundary)[1:-1]:
        head, _, body = chunk.lstrip(b"\r\n").partition(b"\r\n\r\n")
        field = re.search(rb'name="([^"]+)"', head).group(1).decode()
        parts[field] = body[:-2]
    return parts


@pytest.fixture
def multipart_parts() -> Callable[[httpx.Request], dict[str, bytes]]:
    """Decode the parts of an upload captured by an ``httpx.MockTransport``."""
    return _multipart_parts
