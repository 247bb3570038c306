"""Seal provider — reads the seal document that accompanies an artifact blob.

A package ``build/app-1.0.zip`` is always shipped with its seal at
``build/app-1.0.json``.  The content identifier of the artifact is the
SHA-256 of the seal's canonical JSON, so two builds with identical seals
share an identifier.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from artreg.core.errors import InvalidArtifactError, RegistryIOError
from artreg.core.hasher import content_address, file_sha256
from artreg.models.seal import Seal

logger = logging.getLogger(__name__)

PACKAGE_EXT = ".zip"
SEAL_EXT = ".json"


def seal_path_for(package: Path) -> Path:
    """Return the seal path that belongs to *package* (same stem, ``.json``)."""
    package = Path(package)
    return package.with_name(f"{package.stem}{SEAL_EXT}")


def load_seal(path: Path) -> Seal:
    """Load and validate a seal document.

    Raises
    ------
    RegistryIOError
        If the file cannot be read.
    InvalidArtifactError
        If the content is not a valid seal.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RegistryIOError(f"cannot read seal {path}: {exc}") from exc
    try:
        return Seal.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise InvalidArtifactError(f"{path} is not a valid seal: {exc}") from exc


def load_seal_for(package: Path) -> Seal:
    """Load the seal that sits next to *package*."""
    return load_seal(seal_path_for(package))


def artifact_id(seal: Seal) -> str:
    """The content identifier of the artifact described by *seal*."""
    return content_address(seal.model_dump(mode="json"))


def verify_package(package: Path, seal: Seal) -> bool:
    """Check the package bytes against the digest recorded in the seal.

    Seals without a digest cannot be checked and are accepted.
    """
    if not seal.digest:
        logger.debug("Seal for %s carries no digest, skipping check.", package)
        return True
    return file_sha256(package) == seal.digest
