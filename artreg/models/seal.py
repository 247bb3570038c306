"""Seal models: the signed manifest that travels next to every artifact blob.

Seals are produced by the build tooling, not by the registry.  The registry
only reads them: the content identifier is derived from the whole seal and
the manifest supplies the type, size and creation-time labels verbatim.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Manifest(BaseModel):
    """Build-time description of an artifact."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str
    size: str
    time: str  # RFC 850, e.g. "Monday, 19-Oct-26 10:04:05 UTC"
    license: str = ""
    ref: str = ""
    profile: str = ""
    runtime: str = ""
    source: str = ""
    commit: str = ""
    branch: str = ""
    tag: str = ""
    target: str = ""
    labels: dict[str, str] = Field(default_factory=dict)


class Seal(BaseModel):
    """A manifest plus the digest and signature computed over the package."""

    model_config = ConfigDict(frozen=True)

    manifest: Manifest
    digest: str = ""  # "sha256:<hex>" of the zip package
    signature: str = ""
