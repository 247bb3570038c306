"""artreg data models — all Pydantic v2."""

from artreg.models.names import ArtifactName
from artreg.models.registry import Artifact, RegistryIndex, Repository
from artreg.models.results import (
    LookupResult,
    LookupStatus,
    RemoveOutcome,
    RemoveStatus,
    TagResult,
)
from artreg.models.seal import Manifest, Seal

__all__ = [
    # names
    "ArtifactName",
    # index
    "Artifact",
    "Repository",
    "RegistryIndex",
    # results
    "LookupResult",
    "LookupStatus",
    "TagResult",
    "RemoveOutcome",
    "RemoveStatus",
    # seals
    "Manifest",
    "Seal",
]
