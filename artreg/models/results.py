"""Explicit outcome values returned by registry operations."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from artreg.core.errors import AmbiguousReferenceError, ArtifactNotFoundError
from artreg.models.registry import Artifact, Repository


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"


class LookupResult(BaseModel):
    """Tri-state result of resolving a reference.

    ``count`` is the number of candidates that matched; it is only
    interesting for ``AMBIGUOUS``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    reference: str
    status: LookupStatus
    artifact: Artifact | None = None
    repository: Repository | None = None
    count: int = 0

    @classmethod
    def found(
        cls,
        reference: str,
        *,
        artifact: Artifact | None = None,
        repository: Repository | None = None,
    ) -> LookupResult:
        return cls(
            reference=reference,
            status=LookupStatus.FOUND,
            artifact=artifact,
            repository=repository,
            count=1,
        )

    @classmethod
    def not_found(cls, reference: str) -> LookupResult:
        return cls(reference=reference, status=LookupStatus.NOT_FOUND)

    @classmethod
    def ambiguous(cls, reference: str, count: int) -> LookupResult:
        return cls(reference=reference, status=LookupStatus.AMBIGUOUS, count=count)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND

    def unwrap(self) -> Artifact:
        """Return the artifact, raising for the not-found and ambiguous cases."""
        if self.status is LookupStatus.AMBIGUOUS:
            raise AmbiguousReferenceError(self.reference, self.count)
        if self.artifact is None:
            raise ArtifactNotFoundError(
                f"artifact {self.reference} not found in the local registry"
            )
        return self.artifact


class TagResult(str, Enum):
    TAGGED = "tagged"
    ALREADY_TAGGED = "already_tagged"


class RemoveStatus(str, Enum):
    REMOVED = "removed"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"


class RemoveOutcome(BaseModel):
    """What happened to one reference in a batch removal."""

    model_config = ConfigDict(frozen=True)

    reference: str
    status: RemoveStatus
    artifact_id: str = ""
    files_deleted: bool = False
    detail: str = ""  # error message for AMBIGUOUS

    @property
    def removed(self) -> bool:
        return self.status is RemoveStatus.REMOVED
