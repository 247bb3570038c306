"""Registry index models: repositories and the artifacts they tag.

These are the records mirrored to ``repository.json``.  Unlike most models
in the package they are mutable, because tags move between artifacts; the
content identifier is the one field that is frozen.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Artifact(BaseModel):
    """Metadata for one build output stored in the registry.

    ``id`` is derived from the seal and never changes.  ``file_ref`` is the
    locally generated base name of the ``.zip``/``.json`` pair on disk;
    every record carrying the same content id shares it.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(frozen=True)  # "sha256:<hex>"
    type: str
    file_ref: str
    tags: list[str] = Field(default_factory=list)
    size: str = ""
    created: str = ""

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: list[str]) -> list[str]:
        return list(dict.fromkeys(tags))

    @property
    def short_id(self) -> str:
        """The 12 hex characters following the ``sha256:`` prefix."""
        return self.id[7:19]

    @property
    def is_dangling(self) -> bool:
        return not self.tags

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def add_tag(self, tag: str) -> bool:
        """Append *tag* unless already present.  Returns True if appended."""
        if tag in self.tags:
            return False
        self.tags.append(tag)
        return True

    def remove_tag(self, tag: str) -> bool:
        """Drop *tag*.  Returns True if the tag count decreased."""
        if tag not in self.tags:
            return False
        self.tags = [t for t in self.tags if t != tag]
        return True

    def clear_tags(self) -> int:
        count = len(self.tags)
        self.tags = []
        return count

    def copy_for_tag(self, tag: str) -> Artifact:
        """A new record sharing this artifact's content but carrying only *tag*."""
        return Artifact(
            id=self.id,
            type=self.type,
            file_ref=self.file_ref,
            tags=[tag],
            size=self.size,
            created=self.created,
        )


class Repository(BaseModel):
    """A tag namespace: every artifact sharing one fully-qualified name."""

    repository: str
    artifacts: list[Artifact] = Field(default_factory=list)

    def find_by_tag(self, tag: str) -> Artifact | None:
        for artifact in self.artifacts:
            if artifact.has_tag(tag):
                return artifact
        return None

    def find_by_id(self, artifact_id: str) -> Artifact | None:
        for artifact in self.artifacts:
            if artifact.id == artifact_id:
                return artifact
        return None

    def remove_artifact(self, artifact: Artifact) -> bool:
        """Drop *artifact* (by identity) from this repository."""
        for i, candidate in enumerate(self.artifacts):
            if candidate is artifact:
                del self.artifacts[i]
                return True
        return False


class RegistryIndex(BaseModel):
    """The whole persisted document: an ordered list of repositories."""

    repositories: list[Repository] = Field(default_factory=list)

    def iter_artifacts(self):
        """Yield ``(repository, artifact)`` pairs in document order."""
        for repo in self.repositories:
            for artifact in repo.artifacts:
                yield repo, artifact

    def get_repository(self, name: str) -> Repository | None:
        for repo in self.repositories:
            if repo.repository == name:
                return repo
        return None

    def owner_of(self, artifact: Artifact) -> Repository | None:
        for repo, candidate in self.iter_artifacts():
            if candidate is artifact:
                return repo
        return None

    def find_by_id(self, artifact_id: str) -> Artifact | None:
        """First artifact with this id in any repository."""
        for _, artifact in self.iter_artifacts():
            if artifact.id == artifact_id:
                return artifact
        return None

    def references_file(self, file_ref: str) -> bool:
        """True if any record still points at the ``file_ref`` file pair."""
        return any(a.file_ref == file_ref for _, a in self.iter_artifacts())

    def remove_repository(self, repo: Repository) -> None:
        self.repositories = [r for r in self.repositories if r is not repo]
