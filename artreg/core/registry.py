"""Local registry — the single authority over artifact metadata on this host.

Storage layout::

    {root}/repository.json      # the index, rewritten whole on every change
    {root}/{file_ref}.zip       # artifact package
    {root}/{file_ref}.json      # its seal

Invariants held by every operation:

- within a repository a tag names at most one artifact;
- an artifact's content id never changes;
- one package/seal pair per content id, shared by every record of it;
- a pair is deleted only once no record points at its ``file_ref``.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import uuid
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from artreg.bridge.remote import RemoteRegistry, TransportError
from artreg.core.errors import (
    AmbiguousReferenceError,
    InvalidArtifactError,
    RegistryIOError,
)
from artreg.core.index_store import INDEX_FILE, IndexStore, JsonFileIndex
from artreg.core.seal import (
    PACKAGE_EXT,
    SEAL_EXT,
    artifact_id,
    load_seal,
    load_seal_for,
    seal_path_for,
    verify_package,
)
from artreg.listing.projection import ListRow, build_rows, quiet_ids
from artreg.models.names import ArtifactName
from artreg.models.registry import Artifact, RegistryIndex, Repository
from artreg.models.results import (
    LookupResult,
    LookupStatus,
    RemoveOutcome,
    RemoveStatus,
    TagResult,
)
from artreg.models.seal import Seal

if TYPE_CHECKING:
    from artreg.config import RegistrySettings

logger = logging.getLogger(__name__)


class LocalRegistry:
    """Filesystem-backed artifact registry.

    Parameters
    ----------
    root:
        Registry directory.  Holds the index and every package/seal pair.
    index_store:
        Where the index document lives.  Defaults to an atomic
        ``JsonFileIndex`` at ``{root}/repository.json``.
    """

    def __init__(self, root: Path, index_store: IndexStore | None = None) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)
        self._store: IndexStore = index_store or JsonFileIndex(self._root / INDEX_FILE)
        self._index: RegistryIndex = self._store.load()

    @classmethod
    def from_settings(
        cls, settings: RegistrySettings, root: Path | None = None
    ) -> LocalRegistry:
        root = Path(root) if root is not None else settings.home
        store = JsonFileIndex(
            root / INDEX_FILE,
            atomic=settings.atomic_writes,
            use_lock=settings.use_lock,
        )
        return cls(root, store)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def path(self) -> Path:
        """The registry root directory."""
        return self._root

    @property
    def index(self) -> RegistryIndex:
        return self._index

    @property
    def repositories(self) -> list[Repository]:
        return self._index.repositories

    def package_path(self, file_ref: str) -> Path:
        return self._root / f"{file_ref}{PACKAGE_EXT}"

    def seal_path(self, file_ref: str) -> Path:
        return self._root / f"{file_ref}{SEAL_EXT}"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @contextmanager
    def locked(self) -> Iterator[LocalRegistry]:
        """Hold the index lock and work on a freshly loaded index."""
        with self._store.lock():
            self._index = self._store.load()
            yield self

    def _save(self) -> None:
        logger.debug("updating local registry metadata")
        self._store.save(self._index)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _match_id_fragment(self, fragment: str) -> list[tuple[Repository, Artifact]]:
        return [
            (repo, artifact)
            for repo, artifact in self._index.iter_artifacts()
            if fragment in artifact.id
        ]

    def find_repository(self, name: ArtifactName) -> LookupResult:
        """Find the repository by exact name, else by an artifact id fragment."""
        reference = str(name)
        repo = self._index.get_repository(name.fully_qualified_name)
        if repo is not None:
            return LookupResult.found(reference, repository=repo)

        matches = self._match_id_fragment(name.name)
        if not matches:
            return LookupResult.not_found(reference)
        if len(matches) > 1:
            return LookupResult.ambiguous(name.name, len(matches))
        repo, artifact = matches[0]
        return LookupResult.found(reference, artifact=artifact, repository=repo)

    def get_artifact(self, name: ArtifactName) -> LookupResult:
        """Resolve a reference to one artifact.

        When the repository exists the tag must match exactly; there is no
        id fallback inside a matched repository.  Otherwise the bare name
        is treated as an id fragment searched across every repository.
        """
        reference = str(name)
        repo = self._index.get_repository(name.fully_qualified_name)
        if repo is not None:
            artifact = repo.find_by_tag(name.tag)
            if artifact is None:
                return LookupResult.not_found(reference)
            return LookupResult.found(reference, artifact=artifact, repository=repo)

        matches = self._match_id_fragment(name.name)
        if not matches:
            return LookupResult.not_found(reference)
        if len(matches) > 1:
            logger.debug("%d artifacts match id fragment %r", len(matches), name.name)
            return LookupResult.ambiguous(name.name, len(matches))
        repo, artifact = matches[0]
        return LookupResult.found(reference, artifact=artifact, repository=repo)

    def get_artifacts_by_name(self, name: ArtifactName) -> list[Artifact]:
        """Every artifact of the repository with exactly this name."""
        repo = self._index.get_repository(name.fully_qualified_name)
        return list(repo.artifacts) if repo is not None else []

    # ------------------------------------------------------------------
    # Add
    # ------------------------------------------------------------------

    def add(self, package: Path, name: ArtifactName, seal: Seal | None = None) -> Artifact:
        """Move a built package and its seal into the registry under *name*.

        If another artifact in the repository already carries ``name.tag``
        the tag is taken from it; that artifact keeps its other tags or is
        left dangling.

        Content the registry already holds keeps its single file pair: the
        new record shares the existing ``file_ref`` and the incoming files
        are deleted.

        Raises
        ------
        InvalidArtifactError
            If *package* is not a ``.zip`` file.
        RegistryIOError
            If the package or its seal is missing or cannot be moved.
        """
        package = Path(package)
        if package.suffix != PACKAGE_EXT:
            raise InvalidArtifactError(
                f"the local registry can only accept zip files, "
                f"the extension provided was {package.suffix or '(none)'}"
            )
        seal_file = seal_path_for(package)
        for required in (package, seal_file):
            if not required.is_file():
                raise RegistryIOError(f"cannot add {name}: {required} does not exist")
        if seal is None:
            seal = load_seal(seal_file)

        logger.info("adding artifact to local registry: %s", name)
        content_id = artifact_id(seal)
        same_content = self._index.find_by_id(content_id)
        if same_content is not None and self._has_files(same_content.file_ref):
            file_ref = same_content.file_ref
            logger.info("content %s already stored, reusing its files", content_id[7:19])
            self._discard(package, seal_file)
        else:
            file_ref = same_content.file_ref if same_content else uuid.uuid4().hex
            self._relocate_pair(package, seal_file, file_ref)

        repo = self._index.get_repository(name.fully_qualified_name)
        if repo is None:
            repo = Repository(repository=name.fully_qualified_name)
            self._index.repositories.append(repo)
        else:
            holder = repo.find_by_tag(name.tag)
            if holder is not None:
                logger.info("untagging %s from %s", name, holder.short_id)
                holder.remove_tag(name.tag)

        artifact = Artifact(
            id=content_id,
            type=seal.manifest.type,
            file_ref=file_ref,
            tags=[name.tag],
            size=seal.manifest.size,
            created=seal.manifest.time,
        )
        repo.artifacts.append(artifact)
        self._save()
        return artifact

    # ------------------------------------------------------------------
    # Tag / untag
    # ------------------------------------------------------------------

    def tag(self, source: ArtifactName, target: ArtifactName) -> TagResult:
        """Give the artifact at *source* the additional name *target*.

        A target tag that is already taken in the target repository is left
        where it is; unlike ``add``, ``tag`` never moves a tag.

        Raises
        ------
        ArtifactNotFoundError
            If *source* does not resolve.
        AmbiguousReferenceError
            If *source* is an id fragment matching several artifacts.
        """
        source_artifact = self.get_artifact(source).unwrap()
        owner = self._index.owner_of(source_artifact)
        target_fqn = target.fully_qualified_name

        if target.is_in_same_repository_as(source) or (
            owner is not None and owner.repository == target_fqn
        ):
            repo = owner or self._index.get_repository(target_fqn)
            holder = repo.find_by_tag(target.tag) if repo is not None else None
            if holder is not None:
                logger.info("already tagged: %s", target)
                return TagResult.ALREADY_TAGGED
            logger.info("tagging %s as %s", source, target)
            source_artifact.add_tag(target.tag)
            self._save()
            return TagResult.TAGGED

        target_repo = self._index.get_repository(target_fqn)
        if target_repo is None:
            logger.info("tagging %s as %s (new repository)", source, target)
            self._index.repositories.append(
                Repository(
                    repository=target_fqn,
                    artifacts=[source_artifact.copy_for_tag(target.tag)],
                )
            )
            self._save()
            return TagResult.TAGGED

        if target_repo.find_by_tag(target.tag) is not None:
            logger.info("already tagged: %s", target)
            return TagResult.ALREADY_TAGGED

        logger.info("tagging %s as %s", source, target)
        same_content = target_repo.find_by_id(source_artifact.id)
        if same_content is not None:
            same_content.add_tag(target.tag)
        else:
            target_repo.artifacts.append(source_artifact.copy_for_tag(target.tag))
        self._save()
        return TagResult.TAGGED

    def untag(self, name: ArtifactName, tag: str | None = None) -> bool:
        """Remove one tag (default: ``name.tag``) from the artifact at *name*.

        Returns True if a tag was removed.  A reference that resolves to
        nothing is not an error here.
        """
        result = self.get_artifact(name)
        if result.status is LookupStatus.NOT_FOUND:
            return False
        artifact = result.unwrap()
        if not artifact.remove_tag(tag or name.tag):
            return False
        logger.info("untagging %s", name)
        self._save()
        return True

    def purge_tags(self, name: ArtifactName) -> int:
        """Strip every tag from every artifact in the repository *name*.

        The records stay, dangling.  Returns how many tags were cleared.
        """
        cleared = sum(a.clear_tags() for a in self.get_artifacts_by_name(name))
        logger.info("cleared %d tag(s) in %s", cleared, name.fully_qualified_name)
        self._save()
        return cleared

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------

    def remove(self, names: Iterable[ArtifactName]) -> list[RemoveOutcome]:
        """Remove each reference independently.

        A reference naming a tag removes that tag; the artifact record goes
        when its last tag does.  A reference that is an id fragment (and so
        names no tag on the artifact) removes the record outright.  Files
        are deleted once no record points at them any more.

        Unresolvable references are reported in the returned outcomes and
        do not stop the batch.  An ambiguous reference is reported too and
        ends the batch; removals before it stay applied and are reported.
        """
        outcomes: list[RemoveOutcome] = []
        for name in names:
            result = self.get_artifact(name)
            if result.status is LookupStatus.NOT_FOUND:
                logger.warning("name %s not found", name.name)
                outcomes.append(
                    RemoveOutcome(reference=str(name), status=RemoveStatus.NOT_FOUND)
                )
                continue
            if result.status is LookupStatus.AMBIGUOUS:
                error = AmbiguousReferenceError(result.reference, result.count)
                logger.error("%s", error)
                outcomes.append(
                    RemoveOutcome(
                        reference=str(name),
                        status=RemoveStatus.AMBIGUOUS,
                        detail=str(error),
                    )
                )
                break
            artifact = result.unwrap()
            owner = self._index.owner_of(artifact)

            if artifact.remove_tag(name.tag):
                logger.info("untagging %s", name)
                files_deleted = False
                if artifact.is_dangling:
                    files_deleted = self._drop_record(owner, artifact)
            else:
                logger.info("removing artifact %s by id", artifact.short_id)
                files_deleted = self._drop_record(owner, artifact)

            self._save()
            logger.info("removed %s", artifact.id)
            outcomes.append(
                RemoveOutcome(
                    reference=str(name),
                    status=RemoveStatus.REMOVED,
                    artifact_id=artifact.id,
                    files_deleted=files_deleted,
                )
            )
        return outcomes

    def _drop_record(self, owner: Repository | None, artifact: Artifact) -> bool:
        """Delete *artifact*'s record and, if now unreferenced, its files."""
        if owner is not None:
            owner.remove_artifact(artifact)
            if not owner.artifacts:
                self._index.remove_repository(owner)
        if self._index.references_file(artifact.file_ref):
            logger.info(
                "keeping files of %s, still referenced by another record",
                artifact.short_id,
            )
            return False
        self._remove_files(artifact)
        return True

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def rows(self, now: datetime | None = None) -> list[ListRow]:
        return build_rows(self._index, now=now)

    def quiet_ids(self) -> list[str]:
        return quiet_ids(self._index)

    # ------------------------------------------------------------------
    # Remote
    # ------------------------------------------------------------------

    def push(
        self,
        name: ArtifactName,
        remote: RemoteRegistry,
        credentials: str | None = None,
    ) -> Artifact:
        """Upload the artifact at *name* to a remote registry.

        Raises
        ------
        ArtifactNotFoundError
            If *name* does not resolve locally.
        TransportError
            If the upload fails.
        """
        artifact = self.get_artifact(name).unwrap()
        remote.upload_artifact(name, self._root, artifact.file_ref, credentials)
        logger.info("pushed %s", name)
        return artifact

    def pull(
        self,
        name: ArtifactName,
        remote: RemoteRegistry,
        credentials: str | None = None,
    ) -> Artifact:
        """Download *name* from a remote registry and add it locally.

        The download lands in a staging directory inside the registry root
        and is then added exactly like a local build, so an existing local
        holder of the tag loses it.

        Raises
        ------
        TransportError
            If the download fails or the package does not match its seal.
        """
        staging = Path(tempfile.mkdtemp(prefix=".pull-", dir=self._root))
        try:
            package = remote.download_artifact(name, staging, credentials)
            seal = load_seal_for(package)
            if not verify_package(package, seal):
                raise TransportError(
                    f"downloaded package for {name} does not match its seal digest"
                )
            artifact = self.add(package, name, seal)
        finally:
            shutil.rmtree(staging, ignore_errors=True)
        logger.info("pulled %s", name)
        return artifact

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    @staticmethod
    def _relocate(src: Path, dst: Path) -> None:
        try:
            shutil.move(str(src), str(dst))
        except OSError as exc:
            raise RegistryIOError(f"failed to move {src} to {dst}: {exc}") from exc
        logger.debug("moved %s to %s", src, dst)

    def _relocate_pair(self, package: Path, seal_file: Path, file_ref: str) -> None:
        """Move package then seal; if the seal fails the package goes back."""
        stored = self.package_path(file_ref)
        self._relocate(package, stored)
        try:
            self._relocate(seal_file, self.seal_path(file_ref))
        except RegistryIOError:
            try:
                shutil.move(str(stored), str(package))
            except OSError as exc:
                logger.error(
                    "could not restore %s, it was left at %s: %s", package, stored, exc
                )
            raise

    def _has_files(self, file_ref: str) -> bool:
        return self.package_path(file_ref).is_file() and self.seal_path(file_ref).is_file()

    @staticmethod
    def _discard(*paths: Path) -> None:
        for path in paths:
            try:
                path.unlink()
            except OSError as exc:
                raise RegistryIOError(f"failed to remove {path}: {exc}") from exc

    def _remove_files(self, artifact: Artifact) -> None:
        for path in (self.package_path(artifact.file_ref), self.seal_path(artifact.file_ref)):
            try:
                path.unlink()
            except FileNotFoundError:
                logger.warning("%s was already gone", path)
            except OSError as exc:
                raise RegistryIOError(f"failed to remove {path}: {exc}") from exc
        logger.info("removed files for %s", artifact.short_id)

    def __repr__(self) -> str:
        return (
            f"LocalRegistry(path={str(self._root)!r}, "
            f"repositories={len(self._index.repositories)})"
        )
