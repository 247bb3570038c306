"""Persistence backends for the registry index document.

The index is always read and written as a whole.  Three backends:

1. ``JsonFileIndex(atomic=True)`` — writes to a temp file in the same
   directory, then ``os.replace``s it over ``repository.json``.  Default.
2. ``JsonFileIndex(atomic=False)`` — rewrites ``repository.json`` in place.
3. ``InMemoryIndex`` — keeps a serialized copy in memory, for tests.

``JsonFileIndex.lock()`` takes an exclusive ``flock`` on a sibling
``.lock`` file so two processes cannot interleave load-mutate-save cycles.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from artreg.core.errors import RegistryIOError
from artreg.models.registry import RegistryIndex

logger = logging.getLogger(__name__)

INDEX_FILE = "repository.json"
_LOCK_SUFFIX = ".lock"


class IndexStore(Protocol):
    """Anything that can load and save a ``RegistryIndex`` as one document."""

    def load(self) -> RegistryIndex: ...

    def save(self, index: RegistryIndex) -> None: ...

    def lock(self) -> AbstractContextManager[None]: ...


class JsonFileIndex:
    """``repository.json`` on the local filesystem.

    Parameters
    ----------
    path:
        Path to the index document.  Parent directories are created on
        first save.
    atomic:
        Replace the document via write-temp-then-rename instead of
        truncating it in place.
    use_lock:
        When False, ``lock()`` is a no-op.
    """

    def __init__(self, path: Path, *, atomic: bool = True, use_lock: bool = True) -> None:
        self._path = Path(path)
        self._atomic = atomic
        self._use_lock = use_lock

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> RegistryIndex:
        """Read the document; a missing file is created empty."""
        if not self._path.exists():
            logger.debug("No index at %s, creating an empty one.", self._path)
            index = RegistryIndex()
            self.save(index)
            return index
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise RegistryIOError(f"cannot read registry index {self._path}: {exc}") from exc
        try:
            return RegistryIndex.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise RegistryIOError(f"registry index {self._path} is corrupt: {exc}") from exc

    def save(self, index: RegistryIndex) -> None:
        """Write the whole document."""
        content = index.model_dump_json(indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if self._atomic:
                _atomic_write_text(self._path, content)
            else:
                self._path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise RegistryIOError(
                f"fail to update local registry metadata at {self._path}: {exc}"
            ) from exc
        logger.debug("Persisted registry index to %s.", self._path)

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Hold an exclusive advisory lock on the index for the block."""
        if not self._use_lock:
            yield
            return
        lock_path = self._path.with_name(self._path.name + _LOCK_SUFFIX)
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        with lock_path.open("a+", encoding="utf-8") as handle:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    def __repr__(self) -> str:
        return f"JsonFileIndex(path={str(self._path)!r}, atomic={self._atomic})"


class InMemoryIndex:
    """Volatile index store.

    Keeps the serialized JSON rather than the live object so every ``load``
    returns a fresh copy, just like reading the file back would.
    """

    def __init__(self, initial: RegistryIndex | None = None) -> None:
        self._document = (initial or RegistryIndex()).model_dump_json()
        self.save_count = 0

    def load(self) -> RegistryIndex:
        return RegistryIndex.model_validate_json(self._document)

    def save(self, index: RegistryIndex) -> None:
        self._document = index.model_dump_json()
        self.save_count += 1

    @contextmanager
    def lock(self) -> Iterator[None]:
        yield

    @property
    def document(self) -> dict:
        return json.loads(self._document)


def _atomic_write_text(path: Path, content: str) -> None:
    """Write *content* to *path* via a same-directory temp file and rename."""
    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp_handle:
            tmp_handle.write(content)
            tmp_handle.flush()
            os.fsync(tmp_handle.fileno())
        os.replace(tmp_path, str(path))
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
