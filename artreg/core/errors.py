"""Registry error hierarchy.

Validation, ambiguity and I/O errors abort the current command.  Not-found
is fatal for single-target commands; batch removal reports it per item
instead of raising.
"""

from __future__ import annotations


class RegistryError(RuntimeError):
    """Base class for every error raised by the local registry."""


class InvalidReferenceError(RegistryError, ValueError):
    """Raised when an artifact reference cannot be parsed."""


class InvalidArtifactError(RegistryError, ValueError):
    """Raised when a file offered to the registry is not an artifact package."""


class ArtifactNotFoundError(RegistryError, LookupError):
    """Raised when a reference resolves to nothing."""


class AmbiguousReferenceError(RegistryError, LookupError):
    """Raised when an id fragment matches more than one artifact."""

    def __init__(self, reference: str, count: int) -> None:
        self.reference = reference
        self.count = count
        super().__init__(
            f"artifact id hint {reference!r} is not long enough to pin point "
            f"an artifact, {count} were found"
        )


class RegistryIOError(RegistryError, OSError):
    """Raised when relocating, deleting or persisting registry files fails."""
