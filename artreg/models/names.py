"""Artifact reference names: ``[[domain/]group/]name[:tag]``.

A reference resolves to a repository (``domain/group/name``) plus a tag.
Missing parts take the registry defaults, so ``app`` and
``artreg.local/library/app:latest`` name the same artifact.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from artreg.core.errors import InvalidReferenceError

DEFAULT_DOMAIN = "artreg.local"
DEFAULT_GROUP = "library"
DEFAULT_TAG = "latest"

_COMPONENT_RE = re.compile(r"^[a-z0-9]+(?:[._-][a-z0-9]+)*$")
_DOMAIN_RE = re.compile(r"^[A-Za-z0-9]+(?:[.-][A-Za-z0-9]+)*(?::[0-9]+)?$")
_TAG_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$")


class ArtifactName(BaseModel):
    """A parsed artifact reference.

    Examples
    --------
    >>> n = ArtifactName.parse("acme.io:5000/tools/builder:1.2")
    >>> n.fully_qualified_name
    'acme.io:5000/tools/builder'
    >>> n.tag
    '1.2'
    >>> ArtifactName.parse("builder").fully_qualified_name
    'artreg.local/library/builder'
    """

    model_config = ConfigDict(frozen=True)

    domain: str = DEFAULT_DOMAIN
    group: str = DEFAULT_GROUP
    name: str
    tag: str = DEFAULT_TAG

    @classmethod
    def parse(cls, reference: str) -> ArtifactName:
        """Parse a raw reference string.

        Raises
        ------
        InvalidReferenceError
            If the reference is empty, has too many path segments, or any
            component contains characters outside the allowed alphabet.
        """
        raw = reference.strip()
        if not raw:
            raise InvalidReferenceError("artifact reference cannot be empty")

        # the tag is whatever follows the last colon, unless that colon is
        # a domain port (i.e. a slash still follows it)
        path, tag = raw, DEFAULT_TAG
        colon = raw.rfind(":")
        if colon != -1 and "/" not in raw[colon + 1:]:
            path, tag = raw[:colon], raw[colon + 1:]
            if not _TAG_RE.match(tag):
                raise InvalidReferenceError(f"invalid tag {tag!r} in {reference!r}")

        parts = path.split("/")
        if len(parts) == 1:
            domain, group, name = DEFAULT_DOMAIN, DEFAULT_GROUP, parts[0]
        elif len(parts) == 2:
            domain, (group, name) = DEFAULT_DOMAIN, parts
        elif len(parts) == 3:
            domain, group, name = parts
        else:
            raise InvalidReferenceError(
                f"too many path segments in {reference!r}, "
                "expected [[domain/]group/]name[:tag]"
            )

        if not _DOMAIN_RE.match(domain):
            raise InvalidReferenceError(f"invalid domain {domain!r} in {reference!r}")
        for label, value in (("group", group), ("name", name)):
            if not _COMPONENT_RE.match(value):
                raise InvalidReferenceError(
                    f"invalid {label} {value!r} in {reference!r}"
                )

        return cls(domain=domain, group=group, name=name, tag=tag)

    @property
    def fully_qualified_name(self) -> str:
        """The repository key: ``domain/group/name`` without the tag."""
        return f"{self.domain}/{self.group}/{self.name}"

    def is_in_same_repository_as(self, other: ArtifactName) -> bool:
        """True when both references point into the same repository."""
        return self.fully_qualified_name == other.fully_qualified_name

    def __str__(self) -> str:
        return f"{self.fully_qualified_name}:{self.tag}"
