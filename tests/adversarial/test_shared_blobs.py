"""Adversarial tests — package files shared between repositories.

A cross-repository tag makes two records point at one package/seal pair.
These tests verify that:
1. Files survive until the last record holding the content id is gone
2. Removal by id fragment honours the same rule as removal by tag
3. Files are never deleted while listed, whatever order removals come in
"""

from __future__ import annotations

import itertools

import pytest

from artreg.models.results import RemoveStatus

REPOS = ("tools/app", "release/app", "mirror/app")


@pytest.fixture
def shared(registry, make_package, name):
    """One artifact tagged into three repositories."""
    package, _ = make_package("shared content")
    artifact = registry.add(package, name("tools/app:v1"))
    registry.tag(name("tools/app:v1"), name("release/app:v1"))
    registry.tag(name("tools/app:v1"), name("mirror/app:v1"))
    return artifact


def _files_exist(registry, file_ref: str) -> bool:
    return registry.package_path(file_ref).is_file() and registry.seal_path(file_ref).is_file()


def _listed_file_refs(registry) -> set[str]:
    return {a.file_ref for _, a in registry.index.iter_artifacts()}


class TestSharedBlobs:
    def test_three_records_one_file_pair(self, registry, shared):
        refs = [a.file_ref for _, a in registry.index.iter_artifacts()]
        assert refs == [shared.file_ref] * 3
        assert len(list(registry.path.glob("*.zip"))) == 1

    @pytest.mark.parametrize("order", list(itertools.permutations(REPOS)))
    def test_files_outlive_every_order_of_removal(self, registry, shared, name, order):
        for i, repo in enumerate(order):
            [outcome] = registry.remove([name(f"{repo}:v1")])
            last = i == len(order) - 1
            assert outcome.files_deleted is last
            assert _files_exist(registry, shared.file_ref) is not last

        assert registry.repositories == []

    def test_id_removal_keeps_files_for_other_repositories(self, registry, shared, name):
        # all three records share the id, so the fragment is ambiguous; go
        # through a repository-qualified tag first to leave a single record
        registry.remove([name("release/app:v1"), name("mirror/app:v1")])
        [outcome] = registry.remove([name(shared.short_id)])

        assert outcome.status is RemoveStatus.REMOVED
        assert outcome.files_deleted is True
        assert not _files_exist(registry, shared.file_ref)

    def test_dangling_sibling_in_other_repository(self, registry, shared, make_package, name):
        package, _ = make_package("replacement")
        registry.add(package, name("release/app:v1"))

        # release/app now holds the shared record as dangling; tools/app and
        # mirror/app still tag it
        registry.remove([name("tools/app:v1"), name("mirror/app:v1")])
        assert _files_exist(registry, shared.file_ref)
        assert shared.file_ref in _listed_file_refs(registry)

    def test_listed_records_always_have_files(self, registry, shared, make_package, name):
        package, _ = make_package("other")
        registry.add(package, name("tools/app:v1"))
        for ref in ("release/app:v1", "tools/app:v1", "mirror/app:v1"):
            registry.remove([name(ref)])
            for file_ref in _listed_file_refs(registry):
                assert _files_exist(registry, file_ref), file_ref
