"""Adversarial tests — short id fragments that match several artifacts.

A fragment that is not long enough to pin point one artifact must never
be guessed.  These tests verify that:
1. Tag refuses an ambiguous fragment with a typed error
2. Remove reports it as an outcome and stops the batch there
3. A refused operation leaves the index and the files untouched
4. The error says how many artifacts matched
"""

from __future__ import annotations

from pathlib import Path

import pytest

from artreg.core.errors import AmbiguousReferenceError
from artreg.core.index_store import InMemoryIndex
from artreg.core.registry import LocalRegistry
from artreg.models.results import RemoveStatus

ID_1 = "sha256:abc123" + "0" * 58
ID_2 = "sha256:abc123" + "f" * 58
ID_3 = "sha256:" + "9" * 64


@pytest.fixture
def store(make_index, make_artifact) -> InMemoryIndex:
    return InMemoryIndex(
        make_index(
            ("artreg.local/tools/app", [make_artifact(ID_1, "v1")]),
            ("artreg.local/tools/lib", [make_artifact(ID_2, "v1"), make_artifact(ID_3)]),
        )
    )


@pytest.fixture
def local(tmp_dir: Path, store: InMemoryIndex) -> LocalRegistry:
    return LocalRegistry(tmp_dir / "ambiguous", store)


class TestAmbiguousReferences:
    def test_remove_refuses(self, local, store, name):
        before = store.document
        (outcome,) = local.remove([name("abc123")])
        assert outcome.status is RemoveStatus.AMBIGUOUS
        assert not outcome.removed
        assert "2 were found" in outcome.detail
        assert store.document == before
        assert store.save_count == 0

    def test_tag_refuses(self, local, store, name):
        with pytest.raises(AmbiguousReferenceError):
            local.tag(name("abc123"), name("tools/app:v2"))
        assert store.save_count == 0

    def test_untag_refuses(self, local, name):
        with pytest.raises(AmbiguousReferenceError):
            local.untag(name("abc123"))

    def test_message_names_the_fragment(self, local, name):
        with pytest.raises(AmbiguousReferenceError, match="abc123.*2 were found"):
            local.get_artifact(name("abc123")).unwrap()

    def test_longer_fragment_resolves(self, local, name):
        assert local.get_artifact(name("abc1230")).artifact.id == ID_1
        assert local.get_artifact(name("abc123f")).artifact.id == ID_2

    def test_earlier_items_of_a_batch_are_reported(self, local, store, name):
        outcomes = local.remove(
            [name("999999"), name("abc123"), name("tools/app:v1")]
        )
        assert [o.status for o in outcomes] == [
            RemoveStatus.REMOVED,
            RemoveStatus.AMBIGUOUS,
        ]
        assert outcomes[0].artifact_id == ID_3
        # the first item was applied and saved, nothing after the fragment ran
        assert store.save_count == 1
        saved = store.load()
        assert saved.find_by_id(ID_3) is None
        assert saved.find_by_id(ID_1).tags == ["v1"]

    def test_fragment_matches_anywhere_in_the_id(self, local, name):
        assert local.get_artifact(name("ffffff")).artifact.id == ID_2
