"""Integration test — push from one local registry, pull into another.

A dict-backed fake remote registry sits behind ``httpx.MockTransport`` and
speaks the same wire layout as a real one: multipart upload, then separate
GETs for the seal and the package.
"""

from __future__ import annotations

import base64

import httpx
import pytest

from artreg.bridge.remote import RemoteConfig, RemoteRegistry, TransportError
from artreg.core.errors import ArtifactNotFoundError
from artreg.core.registry import LocalRegistry
from artreg.core.seal import artifact_id


class FakeRemote:
    """In-memory remote registry keyed by request path."""

    def __init__(self, multipart_parts, credentials: str | None = None) -> None:
        self._parts = multipart_parts
        self.files: dict[str, bytes] = {}
        self.seals: dict[str, bytes] = {}
        self.expected_auth = (
            "Basic " + base64.b64encode(credentials.encode()).decode() if credentials else None
        )
        self.requests: list[httpx.Request] = []

    def _authorized(self, request: httpx.Request) -> bool:
        if self.expected_auth is None:
            return True
        return request.headers.get("authorization") == self.expected_auth

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._authorized(request):
            return httpx.Response(401)
        path = request.url.path
        if request.method == "POST":
            parts = self._parts(request)
            self.files[path] = parts["artifact-file"]
            self.seals[path] = parts["artifact-seal"]
            return httpx.Response(201)
        key, _, leaf = path.rpartition("/")
        store = {"seal": self.seals, "file": self.files}.get(leaf, {})
        if key not in store:
            return httpx.Response(404)
        return httpx.Response(200, content=store[key])

    def client(self) -> RemoteRegistry:
        return RemoteRegistry(
            RemoteConfig(base_url="https://registry.test"),
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def remote(multipart_parts) -> FakeRemote:
    return FakeRemote(multipart_parts)


@pytest.fixture
def downstream(tmp_dir) -> LocalRegistry:
    return LocalRegistry(tmp_dir / "downstream")


class TestPushPull:
    def test_round_trip_between_registries(
        self, file_registry, downstream, remote, make_package, name
    ):
        package, seal = make_package("release payload")
        pushed = file_registry.add(package, name("tools/app:1.0"))

        file_registry.push(name("tools/app:1.0"), remote.client())
        assert "/artifact/tools/app/1.0" in remote.files

        pulled = downstream.pull(name("tools/app:1.0"), remote.client())
        assert pulled.id == pushed.id == artifact_id(seal)
        assert pulled.tags == ["1.0"]
        assert downstream.package_path(pulled.file_ref).read_bytes() == b"release payload"
        assert downstream.seal_path(pulled.file_ref).is_file()

    def test_pull_leaves_no_staging_directory(
        self, file_registry, downstream, remote, make_package, name
    ):
        package, _ = make_package()
        file_registry.add(package, name("tools/app:1.0"))
        file_registry.push(name("tools/app:1.0"), remote.client())

        downstream.pull(name("tools/app:1.0"), remote.client())
        assert not list(downstream.path.glob(".pull-*"))

    def test_pull_steals_the_local_tag(
        self, file_registry, downstream, remote, make_package, name
    ):
        package, _ = make_package("upstream build")
        file_registry.add(package, name("tools/app:1.0"))
        file_registry.push(name("tools/app:1.0"), remote.client())

        local_package, _ = make_package("local build")
        local_build = downstream.add(local_package, name("tools/app:1.0"))

        pulled = downstream.pull(name("tools/app:1.0"), remote.client())
        assert local_build.is_dangling
        assert downstream.get_artifact(name("tools/app:1.0")).artifact.id == pulled.id

    def test_tampered_package_is_rejected(
        self, file_registry, downstream, remote, make_package, name
    ):
        package, _ = make_package("genuine")
        file_registry.add(package, name("tools/app:1.0"))
        file_registry.push(name("tools/app:1.0"), remote.client())
        remote.files["/artifact/tools/app/1.0"] = b"tampered"

        with pytest.raises(TransportError, match="digest"):
            downstream.pull(name("tools/app:1.0"), remote.client())
        assert downstream.repositories == []
        assert not list(downstream.path.glob(".pull-*"))
        assert not list(downstream.path.glob("*.zip"))

    def test_pull_of_unknown_artifact(self, downstream, remote, name):
        with pytest.raises(TransportError, match="404"):
            downstream.pull(name("tools/ghost:1.0"), remote.client())
        assert downstream.repositories == []

    def test_credentials_are_required_when_configured(
        self, file_registry, make_package, multipart_parts, name
    ):
        remote = FakeRemote(multipart_parts, credentials="ci:secret")
        package, _ = make_package()
        file_registry.add(package, name("tools/app:1.0"))

        with pytest.raises(TransportError, match="credentials"):
            file_registry.push(name("tools/app:1.0"), remote.client())
        file_registry.push(name("tools/app:1.0"), remote.client(), credentials="ci:secret")
        assert remote.files

    def test_push_unknown_artifact_never_contacts_remote(self, file_registry, remote, name):
        with pytest.raises(ArtifactNotFoundError):
            file_registry.push(name("tools/ghost:1.0"), remote.client())
        assert remote.requests == []
