"""Remote transport — moves artifact packages and seals to/from a remote registry.

Wire layout
-----------
``POST {base}/artifact/{group}/{name}/{tag}``
    multipart upload with two parts: ``artifact-file`` (the ``.zip``) and
    ``artifact-seal`` (the ``.json`` seal).
``GET {base}/artifact/{group}/{name}/{tag}/seal``
    the seal document.
``GET {base}/artifact/{group}/{name}/{tag}/file``
    the package bytes.

``base`` defaults to ``{scheme}://{domain}`` of the reference.  Credentials
are ``user:password`` and go out as HTTP basic auth.  TLS certificates are
verified unless the caller explicitly opts out.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from artreg.core.seal import PACKAGE_EXT, SEAL_EXT
from artreg.models.names import ArtifactName

logger = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """Raised when a remote upload or download fails."""


class RemoteConfig(BaseModel):
    """Client settings for talking to a remote registry.

    ``tls_verify=False`` disables certificate validation entirely.  It
    exists for self-signed development registries only.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str | None = None
    scheme: str = "https"
    tls_verify: bool = True
    timeout_seconds: float | None = 60.0


def parse_credentials(credentials: str | None) -> httpx.BasicAuth | None:
    """Turn ``user:password`` into basic auth.  Empty means anonymous."""
    if not credentials:
        return None
    user, sep, password = credentials.partition(":")
    if not sep or not user:
        raise TransportError("credentials must be given as user:password")
    return httpx.BasicAuth(user, password)


class RemoteRegistry:
    """HTTP client for a remote artifact registry.

    Parameters
    ----------
    config:
        Client configuration.  Defaults to HTTPS with verification on.
    transport:
        Optional ``httpx`` transport, forwarded to the underlying client
        (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        config: RemoteConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config or RemoteConfig()
        self._transport = transport
        if not self._config.tls_verify:
            logger.warning(
                "TLS certificate verification is DISABLED for remote registry "
                "connections."
            )

    @property
    def config(self) -> RemoteConfig:
        return self._config

    def base_url(self, name: ArtifactName) -> str:
        if self._config.base_url:
            return self._config.base_url.rstrip("/")
        return f"{self._config.scheme}://{name.domain}"

    def artifact_url(self, name: ArtifactName) -> str:
        return f"{self.base_url(name)}/artifact/{name.group}/{name.name}/{name.tag}"

    def _client(self, credentials: str | None) -> httpx.Client:
        kwargs: dict[str, Any] = {
            "verify": self._config.tls_verify,
            "timeout": self._config.timeout_seconds,
            "auth": parse_credentials(credentials),
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.Client(**kwargs)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload_artifact(
        self,
        name: ArtifactName,
        local_path: Path,
        file_ref: str,
        credentials: str | None = None,
    ) -> None:
        """Upload ``{local_path}/{file_ref}.zip`` and its seal for *name*.

        Raises
        ------
        TransportError
            If either file is missing, the connection fails, or the remote
            answers with a non-2xx status.
        """
        package = Path(local_path) / f"{file_ref}{PACKAGE_EXT}"
        seal = Path(local_path) / f"{file_ref}{SEAL_EXT}"
        url = self.artifact_url(name)
        logger.info("Uploading %s to %s", name, url)
        try:
            with package.open("rb") as pkg, seal.open("rb") as sl, self._client(credentials) as client:
                response = client.post(
                    url,
                    files={
                        "artifact-file": (package.name, pkg, "application/zip"),
                        "artifact-seal": (seal.name, sl, "application/json"),
                    },
                )
        except OSError as exc:
            raise TransportError(f"cannot read local files for {name}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"upload of {name} to {url} failed: {exc}") from exc
        _raise_for_status(response, f"upload of {name}")
        logger.debug("Upload of %s completed (%d).", name, response.status_code)

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def download_artifact(
        self,
        name: ArtifactName,
        target_dir: Path,
        credentials: str | None = None,
    ) -> Path:
        """Download the package and seal for *name* into *target_dir*.

        The files are written as ``<name>.zip`` and ``<name>.json`` so the
        seal sits next to the package the same way a local build leaves
        them.  Returns the package path.
        """
        target_dir = Path(target_dir)
        package = target_dir / f"{name.name}{PACKAGE_EXT}"
        seal = target_dir / f"{name.name}{SEAL_EXT}"
        url = self.artifact_url(name)
        logger.info("Downloading %s from %s", name, url)
        try:
            with self._client(credentials) as client:
                response = client.get(f"{url}/seal")
                _raise_for_status(response, f"download of {name} seal")
                seal.write_bytes(response.content)

                with client.stream("GET", f"{url}/file") as stream:
                    _raise_for_status(stream, f"download of {name} package")
                    with package.open("wb") as out:
                        for chunk in stream.iter_bytes():
                            out.write(chunk)
        except OSError as exc:
            raise TransportError(f"cannot write downloaded files for {name}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"download of {name} from {url} failed: {exc}") from exc
        logger.debug("Download of %s completed into %s.", name, target_dir)
        return package

    def __repr__(self) -> str:
        return (
            f"RemoteRegistry(base_url={self._config.base_url!r}, "
            f"tls_verify={self._config.tls_verify})"
        )


def _raise_for_status(response: httpx.Response, action: str) -> None:
    if response.is_success:
        return
    if response.status_code in (401, 403):
        raise TransportError(f"{action} was refused ({response.status_code}): check credentials")
    raise TransportError(f"{action} failed with status {response.status_code}")
