"""Registry configuration — env-driven via pydantic-settings.

Every setting can be overridden with an ``ARTREG_*`` environment variable
or a ``.env`` file in the working directory.

Examples
--------
Override via environment::

    export ARTREG_HOME=/srv/artreg
    export ARTREG_LOG_LEVEL=DEBUG
    export ARTREG_REMOTE_SCHEME=http
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from artreg.bridge.remote import RemoteConfig


def _default_home() -> Path:
    return Path.home() / ".artreg"


class RegistrySettings(BaseSettings):
    """Settings for the local registry and its remote transport."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ARTREG_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Local registry
    home: Path = Field(default_factory=_default_home)
    atomic_writes: bool = True
    use_lock: bool = True

    # Logging
    log_level: str = "WARNING"

    # Remote transport
    remote_scheme: str = "https"
    remote_timeout_seconds: float | None = 60.0
    tls_verify: bool = True
    credentials: str | None = None

    def remote_config(self, *, insecure: bool = False) -> RemoteConfig:
        """Client config for push/pull; *insecure* turns TLS verification off."""
        return RemoteConfig(
            scheme=self.remote_scheme,
            tls_verify=self.tls_verify and not insecure,
            timeout_seconds=self.remote_timeout_seconds,
        )


# Module-level singleton — import as `from artreg.config import settings`
settings = RegistrySettings()
