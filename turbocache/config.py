"""Server configuration — env-driven, immutable after startup.

Reads ``TURBO_*`` environment variables (and an optional ``.env`` file).
The names of the three core settings match what existing deployments of
the cache server already export: ``TURBO_CACHE_DIR``, ``TURBO_AUTH_TOKEN``
and ``TURBO_LOG_FILE``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ARTIFACT_URL_TEMPLATE = "https://api.vercel.com/v2/now/artifact/{hash}"


class ServerConfig(BaseSettings):
    """Process-wide configuration for the cache server.

    Built once at startup and passed explicitly to :func:`create_app` and the
    artifact store; there is no module-level instance.

    Examples
    --------
    Override via environment::

        export TURBO_AUTH_TOKEN=s3cret
        export TURBO_CACHE_DIR=/data
        export TURBO_LOG_FILE=/var/log/turbocache.log

    Or in tests::

        ServerConfig(auth_token="test-token", cache_dir=tmp_path)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TURBO_",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Storage
    cache_dir: Path = Path("./turbo-cache")

    # Authorization; required, checked by the startup guard
    auth_token: str = ""

    # Logging
    log_file: Path | None = None
    log_level: str = "INFO"

    # Listener
    host: str = "0.0.0.0"
    port: int = 8080

    # Descriptive URL returned in upload responses
    artifact_url_template: str = DEFAULT_ARTIFACT_URL_TEMPLATE

    @field_validator("log_file", mode="before")
    @classmethod
    def _blank_log_file_means_stdout(cls, value: object) -> object:
        # TURBO_LOG_FILE= (set but empty) falls back to stdout
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def artifact_url(self, artifact_hash: str) -> str:
        """Render the reference URL reported back to clients after an upload."""
        return self.artifact_url_template.format(hash=artifact_hash)
