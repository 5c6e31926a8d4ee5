"""Request and response bodies of the ``/v8/artifacts`` API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CacheEvent(BaseModel):
    """One telemetry record posted to ``/v8/artifacts/events``.

    Events are logged and discarded; nothing is persisted.
    Clients omit unset fields, so every field is optional.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    session_id: str = Field(default="", alias="sessionId")
    source: str = ""  # "LOCAL" | "REMOTE"
    event: str = ""  # "HIT" | "MISS"
    hash: str = ""
    duration: float | None = None


class ArtifactQueryRequest(BaseModel):
    """Body of the bulk query ``POST /v8/artifacts``."""

    model_config = ConfigDict(frozen=True)

    hashes: list[str] | None = None


class ArtifactError(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class ArtifactInfo(BaseModel):
    """Per-hash entry of a bulk query response.

    Serialize with ``exclude_none=True``: unset fields are omitted, so a hit
    renders as ``{"size": N}`` and a miss as ``{"error": {"message": ...}}``.
    ``taskDurationMs`` and ``tag`` stay unset since no metadata is persisted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    size: int | None = None
    task_duration_ms: float | None = Field(default=None, alias="taskDurationMs")
    tag: str | None = None
    error: ArtifactError | None = None

    @classmethod
    def found(cls, size: int) -> ArtifactInfo:
        return cls(size=size)

    @classmethod
    def not_found(cls) -> ArtifactInfo:
        return cls(error=ArtifactError(message="Artifact not found"))


class UploadResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    urls: list[str]


class StatusResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str = "enabled"
