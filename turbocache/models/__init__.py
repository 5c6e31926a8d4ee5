"""Wire models — all Pydantic v2, all frozen (immutable)."""

from turbocache.models.wire import (
    ArtifactError,
    ArtifactInfo,
    ArtifactQueryRequest,
    CacheEvent,
    StatusResponse,
    UploadResponse,
)

__all__ = [
    # requests
    "CacheEvent",
    "ArtifactQueryRequest",
    # responses
    "ArtifactError",
    "ArtifactInfo",
    "UploadResponse",
    "StatusResponse",
]
