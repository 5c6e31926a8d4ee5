"""Handlers for the ``/v8/artifacts`` remote-cache API.

Routes are registered on an ``APIRouter`` built by :func:`build_router`,
which closes over the store and config instead of reading module globals.
Blocking filesystem calls run in Starlette's threadpool.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import BinaryIO

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import TypeAdapter, ValidationError
from starlette.background import BackgroundTask
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from turbocache.config import ServerConfig
from turbocache.core.artifact_store import (
    CHUNK_SIZE,
    ArtifactNotFoundError,
    ArtifactStoreError,
    FileSystemArtifactStore,
    PendingArtifact,
    StoredArtifact,
)
from turbocache.core.keyspace import InvalidArtifactHashError, is_valid_artifact_hash
from turbocache.logging_config import EVENTS_LOGGER_NAME
from turbocache.models import (
    ArtifactInfo,
    ArtifactQueryRequest,
    CacheEvent,
    StatusResponse,
    UploadResponse,
)

logger = logging.getLogger(__name__)
events_logger = logging.getLogger(EVENTS_LOGGER_NAME)

API_PREFIX = "/v8/artifacts"

# A JSON null body is a well-formed empty request.
_EVENTS_ADAPTER = TypeAdapter(list[CacheEvent] | None)
_QUERY_ADAPTER = TypeAdapter(ArtifactQueryRequest | None)


def _iter_file(handle: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = handle.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        handle.close()


def _require_valid_hash(artifact_hash: str) -> None:
    if not is_valid_artifact_hash(artifact_hash):
        raise HTTPException(status_code=400, detail="Invalid artifact hash")


def _parse_content_length(request: Request) -> int:
    raw = request.headers.get("content-length")
    if raw is None:
        raise HTTPException(status_code=400, detail="Content-Length required")
    try:
        length = int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid Content-Length") from None
    if length < 0:
        raise HTTPException(status_code=400, detail="Invalid Content-Length")
    return length


async def _receive_upload(request: Request, pending: PendingArtifact) -> StoredArtifact:
    """Feed the request body into *pending* and publish it.

    Any failure, including cancellation, discards the temporary file.
    """
    try:
        async for chunk in request.stream():
            if chunk:
                await run_in_threadpool(pending.write, chunk)
        return await run_in_threadpool(pending.commit)
    except BaseException:
        pending.abort()
        raise


def build_router(store: FileSystemArtifactStore, config: ServerConfig) -> APIRouter:
    """Create the router serving the remote-cache API against *store*."""
    router = APIRouter(prefix=API_PREFIX)

    def lookup_all(hashes: list[str]) -> dict[str, ArtifactInfo]:
        results: dict[str, ArtifactInfo] = {}
        for artifact_hash in hashes:
            try:
                results[artifact_hash] = ArtifactInfo.found(store.size(artifact_hash))
            except (ArtifactNotFoundError, InvalidArtifactHashError):
                results[artifact_hash] = ArtifactInfo.not_found()
            except ArtifactStoreError as exc:
                logger.warning("Query failed for hash %s: %s", artifact_hash, exc)
                results[artifact_hash] = ArtifactInfo.not_found()
        return results

    # ------------------------------------------------------------------
    # Fixed endpoints
    # ------------------------------------------------------------------

    @router.post("/events")
    async def record_events(request: Request) -> Response:
        """Log cache hit/miss telemetry; nothing is stored."""
        body = await request.body()
        try:
            events = _EVENTS_ADAPTER.validate_json(body)
        except ValidationError:
            raise HTTPException(status_code=400, detail="Invalid request body") from None

        for event in events or []:
            events_logger.info(
                "Cache event: %s %s %s (session: %s, duration: %.2f)",
                event.hash,
                event.source,
                event.event,
                event.session_id,
                event.duration or 0.0,
            )
        return Response(status_code=200)

    @router.get("/status")
    async def get_status() -> dict[str, str]:
        return StatusResponse().model_dump()

    # These names are endpoints, not artifact hashes: other verbs get 405
    # instead of falling through to the artifact routes below.
    @router.api_route(
        "/events",
        methods=["GET", "HEAD", "PUT", "DELETE", "PATCH"],
        include_in_schema=False,
    )
    @router.api_route(
        "/status",
        methods=["HEAD", "POST", "PUT", "DELETE", "PATCH"],
        include_in_schema=False,
    )
    async def endpoint_method_not_allowed() -> Response:
        raise HTTPException(status_code=405, detail="Method not allowed")

    @router.post("")
    async def query_artifacts(request: Request) -> JSONResponse:
        """Report size or a not-found error for every requested hash."""
        body = await request.body()
        try:
            query = _QUERY_ADAPTER.validate_json(body)
        except ValidationError:
            raise HTTPException(status_code=400, detail="Invalid request body") from None

        hashes = query.hashes if query is not None and query.hashes else []
        results = await run_in_threadpool(lookup_all, hashes)
        return JSONResponse(
            {
                artifact_hash: info.model_dump(by_alias=True, exclude_none=True)
                for artifact_hash, info in results.items()
            }
        )

    # ------------------------------------------------------------------
    # Single artifact
    # ------------------------------------------------------------------

    @router.get("/{artifact_hash}")
    async def download_artifact(artifact_hash: str) -> Response:
        _require_valid_hash(artifact_hash)
        try:
            handle, size = await run_in_threadpool(store.retrieve, artifact_hash)
        except ArtifactNotFoundError:
            raise HTTPException(status_code=404, detail="Artifact not found") from None
        except ArtifactStoreError as exc:
            logger.error("Download failed for hash %s: %s", artifact_hash, exc)
            raise HTTPException(status_code=500, detail="Failed to read artifact") from None

        return StreamingResponse(
            _iter_file(handle),
            media_type="application/octet-stream",
            headers={"Content-Length": str(size)},
            background=BackgroundTask(handle.close),
        )

    @router.put("/{artifact_hash}")
    async def upload_artifact(artifact_hash: str, request: Request) -> JSONResponse:
        _require_valid_hash(artifact_hash)
        _parse_content_length(request)

        try:
            pending = await run_in_threadpool(store.begin, artifact_hash)
            stored = await _receive_upload(request, pending)
        except ClientDisconnect:
            logger.warning("Client disconnected during upload of %s", artifact_hash)
            raise HTTPException(status_code=400, detail="Incomplete request body") from None
        except ArtifactStoreError as exc:
            logger.error("Upload failed for hash %s: %s", artifact_hash, exc)
            raise HTTPException(status_code=500, detail="Failed to store artifact") from None

        logger.debug("Uploaded %s (%d bytes)", stored.artifact_hash, stored.size_bytes)
        body = UploadResponse(urls=[config.artifact_url(artifact_hash)])
        return JSONResponse(body.model_dump(), status_code=202)

    @router.head("/{artifact_hash}")
    async def check_artifact(artifact_hash: str) -> Response:
        if not is_valid_artifact_hash(artifact_hash):
            return Response(status_code=400)
        try:
            found = await run_in_threadpool(store.exists, artifact_hash)
        except ArtifactStoreError as exc:
            logger.error("Error checking artifact %s: %s", artifact_hash, exc)
            return Response(status_code=500)
        return Response(status_code=200 if found else 404)

    return router
