"""Filesystem-backed artifact store keyed by client-supplied hash.

Storage layout: {base_path}/{hash}
One file per artifact in a flat directory; no sharding, no metadata files.

Writes go to a temporary file in the same directory and are published with
``os.replace``, so a reader sees either the previous complete payload or the
new complete payload, never a partial one.  A failed write removes its
temporary file and leaves nothing addressable under the hash.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import BinaryIO, NamedTuple

from turbocache.core.keyspace import validate_artifact_hash

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
TEMP_SUFFIX = ".tmp"


class ArtifactStoreError(RuntimeError):
    """Base class for artifact store failures."""


class ArtifactNotFoundError(ArtifactStoreError):
    """Raised when no artifact is stored under the requested hash."""


class ArtifactIOError(ArtifactStoreError):
    """Raised for filesystem failures not explained by a missing artifact."""


class StoredArtifact(NamedTuple):
    """Result of a successful store operation."""

    artifact_hash: str
    size_bytes: int


class StoreStats(NamedTuple):
    """Summary of the published artifacts under the storage root."""

    artifact_count: int
    total_bytes: int


class PendingArtifact:
    """An in-progress write that becomes visible only on :meth:`commit`.

    Obtained from :meth:`FileSystemArtifactStore.begin`.  Used as a context
    manager it commits on normal exit and aborts on an exception::

        with store.begin("abc123") as pending:
            for chunk in chunks:
                pending.write(chunk)
    """

    def __init__(self, artifact_hash: str, target: Path) -> None:
        self.artifact_hash = artifact_hash
        self._target = target
        self._size = 0
        self._closed = False
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=str(target.parent),
                prefix=f".{artifact_hash}.",
                suffix=TEMP_SUFFIX,
            )
        except OSError as exc:
            raise ArtifactIOError(
                f"Failed to create temporary file for {artifact_hash}: {exc}"
            ) from exc
        self._tmp_path = Path(tmp_name)
        self._handle = os.fdopen(fd, "wb")

    @property
    def size_bytes(self) -> int:
        return self._size

    def write(self, chunk: bytes) -> None:
        """Append *chunk* to the temporary file."""
        if self._closed:
            raise ArtifactStoreError(f"Write to closed artifact {self.artifact_hash}")
        try:
            self._handle.write(chunk)
        except OSError as exc:
            self.abort()
            raise ArtifactIOError(
                f"Failed to write artifact {self.artifact_hash}: {exc}"
            ) from exc
        self._size += len(chunk)

    def commit(self) -> StoredArtifact:
        """Flush, fsync and atomically publish the artifact under its hash."""
        if self._closed:
            raise ArtifactStoreError(f"Artifact {self.artifact_hash} already closed")
        try:
            self._handle.flush()
            os.fsync(self._handle.fileno())
            self._handle.close()
            os.replace(self._tmp_path, self._target)
        except OSError as exc:
            self.abort()
            raise ArtifactIOError(
                f"Failed to publish artifact {self.artifact_hash}: {exc}"
            ) from exc
        self._closed = True
        logger.debug("Stored artifact %s (%d bytes)", self.artifact_hash, self._size)
        return StoredArtifact(self.artifact_hash, self._size)

    def abort(self) -> None:
        """Discard the temporary file.  Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._handle.close()
        except OSError:
            logger.debug("Closing temp file for %s failed", self.artifact_hash)
        try:
            self._tmp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning(
                "Could not remove temporary file %s: %s", self._tmp_path, exc
            )

    def __enter__(self) -> PendingArtifact:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.abort()
        elif not self._closed:
            self.commit()


class FileSystemArtifactStore:
    """Flat-directory artifact store.

    Same-hash uploads overwrite each other (last writer wins); there is no
    versioning, expiry or delete.

    Parameters
    ----------
    base_path:
        Root directory for artifact storage.  Created if missing.
    """

    def __init__(self, base_path: Path | str) -> None:
        self._base = Path(base_path)
        try:
            self._base.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArtifactIOError(
                f"Failed to create storage directory {self._base}: {exc}"
            ) from exc

    @property
    def base_path(self) -> Path:
        return self._base

    def _artifact_path(self, artifact_hash: str) -> Path:
        return self._base / validate_artifact_hash(artifact_hash)

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def begin(self, artifact_hash: str) -> PendingArtifact:
        """Start a write for *artifact_hash*; nothing is visible until commit."""
        return PendingArtifact(artifact_hash, self._artifact_path(artifact_hash))

    def store(self, artifact_hash: str, stream: BinaryIO) -> StoredArtifact:
        """Persist everything readable from *stream* under *artifact_hash*.

        On any read, write or flush error the partial file is removed and the
        error propagates; ``OSError`` is wrapped in :class:`ArtifactIOError`.
        """
        pending = self.begin(artifact_hash)
        try:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                pending.write(chunk)
        except OSError as exc:
            pending.abort()
            raise ArtifactIOError(
                f"Failed to read upload for {artifact_hash}: {exc}"
            ) from exc
        except BaseException:
            pending.abort()
            raise
        return pending.commit()

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def retrieve(self, artifact_hash: str) -> tuple[BinaryIO, int]:
        """Open the artifact for reading.

        Returns
        -------
        tuple
            ``(handle, size)``.  The caller owns the handle and must close it.

        Raises
        ------
        ArtifactNotFoundError
            If nothing is stored under *artifact_hash*.
        ArtifactIOError
            For any other failure opening or inspecting the file.
        """
        path = self._artifact_path(artifact_hash)
        try:
            handle = path.open("rb")
        except FileNotFoundError as exc:
            raise ArtifactNotFoundError(f"Artifact not found: {artifact_hash}") from exc
        except OSError as exc:
            raise ArtifactIOError(f"Failed to open artifact {artifact_hash}: {exc}") from exc

        try:
            size = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            handle.close()
            raise ArtifactIOError(f"Failed to stat artifact {artifact_hash}: {exc}") from exc
        return handle, size

    def size(self, artifact_hash: str) -> int:
        """Return the stored payload length of *artifact_hash*."""
        handle, size = self.retrieve(artifact_hash)
        handle.close()
        return size

    # ------------------------------------------------------------------
    # Check
    # ------------------------------------------------------------------

    def exists(self, artifact_hash: str) -> bool:
        """Check whether a complete artifact is published under *artifact_hash*."""
        path = self._artifact_path(artifact_hash)
        try:
            st = os.stat(path)
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise ArtifactIOError(f"Failed to check artifact {artifact_hash}: {exc}") from exc
        return stat.S_ISREG(st.st_mode)

    def stats(self) -> StoreStats:
        """Count published artifacts and their total size.

        In-flight temporary files (dot-prefixed) are ignored.
        """
        count = 0
        total = 0
        try:
            entries = list(os.scandir(self._base))
        except OSError as exc:
            raise ArtifactIOError(f"Failed to list {self._base}: {exc}") from exc
        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                total += entry.stat(follow_symlinks=False).st_size
            except FileNotFoundError:
                continue
            count += 1
        return StoreStats(count, total)
