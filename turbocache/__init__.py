"""turbocache: a self-hosted remote cache server for Turborepo-style build clients.

Build clients push opaque build-output blobs keyed by a content hash and later
probe for or fetch them to skip redundant work.  The server speaks the ``/v8``
remote-cache HTTP API:

  - HEAD/GET/PUT ``/v8/artifacts/{hash}`` for single artifacts
  - POST ``/v8/artifacts`` for bulk existence/size queries
  - POST ``/v8/artifacts/events`` for cache telemetry (logged, not stored)
  - GET ``/v8/artifacts/status``
"""

__version__ = "0.1.0"
__description__ = "Remote cache server for the Turborepo /v8 artifacts API"

from turbocache.config import ServerConfig
from turbocache.core.artifact_store import FileSystemArtifactStore
from turbocache.server.app import create_app

__all__ = ["ServerConfig", "FileSystemArtifactStore", "create_app", "__version__"]
