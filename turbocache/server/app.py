"""FastAPI application factory for the remote cache server.

Request path: access logger -> bearer-token gate -> route handler -> store.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from turbocache.config import ServerConfig
from turbocache.core.artifact_store import FileSystemArtifactStore
from turbocache.logging_config import ACCESS_LOGGER_NAME
from turbocache.server.auth import BearerAuthMiddleware
from turbocache.server.middleware import RequestLoggingMiddleware
from turbocache.server.routes import build_router

logger = logging.getLogger(__name__)


def create_app(
    config: ServerConfig,
    store: FileSystemArtifactStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Process-wide settings; the token and storage root are read
            from here.
        store: Artifact store to serve.  Defaults to a filesystem store
            rooted at ``config.cache_dir``.
    """
    if store is None:
        store = FileSystemArtifactStore(config.cache_dir)

    app = FastAPI(
        title="turbocache",
        description="Remote cache server for the /v8 artifacts API",
        redirect_slashes=False,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.store = store

    app.include_router(build_router(store, config))

    # add_middleware prepends, so the logger registered last runs outermost
    # and records the gate's 401 responses too.
    app.add_middleware(BearerAuthMiddleware, token=config.auth_token)
    app.add_middleware(
        RequestLoggingMiddleware, logger=logging.getLogger(ACCESS_LOGGER_NAME)
    )

    logger.info("Serving artifacts from %s", store.base_path)
    return app
