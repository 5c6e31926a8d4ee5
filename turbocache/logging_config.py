"""Log sink setup for the server process.

One handler shared by the ``turbocache`` and ``uvicorn.error`` loggers: an
append-mode file when ``TURBO_LOG_FILE`` is set, otherwise standard output.
Server startup, shutdown and listener errors therefore land in the same
sink as the request log.
"""

from __future__ import annotations

import logging
import sys

from turbocache.config import ServerConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

ROOT_LOGGER_NAME = "turbocache"
ACCESS_LOGGER_NAME = "turbocache.access"
EVENTS_LOGGER_NAME = "turbocache.events"
UVICORN_LOGGER_NAME = "uvicorn.error"

_HANDLER_ATTR = "_turbocache_handler"


def _install(logger: logging.Logger, handler: logging.Handler) -> None:
    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_ATTR, False):
            logger.removeHandler(existing)
            # Shared with the other logger; closing twice is harmless.
            existing.close()
    logger.addHandler(handler)


def configure_logging(config: ServerConfig) -> logging.Logger:
    """Install the configured handler and return the ``turbocache`` logger.

    Calling it again replaces the handler installed by the previous call.
    Raises ``OSError`` if the log file cannot be opened.
    """
    if config.log_file is not None:
        handler: logging.Handler = logging.FileHandler(
            config.log_file, mode="a", encoding="utf-8"
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)

    level = config.log_level.upper()
    root = logging.getLogger(ROOT_LOGGER_NAME)
    _install(root, handler)
    root.setLevel(level)

    server = logging.getLogger(UVICORN_LOGGER_NAME)
    _install(server, handler)
    server.setLevel(level)
    # Keep uvicorn's records out of any handler on the root logger.
    server.propagate = False
    return root
