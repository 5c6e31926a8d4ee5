"""Tests for configure_logging — stdout or append-mode log file."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from turbocache.config import ServerConfig
from turbocache.logging_config import (
    ROOT_LOGGER_NAME,
    UVICORN_LOGGER_NAME,
    configure_logging,
)


@pytest.fixture(autouse=True)
def restore_loggers():
    saved = []
    for name in (ROOT_LOGGER_NAME, UVICORN_LOGGER_NAME):
        logger = logging.getLogger(name)
        saved.append((logger, list(logger.handlers), logger.level, logger.propagate))
    yield
    for logger, handlers, level, propagate in saved:
        for handler in list(logger.handlers):
            if handler not in handlers:
                logger.removeHandler(handler)
                handler.close()
        logger.setLevel(level)
        logger.propagate = propagate


def _installed(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, "_turbocache_handler", False)]


class TestConfigureLogging:
    def test_defaults_to_stdout(self):
        root = configure_logging(ServerConfig())
        (handler,) = _installed(root)
        assert type(handler) is logging.StreamHandler
        assert root.level == logging.INFO

    def test_file_sink_appends(self, tmp_path: Path):
        log_file = tmp_path / "server.log"
        log_file.write_text("existing line\n")
        root = configure_logging(ServerConfig(log_file=log_file))
        (handler,) = _installed(root)
        assert isinstance(handler, logging.FileHandler)

        logging.getLogger("turbocache.access").info("GET /x -> 200 OK")
        handler.flush()
        content = log_file.read_text()
        assert content.startswith("existing line\n")
        assert "[INFO] turbocache.access: GET /x -> 200 OK" in content

    def test_reconfigure_replaces_handler(self, tmp_path: Path):
        configure_logging(ServerConfig())
        root = configure_logging(ServerConfig(log_file=tmp_path / "a.log", log_level="debug"))
        (handler,) = _installed(root)
        assert isinstance(handler, logging.FileHandler)
        assert root.level == logging.DEBUG

    def test_unopenable_file_raises(self, tmp_path: Path):
        with pytest.raises(OSError):
            configure_logging(ServerConfig(log_file=tmp_path / "missing" / "x.log"))


class TestServerLoggerSink:
    def test_uvicorn_errors_share_the_handler(self, tmp_path: Path):
        log_file = tmp_path / "server.log"
        root = configure_logging(ServerConfig(log_file=log_file))
        server = logging.getLogger(UVICORN_LOGGER_NAME)
        assert _installed(server) == _installed(root)

        server.error("Address already in use")
        _installed(root)[0].flush()
        assert "[ERROR] uvicorn.error: Address already in use" in log_file.read_text()

    def test_reconfigure_replaces_uvicorn_handler(self, tmp_path: Path):
        configure_logging(ServerConfig())
        configure_logging(ServerConfig(log_file=tmp_path / "b.log", log_level="warning"))
        server = logging.getLogger(UVICORN_LOGGER_NAME)
        (handler,) = _installed(server)
        assert isinstance(handler, logging.FileHandler)
        assert server.level == logging.WARNING
