"""Shared test fixtures for turbocache."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from turbocache.config import ServerConfig
from turbocache.core.artifact_store import FileSystemArtifactStore
from turbocache.server.app import create_app

TEST_TOKEN = "test-token"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep TURBO_* variables and any local .env file out of the tests."""
    for name in list(os.environ):
        if name.startswith("TURBO_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def artifact_store(cache_dir: Path) -> FileSystemArtifactStore:
    """Provide a fresh FileSystemArtifactStore in a temp directory."""
    return FileSystemArtifactStore(cache_dir)


@pytest.fixture
def config(cache_dir: Path) -> ServerConfig:
    return ServerConfig(auth_token=TEST_TOKEN, cache_dir=cache_dir)


@pytest.fixture
def client(config: ServerConfig, artifact_store: FileSystemArtifactStore) -> TestClient:
    """Test client for an app sharing the ``artifact_store`` fixture."""
    return TestClient(create_app(config, store=artifact_store))


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_TOKEN}"}
