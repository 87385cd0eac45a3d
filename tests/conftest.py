"""Shared fixtures for archivecache tests."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from archivecache.cache.config import CacheConfig, set_global_config
from archivecache.remote.backend import set_remote_backend


@pytest.fixture(autouse=True)
def reset_globals(monkeypatch, tmp_path):
    """Keep global config and remote backend from leaking between tests."""
    for name in (
        "ARCHIVECACHE_DIR",
        "ARCHIVECACHE_REMOTE_URL",
        "ARCHIVECACHE_WORKSPACE",
        "ARCHIVECACHE_TEMP_DIR",
        "ARCHIVECACHE_COMPRESSION",
        "ARCHIVECACHE_USE_LOCK",
        "ARCHIVECACHE_LOCK_TIMEOUT",
        "ARCHIVECACHE_UPLOAD_CHUNK_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        "archivecache.cache.config.DEFAULT_CONFIG_PATH", tmp_path / "no-config.json"
    )
    set_global_config(None)
    set_remote_backend(None)
    yield
    set_global_config(None)
    set_remote_backend(None)


@pytest.fixture
def chown_ok():
    """Make `sudo chown` succeed without running it."""
    with patch("archivecache.cache.permissions.subprocess.run") as mock_run:
        mock_run.side_effect = lambda cmd, **kwargs: subprocess.CompletedProcess(
            cmd, 0, "", ""
        )
        yield mock_run


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Create a workspace with a few files and make it the working directory."""
    ws = tmp_path / "workspace"
    (ws / "deps" / "pkg").mkdir(parents=True)
    (ws / "deps" / "pkg" / "module.py").write_text("print('hello')\n")
    (ws / "deps" / "data.bin").write_bytes(bytes(range(256)) * 4)
    (ws / "build.log").write_text("build ok\n")
    monkeypatch.chdir(ws)
    return ws


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    """Cache directory path (not created)."""
    return tmp_path / "cache"


@pytest.fixture
def temp_root(tmp_path) -> Path:
    """Parent of the temporary directories created during saves."""
    root = tmp_path / "tmp"
    root.mkdir()
    return root


@pytest.fixture
def cache_config(workspace, temp_root):
    """Create test cache configuration."""
    return CacheConfig(
        workspace=workspace,
        temp_dir=temp_root,
        compression="zstd",
        lock_timeout=5,
    )
