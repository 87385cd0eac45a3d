"""Tests for the public restore_cache/save_cache functions."""

import logging
import os
import shutil
from unittest.mock import MagicMock, patch

import pytest

from archivecache import DownloadOptions, UploadOptions, restore_cache, save_cache
from archivecache.cache.config import CacheConfig, set_global_config
from archivecache.remote.backend import set_remote_backend

PATHS = ["deps"]


@pytest.fixture
def remote_backend():
    """Install a mock remote backend."""
    backend = MagicMock()
    backend.restore_cache.return_value = "remote-key"
    backend.save_cache.return_value = 42
    set_remote_backend(backend)
    return backend


class TestBackendSelection:
    """Test the choice between the remote backend and the local directory."""

    @pytest.mark.parametrize("cache_dir", [None, ""])
    def test_restore_without_cache_dir_uses_remote(self, remote_backend, cache_dir):
        """Test that restore is passed through unchanged to the remote backend."""
        result = restore_cache(
            PATHS,
            "primary",
            ["fallback"],
            DownloadOptions(lookup_only=True),
            True,
            cache_dir,
        )

        assert result == "remote-key"
        remote_backend.restore_cache.assert_called_once_with(
            PATHS, "primary", ["fallback"], DownloadOptions(lookup_only=True), True
        )

    def test_save_without_cache_dir_uses_remote(self, remote_backend):
        """Test that save is delegated with the configured chunk size."""
        config = CacheConfig(upload_chunk_size=8 * 1024 * 1024)

        result = save_cache(PATHS, "key", None, False, None, config)

        assert result == 42
        remote_backend.save_cache.assert_called_once_with(
            PATHS, "key", UploadOptions(upload_chunk_size=8 * 1024 * 1024), False
        )

    def test_local_cache_dir_skips_remote(
        self, remote_backend, cache_dir, cache_config, chown_ok
    ):
        """Test that a cache directory keeps everything local."""
        cache_id = save_cache(PATHS, "key", cache_dir=cache_dir, config=cache_config)

        assert cache_id > 0
        remote_backend.save_cache.assert_not_called()
        assert len(os.listdir(cache_dir)) >= 1

    def test_no_remote_configured(self, caplog):
        """Test that a missing remote backend is a warning, not an error."""
        set_global_config(CacheConfig())

        with caplog.at_level(logging.WARNING, logger="archivecache"):
            assert restore_cache(PATHS, "key") is None
            assert save_cache(PATHS, "key") == -1

        assert "no remote backend configured" in caplog.text

    def test_remote_url_builds_cloudfiles_backend(self):
        """Test that remote_url selects the cloudfiles backend."""
        config = CacheConfig(remote_url="gs://bucket/cache")

        with patch("archivecache.remote.backend.CloudFilesCacheBackend") as backend_cls:
            backend_cls.return_value.restore_cache.return_value = None
            assert restore_cache(PATHS, "key", config=config) is None

        backend_cls.assert_called_once_with("gs://bucket/cache", config)


class TestLocalRestore:
    """Test best-effort local restores."""

    def test_round_trip(self, cache_dir, cache_config, chown_ok, workspace):
        """Test save then restore through the public API."""
        original = (workspace / "deps" / "data.bin").read_bytes()
        save_cache(PATHS, "deps-v1", cache_dir=cache_dir, config=cache_config)
        shutil.rmtree(workspace / "deps")

        matched = restore_cache(
            PATHS, "deps-v2", ["deps-v1"], cache_dir=cache_dir, config=cache_config
        )

        assert matched == "deps-v1"
        assert (workspace / "deps" / "data.bin").read_bytes() == original

    def test_too_many_keys_returns_none(self, cache_dir, cache_config, chown_ok, caplog):
        """Test that eleven keys are logged and reported as a miss."""
        restore_keys = [f"k{i}" for i in range(10)]

        with caplog.at_level(logging.WARNING, logger="archivecache"):
            result = restore_cache(
                PATHS, "primary", restore_keys, cache_dir=cache_dir, config=cache_config
            )

        assert result is None
        assert "Failed to restore cache" in caplog.text
        assert "maximum of 10" in caplog.text

    def test_permission_failure_returns_none(self, cache_dir, cache_config, caplog):
        """Test that a failing chown is reported as a miss."""
        cache_dir.mkdir()
        with patch("archivecache.cache.permissions.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stderr="")
            with caplog.at_level(logging.WARNING, logger="archivecache"):
                result = restore_cache(
                    PATHS, "key", cache_dir=cache_dir, config=cache_config
                )

        assert result is None
        assert "exited with code 1" in caplog.text

    def test_lookup_only(self, cache_dir, cache_config, chown_ok, workspace):
        """Test lookup-only through the public API."""
        save_cache(PATHS, "deps-v1", cache_dir=cache_dir, config=cache_config)
        shutil.rmtree(workspace / "deps")

        matched = restore_cache(
            PATHS,
            "deps-v1",
            options=DownloadOptions(lookup_only=True),
            cache_dir=cache_dir,
            config=cache_config,
        )

        assert matched == "deps-v1"
        assert not (workspace / "deps").exists()

    def test_unexpected_error_returns_none(self, cache_dir, cache_config, chown_ok):
        """Test that any exception is swallowed."""
        with patch(
            "archivecache.cache.manager.ArchiveCacheManager.restore",
            side_effect=RuntimeError("boom"),
        ):
            assert (
                restore_cache(PATHS, "key", cache_dir=cache_dir, config=cache_config)
                is None
            )


class TestLocalSave:
    """Test best-effort local saves."""

    def test_records_archive_size(self, cache_dir, cache_config, chown_ok):
        """Test that options receive the archive size."""
        options = UploadOptions()

        save_cache(PATHS, "key", options, cache_dir=cache_dir, config=cache_config)

        assert options.archive_size_bytes > 0

    def test_nothing_to_cache_returns_sentinel(
        self, cache_dir, cache_config, chown_ok, temp_root, caplog
    ):
        """Test that unresolvable paths return -1 without writing an archive."""
        with caplog.at_level(logging.WARNING, logger="archivecache"):
            result = save_cache(
                ["missing"], "key", cache_dir=cache_dir, config=cache_config
            )

        assert result == -1
        assert "Failed to save cache" in caplog.text
        assert not cache_dir.exists()
        assert os.listdir(temp_root) == []

    def test_invalid_key_returns_sentinel(self, cache_dir, cache_config, chown_ok):
        """Test that key validation failures return -1."""
        assert save_cache(PATHS, "k" * 513, cache_dir=cache_dir, config=cache_config) == -1

    def test_copy_failure_returns_sentinel(
        self, cache_dir, cache_config, chown_ok, temp_root
    ):
        """Test that I/O failures return -1 and clean up the temp archive."""
        with patch(
            "archivecache.storage.backend.shutil.copyfile",
            side_effect=OSError("No space left on device"),
        ):
            result = save_cache(PATHS, "key", cache_dir=cache_dir, config=cache_config)

        assert result == -1
        assert os.listdir(temp_root) == []

    def test_cleanup_failure_keeps_result(self, cache_dir, cache_config, chown_ok):
        """Test that a failing temp cleanup does not change the outcome."""
        with patch(
            "archivecache.archive.utils.shutil.rmtree", side_effect=OSError("busy")
        ):
            result = save_cache(PATHS, "key", cache_dir=cache_dir, config=cache_config)

        assert result > 0
