"""Tests for cache configuration."""

from pathlib import Path

import pytest

from archivecache.cache.config import (
    CacheConfig,
    get_global_config,
    set_global_config,
)


class TestCacheConfig:
    """Test CacheConfig construction and persistence."""

    def test_defaults(self):
        """Test default configuration values."""
        config = CacheConfig()

        assert config.cache_dir is None
        assert config.remote_url is None
        assert config.compression == "zstd"
        assert config.use_lock is True
        assert config.lock_timeout == 30
        assert config.upload_chunk_size is None

    def test_string_paths_converted(self):
        """Test that directory settings become expanded Paths."""
        config = CacheConfig(cache_dir="~/cache", workspace="/work")

        assert config.cache_dir == Path.home() / "cache"
        assert config.workspace == Path("/work")

    def test_save_and_load(self, tmp_path):
        """Test a save/load round trip through a JSON file."""
        config_path = tmp_path / "nested" / "config.json"
        config = CacheConfig(
            cache_dir=tmp_path / "cache",
            compression="gzip",
            lock_timeout=5,
            upload_chunk_size=4096,
        )

        config.save(config_path)
        loaded = CacheConfig.load(config_path)

        assert loaded == config

    def test_load_missing_file(self, tmp_path):
        """Test that a missing file gives defaults."""
        assert CacheConfig.load(tmp_path / "absent.json") == CacheConfig()

    def test_load_unknown_key(self, tmp_path):
        """Test that unknown keys in the file are rejected."""
        config_path = tmp_path / "config.json"
        config_path.write_text('{"cache_dir": "/c", "ttl": 5}')

        with pytest.raises(ValueError, match="ttl"):
            CacheConfig.load(config_path)

    def test_to_dict(self, tmp_path):
        """Test that paths are serialized as strings."""
        data = CacheConfig(cache_dir=tmp_path).to_dict()

        assert data["cache_dir"] == str(tmp_path)
        assert data["workspace"] is None


class TestFromEnv:
    """Test configuration from environment variables."""

    def test_all_variables(self, monkeypatch, tmp_path):
        """Test that each variable sets its field."""
        monkeypatch.setenv("ARCHIVECACHE_DIR", str(tmp_path / "cache"))
        monkeypatch.setenv("ARCHIVECACHE_REMOTE_URL", "s3://bucket/cache")
        monkeypatch.setenv("ARCHIVECACHE_WORKSPACE", str(tmp_path / "ws"))
        monkeypatch.setenv("ARCHIVECACHE_TEMP_DIR", str(tmp_path / "tmp"))
        monkeypatch.setenv("ARCHIVECACHE_COMPRESSION", "GZIP")
        monkeypatch.setenv("ARCHIVECACHE_USE_LOCK", "false")
        monkeypatch.setenv("ARCHIVECACHE_LOCK_TIMEOUT", "2.5")
        monkeypatch.setenv("ARCHIVECACHE_UPLOAD_CHUNK_SIZE", "1048576")

        config = CacheConfig.from_env()

        assert config.cache_dir == tmp_path / "cache"
        assert config.remote_url == "s3://bucket/cache"
        assert config.workspace == tmp_path / "ws"
        assert config.temp_dir == tmp_path / "tmp"
        assert config.compression == "gzip"
        assert config.use_lock is False
        assert config.lock_timeout == 2.5
        assert config.upload_chunk_size == 1048576

    def test_env_overrides_base(self, monkeypatch):
        """Test that the environment wins over a base config."""
        monkeypatch.setenv("ARCHIVECACHE_COMPRESSION", "gzip")
        base = CacheConfig(compression="zstd", lock_timeout=7)

        config = CacheConfig.from_env(base)

        assert config.compression == "gzip"
        assert config.lock_timeout == 7
        assert base.compression == "zstd"


class TestGlobalConfig:
    """Test the global configuration."""

    def test_set_and_get(self):
        """Test that set_global_config replaces the global instance."""
        config = CacheConfig(compression="gzip")
        set_global_config(config)

        assert get_global_config() is config

    def test_loaded_from_environment(self, monkeypatch, tmp_path):
        """Test that the global config picks up environment variables."""
        monkeypatch.setenv("ARCHIVECACHE_DIR", str(tmp_path))

        assert get_global_config().cache_dir == tmp_path
