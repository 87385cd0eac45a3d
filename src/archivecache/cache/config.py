"""Cache configuration management."""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

from archivecache.storage.backend import StorageBackend

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "archivecache" / "config.json"

_PATH_FIELDS = ("cache_dir", "workspace", "temp_dir")


@dataclass
class CacheConfig:
    """Configuration for the archive cache.

    Attributes:
        cache_dir: Local cache directory. None means the remote backend is used
            unless a directory is passed per call.
        remote_url: Cloud location (gs://, s3://, file://, ...) used as the
            remote backend when no cache directory is given
        workspace: Directory archives are built from and extracted into
            (None = current working directory)
        temp_dir: Parent of the per-save temporary directories (None = system temp)
        compression: Compression method ('zstd' or 'gzip')
        use_lock: Hold an advisory file lock while writing or reading an archive
        lock_timeout: Seconds to wait for the archive lock
        upload_chunk_size: Chunk size forwarded to the remote backend on save
    """

    cache_dir: Optional[Path] = None
    remote_url: Optional[str] = None
    workspace: Optional[Path] = None
    temp_dir: Optional[Path] = None
    compression: str = "zstd"
    use_lock: bool = True
    lock_timeout: float = 30
    upload_chunk_size: Optional[int] = None

    def __post_init__(self):
        """Ensure directory settings are expanded Path objects."""
        for name in _PATH_FIELDS:
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, Path(value).expanduser())

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "CacheConfig":
        """Load configuration from file.

        Args:
            config_path: Path to config file. If None, uses default location.

        Returns:
            CacheConfig instance (defaults if the file does not exist)
        """
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        if not Path(config_path).exists():
            return cls()

        data = StorageBackend().read_json(str(config_path))
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(
                f"Unknown configuration keys in {config_path}: {', '.join(sorted(unknown))}"
            )

        return cls(**data)

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to file.

        Args:
            config_path: Path to config file. If None, uses default location.
        """
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        Path(config_path).parent.mkdir(parents=True, exist_ok=True)
        StorageBackend().write_json(str(config_path), self.to_dict())

    def to_dict(self) -> dict:
        """Get the configuration as JSON-compatible values."""
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = str(value) if isinstance(value, Path) else value
        return data

    @classmethod
    def from_env(cls, base: Optional["CacheConfig"] = None) -> "CacheConfig":
        """Create configuration from environment variables.

        Environment variables:
            ARCHIVECACHE_DIR: Local cache directory
            ARCHIVECACHE_REMOTE_URL: Remote cache location
            ARCHIVECACHE_WORKSPACE: Workspace directory
            ARCHIVECACHE_TEMP_DIR: Parent directory for temporary archives
            ARCHIVECACHE_COMPRESSION: Compression method (zstd/gzip)
            ARCHIVECACHE_USE_LOCK: Use advisory archive locks (true/false)
            ARCHIVECACHE_LOCK_TIMEOUT: Lock timeout in seconds
            ARCHIVECACHE_UPLOAD_CHUNK_SIZE: Upload chunk size in bytes

        Args:
            base: Configuration to start from (default: built-in defaults)

        Returns:
            CacheConfig instance
        """
        config = replace(base) if base else cls()

        if os.getenv("ARCHIVECACHE_DIR"):
            config.cache_dir = Path(os.getenv("ARCHIVECACHE_DIR")).expanduser()

        if os.getenv("ARCHIVECACHE_REMOTE_URL"):
            config.remote_url = os.getenv("ARCHIVECACHE_REMOTE_URL")

        if os.getenv("ARCHIVECACHE_WORKSPACE"):
            config.workspace = Path(os.getenv("ARCHIVECACHE_WORKSPACE")).expanduser()

        if os.getenv("ARCHIVECACHE_TEMP_DIR"):
            config.temp_dir = Path(os.getenv("ARCHIVECACHE_TEMP_DIR")).expanduser()

        if os.getenv("ARCHIVECACHE_COMPRESSION"):
            config.compression = os.getenv("ARCHIVECACHE_COMPRESSION").lower()

        if os.getenv("ARCHIVECACHE_USE_LOCK"):
            config.use_lock = os.getenv("ARCHIVECACHE_USE_LOCK", "").lower() == "true"

        if os.getenv("ARCHIVECACHE_LOCK_TIMEOUT"):
            config.lock_timeout = float(os.getenv("ARCHIVECACHE_LOCK_TIMEOUT"))

        if os.getenv("ARCHIVECACHE_UPLOAD_CHUNK_SIZE"):
            config.upload_chunk_size = int(os.getenv("ARCHIVECACHE_UPLOAD_CHUNK_SIZE"))

        return config


# Global cache configuration instance
_global_config: Optional[CacheConfig] = None


def get_global_config() -> CacheConfig:
    """Get global cache configuration.

    Returns:
        Global CacheConfig instance
    """
    global _global_config
    if _global_config is None:
        # File settings first, environment variables override them
        _global_config = CacheConfig.from_env(CacheConfig.load())
    return _global_config


def set_global_config(config: Optional[CacheConfig]) -> None:
    """Set global cache configuration.

    Args:
        config: CacheConfig instance to use globally (None to reload on next use)
    """
    global _global_config
    _global_config = config
