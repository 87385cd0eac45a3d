"""Remote cache backends used when no local cache directory is given."""

from archivecache.remote.backend import (
    CloudFilesCacheBackend,
    RemoteCacheBackend,
    get_remote_backend,
    set_remote_backend,
)

__all__ = [
    "RemoteCacheBackend",
    "CloudFilesCacheBackend",
    "get_remote_backend",
    "set_remote_backend",
]
