"""Remote cache backends.

A remote backend is used whenever no local cache directory is given. Any
object with ``restore_cache`` and ``save_cache`` methods matching
:class:`RemoteCacheBackend` can be installed with :func:`set_remote_backend`;
by default one is built from ``CacheConfig.remote_url``.
"""

import logging
from typing import Optional, Sequence

from typing_extensions import Protocol

from archivecache.cache.config import CacheConfig, get_global_config
from archivecache.cache.manager import ArchiveCacheManager
from archivecache.exceptions import RemoteBackendNotConfiguredError
from archivecache.options import DownloadOptions, UploadOptions

logger = logging.getLogger(__name__)


class RemoteCacheBackend(Protocol):
    """Remote save/restore capability."""

    def restore_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str],
        options: Optional[DownloadOptions] = None,
        enable_cross_os_archive: bool = False,
    ) -> Optional[str]: ...

    def save_cache(
        self,
        paths: Sequence[str],
        key: str,
        options: Optional[UploadOptions] = None,
        enable_cross_os_archive: bool = False,
    ) -> int: ...


class CloudFilesCacheBackend:
    """Remote backend storing archives in object storage through cloudfiles.

    Uses the same archive layout as a local cache directory, at a cloud
    location such as ``gs://bucket/cache`` or ``s3://bucket/cache``.

    Examples:
        >>> backend = CloudFilesCacheBackend('gs://my-bucket/ci-cache')
        >>> backend.restore_cache(['node_modules'], 'npm-abc123', ['npm-'])
        'npm-abc123'
    """

    def __init__(self, remote_url: str, config: Optional[CacheConfig] = None):
        self.remote_url = remote_url
        self.manager = ArchiveCacheManager(remote_url, config)

    def restore_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str],
        options: Optional[DownloadOptions] = None,
        enable_cross_os_archive: bool = False,
    ) -> Optional[str]:
        lookup_only = options.lookup_only if options else False
        try:
            return self.manager.restore(
                paths,
                primary_key,
                restore_keys,
                lookup_only=lookup_only,
                enable_cross_os_archive=enable_cross_os_archive,
            )
        except Exception as e:
            logger.warning(f"Failed to restore cache from {self.remote_url}: {e}")
        return None

    def save_cache(
        self,
        paths: Sequence[str],
        key: str,
        options: Optional[UploadOptions] = None,
        enable_cross_os_archive: bool = False,
    ) -> int:
        # cloudfiles uploads each archive as one object; the chunk size is
        # only meaningful to backends that upload in parts
        try:
            return self.manager.save(
                paths,
                key,
                options=options,
                enable_cross_os_archive=enable_cross_os_archive,
            )
        except Exception as e:
            logger.warning(f"Failed to save cache to {self.remote_url}: {e}")
        return -1


# Process-wide remote backend override
_remote_backend: Optional[RemoteCacheBackend] = None


def get_remote_backend(config: Optional[CacheConfig] = None) -> RemoteCacheBackend:
    """Get the remote backend to delegate to.

    Args:
        config: Cache configuration (uses global if None)

    Returns:
        The installed backend, or a CloudFilesCacheBackend for ``remote_url``

    Raises:
        RemoteBackendNotConfiguredError: If there is neither
    """
    if _remote_backend is not None:
        return _remote_backend

    config = config or get_global_config()
    if not config.remote_url:
        raise RemoteBackendNotConfiguredError(
            "No cache directory given and no remote backend configured "
            "(set ARCHIVECACHE_REMOTE_URL or call set_remote_backend)"
        )
    return CloudFilesCacheBackend(config.remote_url, config)


def set_remote_backend(backend: Optional[RemoteCacheBackend]) -> None:
    """Install a remote backend for this process.

    Args:
        backend: Backend to use, or None to go back to ``remote_url``
    """
    global _remote_backend
    _remote_backend = backend
