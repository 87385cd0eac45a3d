"""Public restore/save entry points.

Both functions are best-effort: any failure is logged as a warning and
reported as ``None`` (restore) or ``-1`` (save), never raised.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from archivecache.cache.config import CacheConfig, get_global_config
from archivecache.cache.manager import ArchiveCacheManager
from archivecache.options import DownloadOptions, UploadOptions
from archivecache.remote.backend import get_remote_backend

logger = logging.getLogger(__name__)


def restore_cache(
    paths: Sequence[str],
    primary_key: str,
    restore_keys: Optional[Sequence[str]] = None,
    options: Optional[DownloadOptions] = None,
    enable_cross_os_archive: bool = False,
    cache_dir: Optional[Union[str, Path]] = None,
    config: Optional[CacheConfig] = None,
) -> Optional[str]:
    """Restore a cache from the local cache directory or the remote backend.

    Args:
        paths: Paths to restore (must match the paths used when saving)
        primary_key: Key tried first
        restore_keys: Fallback keys, tried in order after the primary key
        options: Download options (``lookup_only``)
        enable_cross_os_archive: Allow archives made on another OS
        cache_dir: Local cache directory; None or empty delegates to the
            remote backend
        config: Cache configuration (uses global if None)

    Returns:
        The key that was restored, or None on a miss or any failure

    Examples:
        >>> restore_cache(['node_modules'], 'npm-abc123', ['npm-'], cache_dir='/mnt/cache')
        'npm-'
    """
    restore_keys = list(restore_keys or [])

    if not cache_dir:
        logger.info("Cache with remote backend")
        lookup_only = options.lookup_only if options else False
        try:
            backend = get_remote_backend(config)
        except Exception as e:
            logger.warning(f"Failed to restore cache: {e}")
            return None
        return backend.restore_cache(
            paths,
            primary_key,
            restore_keys,
            DownloadOptions(lookup_only=lookup_only),
            enable_cross_os_archive,
        )

    logger.info("Cache with local directory")
    try:
        manager = ArchiveCacheManager(cache_dir, config)
        return manager.restore(
            paths,
            primary_key,
            restore_keys,
            lookup_only=options.lookup_only if options else False,
            enable_cross_os_archive=enable_cross_os_archive,
        )
    except Exception as e:
        logger.warning(f"Failed to restore cache: {e}")
    return None


def save_cache(
    paths: Sequence[str],
    key: str,
    options: Optional[UploadOptions] = None,
    enable_cross_os_archive: bool = False,
    cache_dir: Optional[Union[str, Path]] = None,
    config: Optional[CacheConfig] = None,
) -> int:
    """Save paths to the local cache directory or the remote backend.

    Args:
        paths: Paths to cache (glob patterns, relative to the workspace)
        key: Cache key
        options: Upload options; ``archive_size_bytes`` is filled in for
            local saves
        enable_cross_os_archive: Make the archive restorable on another OS
        cache_dir: Local cache directory; None or empty delegates to the
            remote backend
        config: Cache configuration (uses global if None)

    Returns:
        Cache id, or -1 on any failure

    Examples:
        >>> save_cache(['node_modules'], 'npm-abc123', cache_dir='/mnt/cache')
        1718000000000
    """
    if not cache_dir:
        logger.info("Cache with remote backend")
        try:
            config = config or get_global_config()
            backend = get_remote_backend(config)
        except Exception as e:
            logger.warning(f"Failed to save cache: {e}")
            return -1
        return backend.save_cache(
            paths,
            key,
            UploadOptions(upload_chunk_size=config.upload_chunk_size),
            enable_cross_os_archive,
        )

    logger.info("Cache with local directory")
    try:
        manager = ArchiveCacheManager(cache_dir, config)
        return manager.save(
            paths,
            key,
            options=options,
            enable_cross_os_archive=enable_cross_os_archive,
        )
    except Exception as e:
        logger.warning(f"Failed to save cache: {e}")
    return -1
