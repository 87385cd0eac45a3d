"""Cache manager for storing and restoring path archives in a cache directory."""

import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence, Union

from filelock import FileLock, Timeout

from archivecache.archive import (
    create_tar,
    extract_tar,
    get_archive_file_size,
    get_cache_file_name,
    get_cache_version,
    list_tar,
    resolve_compression_method,
    resolve_paths,
    temporary_directory,
    unlink_file,
)
from archivecache.cache.config import CacheConfig, get_global_config
from archivecache.cache.naming import get_cache_filename
from archivecache.cache.permissions import grant_permission
from archivecache.cache.validation import (
    validate_key,
    validate_key_count,
    validate_paths,
)
from archivecache.exceptions import (
    CacheError,
    CacheLockError,
    CachePermissionError,
    PathValidationError,
)
from archivecache.options import UploadOptions
from archivecache.storage.backend import StorageBackend
from archivecache.utils import format_size, is_cloud_path

logger = logging.getLogger(__name__)


class ArchiveCacheManager:
    """Stores and restores archives of filesystem paths in a cache directory.

    Archives live directly in the cache directory as
    ``{sanitized_key}-{version}.tar.zst`` (or ``.tar.gz``); the existence of
    that file is the only index. The directory may also be a cloud location,
    in which case ownership normalization and locking are skipped and
    archives are transferred through ``cloudfiles``.

    Methods raise :class:`~archivecache.exceptions.CacheError` subclasses;
    the best-effort conversion to ``None``/``-1`` happens in
    :mod:`archivecache.api`.
    """

    def __init__(
        self,
        cache_dir: Union[str, Path],
        config: Optional[CacheConfig] = None,
        storage: Optional[StorageBackend] = None,
    ):
        """Initialize cache manager.

        Args:
            cache_dir: Local cache directory or cloud location
            config: Cache configuration (uses global if None)
            storage: Storage backend (default: StorageBackend())
        """
        self.config = config or get_global_config()
        self.is_remote = is_cloud_path(cache_dir)
        if self.is_remote:
            self.cache_dir = str(cache_dir).rstrip("/")
        else:
            self.cache_dir = str(Path(cache_dir).expanduser())
        self.storage = storage or StorageBackend()

    @property
    def workspace(self) -> Path:
        """Directory archives are built from and extracted into."""
        return Path(self.config.workspace or os.getcwd())

    def get_archive_path(self, key: str, version: str, compression_method: str) -> str:
        """Get the archive path for a key.

        Args:
            key: Cache key
            version: Cache version
            compression_method: Compression method identifier

        Returns:
            Path of the archive inside the cache directory
        """
        filename = get_cache_filename(key, version, compression_method)
        return self.storage.join_paths(self.cache_dir, filename)

    def _grant_permission(self) -> None:
        if not self.is_remote:
            grant_permission(self.cache_dir)

    def _ensure_cache_dir(self) -> None:
        try:
            self.storage.mkdir(self.cache_dir, parents=True, exist_ok=True)
        except PermissionError as e:
            raise CachePermissionError(
                f"Cannot create cache directory {self.cache_dir}: {e}"
            ) from e

    @contextmanager
    def _lock(self, archive_path: str) -> Iterator[None]:
        """Hold the advisory lock for an archive (local caches only)."""
        if self.is_remote or not self.config.use_lock:
            yield
            return

        timeout = self.config.lock_timeout
        try:
            with FileLock(f"{archive_path}.lock", timeout=timeout):
                yield
        except Timeout as e:
            raise CacheLockError(
                f"Timeout acquiring lock for {archive_path} after {timeout} seconds"
            ) from e

    def restore(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Optional[Sequence[str]] = None,
        lookup_only: bool = False,
        enable_cross_os_archive: bool = False,
    ) -> Optional[str]:
        """Restore the first archive found for the candidate keys.

        Candidate keys are the primary key followed by the restore keys in the
        given order; the first one with an archive wins.

        Args:
            paths: Path patterns the archive was saved with
            primary_key: Key tried first
            restore_keys: Fallback keys, tried in order
            lookup_only: Return the matching key without extracting
            enable_cross_os_archive: Match archives across operating systems

        Returns:
            The matched key, or None on a cache miss

        Raises:
            CachePermissionError: If taking ownership of the directory fails
            PathValidationError: If no paths were given
            KeyValidationError: If a key is invalid or more than 10 keys are given
            ArchiveError: If extraction fails
            CacheLockError: If the archive lock cannot be acquired
        """
        self._grant_permission()
        validate_paths(paths)

        keys = [primary_key, *(restore_keys or [])]
        logger.debug(f"Resolved Keys: {keys}")
        validate_key_count(keys)
        for key in keys:
            validate_key(key)

        compression_method = resolve_compression_method(self.config.compression)
        version = get_cache_version(paths, compression_method, enable_cross_os_archive)

        self._ensure_cache_dir()

        for key in keys:
            archive_path = self.get_archive_path(key, version, compression_method)
            logger.debug(f"Checking for cache file: {archive_path}")
            if not self.storage.exists(archive_path):
                continue

            logger.info(f"Cache hit for key: {key}")
            if lookup_only:
                logger.info("Lookup only - skipping extraction")
                return key

            self._extract(archive_path, compression_method)
            logger.info("Cache restored successfully")
            return key

        logger.info(f"Cache not found for input keys: {', '.join(keys)}")
        return None

    def _extract(self, archive_path: str, compression_method: str) -> None:
        if not self.is_remote:
            with self._lock(archive_path):
                size = self.storage.get_size(archive_path)
                logger.info(f"Cache Size: {format_size(size)}")
                extract_tar(archive_path, compression_method, self.workspace)
            return

        with temporary_directory(self.config.temp_dir) as temp_dir:
            local_path = temp_dir / get_cache_file_name(compression_method)
            self.storage.download_file(archive_path, local_path)
            logger.info(f"Cache Size: {format_size(get_archive_file_size(local_path))}")
            extract_tar(local_path, compression_method, self.workspace)

    def _copy_into_cache(self, archive_path: Path, dest_path: str) -> None:
        """Copy an archive into the cache, removing a partial copy on failure."""
        try:
            self.storage.copy_file(archive_path, dest_path)
        except OSError as e:
            logger.error(f"OS error writing cache file: {e}")
            try:
                self.storage.delete_file(dest_path)
            except Exception as cleanup_error:
                logger.warning(
                    f"Failed to clean up partial cache file {dest_path}: {cleanup_error}"
                )
            raise CacheError(f"Cannot write cache file {dest_path}: {e}") from e

    def save(
        self,
        paths: Sequence[str],
        key: str,
        options: Optional[UploadOptions] = None,
        enable_cross_os_archive: bool = False,
    ) -> int:
        """Archive paths and store the archive under a key.

        The archive is built in a temporary directory, then copied into the
        cache directory. The temporary directory is removed on every exit
        path.

        Args:
            paths: Path patterns to archive (relative to the workspace)
            key: Cache key
            options: Upload options; ``archive_size_bytes`` is filled in
            enable_cross_os_archive: Make the archive usable across operating systems

        Returns:
            Cache id (milliseconds since the epoch)

        Raises:
            CachePermissionError: If taking ownership of the directory fails
            PathValidationError: If no paths were given or none exist
            KeyValidationError: If the key is invalid
            ArchiveError: If the archive cannot be built
            CacheLockError: If the archive lock cannot be acquired
        """
        self._grant_permission()
        validate_paths(paths)
        validate_key(key)

        compression_method = resolve_compression_method(self.config.compression)
        cache_paths = resolve_paths(paths, self.workspace)
        logger.debug(f"Cache Paths: {cache_paths}")
        if not cache_paths:
            raise PathValidationError(
                "Path Validation Error: Path(s) specified for caching do(es) not exist, "
                "hence no cache is being saved."
            )

        version = get_cache_version(paths, compression_method, enable_cross_os_archive)

        self._ensure_cache_dir()

        dest_filename = get_cache_filename(key, version, compression_method)
        dest_path = self.storage.join_paths(self.cache_dir, dest_filename)

        with temporary_directory(self.config.temp_dir) as temp_dir:
            archive_path = temp_dir / get_cache_file_name(compression_method)
            try:
                create_tar(temp_dir, cache_paths, compression_method, self.workspace)
                logger.debug(f"Archive Path: {archive_path}")
                if logger.isEnabledFor(logging.DEBUG):
                    list_tar(archive_path, compression_method)

                archive_size = get_archive_file_size(archive_path)
                logger.info(f"Cache Archive Size: {format_size(archive_size)}")
                if options is not None:
                    options.archive_size_bytes = archive_size

                logger.debug(f"Saving cache to: {dest_path}")
                with self._lock(dest_path):
                    self._copy_into_cache(archive_path, dest_path)
            finally:
                unlink_file(archive_path)

        logger.info(f"Cache saved successfully: {dest_filename}")
        return int(time.time() * 1000)
