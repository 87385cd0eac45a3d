"""Exceptions raised by archivecache.

Internal layers raise these; the public ``restore_cache``/``save_cache``
functions convert them into ``None``/``-1`` and a warning.
"""

from typing import Optional


class CacheError(Exception):
    """Base exception for cache-related errors."""

    pass


class CacheValidationError(CacheError):
    """Base exception for request validation errors."""

    pass


class PathValidationError(CacheValidationError):
    """Raised when no paths were given, or none of them exist when saving."""

    pass


class KeyValidationError(CacheValidationError):
    """Raised when a key is too long, contains a comma, or too many keys are given."""

    pass


class CachePermissionError(CacheError):
    """Raised when the cache directory ownership could not be changed."""

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code


class CacheLockError(CacheError):
    """Raised when unable to acquire the archive lock."""

    pass


class ArchiveError(CacheError):
    """Raised when an archive cannot be created, read or extracted."""

    pass


class RemoteBackendNotConfiguredError(CacheError):
    """Raised when no cache directory was given and no remote backend is set up."""

    pass
