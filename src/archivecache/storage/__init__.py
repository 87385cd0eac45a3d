"""Storage backend for archive file operations.

This module provides abstraction for file system operations,
supporting both local and cloud storage.
"""

from archivecache.storage.backend import StorageBackend

__all__ = ["StorageBackend"]
