"""archivecache: Key-addressed archive cache for build paths on local disk."""

__version__ = "0.1.0"

from archivecache.api import restore_cache, save_cache
from archivecache.cache import ArchiveCacheManager, CacheConfig
from archivecache.options import DownloadOptions, UploadOptions

__all__ = [
    "restore_cache",
    "save_cache",
    "ArchiveCacheManager",
    "CacheConfig",
    "DownloadOptions",
    "UploadOptions",
    "__version__",
]
