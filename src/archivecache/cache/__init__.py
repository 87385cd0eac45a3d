"""Local archive cache.

Archives of filesystem paths are stored in a cache directory under a
filename derived from the cache key, so a restore only needs an existence
check per candidate key.

Key components:
- ArchiveCacheManager: Restore resolution and the save pipeline
- CacheConfig: Configuration management
- get_cache_filename: Key to archive filename mapping
- validate_*: Path and key validation
- grant_permission: Cache directory ownership normalization
"""

from archivecache.cache.config import CacheConfig, get_global_config, set_global_config
from archivecache.cache.manager import ArchiveCacheManager
from archivecache.cache.naming import get_cache_filename, sanitize_key
from archivecache.cache.permissions import grant_permission
from archivecache.cache.validation import (
    validate_key,
    validate_key_count,
    validate_paths,
)

__all__ = [
    "ArchiveCacheManager",
    "CacheConfig",
    "get_global_config",
    "set_global_config",
    "get_cache_filename",
    "sanitize_key",
    "grant_permission",
    "validate_key",
    "validate_key_count",
    "validate_paths",
]
