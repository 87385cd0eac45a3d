"""Archive codec: compression selection, versioning and tar handling."""

from archivecache.archive.compression import (
    CompressionMethod,
    get_cache_version,
    resolve_compression_method,
)
from archivecache.archive.tar import create_tar, extract_tar, list_tar
from archivecache.archive.utils import (
    create_temp_directory,
    get_archive_file_size,
    get_cache_file_name,
    resolve_paths,
    temporary_directory,
    unlink_file,
)

__all__ = [
    "CompressionMethod",
    "get_cache_version",
    "resolve_compression_method",
    "create_tar",
    "extract_tar",
    "list_tar",
    "create_temp_directory",
    "get_archive_file_size",
    "get_cache_file_name",
    "resolve_paths",
    "temporary_directory",
    "unlink_file",
]
