"""Mapping from cache keys to archive filenames."""

import re

from archivecache.archive.compression import CompressionMethod

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


def sanitize_key(key: str) -> str:
    """Replace every character outside ``[A-Za-z0-9-_]`` with ``_``.

    Distinct keys can sanitize to the same string (``a.b`` and ``a/b`` both
    become ``a_b``) and then share an archive when their versions match.

    Examples:
        >>> sanitize_key('npm-linux-x64/v1.2')
        'npm-linux-x64_v1_2'
    """
    return _UNSAFE_KEY_CHARS.sub("_", key)


def get_cache_filename(key: str, version: str, compression_method: str) -> str:
    """Get the archive filename for a key.

    Args:
        key: Cache key (sanitized here; the version is used as-is)
        version: Cache version derived from paths and compression
        compression_method: Compression method identifier

    Returns:
        Filename of the form ``{sanitized_key}-{version}.{ext}``

    Examples:
        >>> get_cache_filename('deps', 'abc', 'zstd')
        'deps-abc.tar.zst'
        >>> get_cache_filename('deps', 'abc', 'gzip')
        'deps-abc.tar.gz'
    """
    extension = "tar.zst" if compression_method == CompressionMethod.ZSTD else "tar.gz"
    return f"{sanitize_key(key)}-{version}.{extension}"
