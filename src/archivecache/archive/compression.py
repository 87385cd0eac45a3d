"""Compression method selection and cache version derivation."""

import hashlib
import sys
from enum import Enum
from typing import Optional, Sequence

# Bumped when the archive layout changes so old archives stop matching
VERSION_SALT = "1.0"


class CompressionMethod(str, Enum):
    """Compression applied to cache archives."""

    GZIP = "gzip"
    ZSTD = "zstd"


def resolve_compression_method(preferred: Optional[str] = None) -> CompressionMethod:
    """Resolve the compression method to use.

    Args:
        preferred: Method name from configuration (default: zstd)

    Returns:
        CompressionMethod

    Raises:
        ValueError: If the method is not supported

    Examples:
        >>> resolve_compression_method('gzip')
        <CompressionMethod.GZIP: 'gzip'>
    """
    if not preferred:
        return CompressionMethod.ZSTD
    try:
        return CompressionMethod(preferred.lower())
    except ValueError:
        supported = ", ".join(m.value for m in CompressionMethod)
        raise ValueError(
            f"Unsupported compression method: {preferred} (expected one of {supported})"
        ) from None


def get_cache_version(
    paths: Sequence[str],
    compression_method: Optional[str] = None,
    enable_cross_os_archive: bool = False,
) -> str:
    """Derive the cache version for a set of paths.

    The version changes whenever the paths, the compression method or the
    platform restriction change, so archives built in a different
    environment are never restored.

    Args:
        paths: Path patterns exactly as given by the caller
        compression_method: Compression method identifier
        enable_cross_os_archive: Allow archives made on Windows to be used
            elsewhere and vice versa

    Returns:
        Hex SHA-256 digest
    """
    components = list(paths)
    if isinstance(compression_method, CompressionMethod):
        compression_method = compression_method.value
    if compression_method:
        components.append(compression_method)
    if sys.platform == "win32" and not enable_cross_os_archive:
        components.append("windows-only")
    components.append(VERSION_SALT)

    return hashlib.sha256("|".join(components).encode("utf-8")).hexdigest()
