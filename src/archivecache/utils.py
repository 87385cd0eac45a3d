"""Utility functions for archivecache."""

from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

CLOUD_PREFIXES = (
    "s3://",
    "gs://",
    "gcs://",
    "az://",
    "azure://",
    "https://",
    "http://",
    "file://",
    "mem://",
)


def is_cloud_path(path: Union[str, Path, None]) -> bool:
    """Check if a path is a cloud storage path.

    Args:
        path: Path to check

    Returns:
        True if path starts with cloud storage protocol

    Examples:
        >>> is_cloud_path('s3://bucket/cache')
        True
        >>> is_cloud_path('/local/path/cache')
        False
        >>> is_cloud_path('gs://bucket/cache')
        True
    """
    if path is None:
        return False
    return str(path).startswith(CLOUD_PREFIXES)


def split_cloud_path(path: str) -> Tuple[str, str]:
    """Split a cloud path into its directory and final component.

    Examples:
        >>> split_cloud_path('gs://bucket/cache/deps.tar.zst')
        ('gs://bucket/cache', 'deps.tar.zst')
    """
    parts = path.rsplit("/", 1)
    if len(parts) == 2:
        return parts[0], parts[1]
    return "", parts[0]


def parse_list_input(values: Optional[Iterable[str]]) -> List[str]:
    """Flatten multi-line list inputs into a list of non-empty strings.

    Each value may itself hold several newline-separated entries, as with
    multi-line workflow inputs.

    Examples:
        >>> parse_list_input(['node_modules\\n~/.npm', '', 'dist'])
        ['node_modules', '~/.npm', 'dist']
    """
    if not values:
        return []
    result = []
    for value in values:
        for line in value.splitlines():
            line = line.strip()
            if line:
                result.append(line)
    return result


def is_exact_key_match(key: str, cache_key: Optional[str]) -> bool:
    """Check whether a restored key is the primary key (case-insensitive).

    Examples:
        >>> is_exact_key_match('Linux-deps', 'linux-deps')
        True
        >>> is_exact_key_match('linux-deps', 'linux-')
        False
    """
    return bool(cache_key) and key.casefold() == cache_key.casefold()


def format_size(size_bytes: int) -> str:
    """Format an archive size the way it is logged.

    Examples:
        >>> format_size(3 * 1024 * 1024)
        '~3 MB (3145728 B)'
    """
    return f"~{round(size_bytes / (1024 * 1024))} MB ({size_bytes} B)"
