"""Filesystem helpers used while building and restoring archives."""

import glob
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from archivecache.archive.compression import CompressionMethod

logger = logging.getLogger(__name__)

TEMP_DIR_PREFIX = "archivecache-"


def get_cache_file_name(compression_method: str) -> str:
    """Get the name of the temporary archive built during a save.

    Examples:
        >>> get_cache_file_name('zstd')
        'cache.tzst'
        >>> get_cache_file_name('gzip')
        'cache.tgz'
    """
    return "cache.tzst" if compression_method == CompressionMethod.ZSTD else "cache.tgz"


def _expand_pattern(pattern: str, workspace: Path) -> List[str]:
    """Expand one glob pattern into the existing paths it matches."""
    expanded = os.path.expanduser(pattern)
    if not os.path.isabs(expanded):
        expanded = os.path.join(workspace, expanded)
    # Trailing separators would make glob only match directories with a slash
    expanded = expanded.rstrip("/\\") or expanded
    return sorted(glob.glob(expanded, recursive=True))


def _is_excluded(path: str, excluded: Sequence[str]) -> bool:
    for ex in excluded:
        if path == ex or path.startswith(ex.rstrip(os.sep) + os.sep):
            return True
    return False


def resolve_paths(
    patterns: Sequence[str], workspace: Optional[Union[str, Path]] = None
) -> List[str]:
    """Resolve path patterns into existing entries relative to the workspace.

    Patterns support ``*``, ``?``, ``[...]``, ``**`` (recursive) and a
    leading ``~``. Patterns starting with ``!`` exclude their matches (and
    anything below them). Blank lines and ``#`` comments are ignored.

    Args:
        patterns: Path patterns given by the caller
        workspace: Base directory for relative patterns (default: cwd)

    Returns:
        Deduplicated POSIX-style paths relative to the workspace, in the
        order they were matched
    """
    workspace = Path(workspace or os.getcwd()).resolve()
    included: List[str] = []
    excluded: List[str] = []

    for raw in patterns:
        pattern = raw.strip()
        if not pattern or pattern.startswith("#"):
            continue
        if pattern.startswith("!"):
            excluded.extend(_expand_pattern(pattern[1:].strip(), workspace))
        else:
            included.extend(_expand_pattern(pattern, workspace))

    resolved: List[str] = []
    seen = set()
    for match in included:
        if _is_excluded(match, excluded):
            continue
        relative = Path(os.path.relpath(match, workspace)).as_posix()
        if relative in seen:
            continue
        seen.add(relative)
        resolved.append(relative)

    logger.debug(f"Resolved {len(resolved)} path(s) from {len(patterns)} pattern(s)")
    return resolved


def get_archive_file_size(path: Union[str, Path]) -> int:
    """Get the size of an archive in bytes."""
    return os.path.getsize(path)


def unlink_file(path: Union[str, Path]) -> None:
    """Delete a file, ignoring one that is already gone.

    Failures are logged at debug level and never raised.
    """
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug(f"Failed to delete file {path}: {e}")


def create_temp_directory(base_dir: Optional[Union[str, Path]] = None) -> Path:
    """Create a uniquely named temporary directory.

    Args:
        base_dir: Parent directory (default: the system temp directory)

    Returns:
        Path to the new directory
    """
    if base_dir is not None:
        Path(base_dir).mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX, dir=base_dir))


@contextmanager
def temporary_directory(base_dir: Optional[Union[str, Path]] = None) -> Iterator[Path]:
    """Create a temporary directory that is removed on every exit path.

    Failures while removing it are logged at debug level and never raised,
    so they cannot mask the outcome of the block.

    Args:
        base_dir: Parent directory (default: the system temp directory)

    Yields:
        Path to the temporary directory
    """
    temp_dir = create_temp_directory(base_dir)
    try:
        yield temp_dir
    finally:
        try:
            shutil.rmtree(temp_dir)
        except OSError as e:
            logger.debug(f"Failed to delete temporary directory {temp_dir}: {e}")
