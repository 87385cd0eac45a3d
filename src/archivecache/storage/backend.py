"""Storage backend for handling archive file operations.

This module provides abstraction for file system operations, supporting both
local and cloud storage (via cloudfiles).
"""

import shutil
from pathlib import Path
from typing import Any, Union

from archivecache.utils import is_cloud_path, split_cloud_path


def _cloud_files(path: str):
    """Open a CloudFiles handle on the parent of ``path``.

    Returns:
        Tuple of (CloudFiles, filename)
    """
    from cloudfiles import CloudFiles

    dir_path, filename = split_cloud_path(path)
    cf = CloudFiles(dir_path) if dir_path else CloudFiles(path)
    return cf, filename


class StorageBackend:
    """Handles all file I/O operations for cache archives.

    Provides unified interface for local and cloud storage operations including:
    - File system operations (exists, mkdir, join_paths, copy, size)
    - Moving archives between local disk and cloud storage
    - JSON I/O for configuration files

    Examples:
        >>> storage = StorageBackend()
        >>> storage.write_json('/path/to/config.json', {'key': 'value'})
        >>> data = storage.read_json('/path/to/config.json')
    """

    def exists(self, path: str) -> bool:
        """Check if a file exists (local or cloud).

        Args:
            path: Path to check

        Returns:
            True if path exists

        Examples:
            >>> storage = StorageBackend()
            >>> storage.exists('/path/to/cache/deps-abc.tar.zst')
            True
        """
        if is_cloud_path(path):
            cf, filename = _cloud_files(path)
            return bool(cf.exists(filename))
        else:
            return Path(path).exists()

    def mkdir(self, path: str, parents: bool = True, exist_ok: bool = True) -> None:
        """Create a directory (local or cloud).

        Args:
            path: Directory path to create
            parents: Create parent directories if needed
            exist_ok: Don't error if directory exists

        Examples:
            >>> storage = StorageBackend()
            >>> storage.mkdir('/path/to/dir')
        """
        if is_cloud_path(path):
            # Cloud storage is object-based, no need to create directories
            # They're created implicitly when you write files
            pass
        else:
            Path(path).mkdir(parents=parents, exist_ok=exist_ok)

    def join_paths(self, *parts: str) -> str:
        """Join path components (local or cloud).

        Args:
            *parts: Path components to join

        Returns:
            Joined path string

        Examples:
            >>> storage = StorageBackend()
            >>> storage.join_paths('path', 'to', 'file.txt')
            'path/to/file.txt'
        """
        if any(is_cloud_path(str(p)) for p in parts):
            # Cloud path - use forward slashes
            return "/".join(str(p).rstrip("/") for p in parts)
        else:
            # Local path
            return str(Path(*parts))

    def delete_file(self, path: str) -> None:
        """Delete a file (local or cloud).

        A local file that does not exist is ignored.

        Args:
            path: File path to delete

        Examples:
            >>> storage = StorageBackend()
            >>> storage.delete_file('/path/to/cache/deps-abc.tar.zst')
        """
        if is_cloud_path(path):
            cf, filename = _cloud_files(path)
            cf.delete(filename)
        else:
            path_obj = Path(path)
            if path_obj.exists():
                path_obj.unlink()

    def copy_file(self, src: Union[str, Path], dst: str) -> None:
        """Copy a file (local to local/cloud).

        The source is copied, never moved, so it stays intact if the copy
        fails midway.

        Args:
            src: Source file path (local)
            dst: Destination path (local or cloud)

        Examples:
            >>> storage = StorageBackend()
            >>> storage.copy_file('/tmp/cache.tzst', 's3://bucket/cache/deps.tar.zst')
        """
        if is_cloud_path(dst):
            with open(src, "rb") as f:
                content = f.read()
            cf, filename = _cloud_files(dst)
            cf.put(filename, content, compress=None)
        else:
            shutil.copyfile(src, dst)

    def download_file(self, src: str, dst: Union[str, Path]) -> None:
        """Copy a file (local/cloud to local).

        Args:
            src: Source path (local or cloud)
            dst: Destination file path (local)

        Raises:
            FileNotFoundError: If the cloud object does not exist
        """
        if is_cloud_path(src):
            cf, filename = _cloud_files(src)
            content = cf.get(filename)
            if content is None:
                raise FileNotFoundError(f"Remote file not found: {src}")
            with open(dst, "wb") as f:
                f.write(content)
        else:
            shutil.copyfile(src, dst)

    def get_size(self, path: str) -> int:
        """Get file size in bytes (local or cloud).

        Raises:
            FileNotFoundError: If the file does not exist
        """
        if is_cloud_path(path):
            cf, filename = _cloud_files(path)
            size = cf.size(filename)
            if size is None:
                raise FileNotFoundError(f"Remote file not found: {path}")
            return size
        else:
            return Path(path).stat().st_size

    # =========================================================================
    # JSON I/O
    # =========================================================================

    def write_json(self, path: str, data: Any) -> None:
        """Write JSON data to file (local or cloud).

        Args:
            path: File path
            data: Data to serialize

        Examples:
            >>> storage = StorageBackend()
            >>> storage.write_json('/path/to/data.json', {'key': 'value'})
        """
        import orjson

        content = orjson.dumps(data, option=orjson.OPT_INDENT_2)

        if is_cloud_path(path):
            cf, filename = _cloud_files(path)
            cf.put(filename, content)
        else:
            with open(path, "wb") as f:
                f.write(content)

    def read_json(self, path: str) -> Any:
        """Read JSON data from file (local or cloud).

        Args:
            path: File path

        Returns:
            Deserialized data

        Examples:
            >>> storage = StorageBackend()
            >>> data = storage.read_json('/path/to/data.json')
        """
        import orjson

        if is_cloud_path(path):
            cf, filename = _cloud_files(path)
            content = cf.get(filename)
            return orjson.loads(content)
        else:
            with open(path, "rb") as f:
                return orjson.loads(f.read())
