"""Tar archive creation, extraction and listing.

gzip archives go through :mod:`tarfile` directly; zstd archives stream the
tar through :mod:`zstandard`.

Entries are stored relative to the workspace. Paths saved from outside the
workspace (``~/.npm``, absolute paths) keep their leading ``..`` components
and are restored to the same location, as ``tar -P`` does.
"""

import logging
import os
import stat
import tarfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

import zstandard

from archivecache.archive.compression import CompressionMethod
from archivecache.archive.utils import get_cache_file_name
from archivecache.exceptions import ArchiveError

logger = logging.getLogger(__name__)

# Accept archives written by `zstd --long=30` or larger windows
ZSTD_MAX_WINDOW_SIZE = 2**31

# Mode bits dropped on extraction (same set as the stdlib "tar" filter)
_UNSAFE_MODE_BITS = (
    stat.S_ISUID | stat.S_ISGID | stat.S_ISVTX | stat.S_IWGRP | stat.S_IWOTH
)


def _add_members(
    tar: tarfile.TarFile, source_paths: Sequence[str], workspace: Path
) -> None:
    for relative in source_paths:
        tar.add(str(workspace / relative), arcname=relative)


def restore_filter(member: tarfile.TarInfo, dest_path: str) -> tarfile.TarInfo:
    """Extraction filter for archives built by :func:`create_tar`.

    Unlike the stdlib ``"tar"`` filter, members with leading ``..``
    components are allowed, because that is how entries from outside the
    workspace are stored. Absolute names are still rejected.
    """
    if member.name.startswith("/") or os.path.isabs(member.name):
        raise tarfile.AbsolutePathError(member)
    if member.mode is None:
        return member
    return member.replace(mode=member.mode & ~_UNSAFE_MODE_BITS, deep=False)


@contextmanager
def _open_for_reading(
    archive_path: Union[str, Path], compression_method: str
) -> Iterator[tarfile.TarFile]:
    if compression_method == CompressionMethod.ZSTD:
        decompressor = zstandard.ZstdDecompressor(max_window_size=ZSTD_MAX_WINDOW_SIZE)
        with open(archive_path, "rb") as fh:
            with decompressor.stream_reader(fh) as reader:
                with tarfile.open(fileobj=reader, mode="r|") as tar:
                    yield tar
    else:
        with tarfile.open(archive_path, mode="r:gz") as tar:
            yield tar


def create_tar(
    archive_folder: Union[str, Path],
    source_paths: Sequence[str],
    compression_method: str,
    workspace: Optional[Union[str, Path]] = None,
) -> Path:
    """Create a compressed tar of paths relative to the workspace.

    Args:
        archive_folder: Directory the archive is written into
        source_paths: Paths relative to the workspace (see ``resolve_paths``)
        compression_method: Compression method identifier
        workspace: Base directory of ``source_paths`` (default: cwd)

    Returns:
        Path to the created archive

    Raises:
        ArchiveError: If the archive cannot be written
    """
    workspace = Path(workspace or os.getcwd()).resolve()
    archive_path = Path(archive_folder) / get_cache_file_name(compression_method)

    try:
        if compression_method == CompressionMethod.ZSTD:
            compressor = zstandard.ZstdCompressor(threads=-1)
            with open(archive_path, "wb") as fh:
                with compressor.stream_writer(fh, closefd=False) as writer:
                    with tarfile.open(fileobj=writer, mode="w|") as tar:
                        _add_members(tar, source_paths, workspace)
        else:
            with tarfile.open(archive_path, mode="w:gz") as tar:
                _add_members(tar, source_paths, workspace)
    except (tarfile.TarError, zstandard.ZstdError) as e:
        raise ArchiveError(f"Failed to create archive {archive_path}: {e}") from e

    return archive_path


def extract_tar(
    archive_path: Union[str, Path],
    compression_method: str,
    workspace: Optional[Union[str, Path]] = None,
) -> None:
    """Extract an archive into the workspace.

    Every member is read and run through :func:`restore_filter` before
    anything is written, so an unreadable archive or a rejected member leaves
    the filesystem untouched. An OS error while writing (disk full, no
    permission) can still leave the members extracted so far in place.

    Args:
        archive_path: Archive to extract
        compression_method: Compression method the archive was built with
        workspace: Destination directory (default: cwd)

    Raises:
        ArchiveError: If the archive is corrupt or a member is rejected
    """
    workspace = Path(workspace or os.getcwd()).resolve()
    workspace.mkdir(parents=True, exist_ok=True)

    try:
        with _open_for_reading(archive_path, compression_method) as tar:
            for member in tar:
                restore_filter(member, str(workspace))

        with _open_for_reading(archive_path, compression_method) as tar:
            tar.extractall(path=workspace, filter=restore_filter)
    except (tarfile.TarError, zstandard.ZstdError) as e:
        raise ArchiveError(f"Failed to extract archive {archive_path}: {e}") from e


def list_tar(archive_path: Union[str, Path], compression_method: str) -> List[str]:
    """List member names of an archive without extracting it.

    Raises:
        ArchiveError: If the archive cannot be read
    """
    try:
        with _open_for_reading(archive_path, compression_method) as tar:
            names = [member.name for member in tar]
    except (tarfile.TarError, zstandard.ZstdError) as e:
        raise ArchiveError(f"Failed to list archive {archive_path}: {e}") from e

    for name in names:
        logger.debug(name)
    return names
