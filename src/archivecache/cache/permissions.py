"""Ownership normalization for the local cache directory."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Union

from archivecache.exceptions import CachePermissionError

logger = logging.getLogger(__name__)


def grant_permission(directory: Union[str, Path]) -> None:
    """Change ownership of a directory tree to the current user.

    The cache directory may be a volume mounted with a foreign owner, so this
    runs ``sudo chown -R`` on every local cache operation instead of checking
    ownership first. The exit code is checked explicitly, so a directory
    that does not exist (chown fails on it) fails the operation.

    Args:
        directory: Directory to take ownership of

    Raises:
        CachePermissionError: If chown exits non-zero or cannot be run
    """
    directory = Path(directory).expanduser()
    owner = f"{os.getuid()}:{os.getgid()}"
    command = ["sudo", "chown", "-R", owner, str(directory)]
    logger.debug(f"Changing ownership of {directory} to {owner}")

    try:
        result = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as e:
        raise CachePermissionError(
            f"Changing ownership of {directory} failed: {e}"
        ) from e

    if result.returncode != 0:
        if result.stderr:
            logger.debug(f"chown stderr: {result.stderr.strip()}")
        raise CachePermissionError(
            f"Changing ownership of {directory} exited with code {result.returncode}",
            exit_code=result.returncode,
        )
