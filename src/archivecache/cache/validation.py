"""Validation of cache paths and keys.

These checks run before any filesystem mutation so an invalid request never
partially executes.
"""

import re
from typing import Optional, Sequence

from archivecache.exceptions import KeyValidationError, PathValidationError

MAX_KEY_LENGTH = 512
MAX_KEY_COUNT = 10

_NO_COMMA = re.compile(r"^[^,]*$")


def validate_paths(paths: Optional[Sequence[str]]) -> None:
    """Check that at least one path was given.

    Existence on disk is not checked here; saving checks it after resolving
    the paths.

    Raises:
        PathValidationError: If ``paths`` is None or empty
    """
    if not paths:
        raise PathValidationError(
            "Path Validation Error: At least one directory or file path is required"
        )


def validate_key(key: str) -> None:
    """Check key length and that it contains no commas.

    Raises:
        KeyValidationError: If the key is longer than 512 characters or
            contains a comma
    """
    if len(key) > MAX_KEY_LENGTH:
        raise KeyValidationError(
            f"Key Validation Error: {key} cannot be larger than {MAX_KEY_LENGTH} characters."
        )
    if not _NO_COMMA.match(key):
        raise KeyValidationError(f"Key Validation Error: {key} cannot contain commas.")


def validate_key_count(keys: Sequence[str]) -> None:
    """Check the number of candidate keys (primary plus restore keys).

    Raises:
        KeyValidationError: If more than 10 keys are given
    """
    if len(keys) > MAX_KEY_COUNT:
        raise KeyValidationError(
            f"Key Validation Error: Keys are limited to a maximum of {MAX_KEY_COUNT}."
        )
