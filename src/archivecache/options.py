"""Options passed through restore and save calls."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class DownloadOptions:
    """Options for restoring a cache.

    Attributes:
        lookup_only: Report the matching key without extracting the archive
    """

    lookup_only: bool = False


@dataclass
class UploadOptions:
    """Options for saving a cache.

    Attributes:
        upload_chunk_size: Chunk size hint for remote backends that upload in parts
        archive_size_bytes: Set by the save pipeline to the built archive's size
    """

    upload_chunk_size: Optional[int] = None
    archive_size_bytes: Optional[int] = None
