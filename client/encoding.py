# =============================================================================
# Scan to Markdown - File Encoding
# =============================================================================
# Reads a selected file into a data URL, reporting progress as it goes, and
# enforces the client-side size and type limits before anything is sent.
# =============================================================================

import base64
import logging
import mimetypes
import os
from typing import Callable, Optional

from client.errors import FileTooLargeError, UnsupportedFileTypeError
from config import DEFAULT_MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = DEFAULT_MAX_UPLOAD_BYTES

# Media types the file picker accepts: any image, or a PDF
SUPPORTED_PREFIXES = ("image/", "application/pdf")

# Multiple of 3 so each chunk base64-encodes without padding
DEFAULT_CHUNK_SIZE = 3 * 64 * 1024

ProgressCallback = Callable[[int], None]


def check_upload_size(size: int, limit: int = MAX_UPLOAD_BYTES) -> None:
    """
    Reject files larger than ``limit`` bytes.

    Args:
        size:  File size in bytes.
        limit: Largest accepted size in bytes (inclusive).

    Raises:
        FileTooLargeError: If ``size`` exceeds ``limit``.
    """
    if size > limit:
        raise FileTooLargeError(size, limit)


def guess_mime_type(path: str) -> str:
    """Media type for ``path`` from its extension, or application/octet-stream."""
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type or "application/octet-stream"


def check_mime_type(mime_type: str) -> None:
    """
    Reject anything that is not an image or a PDF.

    Raises:
        UnsupportedFileTypeError: If ``mime_type`` is not accepted.
    """
    if not mime_type.startswith(SUPPORTED_PREFIXES):
        raise UnsupportedFileTypeError(mime_type)


def read_as_data_url(
    path: str,
    mime_type: Optional[str] = None,
    progress: Optional[ProgressCallback] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> str:
    """
    Read a file and encode it as a base64 data URL.

    The file is streamed in chunks; after each chunk ``progress`` receives
    the percentage read so far, and it always receives 100 at the end.

    Args:
        path:       Path of the file to read.
        mime_type:  Media type to declare; guessed from the extension if None.
        progress:   Optional callback receiving an integer percentage.
        chunk_size: Bytes per read; must be a multiple of 3.

    Returns:
        str: ``data:<mime_type>;base64,<payload>``.
    """
    if chunk_size <= 0 or chunk_size % 3 != 0:
        raise ValueError(f"chunk_size must be a positive multiple of 3, got {chunk_size}")

    mime_type = mime_type or guess_mime_type(path)
    total = os.path.getsize(path)
    loaded = 0
    parts = []

    with open(path, "rb") as fh:
        while True:
            chunk = fh.read(chunk_size)
            if not chunk:
                break
            parts.append(base64.b64encode(chunk).decode("ascii"))
            loaded += len(chunk)
            if progress is not None and total > 0:
                progress(round(loaded / total * 100))

    if progress is not None:
        progress(100)

    logger.debug("Encoded %s (%d bytes, %s)", path, loaded, mime_type)
    return f"data:{mime_type};base64,{''.join(parts)}"
