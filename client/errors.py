# =============================================================================
# Scan to Markdown - Client Error Types
# =============================================================================
# Every failure the client can hit derives from ClientError; the CLI turns
# any of them into one blocking error message.
# =============================================================================

from typing import Optional


class ClientError(Exception):
    """Base class for scanning client failures."""


class FileTooLargeError(ClientError):
    """The selected file exceeds the upload limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"File size exceeds {limit // (1024 * 1024)}MB limit "
            f"({size} bytes). Please choose a smaller file."
        )


class UnsupportedFileTypeError(ClientError):
    """The selected file is neither an image nor a PDF."""

    def __init__(self, mime_type: str):
        self.mime_type = mime_type
        super().__init__(f"Unsupported file type: {mime_type}. Choose an image or PDF.")


class CameraUnavailableError(ClientError):
    """No camera could be opened or read."""


class RelayError(ClientError):
    """The relay rejected the request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ClipboardError(ClientError):
    """The markdown could not be placed on the system clipboard."""
