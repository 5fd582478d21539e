# =============================================================================
# Scan to Markdown - Data URL Helpers
# =============================================================================
# Files travel between the client and the relay as data URLs
# (``data:<media-type>;base64,<payload>``) embedded in JSON.  These helpers
# build and take apart that representation on both sides.
# =============================================================================

import base64
import binascii
from dataclasses import dataclass
from typing import Optional


class InvalidDataURLError(ValueError):
    """Raised when the payload part of a data URL is not valid base64."""


@dataclass(frozen=True)
class DataURL:
    """
    A decoded data URL.

    Attributes:
        mime_type: Media type declared in the prefix, or None if absent.
        payload:   The base64 text following the first comma.
        data:      The decoded binary content.
    """

    mime_type: Optional[str]
    payload: str
    data: bytes


def encode_data_url(data: bytes, mime_type: str) -> str:
    """
    Encode binary content as a base64 data URL.

    Args:
        data:      Raw file bytes.
        mime_type: Media type to declare in the prefix.

    Returns:
        str: ``data:<mime_type>;base64,<payload>``.
    """
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def split_data_url(value: Optional[str]) -> Optional[str]:
    """
    Return the base64 payload of a data URL.

    Everything after the first comma is the payload. A value with no comma,
    or with nothing after it, yields None.
    """
    if not value:
        return None
    _, sep, payload = value.partition(",")
    if not sep:
        return None
    # A second comma would not survive a plain split either
    payload = payload.split(",", 1)[0].strip()
    return payload or None


def _declared_mime_type(prefix: str) -> Optional[str]:
    # "data:image/png;base64" -> "image/png"
    if not prefix.startswith("data:"):
        return None
    media = prefix[len("data:"):].split(";", 1)[0].strip()
    return media or None


def parse_data_url(value: str) -> DataURL:
    """
    Decode a data URL into its media type and binary content.

    Args:
        value: The full data URL string.

    Returns:
        DataURL with the declared media type and decoded bytes.

    Raises:
        InvalidDataURLError: If there is no payload or it is not valid base64.
    """
    payload = split_data_url(value)
    if payload is None:
        raise InvalidDataURLError("Data URL has no payload")

    # Line-wrapped (MIME style) base64 is still valid input
    payload = "".join(payload.split())
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidDataURLError(f"Malformed base64 payload: {exc}") from exc

    return DataURL(
        mime_type=_declared_mime_type(value.partition(",")[0]),
        payload=payload,
        data=data,
    )
