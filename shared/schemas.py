# =============================================================================
# Scan to Markdown - Shared API Schemas
# =============================================================================
# Pydantic models defining the data contracts between the scanning client
# and the relay server.  These schemas are used for request/response
# validation and serialization across the HTTP API boundary.
#
# Two request shapes are accepted: the current one carries a data-URL
# encoded ``file`` plus its ``mimeType``; the legacy one (webcam snapshots)
# carries only a data-URL encoded ``image`` and implies image/jpeg.
# =============================================================================

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from shared.data_url import split_data_url


class AnalyzeRequest(BaseModel):
    """
    Payload sent from the client to the relay's analyze endpoint.

    Attributes:
        file:      Data URL of an uploaded image or PDF.
        mime_type: Declared media type of ``file`` (JSON key ``mimeType``).
        image:     Data URL of a webcam snapshot (legacy field).
    """

    model_config = ConfigDict(populate_by_name=True)

    file: Optional[str] = Field(default=None, description="Data URL of the uploaded file")
    mime_type: Optional[str] = Field(
        default=None,
        alias="mimeType",
        description="Media type of the uploaded file",
    )
    image: Optional[str] = Field(default=None, description="Data URL of a webcam image (legacy)")

    def select_payload(self, default_mime_type: str) -> Optional[Tuple[str, str]]:
        """
        Pick the data URL to analyze and the media type to declare for it.

        ``file`` takes precedence over ``image`` whenever it carries a
        payload. The declared ``mimeType`` applies to whichever field is
        used, falling back to ``default_mime_type`` (webcam snapshots from
        legacy clients never declare one).

        Args:
            default_mime_type: Media type used when none is declared.

        Returns:
            (data_url, mime_type), or None if neither field has a payload.
        """
        if split_data_url(self.file) is not None:
            return self.file, self.mime_type or default_mime_type
        if split_data_url(self.image) is not None:
            return self.image, self.mime_type or default_mime_type
        return None


class AnalyzeResponse(BaseModel):
    """Generated markdown, returned verbatim from the model."""

    markdown: str


class ErrorResponse(BaseModel):
    """Short error message returned with any non-2xx status."""

    error: str


class HealthResponse(BaseModel):
    """
    Relay health report.

    Attributes:
        status:             "ok", or "unconfigured" when no API key is set.
        model:              Name of the Gemini model requests are sent to.
        api_key_configured: Whether a Gemini credential is present.
        uptime_seconds:     Seconds since the app started.
    """

    status: str
    model: str
    api_key_configured: bool
    uptime_seconds: float
