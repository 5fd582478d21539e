# =============================================================================
# Scan to Markdown - Relay Error Types
# =============================================================================
# Request-level failures of the analyze endpoint.  Each carries the HTTP
# status it maps to; the app renders them as ``{"error": message}``.
# =============================================================================


class AnalyzeError(Exception):
    """Base class for errors reported to the client with a status code."""

    status_code = 500
    default_message = "Failed to analyze file"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(AnalyzeError):
    """The Gemini credential is not configured."""

    status_code = 500
    default_message = "Google API key not configured"


class PayloadError(AnalyzeError):
    """The request carried no usable file payload."""

    status_code = 400
    default_message = "No file provided"


class PayloadTooLargeError(AnalyzeError):
    """The request body exceeds the configured size cap."""

    status_code = 413

    def __init__(self, limit_bytes: int):
        self.limit_bytes = limit_bytes
        super().__init__(f"Request body exceeds the {limit_bytes} byte limit")
