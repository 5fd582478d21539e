# =============================================================================
# Scan to Markdown - Relay HTTP Client
# =============================================================================
# Provides the RelayClient class responsible for POSTing data-URL encoded
# files to the relay's analyze endpoint and returning the generated markdown.
# One request per call; failures are raised, never retried.
# =============================================================================

import logging

import requests

from client.errors import RelayError

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/api/analyze"


class RelayClient:
    """
    HTTP client for the relay server.

    Args:
        server_url: Base URL of the relay (e.g., "http://127.0.0.1:3000").
        timeout:    Seconds to wait for the relay's response.
    """

    def __init__(self, server_url: str, timeout: float = 300.0):
        self._server_url = server_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    @property
    def server_url(self) -> str:
        return self._server_url

    def analyze_file(self, data_url: str, mime_type: str) -> str:
        """
        Submit an uploaded file for conversion.

        Args:
            data_url:  The file as a data URL.
            mime_type: Media type of the file.

        Returns:
            str: The generated markdown.

        Raises:
            RelayError: On a non-2xx response or transport failure.
        """
        return self._analyze({"file": data_url, "mimeType": mime_type})

    def analyze_image(self, data_url: str) -> str:
        """Submit a webcam still through the legacy ``image`` field."""
        return self._analyze({"image": data_url})

    def _analyze(self, payload: dict) -> str:
        url = f"{self._server_url}{ANALYZE_PATH}"
        payload_kb = sum(len(v) for v in payload.values()) // 1024

        try:
            response = self._session.post(url, json=payload, timeout=self._timeout)
        except requests.exceptions.RequestException as exc:
            logger.error("Could not reach relay at %s: %s", url, exc)
            raise RelayError(f"Could not reach relay: {exc}") from exc

        if not response.ok:
            message = _error_message(response)
            logger.error("Relay responded %d: %s", response.status_code, message)
            raise RelayError(message, status_code=response.status_code)

        try:
            markdown = response.json()["markdown"]
        except (ValueError, KeyError, TypeError) as exc:
            raise RelayError("Relay returned an unexpected response") from exc
        if not isinstance(markdown, str):
            raise RelayError("Relay returned an unexpected response")

        logger.info(
            "Relay returned %d chars of markdown (%d KB payload)",
            len(markdown),
            payload_kb,
        )
        return markdown

    def health(self) -> dict:
        """
        Fetch the relay's health report.

        Raises:
            RelayError: If the relay is unreachable or unhealthy.
        """
        url = f"{self._server_url}/health"
        try:
            response = self._session.get(url, timeout=5)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as exc:
            raise RelayError(f"Relay health check failed: {exc}") from exc


def _error_message(response: requests.Response) -> str:
    """Pull the ``error`` field out of a failed response, if there is one."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Failed to analyze file (HTTP {response.status_code})"
