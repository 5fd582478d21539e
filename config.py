# =============================================================================
# Scan to Markdown - Centralized Configuration
# =============================================================================
# Provides a single Config dataclass containing all tunable parameters for
# both the relay server and the scanning client. Parameters are overridable
# via environment variables with the SCANMD_ prefix (e.g., SCANMD_SERVER_PORT=8080).
# The Gemini credential is read from the conventional GOOGLE_API_KEY variable.
# =============================================================================

import os
from dataclasses import dataclass, field
from typing import Optional

# Upload ceiling enforced by the client before anything is sent (20 MB)
DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024

# Slack for the JSON envelope around the base64 payload
_JSON_OVERHEAD_BYTES = 64 * 1024


def _encoded_size(raw_size: int) -> int:
    """
    Size of the JSON request body carrying ``raw_size`` bytes as base64.

    Args:
        raw_size: Number of raw file bytes.

    Returns:
        int: Upper bound on the encoded request body length in bytes.
    """
    return ((raw_size + 2) // 3) * 4 + _JSON_OVERHEAD_BYTES


def _read_api_key() -> Optional[str]:
    """Return GOOGLE_API_KEY, treating an empty value as unset."""
    value = os.environ.get("GOOGLE_API_KEY", "").strip()
    return value or None


@dataclass
class Config:
    """
    Centralized configuration for the Scan to Markdown system.

    All fields except ``google_api_key`` can be overridden via environment
    variables prefixed with SCANMD_.
    """

    # -- Networking --
    server_host: str = "127.0.0.1"
    server_port: int = 3000

    # -- External model service (Gemini) --
    model_name: str = "gemini-2.0-flash-exp"
    google_api_key: Optional[str] = field(default_factory=_read_api_key)

    # -- Uploads --
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    max_body_bytes: int = 0  # 0 = derive from max_upload_bytes
    default_mime_type: str = "image/jpeg"

    # -- Webcam --
    camera_index: int = 0
    camera_width: int = 1280
    camera_height: int = 720

    # -- Client --
    request_timeout_seconds: float = 300.0

    # -- Logging --
    log_level: str = "INFO"

    # -- Derived (computed post-init) --
    server_url: str = field(init=False)

    def __post_init__(self):
        """Apply environment variable overrides and compute derived fields."""
        self._apply_env_overrides()
        self.server_url = f"http://{self.server_host}:{self.server_port}"
        if self.max_body_bytes <= 0:
            self.max_body_bytes = _encoded_size(self.max_upload_bytes)

    @property
    def api_key_configured(self) -> bool:
        return bool(self.google_api_key)

    def _apply_env_overrides(self):
        """
        Override config fields from environment variables.

        Looks for SCANMD_<FIELD_NAME_UPPERCASE> environment variables and
        applies them with appropriate type conversion.
        """
        field_types = {
            "server_host": str,
            "server_port": int,
            "model_name": str,
            "max_upload_bytes": int,
            "max_body_bytes": int,
            "default_mime_type": str,
            "camera_index": int,
            "camera_width": int,
            "camera_height": int,
            "request_timeout_seconds": float,
            "log_level": str,
        }
        for field_name, field_type in field_types.items():
            env_key = f"SCANMD_{field_name.upper()}"
            env_value = os.environ.get(env_key)
            if env_value is not None:
                setattr(self, field_name, field_type(env_value))


# ---------------------------------------------------------------------------
# Singleton accessor
# ---------------------------------------------------------------------------
_config_instance: Optional[Config] = None


def get_config() -> Config:
    """
    Return the singleton Config instance, creating it on first call.

    Returns:
        Config: The global configuration object.
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached Config so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None
