"""
Shared fixtures for the Scan to Markdown test suite.
"""

import base64
import os

import pytest

import config as config_module
from config import Config

# Smallest valid PNG: 1x1 transparent pixel
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Strip configuration env vars and the config singleton around every test."""
    for key in list(os.environ):
        if key.startswith("SCANMD_") or key == "GOOGLE_API_KEY":
            monkeypatch.delenv(key, raising=False)
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def png_data_url():
    return "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def configured():
    """Config with a Gemini credential present."""
    return Config(google_api_key="test-key")


@pytest.fixture
def unconfigured():
    """Config with no Gemini credential."""
    return Config(google_api_key=None)
