"""
Tests for the relay's analyze endpoint.

Covers:
- Configuration errors (missing credential) regardless of payload
- Validation errors for empty or missing payloads
- Verbatim pass-through of generated markdown
- Media type selection for current and legacy payload shapes
- Downstream failures and the body size cap
"""

import base64
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from config import Config
from server.app import create_app, get_generator
from server.errors import PayloadTooLargeError
from server.generator import GenerationError


class StubGenerator:
    """Records generate() calls and returns canned text (or raises)."""

    def __init__(self, text="# Heading\n\nBody text.", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate(self, data, mime_type):
        self.calls.append((data, mime_type))
        if self.error is not None:
            raise self.error
        return self.text


def make_client(config: Config, generator=None) -> TestClient:
    app = create_app(config)
    if generator is not None:
        app.dependency_overrides[get_generator] = lambda: generator
    return TestClient(app)


@pytest.fixture
def stub():
    return StubGenerator()


@pytest.fixture
def client(configured, stub):
    return make_client(configured, stub)


class TestConfigurationError:
    """A missing credential fails every request with 500."""

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"file": ""},
            {"image": "data:image/jpeg;base64,"},
            {"file": "data:image/png;base64,iVBORw0KGgo=", "mimeType": "image/png"},
        ],
    )
    def test_missing_key_returns_500(self, unconfigured, stub, body):
        client = make_client(unconfigured, stub)

        response = client.post("/api/analyze", json=body)

        assert response.status_code == 500
        assert response.json() == {"error": "Google API key not configured"}
        assert stub.calls == []

    def test_missing_key_with_unparseable_body(self, unconfigured, stub):
        client = make_client(unconfigured, stub)

        response = client.post(
            "/api/analyze",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Google API key not configured"

    def test_empty_key_counts_as_missing(self, stub, png_data_url):
        client = make_client(Config(google_api_key=""), stub)

        response = client.post("/api/analyze", json={"file": png_data_url})

        assert response.status_code == 500


class TestValidationError:
    """Requests without a usable payload fail with 400."""

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"file": ""},
            {"file": None, "image": None},
            {"file": "data:image/png;base64,"},
            {"file": "no-comma-here"},
            {"image": ""},
            {"image": "data:image/jpeg;base64,"},
            {"mimeType": "application/pdf"},
        ],
    )
    def test_missing_or_empty_file_returns_400(self, client, stub, body):
        response = client.post("/api/analyze", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "No file provided"}
        assert stub.calls == []

    def test_non_object_body_returns_400(self, client):
        response = client.post("/api/analyze", json=["data:image/png;base64,AAAA"])

        assert response.status_code == 400

    def test_malformed_json_returns_400(self, client):
        response = client.post(
            "/api/analyze",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "No file provided"}


class TestSuccessfulRelay:
    """Well-formed payloads reach the generator and its text comes back untouched."""

    def test_markdown_returned_verbatim(self, configured, png_data_url):
        text = "```\n<b>not really markdown</b>\n```\n\n  trailing spaces  \n"
        stub = StubGenerator(text=text)
        client = make_client(configured, stub)

        response = client.post(
            "/api/analyze", json={"file": png_data_url, "mimeType": "image/png"}
        )

        assert response.status_code == 200
        assert response.json() == {"markdown": text}

    def test_new_style_payload_uses_declared_mime_type(self, client, stub):
        pdf = b"%PDF-1.4 fake"
        data_url = "data:application/pdf;base64," + base64.b64encode(pdf).decode()

        response = client.post(
            "/api/analyze", json={"file": data_url, "mimeType": "application/pdf"}
        )

        assert response.status_code == 200
        assert stub.calls == [(pdf, "application/pdf")]

    def test_new_style_payload_without_mime_type_defaults_to_jpeg(self, client, stub, png_data_url, png_bytes):
        response = client.post("/api/analyze", json={"file": png_data_url})

        assert response.status_code == 200
        assert stub.calls == [(png_bytes, "image/jpeg")]

    def test_legacy_image_payload_defaults_to_jpeg(self, client, stub, png_data_url, png_bytes):
        response = client.post("/api/analyze", json={"image": png_data_url})

        assert response.status_code == 200
        assert response.json() == {"markdown": stub.text}
        assert stub.calls == [(png_bytes, "image/jpeg")]

    def test_file_takes_precedence_over_image(self, client, stub, png_data_url, png_bytes):
        response = client.post(
            "/api/analyze",
            json={
                "file": png_data_url,
                "mimeType": "image/png",
                "image": "data:image/jpeg;base64,/9j/4AAQ",
            },
        )

        assert response.status_code == 200
        assert stub.calls == [(png_bytes, "image/png")]

    def test_line_wrapped_base64_accepted(self, client, stub, png_bytes):
        encoded = base64.b64encode(png_bytes).decode()
        wrapped = "\n".join(encoded[i:i + 76] for i in range(0, len(encoded), 76))

        response = client.post(
            "/api/analyze",
            json={"file": f"data:image/png;base64,{wrapped}\n", "mimeType": "image/png"},
        )

        assert response.status_code == 200
        assert stub.calls == [(png_bytes, "image/png")]

    def test_single_dispatch_per_request(self, client, stub, png_data_url):
        client.post("/api/analyze", json={"file": png_data_url})

        assert len(stub.calls) == 1


class TestDownstreamError:
    """Any failure after validation collapses to a generic 500."""

    def test_generation_error_returns_500(self, configured, png_data_url):
        stub = StubGenerator(error=GenerationError("generate", RuntimeError("quota")))
        client = make_client(configured, stub)

        response = client.post("/api/analyze", json={"file": png_data_url})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to analyze file"}

    def test_unexpected_exception_returns_500(self, configured, png_data_url):
        stub = StubGenerator(error=ConnectionError("network down"))
        client = make_client(configured, stub)

        response = client.post("/api/analyze", json={"file": png_data_url})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to analyze file"}

    def test_malformed_base64_returns_500(self, client, stub):
        response = client.post(
            "/api/analyze", json={"file": "data:image/png;base64,@@not-base64@@"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to analyze file"}
        assert stub.calls == []


class TestBodySizeCap:
    """Oversized bodies are refused with 413."""

    def test_body_over_limit_returns_413(self, stub):
        config = Config(google_api_key="test-key", max_body_bytes=1024)
        client = make_client(config, stub)

        response = client.post(
            "/api/analyze",
            json={"file": "data:image/png;base64," + "A" * 4096},
        )

        assert response.status_code == 413
        assert response.json() == {"error": "Request body exceeds the 1024 byte limit"}
        assert stub.calls == []

    def test_default_limit_reported_exactly(self, configured):
        error = PayloadTooLargeError(configured.max_body_bytes)

        assert f"{configured.max_body_bytes} byte limit" in error.message

    def test_default_limit_admits_20mb_upload(self, configured):
        # 20 MB of raw bytes base64-encodes to ~26.7 MB of JSON
        assert configured.max_body_bytes >= ((20 * 1024 * 1024 + 2) // 3) * 4


class TestGeneratorDependency:
    """Without overrides the app builds one Gemini generator and reuses it."""

    def test_generator_created_once(self, configured, png_data_url):
        with patch("server.app.MarkdownGenerator") as generator_cls:
            generator_cls.return_value.generate = AsyncMock(return_value="# md")
            client = make_client(configured)

            first = client.post("/api/analyze", json={"file": png_data_url})
            second = client.post("/api/analyze", json={"image": png_data_url})

        assert first.json() == {"markdown": "# md"}
        assert second.json() == {"markdown": "# md"}
        generator_cls.assert_called_once_with(
            api_key="test-key", model_name=configured.model_name
        )


class TestHealth:
    def test_health_reports_configured(self, client, configured):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["api_key_configured"] is True
        assert body["model"] == configured.model_name

    def test_health_reports_unconfigured(self, unconfigured):
        response = make_client(unconfigured).get("/health")

        assert response.json()["status"] == "unconfigured"
        assert response.json()["api_key_configured"] is False
