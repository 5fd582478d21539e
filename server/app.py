# =============================================================================
# Scan to Markdown - FastAPI Relay Application
# =============================================================================
# Defines the HTTP API of the relay: a single analyze endpoint that decodes
# a data-URL encoded upload, forwards it to Gemini with a fixed markdown
# prompt, and returns the generated text.  Nothing is retained between
# requests.
# =============================================================================

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from config import Config, get_config
from server.errors import (
    AnalyzeError,
    ConfigurationError,
    PayloadError,
    PayloadTooLargeError,
)
from server.generator import MarkdownGenerator
from shared.data_url import parse_data_url
from shared.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
    HealthResponse,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Records the start time and reports the active configuration. The
    Gemini client itself is created lazily on the first analyze request.
    """
    config: Config = app.state.config
    app.state.start_time = time.time()

    logger.info(
        "Relay starting (model=%s, api_key=%s, body_limit=%d bytes)",
        config.model_name,
        "configured" if config.api_key_configured else "MISSING",
        config.max_body_bytes,
    )
    if not config.api_key_configured:
        logger.warning("GOOGLE_API_KEY is not set; analyze requests will fail.")

    yield

    logger.info("Shutting down relay...")
    app.state.generator = None


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def require_api_key(request: Request) -> None:
    """Reject the request before its body is read if no credential is set."""
    if not request.app.state.config.api_key_configured:
        raise ConfigurationError()


def get_generator(request: Request) -> MarkdownGenerator:
    """
    Return the app's MarkdownGenerator, creating it on first use.

    Raises:
        ConfigurationError: If no Gemini credential is configured.
    """
    config: Config = request.app.state.config
    if not config.api_key_configured:
        raise ConfigurationError()

    generator = request.app.state.generator
    if generator is None:
        generator = MarkdownGenerator(
            api_key=config.google_api_key,
            model_name=config.model_name,
        )
        request.app.state.generator = generator
    return generator


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def analyze_error_handler(request: Request, exc: AnalyzeError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


async def analyze(
    request: Request,
    generator: MarkdownGenerator = Depends(get_generator),
) -> AnalyzeResponse:
    """
    Convert an uploaded image or PDF into markdown.

    Accepts either ``{"file": <data URL>, "mimeType": <type>}`` or the
    legacy ``{"image": <data URL>}``. The decoded bytes and the fixed
    markdown prompt go to Gemini in a single call; its text is returned
    unmodified.

    Returns:
        AnalyzeResponse with the generated markdown.
    """
    config: Config = request.app.state.config

    body = await request.body()
    if len(body) > config.max_body_bytes:
        raise PayloadTooLargeError(config.max_body_bytes)

    try:
        payload = AnalyzeRequest.model_validate_json(body)
    except ValidationError:
        raise PayloadError()

    selected = payload.select_payload(config.default_mime_type)
    if selected is None:
        raise PayloadError()
    data_url, mime_type = selected

    try:
        decoded = parse_data_url(data_url)
        if not decoded.data:
            raise PayloadError()

        start = time.time()
        markdown = await generator.generate(decoded.data, mime_type)
        elapsed_ms = (time.time() - start) * 1000.0
    except PayloadError:
        raise
    except Exception:
        logger.exception("Error analyzing file")
        raise AnalyzeError()

    logger.info(
        "Analyzed %d bytes (%s) -> %d chars of markdown (%.1fms)",
        len(decoded.data),
        mime_type,
        len(markdown),
        elapsed_ms,
    )
    return AnalyzeResponse(markdown=markdown)


def health_check(request: Request) -> HealthResponse:
    """Report whether the relay can serve analyze requests, and its uptime."""
    config: Config = request.app.state.config
    start_time = request.app.state.start_time
    uptime = time.time() - start_time if start_time > 0 else 0.0
    return HealthResponse(
        status="ok" if config.api_key_configured else "unconfigured",
        model=config.model_name,
        api_key_configured=config.api_key_configured,
        uptime_seconds=round(uptime, 2),
    )


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------


def create_app(config: Optional[Config] = None) -> FastAPI:
    """
    Build the relay application.

    Args:
        config: Configuration to serve with; defaults to the global singleton.

    Returns:
        FastAPI: The configured application.
    """
    app = FastAPI(
        title="Scan to Markdown Relay",
        description=(
            "Receives data-URL encoded images and PDFs, forwards them to a "
            "Gemini model with a fixed markdown prompt, and returns the "
            "generated markdown."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config or get_config()
    app.state.generator = None
    app.state.start_time = 0.0

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        """Refuse bodies whose declared length exceeds the cap before reading them."""
        limit = app.state.config.max_body_bytes
        content_length = request.headers.get("content-length")
        if content_length is not None and content_length.isdigit() and int(content_length) > limit:
            exc = PayloadTooLargeError(limit)
            logger.warning("Rejected %s byte body (limit %d)", content_length, limit)
            return await analyze_error_handler(request, exc)
        return await call_next(request)

    app.add_exception_handler(AnalyzeError, analyze_error_handler)

    app.add_api_route(
        "/api/analyze",
        analyze,
        methods=["POST"],
        response_model=AnalyzeResponse,
        responses={
            400: {"model": ErrorResponse},
            413: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
        dependencies=[Depends(require_api_key)],
    )
    app.add_api_route("/health", health_check, methods=["GET"], response_model=HealthResponse)

    return app


app = create_app()
