# =============================================================================
# Scan to Markdown - Server Entry Point
# =============================================================================
# CLI entry point for starting the FastAPI relay under uvicorn.
# =============================================================================

import argparse
import logging

import uvicorn

from config import get_config


def main():
    """Parse CLI arguments, apply overrides, and start the server."""
    parser = argparse.ArgumentParser(
        description="Scan to Markdown — relay server (Gemini)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--host", type=str, default=None, help="Server bind address")
    parser.add_argument("--port", type=int, default=None, help="Server bind port")
    parser.add_argument("--model", type=str, default=None, help="Gemini model name")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level")
    args = parser.parse_args()

    config = get_config()

    if args.host is not None:
        config.server_host = args.host
    if args.port is not None:
        config.server_port = args.port
    if args.model is not None:
        config.model_name = args.model
    if args.log_level is not None:
        config.log_level = args.log_level.upper()

    config.server_url = f"http://{config.server_host}:{config.server_port}"

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    print("\n" + "=" * 60)
    print("  Scan to Markdown — Relay Server")
    print("=" * 60)
    print(f"  Model      : {config.model_name}")
    print(f"  API key    : {'configured' if config.api_key_configured else 'MISSING (set GOOGLE_API_KEY)'}")
    print(f"  Body limit : {config.max_body_bytes} bytes")
    print(f"  Listening  : {config.server_host}:{config.server_port}")
    print("=" * 60 + "\n")

    uvicorn.run(
        "server.app:app",
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
