# =============================================================================
# Scan to Markdown - Client Orchestrator
# =============================================================================
# Entry point for the scanning client.  Takes input from a file or a webcam
# snapshot, encodes it as a data URL, submits it to the relay, and shows the
# returned markdown, optionally copying it to the clipboard.
#
# Flow:
#   file:   size check -> type check -> encode (with progress) -> POST file+mimeType
#   webcam: open camera -> live preview -> capture still -> release -> POST image
#
# Any failure ends the run with a single error message; there is no retry.
# =============================================================================

import argparse
import logging
import os
import sys
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from client.encoding import (
    ProgressCallback,
    check_mime_type,
    check_upload_size,
    guess_mime_type,
    read_as_data_url,
)
from client.errors import ClientError
from client.relay import RelayClient
from client.views import ScanResult, ViewMode, copy_to_clipboard, render
from client.webcam import CAPTURE_MIME_TYPE, WebcamCapture, run_preview
from config import Config, get_config

logger = logging.getLogger(__name__)


class ScanSession:
    """
    Orchestrates one scan at a time: gather input, encode, submit.

    Args:
        config:         The global Config instance.
        relay:          Client for the relay server; built from config if None.
        webcam_factory: Callable returning a fresh WebcamCapture.
    """

    def __init__(
        self,
        config: Config,
        relay: Optional[RelayClient] = None,
        webcam_factory: Optional[Callable[[], WebcamCapture]] = None,
    ):
        self._config = config
        self._relay = relay or RelayClient(
            server_url=config.server_url,
            timeout=config.request_timeout_seconds,
        )
        self._webcam_factory = webcam_factory or (
            lambda: WebcamCapture(
                camera_index=config.camera_index,
                width=config.camera_width,
                height=config.camera_height,
            )
        )

    def scan_file(self, path: str, progress: Optional[ProgressCallback] = None) -> ScanResult:
        """
        Convert an image or PDF on disk to markdown.

        The size and type checks run before the file is read, so an
        oversized or unsupported file never reaches the network.

        Args:
            path:     Path to the file.
            progress: Optional callback receiving read progress (0-100).

        Returns:
            ScanResult with the relay's markdown.

        Raises:
            ClientError: On any validation, read, or relay failure.
        """
        try:
            size = os.path.getsize(path)
        except OSError as exc:
            raise ClientError(f"Could not read {path}: {exc}") from exc

        check_upload_size(size, self._config.max_upload_bytes)
        mime_type = guess_mime_type(path)
        check_mime_type(mime_type)

        logger.info("Encoding %s (%d bytes, %s)", path, size, mime_type)
        try:
            data_url = read_as_data_url(path, mime_type=mime_type, progress=progress)
        except OSError as exc:
            raise ClientError(f"Could not read {path}: {exc}") from exc

        markdown = self._relay.analyze_file(data_url, mime_type)
        return ScanResult(markdown=markdown, source=path, mime_type=mime_type)

    def scan_webcam(self, preview: bool = True) -> Optional[ScanResult]:
        """
        Capture a webcam photo and convert it to markdown.

        The camera is released as soon as capture mode ends, whether a
        photo was taken, the user cancelled, or an error occurred.

        Args:
            preview: Show a live preview window and wait for the user; if
                     False, capture the first frame immediately.

        Returns:
            ScanResult, or None if the user cancelled.

        Raises:
            ClientError: On camera or relay failure.
        """
        webcam = self._webcam_factory()
        try:
            webcam.open()
            data_url = run_preview(webcam) if preview else webcam.capture()
        finally:
            webcam.release()

        if data_url is None:
            return None

        markdown = self._relay.analyze_image(data_url)
        return ScanResult(markdown=markdown, source="webcam", mime_type=CAPTURE_MIME_TYPE)


def _scan_file_with_progress(session: ScanSession, path: str, console: Console) -> ScanResult:
    """Run ``scan_file`` behind a progress bar: "Uploading..." then "Processing..."."""
    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as bar:
        task = bar.add_task("Uploading...", total=100)

        def on_progress(percent: int) -> None:
            description = "Uploading..." if percent < 100 else "Processing..."
            bar.update(task, completed=percent, description=description)

        return session.scan_file(path, progress=on_progress)


def main(argv=None) -> int:
    """CLI entry point for the scanning client."""
    parser = argparse.ArgumentParser(
        description="Scan to Markdown — convert an image, PDF, or webcam photo to markdown",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--server-url", type=str, default=None,
        help="Relay base URL (e.g., http://127.0.0.1:3000)",
    )
    parser.add_argument(
        "--view", choices=[m.value for m in ViewMode], default=ViewMode.PREVIEW.value,
        help="Show formatted markdown or the raw text",
    )
    parser.add_argument(
        "--copy", action="store_true",
        help="Also copy the generated markdown to the clipboard",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    file_cmd = commands.add_parser("file", help="Convert an image or PDF (max 20MB)")
    file_cmd.add_argument("path", help="Path to the image or PDF")
    webcam_cmd = commands.add_parser("webcam", help="Capture a photo from the webcam")
    webcam_cmd.add_argument(
        "--camera", type=int, default=None,
        help="Camera device index (overrides config)",
    )
    webcam_cmd.add_argument(
        "--no-preview", action="store_true",
        help="Capture immediately without a preview window",
    )
    args = parser.parse_args(argv)

    config = get_config()
    if args.server_url is not None:
        config.server_url = args.server_url
    if getattr(args, "camera", None) is not None:
        config.camera_index = args.camera

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    console = Console()
    session = ScanSession(config)

    try:
        if args.command == "file":
            result = _scan_file_with_progress(session, args.path, console)
        else:
            result = session.scan_webcam(preview=not args.no_preview)
            if result is None:
                console.print("[yellow]Capture cancelled.[/yellow]")
                return 0

        render(result, ViewMode(args.view), console)
        if args.copy:
            copy_to_clipboard(result)
            console.print("[green]Copied to clipboard.[/green]")
    except ClientError as exc:
        logger.error("Scan failed: %s", exc)
        Console(stderr=True).print(f"[red]Error:[/red] {escape(str(exc))}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
