# =============================================================================
# Scan to Markdown - Result Views
# =============================================================================
# Renders a scan result either as formatted markdown (preview) or as the
# raw text the relay returned, and copies the raw text to the clipboard.
# Formatting is delegated to rich, the clipboard to pyperclip.
# =============================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pyperclip
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from client.errors import ClipboardError

PLACEHOLDER = "Markdown will appear here..."


class ViewMode(str, Enum):
    PREVIEW = "preview"
    RAW = "raw"


@dataclass
class ScanResult:
    """
    Markdown produced for one scan. Held in memory only.

    Attributes:
        markdown:  Text returned by the relay.
        source:    File path, or "webcam" for a captured photo.
        mime_type: Media type that was submitted.
    """

    markdown: str
    source: str
    mime_type: str


def render(result: Optional[ScanResult], mode: ViewMode, console: Console) -> None:
    """Print ``result`` in the requested view mode."""
    text = result.markdown if result is not None and result.markdown else PLACEHOLDER
    title = f"Generated Markdown — {result.source}" if result is not None else "Generated Markdown"

    if mode is ViewMode.RAW:
        # soft_wrap keeps long lines intact; no markup or highlighting
        console.print(text, markup=False, highlight=False, soft_wrap=True)
        return

    console.print(Panel(Markdown(text), title=title, border_style="blue"))


def copy_to_clipboard(result: ScanResult) -> None:
    """
    Put the raw markdown of ``result`` on the system clipboard.

    Raises:
        ClipboardError: If no clipboard mechanism is available.
    """
    try:
        pyperclip.copy(result.markdown)
    except pyperclip.PyperclipException as exc:
        raise ClipboardError("Failed to copy to clipboard") from exc
