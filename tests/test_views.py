"""
Tests for the preview and raw result views.
"""

from unittest.mock import patch

import pyperclip
import pytest
from rich.console import Console

from client.errors import ClipboardError
from client.views import PLACEHOLDER, ScanResult, ViewMode, copy_to_clipboard, render


@pytest.fixture
def console():
    return Console(record=True, width=100, color_system=None)


@pytest.fixture
def result():
    return ScanResult(
        markdown="# Receipt\n\nTotal: **42.00**\n\n- milk\n- eggs",
        source="receipt.jpg",
        mime_type="image/jpeg",
    )


class TestRender:
    def test_raw_prints_text_verbatim(self, console, result):
        render(result, ViewMode.RAW, console)

        output = console.export_text()
        assert "# Receipt" in output
        assert "**42.00**" in output

    def test_preview_formats_markdown(self, console, result):
        render(result, ViewMode.PREVIEW, console)

        output = console.export_text()
        assert "Receipt" in output
        assert "42.00" in output
        assert "**42.00**" not in output
        assert "receipt.jpg" in output

    @pytest.mark.parametrize("mode", list(ViewMode))
    def test_placeholder_without_markdown(self, console, mode):
        render(None, mode, console)

        assert PLACEHOLDER in console.export_text()

    def test_view_mode_from_cli_value(self):
        assert ViewMode("raw") is ViewMode.RAW
        assert ViewMode("preview") is ViewMode.PREVIEW


class TestCopyToClipboard:
    def test_copies_raw_markdown(self, result):
        with patch("client.views.pyperclip.copy") as copy:
            copy_to_clipboard(result)

        copy.assert_called_once_with(result.markdown)

    def test_unavailable_clipboard_raises_client_error(self, result):
        with patch("client.views.pyperclip.copy", side_effect=pyperclip.PyperclipException("no mechanism")):
            with pytest.raises(ClipboardError, match="Failed to copy to clipboard"):
                copy_to_clipboard(result)
