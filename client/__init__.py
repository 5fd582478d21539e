# =============================================================================
# Scan to Markdown - Client Package
# =============================================================================
# This package contains the scanning client: file and webcam input, data-URL
# encoding with progress reporting, submission to the relay, and display of
# the returned markdown.
# =============================================================================
