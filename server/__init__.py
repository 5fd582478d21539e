# =============================================================================
# Scan to Markdown - Server Package
# =============================================================================
# This package contains the stateless relay: a FastAPI endpoint that decodes
# an uploaded file and forwards it to Gemini with a fixed markdown prompt.
# Nothing received or generated here is stored.
# =============================================================================
