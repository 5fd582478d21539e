# =============================================================================
# Scan to Markdown - Shared Package
# =============================================================================
# Wire schemas and data-URL helpers used by both the relay server and the
# scanning client.
# =============================================================================
