# ==============================================================================
# Utilities
# ==============================================================================
"""Configuration and retry helpers."""
