# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for clicksignals.

- shared.py: Colors, icons and logging setup
- config.py: config show
- replay.py: replay a recorded host event stream
"""

from clicksignals.cli.shared import C, Colors, I, Icons, setup_logging

__all__ = ["C", "Colors", "I", "Icons", "setup_logging"]
