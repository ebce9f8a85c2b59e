# ==============================================================================
# Shared Utilities for CLI Commands
# ==============================================================================
"""
Terminal colors, icons and logging setup shared by the CLI commands.
"""

import logging


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"


class Icons:
    """Status icons using Unicode symbols."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "!"
    BULLET = "•"
    ARROW = "→"


# Module-level aliases for convenience
C, I = Colors, Icons

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str) -> None:
    """Configure root logging at the given level name (e.g. "INFO")."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


__all__ = ["C", "Colors", "I", "Icons", "LOG_FORMAT", "setup_logging"]
