# ==============================================================================
# Click Signals
# ==============================================================================
"""
Client-side behavioral telemetry and signal detection.

Turns raw interaction and browser-performance events into a small number of
de-duplicated signals: session lifecycle, page dwell time, idle/active
transitions, frustration patterns and performance degradation.
"""

__version__ = "0.1.0"
