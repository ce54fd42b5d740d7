"""Shared constants and globals for backend modules."""

from __future__ import annotations

from pathlib import Path

# Interval of the central timer tick in seconds
DEFAULT_TICK_INTERVAL = 0.1

# How often the UI redraws the routine stopwatch
DISPLAY_REFRESH_INTERVAL = 1.0

# Rest between sets when a routine definition omits it
DEFAULT_REST_DURATION = 60

# Directory holding routines, settings, recovery files and the history db
DATA_DIR = Path(__file__).resolve().parent.parent / "data"

DEFAULT_ROUTINES_PATH = DATA_DIR / "routines.json"
DEFAULT_DB_PATH = DATA_DIR / "history.db"
DEFAULT_RECOVERY_BASE = DATA_DIR / "session_recovery"

__all__ = [
    "DEFAULT_TICK_INTERVAL",
    "DISPLAY_REFRESH_INTERVAL",
    "DEFAULT_REST_DURATION",
    "DATA_DIR",
    "DEFAULT_ROUTINES_PATH",
    "DEFAULT_DB_PATH",
    "DEFAULT_RECOVERY_BASE",
]
