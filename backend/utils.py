"""Utility helpers used across backend and UI modules."""

from __future__ import annotations

from datetime import datetime


def format_time(total_seconds: float) -> str:
    """Return ``total_seconds`` as ``MM:SS``; minutes may exceed 59."""

    total = max(0, int(total_seconds))
    minutes, seconds = divmod(total, 60)
    return f"{minutes:02d}:{seconds:02d}"


def format_date(iso_string: str) -> str:
    """Return an ISO timestamp in local time, e.g. ``14:29 Mon 11/08/2025``."""

    dt = datetime.fromisoformat(iso_string)
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime("%H:%M %a %d/%m/%Y")
