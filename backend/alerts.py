"""Vibration and audio cues emitted on timer events.

The engine only names the cue (``"short"``, ``"complete"`` or
``"beep"``); how it is delivered is decided here.  Delivery is best effort
and every failure is swallowed by the engine after logging.
"""

from __future__ import annotations

import logging
from typing import Callable

from backend import settings

# Vibration patterns in milliseconds (on, off, on, ...)
VIBRATE: dict[str, list[int]] = {
    "short": [80],
    "complete": [300, 120, 300, 120, 450],
}

BEEP = "beep"


class AlertSystem:
    """Route alert tokens to the sound system and an optional vibrator.

    ``vibrator`` receives the millisecond pattern; on platforms without a
    vibration motor it is left as ``None`` and patterns are only logged.
    """

    def __init__(self, sound=None, vibrator: Callable[[list[int]], None] | None = None):
        self.sound = sound
        self.vibrator = vibrator

    def vibrate(self, pattern: str) -> None:
        if pattern not in VIBRATE:
            raise ValueError(f"Unknown vibration pattern '{pattern}'")
        if not settings.get_value("vibration_on"):
            return
        if self.vibrator is None:
            logging.debug("Vibration '%s' requested but no vibrator available", pattern)
            return
        self.vibrator(VIBRATE[pattern])

    def play(self, cue: str) -> None:
        if self.sound is None or not settings.get_value("sound_on"):
            return
        level = settings.get_value("sound_level")
        if level is not None:
            self.sound.volume = float(level)
        self.sound.play(cue)
