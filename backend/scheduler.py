"""Central periodic tick for running timers.

A single :class:`TickScheduler` drives every running phase timer and rest
countdown.  It holds at most one Kivy clock event; :meth:`start` is a no-op
while that event is live, so a timer can never end up with two tick
registrations.
"""

from __future__ import annotations

from typing import Callable

from kivy.clock import Clock

from backend import DEFAULT_TICK_INTERVAL


class TickScheduler:
    def __init__(
        self,
        callback: Callable[[], object],
        interval: float = DEFAULT_TICK_INTERVAL,
        clock=None,
    ):
        self.callback = callback
        self.interval = interval
        self._clock = clock or Clock
        self._event = None

    @property
    def active(self) -> bool:
        return self._event is not None

    def start(self) -> None:
        if self._event is None:
            self._event = self._clock.schedule_interval(self._on_tick, self.interval)

    def stop(self) -> None:
        if self._event is not None:
            self._event.cancel()
            self._event = None

    def _on_tick(self, dt) -> None:
        self.callback()
