"""Test doubles shared by the engine tests."""


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class FakeEvent:
    def __init__(self, callback, interval):
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Stand-in for ``kivy.clock.Clock`` recording interval registrations."""

    def __init__(self):
        self.events: list[FakeEvent] = []

    def schedule_interval(self, callback, interval):
        event = FakeEvent(callback, interval)
        self.events.append(event)
        return event

    @property
    def live(self) -> list[FakeEvent]:
        return [e for e in self.events if not e.cancelled]

    def fire(self, dt: float = 0.1) -> None:
        for event in self.live:
            event.callback(dt)


class RecordingAlerts:
    """Alert sink storing every vibration pattern and audio cue."""

    def __init__(self):
        self.vibrations: list[str] = []
        self.cues: list[str] = []

    def vibrate(self, pattern: str) -> None:
        self.vibrations.append(pattern)

    def play(self, cue: str) -> None:
        self.cues.append(cue)

    def clear(self) -> None:
        self.vibrations.clear()
        self.cues.clear()


class FailingRecovery:
    """Recovery store whose writes fail until ``fail`` is cleared."""

    def __init__(self):
        self.fail = True
        self.saved: list[dict] = []

    def save(self, state: dict) -> None:
        from backend.errors import PersistenceFailure

        if self.fail:
            raise PersistenceFailure("disk full")
        self.saved.append(state)

    def load(self):
        return self.saved[-1] if self.saved else None

    def clear(self):
        self.saved.clear()
