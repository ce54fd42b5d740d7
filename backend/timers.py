"""Countdown and stopwatch state machines.

All timers are driven by wall-clock timestamps rather than by counting ticks.
While running, ``started_at`` marks the moment up to which elapsed time has
already been folded into the stored value; every tick (or pause) subtracts
``now - started_at`` and moves ``started_at`` forward.  Missed ticks therefore
never cause drift: the next tick simply sees a larger gap.

None of these classes schedule anything or know about the UI.  They are
plain objects mutated by :class:`backend.workout_session.WorkoutSession`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from backend.errors import InvalidTransition
from backend.routines import ExerciseDef


class Phase(str, Enum):
    WORK = "work"
    REST = "rest"
    COMPLETED = "completed"


class Transition(str, Enum):
    """Phase change produced by :meth:`PhaseTimer.tick` or ``skip``."""

    NONE = "none"
    TO_REST = "to_rest"
    TO_WORK = "to_work"
    COMPLETED = "completed"


def _elapsed(now: float, started_at: float | None) -> float:
    # a clock that jumped backwards counts as no time passing
    if started_at is None:
        return 0.0
    return max(0.0, now - started_at)


@dataclass
class PhaseTimer:
    """Work/rest countdown for a timed exercise."""

    phase: Phase = Phase.WORK
    remaining_seconds: float = 0.0
    current_set: int = 1
    running: bool = False
    started_at: float | None = None

    @classmethod
    def fresh(cls, exercise: ExerciseDef) -> "PhaseTimer":
        """Return the "not started" state: set 1, full work duration."""
        return cls(remaining_seconds=float(exercise.duration_sec))

    @property
    def completed(self) -> bool:
        return self.phase is Phase.COMPLETED

    def toggle(self, now: float) -> None:
        if self.completed:
            raise InvalidTransition("Timer already completed")
        if self.running:
            self._fold(now)
            self.running = False
            self.started_at = None
        else:
            self.running = True
            self.started_at = now

    def tick(self, now: float, exercise: ExerciseDef) -> Transition:
        """Consume elapsed time and advance the phase once it expires."""

        if not self.running:
            return Transition.NONE
        self._fold(now)
        self.started_at = now
        if self.remaining_seconds > 0:
            return Transition.NONE
        return self._advance(exercise)

    def skip(self, now: float, exercise: ExerciseDef) -> Transition:
        """Jump to the next phase as if the current one had expired."""

        if self.completed:
            raise InvalidTransition("Timer already completed")
        transition = self._advance(exercise)
        if self.running:
            self.started_at = now
        return transition

    def reconcile(self, now: float) -> None:
        """Fold time spent suspended into ``remaining_seconds``.

        Never changes phase: an expired timer is left at zero and still
        running so the next tick performs the transition.
        """

        if self.running:
            self._fold(now)
            self.started_at = now

    def _fold(self, now: float) -> None:
        self.remaining_seconds = max(
            0.0, self.remaining_seconds - _elapsed(now, self.started_at)
        )

    def _advance(self, exercise: ExerciseDef) -> Transition:
        if self.phase is Phase.WORK:
            if self.current_set >= exercise.sets:
                self.phase = Phase.COMPLETED
                self.remaining_seconds = 0.0
                self.running = False
                self.started_at = None
                return Transition.COMPLETED
            self.phase = Phase.REST
            self.remaining_seconds = float(exercise.rest_sec)
            return Transition.TO_REST
        # rest finished, start the next set
        self.phase = Phase.WORK
        self.current_set = min(self.current_set + 1, exercise.sets)
        self.remaining_seconds = float(exercise.duration_sec)
        return Transition.TO_WORK

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "remaining_seconds": self.remaining_seconds,
            "current_set": self.current_set,
            "running": self.running,
            "started_at": self.started_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PhaseTimer":
        phase = Phase(data.get("phase", Phase.WORK.value))
        running = bool(data.get("running", False)) and phase is not Phase.COMPLETED
        started_at = data.get("started_at") if running else None
        if running and started_at is None:
            running = False
        return cls(
            phase=phase,
            remaining_seconds=max(0.0, float(data.get("remaining_seconds", 0.0))),
            current_set=max(1, int(data.get("current_set", 1))),
            running=running,
            started_at=started_at,
        )


@dataclass
class RestCountdown:
    """Single-phase rest countdown used between sets of a rep exercise."""

    remaining_seconds: float = 0.0
    running: bool = False
    started_at: float | None = None

    @classmethod
    def start(cls, seconds: float, now: float) -> "RestCountdown":
        seconds = max(0.0, float(seconds))
        return cls(remaining_seconds=seconds, running=True, started_at=now)

    @property
    def finished(self) -> bool:
        return not self.running and self.remaining_seconds <= 0

    def tick(self, now: float) -> bool:
        """Advance the countdown, returning ``True`` when it just expired."""

        if not self.running:
            return False
        self.remaining_seconds = max(
            0.0, self.remaining_seconds - _elapsed(now, self.started_at)
        )
        self.started_at = now
        if self.remaining_seconds > 0:
            return False
        self.running = False
        self.started_at = None
        return True

    def reconcile(self, now: float) -> None:
        if self.running:
            self.remaining_seconds = max(
                0.0, self.remaining_seconds - _elapsed(now, self.started_at)
            )
            self.started_at = now

    def to_dict(self) -> dict:
        return {
            "remaining_seconds": self.remaining_seconds,
            "running": self.running,
            "started_at": self.started_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RestCountdown":
        running = bool(data.get("running", False))
        started_at = data.get("started_at") if running else None
        if running and started_at is None:
            running = False
        return cls(
            remaining_seconds=max(0.0, float(data.get("remaining_seconds", 0.0))),
            running=running,
            started_at=started_at,
        )


@dataclass
class Stopwatch:
    """Routine stopwatch accumulating milliseconds across pauses."""

    running: bool = False
    started_at: float | None = None
    elapsed_ms: int = 0

    def toggle(self, now: float) -> None:
        if self.running:
            self.elapsed_ms = self.elapsed(now)
            self.started_at = None
            self.running = False
        else:
            self.started_at = now
            self.running = True

    def reset(self) -> None:
        self.running = False
        self.started_at = None
        self.elapsed_ms = 0

    def elapsed(self, now: float) -> int:
        """Return total elapsed milliseconds without mutating state."""

        if not self.running:
            return self.elapsed_ms
        return self.elapsed_ms + int(round(_elapsed(now, self.started_at) * 1000))

    def reconcile(self, now: float) -> None:
        if self.running:
            self.elapsed_ms = self.elapsed(now)
            self.started_at = now

    def to_dict(self) -> dict:
        return {
            "running": self.running,
            "started_at": self.started_at,
            "elapsed_ms": self.elapsed_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Stopwatch":
        running = bool(data.get("running", False))
        started_at = data.get("started_at") if running else None
        if running and started_at is None:
            running = False
        return cls(
            running=running,
            started_at=started_at,
            elapsed_ms=max(0, int(data.get("elapsed_ms", 0))),
        )
