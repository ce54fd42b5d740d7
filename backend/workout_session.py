"""Timer and progress engine for an open workout.

:class:`WorkoutSession` owns every piece of mutable workout state through a
:class:`SessionStore`: the phase timers of timed exercises, the rest
countdowns of rep exercises, the progress ledger and the routine stopwatch.
Rendering code reads state through the query methods and changes it only
through the command methods; each successful command persists the store and
notifies listeners.

Commands never raise for bad input.  Unknown ids and commands that do not
apply to the current state are logged and reported by returning ``False``.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from datetime import datetime, timezone
from typing import Callable

from backend.errors import InvalidTransition, NotFound, PersistenceFailure
from backend.progress import ProgressLedger, SetProgress
from backend.routines import ExerciseDef, ExerciseKind, Routine, RoutineCatalog
from backend.sessions import SessionHistoryEntry
from backend.timers import PhaseTimer, RestCountdown, Stopwatch, Transition

# Bumped whenever the snapshot layout changes
STATE_VERSION = 1

Key = tuple[str, str]


class SessionStore:
    """Explicit container for all mutable engine state.

    Per-exercise state is keyed by ``(routine_id, exercise_id)``.
    """

    def __init__(
        self,
        current_routine_id: str | None = None,
        timers: dict[Key, PhaseTimer] | None = None,
        rest_countdowns: dict[Key, RestCountdown] | None = None,
        progress: ProgressLedger | None = None,
        stopwatch: Stopwatch | None = None,
    ):
        self.current_routine_id = current_routine_id
        self.timers: dict[Key, PhaseTimer] = timers if timers is not None else {}
        self.rest_countdowns: dict[Key, RestCountdown] = (
            rest_countdowns if rest_countdowns is not None else {}
        )
        self.progress = progress if progress is not None else ProgressLedger()
        self.stopwatch = stopwatch if stopwatch is not None else Stopwatch()

    def to_dict(self) -> dict:
        return {
            "version": STATE_VERSION,
            "current_routine_id": self.current_routine_id,
            "timers": [
                {"routine_id": r_id, "exercise_id": ex_id, **timer.to_dict()}
                for (r_id, ex_id), timer in self.timers.items()
            ],
            "rest_countdowns": [
                {"routine_id": r_id, "exercise_id": ex_id, **countdown.to_dict()}
                for (r_id, ex_id), countdown in self.rest_countdowns.items()
            ],
            "progress": self.progress.to_list(),
            "stopwatch": self.stopwatch.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionStore":
        version = data.get("version", STATE_VERSION)
        if version != STATE_VERSION:
            raise ValueError(f"Unsupported state version {version}")
        return cls(
            current_routine_id=data.get("current_routine_id"),
            timers={
                (item["routine_id"], item["exercise_id"]): PhaseTimer.from_dict(item)
                for item in data.get("timers") or []
            },
            rest_countdowns={
                (item["routine_id"], item["exercise_id"]): RestCountdown.from_dict(item)
                for item in data.get("rest_countdowns") or []
            },
            progress=ProgressLedger.from_list(data.get("progress") or []),
            stopwatch=Stopwatch.from_dict(data.get("stopwatch") or {}),
        )


class WorkoutSession:
    """Engine API used by the screens.

    ``clock`` returns the current wall-clock time in seconds, ``alerts``
    accepts vibration/audio cues, ``recovery`` persists snapshots and
    ``history`` records completed routines.  All collaborators are optional.
    """

    def __init__(
        self,
        catalog: RoutineCatalog,
        *,
        clock: Callable[[], float] | None = None,
        alerts=None,
        recovery=None,
        history=None,
        store: SessionStore | None = None,
    ):
        self.catalog = catalog
        self._clock = clock or time.time
        self.alerts = alerts
        self.recovery = recovery
        self.history = history
        self.store = store or SessionStore()
        self.scheduler = None
        # True while the last persistence attempt failed
        self.dirty = False
        self._listeners: list[Callable[["WorkoutSession"], None]] = []

    @classmethod
    def restore(
        cls, catalog: RoutineCatalog, state: dict | None = None, **kwargs
    ) -> "WorkoutSession":
        """Rebuild a session from ``state`` or from its recovery store.

        Elapsed time of running timers is reconciled before the session is
        returned, so it is ready for rendering and scheduling.
        """

        session = cls(catalog, **kwargs)
        if state is None and session.recovery is not None:
            state = session.recovery.load()
        if not state:
            return session
        try:
            session.store = SessionStore.from_dict(state)
        except (AttributeError, KeyError, TypeError, ValueError):
            logging.exception("Discarding unreadable session state")
            return session
        session._drop_unknown_state()
        session.reconcile()
        session._persist()
        return session

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def now(self) -> float:
        return self._clock()

    def _exercise(self, routine_id: str, exercise_id: str, kind: ExerciseKind) -> ExerciseDef:
        exercise = self.catalog.get_exercise(routine_id, exercise_id)
        if exercise.kind is not kind:
            raise NotFound(
                f"Exercise '{exercise_id}' in routine '{routine_id}' is not a {kind.value} exercise"
            )
        return exercise

    def _drop_unknown_state(self) -> None:
        """Remove restored state that no longer matches the routine catalog."""

        store = self.store
        for key in list(store.timers):
            try:
                exercise = self._exercise(*key, ExerciseKind.TIMED)
            except NotFound:
                logging.warning("Dropping timer for unknown exercise %s/%s", *key)
                del store.timers[key]
                continue
            timer = store.timers[key]
            timer.current_set = min(timer.current_set, exercise.sets)
        for key in list(store.rest_countdowns):
            try:
                self._exercise(*key, ExerciseKind.REPS)
            except NotFound:
                logging.warning("Dropping rest countdown for unknown exercise %s/%s", *key)
                del store.rest_countdowns[key]
        for key in store.progress.keys():
            try:
                exercise = self.catalog.get_exercise(*key)
            except NotFound:
                logging.warning("Dropping progress for unknown exercise %s/%s", *key)
                store.progress.discard(*key)
                continue
            entry = store.progress.ensure(*key)
            entry.done_sets = min(entry.done_sets, exercise.sets)
            if entry.done_sets == exercise.sets:
                entry.completed = True
        if store.current_routine_id and store.current_routine_id not in self.catalog:
            store.current_routine_id = None

    def _alert(self, vibration: str | None = None, cue: str | None = None) -> None:
        if self.alerts is None:
            return
        try:
            if vibration:
                self.alerts.vibrate(vibration)
            if cue:
                self.alerts.play(cue)
        except Exception:
            logging.debug("Alert %s/%s failed", vibration, cue, exc_info=True)

    def _persist(self) -> None:
        if self.recovery is None:
            return
        try:
            self.recovery.save(self.snapshot())
        except PersistenceFailure:
            logging.exception("Could not persist session state, keeping it in memory")
            self.dirty = True
        else:
            self.dirty = False

    def _sync_scheduler(self) -> None:
        if self.scheduler is None:
            return
        if self.has_running_timers():
            self.scheduler.start()
        else:
            self.scheduler.stop()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logging.exception("Session listener %r failed", listener)

    def _changed(self, persist: bool = True) -> None:
        if persist or self.dirty:
            self._persist()
        self._sync_scheduler()
        self._notify()

    def _run(self, command: Callable, *args) -> bool:
        name = command.__name__.lstrip("_")
        try:
            command(*args)
        except NotFound as exc:
            logging.warning("%s ignored: %s", name, exc)
            return False
        except InvalidTransition as exc:
            logging.debug("%s ignored: %s", name, exc)
            return False
        self._changed()
        return True

    def add_listener(self, listener: Callable[["WorkoutSession"], None]) -> None:
        """Call ``listener(session)`` after every change."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def attach_scheduler(self, scheduler) -> None:
        """Let ``scheduler`` drive :meth:`tick` while timers are running."""

        if self.scheduler is not None and self.scheduler is not scheduler:
            self.scheduler.stop()
        self.scheduler = scheduler
        self._sync_scheduler()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current_routine(self) -> Routine | None:
        routine_id = self.store.current_routine_id
        if routine_id is None or routine_id not in self.catalog:
            return None
        return self.catalog.get_routine(routine_id)

    def phase_timer(self, routine_id: str, exercise_id: str) -> PhaseTimer:
        """Return a copy of the timer state, defaulting to "not started"."""

        exercise = self._exercise(routine_id, exercise_id, ExerciseKind.TIMED)
        timer = self.store.timers.get((routine_id, exercise_id))
        if timer is None:
            return PhaseTimer.fresh(exercise)
        return dataclasses.replace(timer)

    def rest_countdown(self, routine_id: str, exercise_id: str) -> RestCountdown | None:
        self._exercise(routine_id, exercise_id, ExerciseKind.REPS)
        countdown = self.store.rest_countdowns.get((routine_id, exercise_id))
        return dataclasses.replace(countdown) if countdown else None

    def progress(self, routine_id: str, exercise_id: str) -> SetProgress:
        self.catalog.get_exercise(routine_id, exercise_id)
        return self.store.progress.get(routine_id, exercise_id)

    @property
    def stopwatch(self) -> Stopwatch:
        return dataclasses.replace(self.store.stopwatch)

    def stopwatch_elapsed_ms(self) -> int:
        return self.store.stopwatch.elapsed(self.now())

    def completed_count(self, routine_id: str) -> int:
        routine = self.catalog.get_routine(routine_id)
        return self.store.progress.completed_count(
            routine_id, (ex.id for ex in routine.exercises)
        )

    def total_count(self, routine_id: str) -> int:
        return len(self.catalog.get_routine(routine_id).exercises)

    def has_running_timers(self) -> bool:
        return any(t.running for t in self.store.timers.values()) or any(
            c.running for c in self.store.rest_countdowns.values()
        )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def open_routine(self, routine_id: str) -> bool:
        return self._run(self._open_routine, routine_id)

    def _open_routine(self, routine_id: str) -> None:
        self.catalog.get_routine(routine_id)
        self.store.current_routine_id = routine_id

    def close_routine(self) -> bool:
        return self._run(self._close_routine)

    def _close_routine(self) -> None:
        self.store.current_routine_id = None

    # ------------------------------------------------------------------
    # Timed exercises
    # ------------------------------------------------------------------

    def toggle_timer(self, routine_id: str, exercise_id: str) -> bool:
        """Start or pause the phase timer of a timed exercise."""
        return self._run(self._toggle_timer, routine_id, exercise_id)

    def _toggle_timer(self, routine_id: str, exercise_id: str) -> None:
        exercise = self._exercise(routine_id, exercise_id, ExerciseKind.TIMED)
        key = (routine_id, exercise_id)
        if self.store.progress.get(*key).completed:
            raise InvalidTransition(f"Exercise '{exercise_id}' already completed")
        timer = self.store.timers.get(key) or PhaseTimer.fresh(exercise)
        timer.toggle(self.now())
        self.store.timers[key] = timer

    def skip_timer(self, routine_id: str, exercise_id: str) -> bool:
        """Jump to the next work/rest phase."""
        return self._run(self._skip_timer, routine_id, exercise_id)

    def _skip_timer(self, routine_id: str, exercise_id: str) -> None:
        exercise = self._exercise(routine_id, exercise_id, ExerciseKind.TIMED)
        key = (routine_id, exercise_id)
        if self.store.progress.get(*key).completed:
            raise InvalidTransition(f"Exercise '{exercise_id}' already completed")
        timer = self.store.timers.get(key) or PhaseTimer.fresh(exercise)
        transition = timer.skip(self.now(), exercise)
        self.store.timers[key] = timer
        self._apply_transition(routine_id, exercise, timer, transition)

    def reset_timer(self, routine_id: str, exercise_id: str) -> bool:
        """Return a timed exercise to set 1 and clear its completion."""
        return self._run(self._reset_timer, routine_id, exercise_id)

    def _reset_timer(self, routine_id: str, exercise_id: str) -> None:
        exercise = self._exercise(routine_id, exercise_id, ExerciseKind.TIMED)
        self.store.timers[(routine_id, exercise_id)] = PhaseTimer.fresh(exercise)
        self.store.progress.reset(routine_id, exercise_id)

    def _apply_transition(
        self,
        routine_id: str,
        exercise: ExerciseDef,
        timer: PhaseTimer,
        transition: Transition,
    ) -> None:
        ledger = self.store.progress
        if transition is Transition.TO_REST:
            ledger.record_finished_set(routine_id, exercise.id, timer.current_set, exercise.sets)
            self._alert("short")
        elif transition is Transition.TO_WORK:
            self._alert("short")
        elif transition is Transition.COMPLETED:
            ledger.record_finished_set(routine_id, exercise.id, exercise.sets, exercise.sets)
            self._alert("complete", "beep")

    # ------------------------------------------------------------------
    # Rep exercises
    # ------------------------------------------------------------------

    def increment_set(self, routine_id: str, exercise_id: str) -> bool:
        """Record a finished set and start the rest countdown."""
        return self._run(self._increment_set, routine_id, exercise_id)

    def _increment_set(self, routine_id: str, exercise_id: str) -> None:
        exercise = self._exercise(routine_id, exercise_id, ExerciseKind.REPS)
        key = (routine_id, exercise_id)
        if self.store.progress.get(*key).completed:
            raise InvalidTransition(f"Exercise '{exercise_id}' already completed")
        entry = self.store.progress.increment(routine_id, exercise_id, exercise.sets)
        if entry.completed:
            self.store.rest_countdowns.pop(key, None)
            self._alert("complete")
        else:
            self.store.rest_countdowns[key] = RestCountdown.start(exercise.rest_sec, self.now())
            self._alert("short")

    def decrement_set(self, routine_id: str, exercise_id: str) -> bool:
        """Undo one set; always clears the completed flag."""
        return self._run(self._decrement_set, routine_id, exercise_id)

    def _decrement_set(self, routine_id: str, exercise_id: str) -> None:
        self._exercise(routine_id, exercise_id, ExerciseKind.REPS)
        self.store.progress.decrement(routine_id, exercise_id)

    def reset_sets(self, routine_id: str, exercise_id: str) -> bool:
        return self._run(self._reset_sets, routine_id, exercise_id)

    def _reset_sets(self, routine_id: str, exercise_id: str) -> None:
        self._exercise(routine_id, exercise_id, ExerciseKind.REPS)
        self.store.progress.reset(routine_id, exercise_id)
        self.store.rest_countdowns.pop((routine_id, exercise_id), None)

    # ------------------------------------------------------------------
    # Stopwatch
    # ------------------------------------------------------------------

    def toggle_stopwatch(self) -> bool:
        return self._run(self._toggle_stopwatch)

    def _toggle_stopwatch(self) -> None:
        self.store.stopwatch.toggle(self.now())

    def reset_stopwatch(self) -> bool:
        return self._run(self._reset_stopwatch)

    def _reset_stopwatch(self) -> None:
        self.store.stopwatch.reset()

    # ------------------------------------------------------------------
    # Routine completion
    # ------------------------------------------------------------------

    def complete_routine(self, routine_id: str) -> SessionHistoryEntry | None:
        """Record a history entry and clear all state of ``routine_id``.

        Returns the recorded entry, or ``None`` for an unknown routine.
        """

        try:
            routine = self.catalog.get_routine(routine_id)
        except NotFound as exc:
            logging.warning("complete_routine ignored: %s", exc)
            return None

        now = self.now()
        store = self.store
        entry = SessionHistoryEntry(
            id=str(int(now * 1000)),
            routine_id=routine.id,
            routine_name=routine.name,
            completed_at=datetime.fromtimestamp(now, timezone.utc).isoformat(),
            total_duration_ms=store.stopwatch.elapsed(now),
            completed_exercise_count=self.completed_count(routine.id),
            total_exercise_count=len(routine.exercises),
        )
        if self.history is not None:
            try:
                self.history.record(entry)
            except Exception:
                logging.exception("Could not record history entry for '%s'", routine.id)

        # build the cleaned store first and swap it in as a whole
        self.store = SessionStore(
            current_routine_id=(
                None if store.current_routine_id == routine.id else store.current_routine_id
            ),
            timers={k: v for k, v in store.timers.items() if k[0] != routine.id},
            rest_countdowns={
                k: v for k, v in store.rest_countdowns.items() if k[0] != routine.id
            },
            progress=store.progress.without_routine(routine.id),
            stopwatch=Stopwatch(),
        )
        logging.info(
            "Completed routine '%s': %d/%d exercises in %d ms",
            routine.id,
            entry.completed_exercise_count,
            entry.total_exercise_count,
            entry.total_duration_ms,
        )
        self._alert("complete")
        self._changed()
        return entry

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def tick(self, now: float | None = None) -> bool:
        """Advance every running timer and countdown.

        Returns ``True`` if anything was running.  State is persisted only
        when a phase changed or a countdown expired; in between, the stored
        ``started_at``/remaining pair already describes the running timer.
        """

        now = self.now() if now is None else now
        store = self.store
        ticked = False
        transitioned = False
        for key, timer in list(store.timers.items()):
            if not timer.running:
                continue
            try:
                exercise = self._exercise(*key, ExerciseKind.TIMED)
            except NotFound:
                logging.warning("Dropping timer for unknown exercise %s/%s", *key)
                del store.timers[key]
                continue
            ticked = True
            transition = timer.tick(now, exercise)
            if transition is not Transition.NONE:
                transitioned = True
                self._apply_transition(key[0], exercise, timer, transition)
        for key, countdown in list(store.rest_countdowns.items()):
            if not countdown.running:
                continue
            ticked = True
            if countdown.tick(now):
                transitioned = True
                self._alert("short", "beep")
        if ticked:
            self._changed(persist=transitioned)
        else:
            self._sync_scheduler()
        return ticked

    def reconcile(self, now: float | None = None) -> None:
        """Fold time elapsed while suspended into every running timer.

        Performs no phase transitions; see :meth:`PhaseTimer.reconcile`.
        """

        now = self.now() if now is None else now
        for timer in self.store.timers.values():
            timer.reconcile(now)
        for countdown in self.store.rest_countdowns.values():
            countdown.reconcile(now)
        self.store.stopwatch.reconcile(now)

    # --------------------------------------------------------------
    # Persistence helpers
    # --------------------------------------------------------------

    def snapshot(self) -> dict:
        """Return a JSON-serialisable representation of the session state."""
        return self.store.to_dict()

    def save(self) -> bool:
        """Persist now; returns ``False`` if the write failed."""
        self._persist()
        return not self.dirty
