"""Entry points shared by the app and by scripts.

Re-exports the backend API and wires a :class:`WorkoutSession` to its
default collaborators (routine file, recovery files and history database).
"""

from __future__ import annotations

import time
from pathlib import Path

from backend import (
    DEFAULT_DB_PATH,
    DEFAULT_RECOVERY_BASE,
    DEFAULT_REST_DURATION,
    DEFAULT_ROUTINES_PATH,
    DEFAULT_TICK_INTERVAL,
    DISPLAY_REFRESH_INTERVAL,
)
from backend.errors import EngineError, InvalidTransition, NotFound, PersistenceFailure
from backend.progress import SetProgress
from backend.recovery import RecoveryStore
from backend.routines import ExerciseDef, ExerciseKind, Routine, RoutineCatalog, load_routines
from backend.sessions import HistoryLog, SessionHistoryEntry, get_session_history
from backend.timers import Phase, PhaseTimer, RestCountdown, Stopwatch
from backend.workout_session import SessionStore, WorkoutSession


def open_workout_session(
    routines_path: Path = DEFAULT_ROUTINES_PATH,
    db_path: Path = DEFAULT_DB_PATH,
    recovery_base: Path = DEFAULT_RECOVERY_BASE,
    *,
    alerts=None,
    clock=time.time,
) -> WorkoutSession:
    """Load routines and restore the last session from its recovery files."""

    catalog = load_routines(routines_path)
    return WorkoutSession.restore(
        catalog,
        clock=clock,
        alerts=alerts,
        recovery=RecoveryStore(recovery_base),
        history=HistoryLog(db_path),
    )


__all__ = [
    "DEFAULT_DB_PATH",
    "DEFAULT_RECOVERY_BASE",
    "DEFAULT_REST_DURATION",
    "DEFAULT_ROUTINES_PATH",
    "DEFAULT_TICK_INTERVAL",
    "DISPLAY_REFRESH_INTERVAL",
    "EngineError",
    "ExerciseDef",
    "ExerciseKind",
    "HistoryLog",
    "InvalidTransition",
    "NotFound",
    "PersistenceFailure",
    "Phase",
    "PhaseTimer",
    "RecoveryStore",
    "RestCountdown",
    "Routine",
    "RoutineCatalog",
    "SessionHistoryEntry",
    "SessionStore",
    "SetProgress",
    "Stopwatch",
    "WorkoutSession",
    "get_session_history",
    "load_routines",
    "open_workout_session",
]
