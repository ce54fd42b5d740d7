"""Display values for the workout screens.

These functions turn engine state into the strings and fractions shown by
the widgets.  They import nothing from Kivy so they can be tested directly.
"""

from __future__ import annotations

import math

from backend.progress import SetProgress
from backend.routines import ExerciseDef
from backend.sessions import SessionHistoryEntry
from backend.timers import Phase, PhaseTimer, RestCountdown
from backend.utils import format_date, format_time

PHASE_LABELS = {
    Phase.WORK: "Work",
    Phase.REST: "Rest",
    Phase.COMPLETED: "Done",
}


def _fraction(value: float) -> float:
    return min(1.0, max(0.0, value))


def countdown_text(remaining_seconds: float) -> str:
    # round up so "00:00" only shows once the countdown has expired
    return format_time(math.ceil(remaining_seconds))


def timed_exercise_view(
    exercise: ExerciseDef, timer: PhaseTimer, progress: SetProgress
) -> dict:
    """Return labels and control state for a timed exercise card."""

    if timer.phase is Phase.REST:
        span = exercise.rest_sec
    else:
        span = exercise.duration_sec
    ring = 1.0 - timer.remaining_seconds / span if span > 0 else 1.0
    if timer.phase is Phase.COMPLETED:
        ring = 1.0
    return {
        "time_text": countdown_text(timer.remaining_seconds),
        "phase_text": PHASE_LABELS[timer.phase],
        "set_text": f"Set {timer.current_set} / {exercise.sets}",
        "info_text": (
            f"{exercise.sets} sets · {exercise.duration_sec:g}s · {exercise.rest_sec:g}s rest"
        ),
        "ring_progress": _fraction(ring),
        "running": timer.running,
        "resting": timer.phase is Phase.REST,
        "toggle_text": "Pause" if timer.running else "Start",
        "controls_disabled": progress.completed,
        "completed": progress.completed,
    }


def reps_exercise_view(
    exercise: ExerciseDef, progress: SetProgress, countdown: RestCountdown | None
) -> dict:
    """Return labels and control state for a rep exercise card."""

    resting = (
        countdown is not None and countdown.running and countdown.remaining_seconds > 0
    )
    return {
        "counter_text": f"{progress.done_sets} / {exercise.sets}",
        "target_text": f"{exercise.sets} × {exercise.reps} reps",
        "info_text": f"{exercise.sets} sets · {exercise.reps} reps · {exercise.rest_sec:g}s rest",
        "rest_text": countdown_text(countdown.remaining_seconds) if resting else "",
        "resting": resting,
        "ring_progress": _fraction(progress.done_sets / exercise.sets),
        "decrement_disabled": progress.done_sets == 0,
        "increment_disabled": progress.completed,
        "completed": progress.completed,
    }


def routine_progress_view(completed: int, total: int) -> dict:
    return {
        "text": f"{completed} / {total}",
        "fraction": completed / total if total else 0.0,
        "in_progress": 0 < completed < total,
        "complete_text": f"Finish workout ({completed}/{total})",
    }


def stopwatch_text(elapsed_ms: int) -> str:
    return format_time(elapsed_ms // 1000)


def history_entry_view(entry: SessionHistoryEntry) -> dict:
    return {
        "title": entry.routine_name,
        "date_text": format_date(entry.completed_at),
        "duration_text": stopwatch_text(entry.total_duration_ms),
        "exercises_text": (
            f"{entry.completed_exercise_count}/{entry.total_exercise_count} exercises"
        ),
    }
