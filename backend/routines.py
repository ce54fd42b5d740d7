"""Routine and exercise definitions.

Routines are read from ``data/routines.json``.  The definitions are
immutable; the engine only ever reads them.  When the file is missing or
cannot be parsed the built-in :data:`DEFAULT_ROUTINES` are used instead so the
app always has something to show.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from backend import DEFAULT_REST_DURATION, DEFAULT_ROUTINES_PATH
from backend.errors import NotFound


class ExerciseKind(str, Enum):
    TIMED = "time"
    REPS = "reps"


# Same shape as ``routines.json``
DEFAULT_ROUTINES: dict = {
    "routines": [
        {
            "id": "push",
            "name": "Push Day",
            "description": "Chest & shoulders",
            "exercises": [
                {"id": "bench", "name": "Bench Press", "type": "reps", "sets": 4, "reps": 8, "restSec": 90},
                {"id": "shoulder-press", "name": "Shoulder Press", "type": "reps", "sets": 4, "reps": 8, "restSec": 90},
                {"id": "lateral-raise", "name": "Lateral Raise", "type": "reps", "sets": 3, "reps": 15, "restSec": 60},
            ],
        },
        {
            "id": "core",
            "name": "Core Blast",
            "description": "Abs & trunk",
            "exercises": [
                {"id": "plank", "name": "Plank", "type": "time", "sets": 3, "durationSec": 45, "restSec": 30},
                {"id": "crunches", "name": "Crunches", "type": "reps", "sets": 3, "reps": 20, "restSec": 45},
            ],
        },
    ]
}


@dataclass(frozen=True)
class ExerciseDef:
    """A single exercise within a routine."""

    id: str
    name: str
    kind: ExerciseKind
    sets: int
    rest_sec: float = DEFAULT_REST_DURATION
    duration_sec: float = 0
    reps: int = 0
    image: str | None = None

    @property
    def is_timed(self) -> bool:
        return self.kind is ExerciseKind.TIMED

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseDef":
        """Build a definition from a ``routines.json`` exercise entry."""

        try:
            kind = ExerciseKind(data.get("type", ExerciseKind.REPS.value))
        except ValueError:
            raise ValueError(f"Unknown exercise type {data.get('type')!r}") from None
        ex_id = data.get("id")
        if not ex_id:
            raise ValueError("Exercise definition without an id")
        sets = int(data.get("sets", 1))
        if sets < 1:
            raise ValueError(f"Exercise '{ex_id}' needs at least one set")
        rest = float(data.get("restSec", DEFAULT_REST_DURATION))
        if rest < 0:
            raise ValueError(f"Exercise '{ex_id}' has a negative rest time")
        duration = float(data.get("durationSec", 0))
        if kind is ExerciseKind.TIMED and duration <= 0:
            raise ValueError(f"Timed exercise '{ex_id}' needs a positive duration")
        return cls(
            id=str(ex_id),
            name=data.get("name", str(ex_id)),
            kind=kind,
            sets=sets,
            rest_sec=rest,
            duration_sec=duration,
            reps=int(data.get("reps", 0)),
            image=data.get("image"),
        )


@dataclass(frozen=True)
class Routine:
    id: str
    name: str
    description: str
    exercises: tuple[ExerciseDef, ...]

    @classmethod
    def from_dict(cls, data: dict) -> "Routine":
        routine_id = data.get("id")
        if not routine_id:
            raise ValueError("Routine definition without an id")
        exercises = tuple(ExerciseDef.from_dict(ex) for ex in data.get("exercises", []))
        ids = [ex.id for ex in exercises]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Routine '{routine_id}' has duplicate exercise ids")
        return cls(
            id=str(routine_id),
            name=data.get("name", str(routine_id)),
            description=data.get("description", ""),
            exercises=exercises,
        )

    def exercise(self, exercise_id: str) -> ExerciseDef:
        for ex in self.exercises:
            if ex.id == exercise_id:
                return ex
        raise NotFound(f"Exercise '{exercise_id}' not found in routine '{self.id}'")


class RoutineCatalog:
    """Read-only lookup of routines by id, preserving file order."""

    def __init__(self, routines: list[Routine] | tuple[Routine, ...] = ()):
        self._routines: dict[str, Routine] = {}
        for routine in routines:
            if routine.id in self._routines:
                raise ValueError(f"Duplicate routine id '{routine.id}'")
            self._routines[routine.id] = routine

    @classmethod
    def from_dict(cls, data: dict) -> "RoutineCatalog":
        return cls([Routine.from_dict(r) for r in data.get("routines", [])])

    @property
    def routines(self) -> list[Routine]:
        return list(self._routines.values())

    def __len__(self) -> int:
        return len(self._routines)

    def __contains__(self, routine_id: object) -> bool:
        return routine_id in self._routines

    def get_routine(self, routine_id: str) -> Routine:
        try:
            return self._routines[routine_id]
        except KeyError:
            raise NotFound(f"Routine '{routine_id}' not found") from None

    def get_exercise(self, routine_id: str, exercise_id: str) -> ExerciseDef:
        return self.get_routine(routine_id).exercise(exercise_id)


def load_routines(path: Path = DEFAULT_ROUTINES_PATH) -> RoutineCatalog:
    """Load the routine catalog from ``path``.

    Falls back to :data:`DEFAULT_ROUTINES` if the file is missing or any
    definition in it is invalid.
    """

    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        catalog = RoutineCatalog.from_dict(data)
    except FileNotFoundError:
        logging.info("No routine file at %s, using default routines", path)
        return RoutineCatalog.from_dict(DEFAULT_ROUTINES)
    except (OSError, ValueError, TypeError, AttributeError):
        logging.exception("Could not load routines from %s, using defaults", path)
        return RoutineCatalog.from_dict(DEFAULT_ROUTINES)
    logging.info("Loaded %d routines from %s", len(catalog), path)
    return catalog
