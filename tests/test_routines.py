import json

import pytest

from backend import DEFAULT_ROUTINES_PATH
from backend.errors import NotFound
from backend.routines import (
    DEFAULT_ROUTINES,
    ExerciseDef,
    ExerciseKind,
    Routine,
    RoutineCatalog,
    load_routines,
)


def test_bundled_routines_load():
    catalog = load_routines(DEFAULT_ROUTINES_PATH)
    assert [r.id for r in catalog.routines] == ["push", "core"]
    plank = catalog.get_exercise("core", "plank")
    assert plank.kind is ExerciseKind.TIMED
    assert plank.duration_sec == 45
    assert plank.rest_sec == 30


def test_missing_file_uses_defaults(tmp_path):
    catalog = load_routines(tmp_path / "missing.json")
    assert len(catalog) == len(DEFAULT_ROUTINES["routines"])
    assert "push" in catalog


def test_malformed_file_uses_defaults(tmp_path):
    path = tmp_path / "routines.json"
    path.write_text("[1, 2", encoding="utf-8")
    assert "core" in load_routines(path)


def test_invalid_definition_uses_defaults(tmp_path):
    path = tmp_path / "routines.json"
    path.write_text(
        json.dumps({"routines": [{"id": "x", "exercises": [{"id": "a", "sets": 0}]}]}),
        encoding="utf-8",
    )
    catalog = load_routines(path)
    assert "x" not in catalog


def test_custom_file(tmp_path):
    path = tmp_path / "routines.json"
    path.write_text(
        json.dumps(
            {
                "routines": [
                    {
                        "id": "legs",
                        "name": "Leg Day",
                        "exercises": [
                            {"id": "squat", "name": "Squat", "type": "reps", "sets": 5, "reps": 5},
                            {"id": "wall-sit", "type": "time", "sets": 2, "durationSec": 60, "restSec": 30, "image": "wall.png"},
                        ],
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    catalog = load_routines(path)
    routine = catalog.get_routine("legs")
    assert routine.description == ""
    squat = routine.exercise("squat")
    assert squat.rest_sec == 60
    assert squat.reps == 5
    wall_sit = routine.exercise("wall-sit")
    assert wall_sit.name == "wall-sit"
    assert wall_sit.image == "wall.png"


@pytest.mark.parametrize(
    "data",
    [
        {"name": "no id", "type": "reps", "sets": 3},
        {"id": "a", "type": "reps", "sets": 0},
        {"id": "a", "type": "reps", "sets": 3, "restSec": -1},
        {"id": "a", "type": "time", "sets": 3},
        {"id": "a", "type": "distance", "sets": 3},
    ],
)
def test_invalid_exercise_definitions(data):
    with pytest.raises(ValueError):
        ExerciseDef.from_dict(data)


def test_duplicate_exercise_ids_rejected():
    with pytest.raises(ValueError):
        Routine.from_dict(
            {"id": "r", "exercises": [{"id": "a", "sets": 1}, {"id": "a", "sets": 2}]}
        )


def test_lookup_errors(catalog):
    with pytest.raises(NotFound):
        catalog.get_routine("missing")
    with pytest.raises(NotFound):
        catalog.get_exercise("core", "missing")
    assert "missing" not in catalog
    assert isinstance(catalog, RoutineCatalog)
