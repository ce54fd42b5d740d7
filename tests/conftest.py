from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from backend import settings  # noqa: E402
from backend.recovery import RecoveryStore  # noqa: E402
from backend.routines import RoutineCatalog  # noqa: E402
from backend.sessions import HistoryLog  # noqa: E402
from backend.workout_session import WorkoutSession  # noqa: E402
from tests.utils import FakeClock, RecordingAlerts  # noqa: E402

SAMPLE_ROUTINES = {
    "routines": [
        {
            "id": "core",
            "name": "Core Blast",
            "description": "Abs & trunk",
            "exercises": [
                {"id": "plank", "name": "Plank", "type": "time", "sets": 2, "durationSec": 10, "restSec": 5},
                {"id": "crunches", "name": "Crunches", "type": "reps", "sets": 3, "reps": 20, "restSec": 45},
                {"id": "hold", "name": "Hollow Hold", "type": "time", "sets": 1, "durationSec": 20, "restSec": 0},
            ],
        },
        {
            "id": "push",
            "name": "Push Day",
            "description": "Chest & shoulders",
            "exercises": [
                {"id": "bench", "name": "Bench Press", "type": "reps", "sets": 2, "reps": 8, "restSec": 90},
                {"id": "plank", "name": "Plank", "type": "time", "sets": 1, "durationSec": 30, "restSec": 10},
            ],
        },
    ]
}


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    """Keep settings out of the real data directory."""
    monkeypatch.setattr(settings, "SETTINGS_PATH", tmp_path / "settings.json")
    monkeypatch.setattr(settings, "_settings_cache", None)
    yield


@pytest.fixture
def catalog() -> RoutineCatalog:
    return RoutineCatalog.from_dict(SAMPLE_ROUTINES)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def alerts() -> RecordingAlerts:
    return RecordingAlerts()


@pytest.fixture
def recovery(tmp_path) -> RecoveryStore:
    return RecoveryStore(tmp_path / "session_recovery")


@pytest.fixture
def history(tmp_path) -> HistoryLog:
    return HistoryLog(tmp_path / "history.db")


@pytest.fixture
def session(catalog, clock, alerts, recovery, history) -> WorkoutSession:
    """Engine wired to fakes and temporary storage."""
    return WorkoutSession(
        catalog, clock=clock, alerts=alerts, recovery=recovery, history=history
    )
