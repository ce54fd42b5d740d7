import core
from tests.utils import FakeClock, RecordingAlerts


def test_open_workout_session_wires_storage(tmp_path):
    clock = FakeClock()
    alerts = RecordingAlerts()
    paths = dict(
        routines_path=tmp_path / "missing.json",
        db_path=tmp_path / "history.db",
        recovery_base=tmp_path / "session_recovery",
    )
    session = core.open_workout_session(**paths, alerts=alerts, clock=clock)
    assert "core" in session.catalog
    session.open_routine("core")
    session.increment_set("core", "crunches")
    assert alerts.vibrations == ["short"]

    clock.advance(5)
    reopened = core.open_workout_session(**paths, clock=clock)
    assert reopened.current_routine.id == "core"
    assert reopened.progress("core", "crunches").done_sets == 1
    assert reopened.rest_countdown("core", "crunches").remaining_seconds == 40

    entry = reopened.complete_routine("core")
    assert reopened.history.entries() == [entry]
    assert core.get_session_history(db_path=tmp_path / "history.db") == [entry]


def test_public_names_exported():
    for name in core.__all__:
        assert hasattr(core, name)
