import json

import pytest

from backend.errors import PersistenceFailure
from backend.recovery import RecoveryStore
from backend.timers import Phase
from backend.workout_session import STATE_VERSION, WorkoutSession


def test_recovery_files_written_on_every_mutation(session, recovery):
    session.increment_set("core", "crunches")
    f1, f2 = recovery.paths
    assert f1.exists() and f2.exists()
    with f1.open() as fh:
        data1 = json.load(fh)
    with f2.open() as fh:
        data2 = json.load(fh)
    assert data1 == data2 == session.snapshot()


def test_snapshot_holds_only_engine_state(session):
    session.open_routine("core")
    state = session.snapshot()
    assert set(state) == {
        "version",
        "current_routine_id",
        "timers",
        "rest_countdowns",
        "progress",
        "stopwatch",
    }
    assert state["version"] == STATE_VERSION


def test_backup_file_used_when_primary_missing(recovery):
    recovery.save({"version": STATE_VERSION, "current_routine_id": "core"})
    recovery.paths[0].unlink()
    assert recovery.load()["current_routine_id"] == "core"


def test_corrupt_primary_falls_back_to_backup(recovery):
    recovery.save({"version": STATE_VERSION, "current_routine_id": "push"})
    recovery.paths[0].write_text("{not json", encoding="utf-8")
    assert recovery.load()["current_routine_id"] == "push"


def test_empty_files_load_as_none(recovery):
    for path in recovery.paths:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")
    assert recovery.load() is None


def test_clear_removes_files(recovery):
    recovery.save({"version": STATE_VERSION})
    recovery.clear()
    assert not any(p.exists() for p in recovery.paths)
    recovery.clear()


def test_unserialisable_state_raises(recovery):
    with pytest.raises(PersistenceFailure):
        recovery.save({"bad": object()})


def test_unwritable_location_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = RecoveryStore(blocker / "sub" / "state")
    with pytest.raises(PersistenceFailure):
        store.save({"version": STATE_VERSION})


def test_restore_round_trip(session, catalog, clock, recovery):
    session.open_routine("core")
    session.increment_set("core", "crunches")
    session.skip_timer("core", "plank")
    session.toggle_stopwatch()

    restored = WorkoutSession.restore(catalog, clock=clock, recovery=recovery)
    assert restored.snapshot() == session.snapshot()
    assert restored.current_routine.id == "core"
    assert restored.phase_timer("core", "plank").phase is Phase.REST


def test_restore_reconciles_without_transitions(session, catalog, clock, recovery):
    session.toggle_timer("core", "plank")
    session.increment_set("core", "crunches")
    session.toggle_stopwatch()

    clock.advance(4)
    restored = WorkoutSession.restore(catalog, clock=clock, recovery=recovery)
    timer = restored.phase_timer("core", "plank")
    assert timer.remaining_seconds == pytest.approx(6)
    assert timer.started_at == clock.now
    assert restored.rest_countdown("core", "crunches").remaining_seconds == pytest.approx(41)
    assert restored.stopwatch_elapsed_ms() == 4000

    clock.advance(100)
    restored = WorkoutSession.restore(catalog, clock=clock, recovery=recovery)
    timer = restored.phase_timer("core", "plank")
    # expired while suspended: left at zero for the next tick
    assert timer.phase is Phase.WORK
    assert timer.remaining_seconds == 0
    assert timer.running
    countdown = restored.rest_countdown("core", "crunches")
    assert countdown.remaining_seconds == 0
    assert countdown.running

    restored.tick()
    assert restored.phase_timer("core", "plank").phase is Phase.REST
    assert not restored.rest_countdown("core", "crunches").running


def test_reconcile_equals_continuous_ticking_single_set(catalog, clock):
    ticking = WorkoutSession(catalog, clock=clock)
    ticking.toggle_timer("core", "hold")
    start = clock.now
    for step in range(1, 121):
        ticking.tick(start + step * 0.1)

    suspended = WorkoutSession(catalog, clock=clock)
    suspended.toggle_timer("core", "hold")
    restored = WorkoutSession.restore(catalog, suspended.snapshot(), clock=clock)
    restored.reconcile(start + 12)

    assert restored.phase_timer("core", "hold").remaining_seconds == pytest.approx(
        ticking.phase_timer("core", "hold").remaining_seconds
    )


def test_restore_drops_unknown_state(catalog, clock):
    state = {
        "version": STATE_VERSION,
        "current_routine_id": "gone",
        "timers": [
            {"routine_id": "gone", "exercise_id": "x", "phase": "work", "remaining_seconds": 3},
            {"routine_id": "core", "exercise_id": "plank", "phase": "rest", "remaining_seconds": 2, "current_set": 9},
        ],
        "rest_countdowns": [
            {"routine_id": "core", "exercise_id": "plank", "remaining_seconds": 10},
        ],
        "progress": [],
        "stopwatch": {},
    }
    restored = WorkoutSession.restore(catalog, state, clock=clock)
    assert list(restored.store.timers) == [("core", "plank")]
    assert restored.phase_timer("core", "plank").current_set == 2
    assert restored.store.rest_countdowns == {}
    assert restored.current_routine is None


def test_restore_ignores_unsupported_version(catalog, clock):
    restored = WorkoutSession.restore(catalog, {"version": 99}, clock=clock)
    assert restored.snapshot()["timers"] == []


def test_restore_without_saved_state(catalog, clock, recovery):
    restored = WorkoutSession.restore(catalog, clock=clock, recovery=recovery)
    assert restored.current_routine is None
    assert not restored.has_running_timers()


@pytest.mark.parametrize("field", ["stopwatch", "timers", "rest_countdowns", "progress"])
def test_restore_tolerates_null_fields(catalog, clock, field):
    restored = WorkoutSession.restore(
        catalog, {"version": STATE_VERSION, field: None}, clock=clock
    )
    assert restored.stopwatch_elapsed_ms() == 0
    assert not restored.has_running_timers()


def test_restore_discards_malformed_entries(catalog, clock, recovery):
    recovery.save({"version": STATE_VERSION, "timers": [None], "stopwatch": []})
    restored = WorkoutSession.restore(catalog, clock=clock, recovery=recovery)
    assert restored.snapshot()["timers"] == []
    assert restored.current_routine is None


def test_restore_clamps_progress_to_catalog(catalog, clock):
    state = {
        "version": STATE_VERSION,
        "progress": [
            {"routine_id": "core", "exercise_id": "crunches", "done_sets": 9},
            {"routine_id": "core", "exercise_id": "plank", "done_sets": 2, "completed": False},
            {"routine_id": "core", "exercise_id": "hold", "done_sets": 0},
            {"routine_id": "gone", "exercise_id": "x", "done_sets": 1},
            {"routine_id": "core", "exercise_id": "retired", "done_sets": 1},
        ],
    }
    restored = WorkoutSession.restore(catalog, state, clock=clock)

    crunches = restored.progress("core", "crunches")
    assert crunches.done_sets == 3
    assert crunches.completed
    assert restored.progress("core", "plank").completed
    assert not restored.progress("core", "hold").completed
    kept = {(item["routine_id"], item["exercise_id"]) for item in restored.snapshot()["progress"]}
    assert kept == {("core", "crunches"), ("core", "plank"), ("core", "hold")}
    assert restored.completed_count("core") == 2
