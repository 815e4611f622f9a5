import asyncio
from datetime import timedelta

import pytest

from liftlog.core.enums import ErrorKind, IntensityCategory, SessionState
from liftlog.core.exceptions import (
    AlreadyActiveError,
    DuplicateExerciseError,
    EmptyWorkoutError,
    InvalidInputError,
    NoActiveSessionError,
    SessionNotFoundError,
    StorageError,
    UnknownExerciseError,
)
from liftlog.schemas.workout import WorkoutSet
from liftlog.services.workout_session import ActiveSessionSlot, WorkoutSessionMachine
from tests.conftest import START, FakeClock, make_session


@pytest.mark.asyncio
async def test_start_creates_empty_session_and_persists(machine, memory_store):
    session = await machine.start()

    assert session.name == "Workout 2025-01-01 09:00"
    assert session.started_at == START
    assert session.ended_at is None
    assert session.exercises == []
    assert session.state == SessionState.ACTIVE
    assert memory_store.active == session
    assert machine.active == session


@pytest.mark.asyncio
async def test_start_uses_given_name(machine):
    session = await machine.start("  Leg day ")
    assert session.name == "Leg day"


@pytest.mark.asyncio
async def test_start_twice_fails_already_active(machine):
    first = await machine.start()
    with pytest.raises(AlreadyActiveError) as exc_info:
        await machine.start()
    assert exc_info.value.kind == ErrorKind.ALREADY_ACTIVE
    assert machine.active.id == first.id


@pytest.mark.asyncio
async def test_add_exercise_appends_entry_with_default_rest(machine):
    await machine.start()
    session = await machine.add_exercise("bench-press")

    assert [e.exercise_id for e in session.exercises] == ["bench-press"]
    entry = session.exercises[0]
    assert entry.sets == []
    assert entry.rest_time_seconds == 120


@pytest.mark.asyncio
async def test_add_exercise_without_session_fails(machine):
    with pytest.raises(NoActiveSessionError):
        await machine.add_exercise("bench-press")


@pytest.mark.asyncio
async def test_duplicate_exercise_never_changes_state(machine, memory_store):
    await machine.start()
    await machine.add_exercise("bench-press")
    await machine.add_set("bench-press", 5, 100)
    before = machine.active.model_copy(deep=True)
    saves = memory_store.calls.count("save_active")

    for _ in range(2):
        with pytest.raises(DuplicateExerciseError) as exc_info:
            await machine.add_exercise("bench-press")
        assert exc_info.value.kind == ErrorKind.DUPLICATE_EXERCISE

    assert machine.active == before
    assert memory_store.calls.count("save_active") == saves


@pytest.mark.asyncio
async def test_add_set_defaults_completed_and_keeps_order(machine):
    await machine.start()
    await machine.add_exercise("squat")
    await machine.add_set("squat", 10, 80)
    await machine.add_set("squat", 8, 85)
    await machine.add_set("squat", 6, 90, completed=False)

    sets = machine.active.find_exercise("squat").sets
    assert [(s.reps, s.weight) for s in sets] == [(10, 80), (8, 85), (6, 90)]
    assert [s.completed for s in sets] == [True, True, False]
    assert machine.active.total_volume == 800 + 680 + 540


@pytest.mark.asyncio
async def test_add_set_unknown_exercise(machine):
    await machine.start()
    with pytest.raises(UnknownExerciseError) as exc_info:
        await machine.add_set("deadlift", 5, 140)
    assert exc_info.value.kind == ErrorKind.UNKNOWN_EXERCISE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reps, weight",
    [
        (0, 50),
        (-3, 50),
        (1001, 50),
        (5.5, 50),
        (True, 50),
        ("10", 50),
        (10, -1),
        (10, 10000.5),
        (10, float("nan")),
        (10, None),
    ],
)
async def test_add_set_rejects_out_of_range_input(machine, reps, weight):
    await machine.start()
    await machine.add_exercise("bench-press")
    await machine.add_set("bench-press", 5, 100)

    with pytest.raises(InvalidInputError) as exc_info:
        await machine.add_set("bench-press", reps, weight)

    assert exc_info.value.kind == ErrorKind.INVALID_INPUT
    assert len(machine.active.find_exercise("bench-press").sets) == 1


@pytest.mark.asyncio
async def test_add_set_accepts_boundaries(machine):
    await machine.start()
    await machine.add_exercise("bench-press")
    await machine.add_set("bench-press", 1000, 0)
    await machine.add_set("bench-press", 1, 10000)
    assert len(machine.active.find_exercise("bench-press").sets) == 2


@pytest.mark.parametrize(
    "reps, expected",
    [
        (1, IntensityCategory.MAX),
        (2, IntensityCategory.MAX),
        (3, IntensityCategory.HEAVY),
        (7, IntensityCategory.HEAVY),
        (8, IntensityCategory.MODERATE),
        (14, IntensityCategory.MODERATE),
        (15, IntensityCategory.LIGHT),
    ],
)
def test_set_intensity_category(reps, expected):
    workout_set = WorkoutSet(reps=reps, weight=50)
    assert workout_set.intensity == expected
    assert workout_set.model_dump()["intensity"] == expected


@pytest.mark.asyncio
async def test_update_set_revalidates(machine):
    await machine.start()
    await machine.add_exercise("bench-press")
    await machine.add_set("bench-press", 5, 100)

    updated = await machine.update_set("bench-press", 0, reps=6, completed=False)
    assert (updated.reps, updated.weight, updated.completed) == (6, 100, False)

    with pytest.raises(InvalidInputError):
        await machine.update_set("bench-press", 0, weight=-5)
    with pytest.raises(InvalidInputError):
        await machine.update_set("bench-press", 3, reps=5)
    assert machine.active.find_exercise("bench-press").sets[0] == updated


@pytest.mark.asyncio
async def test_remove_is_best_effort(machine, memory_store):
    assert await machine.remove_exercise("bench-press") is False
    assert await machine.remove_set("bench-press", 0) is False

    await machine.start()
    await machine.add_exercise("bench-press")
    await machine.add_set("bench-press", 5, 100)
    await machine.add_set("bench-press", 3, 110)
    saves = memory_store.calls.count("save_active")

    assert await machine.remove_set("bench-press", 5) is False
    assert await machine.remove_set("squat", 0) is False
    assert await machine.remove_exercise("squat") is False
    assert memory_store.calls.count("save_active") == saves

    assert await machine.remove_set("bench-press", 0) is True
    assert [s.weight for s in machine.active.find_exercise("bench-press").sets] == [110]
    assert await machine.remove_exercise("bench-press") is True
    assert machine.active.exercises == []
    assert memory_store.active.exercises == []


@pytest.mark.asyncio
async def test_update_exercise_notes(machine):
    await machine.start()
    assert await machine.update_exercise_notes("bench-press", "x") is False
    await machine.add_exercise("bench-press")
    assert await machine.update_exercise_notes("bench-press", " paused reps ") is True
    assert machine.active.find_exercise("bench-press").notes == "paused reps"


@pytest.mark.asyncio
async def test_complete_moves_session_to_history_once(machine, memory_store):
    started = await machine.start()
    await machine.add_exercise("bench-press")
    await machine.add_set("bench-press", 5, 100)

    completed = await machine.complete()

    assert completed.id == started.id
    assert completed.ended_at > completed.started_at
    assert completed.state == SessionState.COMPLETED
    assert machine.active is None
    assert memory_store.active is None
    assert [s.id for s in memory_store.sessions] == [started.id]

    with pytest.raises(NoActiveSessionError) as exc_info:
        await machine.complete()
    assert exc_info.value.kind == ErrorKind.NO_ACTIVE_SESSION
    assert len(memory_store.sessions) == 1


@pytest.mark.asyncio
async def test_complete_empty_workout_fails(machine, memory_store):
    await machine.start()
    with pytest.raises(EmptyWorkoutError) as exc_info:
        await machine.complete()
    assert exc_info.value.kind == ErrorKind.EMPTY_WORKOUT
    assert machine.active is not None
    assert memory_store.sessions == []


@pytest.mark.asyncio
async def test_complete_with_frozen_clock_still_ends_after_start(memory_store):
    machine = WorkoutSessionMachine(memory_store, clock=FakeClock(step=timedelta(0)))
    await machine.start()
    await machine.add_exercise("squat")
    completed = await machine.complete()
    assert completed.ended_at > completed.started_at


@pytest.mark.asyncio
async def test_abandon_discards_without_history(machine, memory_store):
    assert await machine.abandon() is False

    await machine.start()
    await machine.add_exercise("squat")
    assert await machine.abandon() is True

    assert machine.active is None
    assert memory_store.active is None
    assert memory_store.sessions == []
    # a new session can be started afterwards
    await machine.start()


@pytest.mark.asyncio
async def test_storage_failure_leaves_slot_unchanged(machine, memory_store):
    await machine.start()
    await machine.add_exercise("bench-press")
    before = machine.active

    memory_store.fail_on.add("save_active")
    with pytest.raises(StorageError) as exc_info:
        await machine.add_set("bench-press", 5, 100)
    assert exc_info.value.kind == ErrorKind.STORAGE_FAILURE
    assert exc_info.value.recoverable is True
    assert machine.active is before
    assert machine.active.find_exercise("bench-press").sets == []

    memory_store.fail_on.clear()
    await machine.add_set("bench-press", 5, 100)
    assert len(machine.active.find_exercise("bench-press").sets) == 1


@pytest.mark.asyncio
async def test_failed_archive_keeps_session_active(machine, memory_store):
    await machine.start()
    await machine.add_exercise("bench-press")
    memory_store.fail_on.add("archive")

    with pytest.raises(StorageError):
        await machine.complete()
    assert machine.active is not None
    assert machine.active.ended_at is None

    memory_store.fail_on.clear()
    await machine.complete()
    assert len(memory_store.sessions) == 1


@pytest.mark.asyncio
async def test_restore_loads_persisted_session(memory_store, clock):
    first = WorkoutSessionMachine(memory_store, clock=clock)
    session = await first.start("Push")
    await first.add_exercise("bench-press")

    second = WorkoutSessionMachine(memory_store, ActiveSessionSlot(), clock=clock)
    restored = await second.restore()

    assert restored.id == session.id
    assert second.active.find_exercise("bench-press") is not None


@pytest.mark.asyncio
async def test_independent_slots_do_not_share_state(memory_store, clock):
    a = WorkoutSessionMachine(memory_store, ActiveSessionSlot(), clock=clock)
    b = WorkoutSessionMachine(memory_store, ActiveSessionSlot(), clock=clock)
    await a.start()
    assert b.active is None


@pytest.mark.asyncio
async def test_overlapping_add_set_calls_are_serialized(machine):
    await machine.start()
    await machine.add_exercise("squat")
    await asyncio.gather(*(machine.add_set("squat", r, 100) for r in range(1, 21)))

    sets = machine.active.find_exercise("squat").sets
    assert [s.reps for s in sets] == list(range(1, 21))


@pytest.mark.asyncio
async def test_duplicate_copies_exercises_without_sets(machine, memory_store):
    past = make_session(START - timedelta(days=3), {"bench-press": [(5, 100)], "squat": [(5, 140)]})
    memory_store.sessions.append(past)

    session = await machine.duplicate(past.id)

    assert session.id != past.id
    assert session.name == f"{past.name} (Copy)"
    assert [e.exercise_id for e in session.exercises] == ["bench-press", "squat"]
    assert all(e.sets == [] for e in session.exercises)
    with pytest.raises(AlreadyActiveError):
        await machine.duplicate(past.id)


@pytest.mark.asyncio
async def test_duplicate_unknown_session(machine):
    with pytest.raises(SessionNotFoundError):
        await machine.duplicate("missing")


@pytest.mark.asyncio
async def test_history_is_newest_first_with_paging(machine, memory_store):
    for day in (1, 3, 2):
        memory_store.sessions.append(make_session(START + timedelta(days=day), {"squat": [(5, 100)]}))

    history = await machine.history()
    assert [s.started_at.day for s in history] == [4, 3, 2]
    assert [s.started_at.day for s in await machine.history(limit=1, offset=1)] == [3]

    assert await machine.delete_from_history(history[0].id) is True
    assert await machine.delete_from_history(history[0].id) is False
    with pytest.raises(SessionNotFoundError):
        await machine.get_from_history(history[0].id)
