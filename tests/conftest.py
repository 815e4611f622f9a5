import copy
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from liftlog.core.config import Settings
from liftlog.core.exceptions import StorageError
from liftlog.db.session import build_engine, build_session_maker, create_tables
from liftlog.schemas.exercise import ExerciseInfo
from liftlog.schemas.workout import ExerciseEntry, WorkoutSession, WorkoutSet
from liftlog.services.exercise_catalog import JsonExerciseCatalog
from liftlog.services.session_store import SqlSessionStore
from liftlog.services.workout_session import ActiveSessionSlot, WorkoutSessionMachine

START = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Returns `now`, then moves it forward by `step` on every call."""

    def __init__(self, now: datetime = START, step: timedelta = timedelta(minutes=1)) -> None:
        self.now = now
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


class MemorySessionStore:
    """In-memory SessionStore. Set fail_on to an operation name to make it raise StorageError."""

    def __init__(self) -> None:
        self.active: WorkoutSession | None = None
        self.sessions: list[WorkoutSession] = []
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise StorageError(f"{name} unavailable")

    async def load_active(self):
        self._call("load_active")
        return copy.deepcopy(self.active)

    async def save_active(self, session):
        self._call("save_active")
        self.active = copy.deepcopy(session)

    async def clear_active(self):
        self._call("clear_active")
        self.active = None

    async def append_history(self, session):
        self._call("append_history")
        self.sessions.insert(0, copy.deepcopy(session))

    async def archive(self, session):
        self._call("archive")
        self.sessions.insert(0, copy.deepcopy(session))
        self.active = None

    async def list_history(self):
        self._call("list_history")
        return copy.deepcopy(self.sessions)

    async def get_history(self, session_id):
        self._call("get_history")
        return next((copy.deepcopy(s) for s in self.sessions if s.id == session_id), None)

    async def remove_history(self, session_id):
        self._call("remove_history")
        before = len(self.sessions)
        self.sessions = [s for s in self.sessions if s.id != session_id]
        return len(self.sessions) != before


def make_session(
    started_at: datetime,
    exercises: dict[str, list[tuple[int, float]]],
    session_id: str | None = None,
    duration: timedelta = timedelta(hours=1),
) -> WorkoutSession:
    """Completed session from {exercise_id: [(reps, weight), ...]}."""
    return WorkoutSession(
        id=session_id or f"w-{started_at:%Y%m%d%H%M}",
        name=f"Workout {started_at:%Y-%m-%d}",
        started_at=started_at,
        ended_at=started_at + duration,
        exercises=[
            ExerciseEntry(exercise_id=ex_id, sets=[WorkoutSet(reps=r, weight=w) for r, w in sets])
            for ex_id, sets in exercises.items()
        ],
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return MemorySessionStore()


@pytest.fixture
def machine(memory_store, clock):
    return WorkoutSessionMachine(memory_store, ActiveSessionSlot(), clock=clock)


@pytest.fixture
def catalog():
    return JsonExerciseCatalog(
        [
            ExerciseInfo(id="bench-press", name="Bench Press", muscle_groups=["chest"], equipment=["barbell"]),
            ExerciseInfo(id="squat", name="Back Squat", muscle_groups=["legs"], equipment=["barbell"]),
        ]
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_path=tmp_path / "liftlog-test.db",
        storage_retry_attempts=2,
        storage_retry_delay_seconds=0,
    )


@pytest_asyncio.fixture
async def sql_store(settings):
    engine = build_engine(settings)
    await create_tables(engine)
    yield SqlSessionStore(build_session_maker(engine), retry_attempts=2, retry_delay_seconds=0)
    await engine.dispose()
