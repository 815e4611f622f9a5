"""Workout session state machine: Active -> Completed | Abandoned.

Every command works on a copy of the active session, writes the copy through the
store, and only then swaps it into the slot. A failed write leaves the slot as it was.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from loguru import logger
from pydantic import ValidationError

from liftlog.core.exceptions import (
    AlreadyActiveError,
    DuplicateExerciseError,
    EmptyWorkoutError,
    InvalidInputError,
    NoActiveSessionError,
    SessionNotFoundError,
    UnknownExerciseError,
)
from liftlog.schemas.workout import ExerciseEntry, WorkoutSession, WorkoutSet
from liftlog.services.session_store import SessionStore

Clock = Callable[[], datetime]

_SET_FIELDS = {"reps", "weight", "completed", "rest_time_seconds"}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ActiveSessionSlot:
    """Holder for the single in-progress session. Only the machine writes it."""

    def __init__(self, session: WorkoutSession | None = None) -> None:
        self.session = session

    def __repr__(self) -> str:
        return f"ActiveSessionSlot({self.session.id if self.session else None})"


def _invalid_set(e: ValidationError) -> InvalidInputError:
    fields = ", ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'set'}: {err['msg']}" for err in e.errors()
    )
    return InvalidInputError(f"Invalid set data: {fields}")


def build_set(**values: Any) -> WorkoutSet:
    """Validate set input, converting pydantic errors to InvalidInputError."""
    try:
        return WorkoutSet.model_validate(values)
    except ValidationError as e:
        raise _invalid_set(e) from e


class WorkoutSessionMachine:
    def __init__(
        self,
        store: SessionStore,
        slot: ActiveSessionSlot | None = None,
        clock: Clock = utc_now,
        default_rest_seconds: int = 120,
    ) -> None:
        self.store = store
        self.slot = slot if slot is not None else ActiveSessionSlot()
        self.clock = clock
        self.default_rest_seconds = default_rest_seconds
        # Commands run one at a time so read-modify-write never interleaves
        self._lock = asyncio.Lock()

    @property
    def active(self) -> WorkoutSession | None:
        return self.slot.session

    def _require_active(self) -> WorkoutSession:
        if self.slot.session is None:
            raise NoActiveSessionError()
        return self.slot.session

    async def _commit(self, updated: WorkoutSession) -> WorkoutSession:
        await self.store.save_active(updated)
        self.slot.session = updated
        return updated

    async def restore(self) -> WorkoutSession | None:
        """Load the persisted active session into the slot (app startup)."""
        async with self._lock:
            session = await self.store.load_active()
            if session is not None and session.ended_at is not None:
                logger.warning(f"Discarding completed session {session.id} found in active slot")
                await self.store.clear_active()
                session = None
            self.slot.session = session
            if session:
                logger.info(f"Restored active workout {session.id} ({len(session.exercises)} exercises)")
            return session

    async def start(self, name: str | None = None) -> WorkoutSession:
        async with self._lock:
            if self.slot.session is not None:
                raise AlreadyActiveError(self.slot.session.id)
            now = self.clock()
            session = WorkoutSession(
                id=str(uuid.uuid4()),
                name=(name or "").strip() or f"Workout {now:%Y-%m-%d %H:%M}",
                started_at=now,
            )
            await self._commit(session)
            logger.info(f"Started workout {session.id} '{session.name}'")
            return session

    async def add_exercise(self, exercise_id: str) -> WorkoutSession:
        async with self._lock:
            current = self._require_active()
            if not exercise_id:
                raise InvalidInputError("Exercise id is required")
            if current.find_exercise(exercise_id) is not None:
                raise DuplicateExerciseError(exercise_id)
            updated = current.model_copy(deep=True)
            updated.exercises.append(
                ExerciseEntry(exercise_id=exercise_id, rest_time_seconds=self.default_rest_seconds)
            )
            logger.debug(f"Workout {current.id}: added exercise {exercise_id}")
            return await self._commit(updated)

    async def add_set(
        self, exercise_id: str, reps: Any, weight: Any, completed: bool = True
    ) -> WorkoutSet:
        async with self._lock:
            current = self._require_active()
            if current.find_exercise(exercise_id) is None:
                raise UnknownExerciseError(exercise_id)
            new_set = build_set(reps=reps, weight=weight, completed=completed)
            updated = current.model_copy(deep=True)
            updated.find_exercise(exercise_id).sets.append(new_set)
            await self._commit(updated)
            logger.debug(f"Workout {current.id}: {exercise_id} set {new_set.reps}x{new_set.weight}")
            return new_set

    async def update_set(self, exercise_id: str, index: int, **changes: Any) -> WorkoutSet:
        """Replace set `index` with a re-validated copy carrying `changes`."""
        async with self._lock:
            current = self._require_active()
            entry = current.find_exercise(exercise_id)
            if entry is None:
                raise UnknownExerciseError(exercise_id)
            if not 0 <= index < len(entry.sets):
                raise InvalidInputError(f"Set index {index} out of range for {exercise_id}")
            unknown = set(changes) - _SET_FIELDS
            if unknown:
                raise InvalidInputError(f"Unknown set fields: {', '.join(sorted(unknown))}")
            values = {k: v for k, v in changes.items() if v is not None}
            new_set = build_set(**{**entry.sets[index].model_dump(), **values})
            updated = current.model_copy(deep=True)
            updated.find_exercise(exercise_id).sets[index] = new_set
            await self._commit(updated)
            return new_set

    async def update_exercise_notes(self, exercise_id: str, notes: str) -> bool:
        async with self._lock:
            current = self.slot.session
            if current is None or current.find_exercise(exercise_id) is None:
                return False
            updated = current.model_copy(deep=True)
            updated.find_exercise(exercise_id).notes = notes.strip()
            await self._commit(updated)
            return True

    async def remove_exercise(self, exercise_id: str) -> bool:
        """Best-effort: False when there is nothing to remove."""
        async with self._lock:
            current = self.slot.session
            if current is None or current.find_exercise(exercise_id) is None:
                return False
            updated = current.model_copy(deep=True)
            updated.exercises = [e for e in updated.exercises if e.exercise_id != exercise_id]
            await self._commit(updated)
            logger.debug(f"Workout {current.id}: removed exercise {exercise_id}")
            return True

    async def remove_set(self, exercise_id: str, index: int) -> bool:
        """Best-effort: False when the exercise or index is absent."""
        async with self._lock:
            current = self.slot.session
            if current is None:
                return False
            entry = current.find_exercise(exercise_id)
            if entry is None or not 0 <= index < len(entry.sets):
                return False
            updated = current.model_copy(deep=True)
            del updated.find_exercise(exercise_id).sets[index]
            await self._commit(updated)
            return True

    async def complete(self) -> WorkoutSession:
        async with self._lock:
            current = self._require_active()
            if not current.exercises:
                raise EmptyWorkoutError()
            now = self.clock()
            if now <= current.started_at:
                # clock resolution can report the start instant again
                now = current.started_at + timedelta(microseconds=1)
            completed = WorkoutSession.model_validate({**current.model_dump(), "ended_at": now})
            await self.store.archive(completed)
            self.slot.session = None
            logger.info(
                f"Completed workout {completed.id}: {completed.total_sets} sets, "
                f"volume {completed.total_volume:g}"
            )
            return completed

    async def abandon(self) -> bool:
        async with self._lock:
            current = self.slot.session
            if current is None:
                return False
            await self.store.clear_active()
            self.slot.session = None
            logger.info(f"Abandoned workout {current.id}")
            return True

    async def duplicate(self, session_id: str) -> WorkoutSession:
        """Start a new workout with the exercises (not the sets) of a past one."""
        async with self._lock:
            if self.slot.session is not None:
                raise AlreadyActiveError(self.slot.session.id)
            original = await self.store.get_history(session_id)
            if original is None:
                raise SessionNotFoundError(session_id)
            session = WorkoutSession(
                id=str(uuid.uuid4()),
                name=f"{original.name} (Copy)",
                started_at=self.clock(),
                exercises=[e.model_copy(update={"sets": []}) for e in original.exercises],
            )
            await self._commit(session)
            logger.info(f"Started workout {session.id} from {original.id}")
            return session

    async def history(self, limit: int | None = None, offset: int = 0) -> list[WorkoutSession]:
        sessions = await self.store.list_history()
        sessions.sort(key=lambda s: s.started_at, reverse=True)
        end = offset + limit if limit is not None else None
        return sessions[offset:end]

    async def get_from_history(self, session_id: str) -> WorkoutSession:
        session = await self.store.get_history(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def delete_from_history(self, session_id: str) -> bool:
        async with self._lock:
            removed = await self.store.remove_history(session_id)
            if removed:
                logger.info(f"Deleted workout {session_id} from history")
            return removed
