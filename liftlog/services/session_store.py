"""Durable storage for the active session slot and the completed-session history."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from liftlog.core.exceptions import StorageError
from liftlog.models.session_record import ACTIVE_SLOT_KEY, ActiveSessionRecord, HistoryRecord
from liftlog.schemas.workout import WorkoutSession

T = TypeVar("T")


class SessionStore(Protocol):
    """What the workout core needs from persistence. Failures raise StorageError."""

    async def load_active(self) -> WorkoutSession | None: ...

    async def save_active(self, session: WorkoutSession) -> None: ...

    async def clear_active(self) -> None: ...

    async def append_history(self, session: WorkoutSession) -> None: ...

    async def archive(self, session: WorkoutSession) -> None: ...

    async def list_history(self) -> list[WorkoutSession]: ...

    async def get_history(self, session_id: str) -> WorkoutSession | None: ...

    async def remove_history(self, session_id: str) -> bool: ...


class SqlSessionStore:
    """SessionStore on an async SQLAlchemy engine. Each call is its own transaction."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        retry_attempts: int = 3,
        retry_delay_seconds: float = 0.2,
    ) -> None:
        self._session_maker = session_maker
        self._retry_attempts = max(1, retry_attempts)
        self._retry_delay = retry_delay_seconds

    async def _run(self, operation: str, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run fn in a fresh transaction, retrying database errors a bounded number of times.

        Constraint violations and unreadable payloads fail at once: a retry cannot fix them.
        """
        last_error: SQLAlchemyError | None = None
        for attempt in range(1, self._retry_attempts + 1):
            try:
                async with self._session_maker() as db:
                    async with db.begin():
                        return await fn(db)
            except IntegrityError as e:
                logger.error(f"event=storage_rejected op={operation} error={e.orig}")
                raise StorageError(f"Storage operation {operation} rejected: {e.orig}", recoverable=False) from e
            except ValidationError as e:
                logger.error(f"event=storage_corrupt op={operation} errors={e.error_count()}")
                raise StorageError(f"Stored workout data is unreadable ({operation})", recoverable=False) from e
            except SQLAlchemyError as e:
                last_error = e
                logger.warning(f"event=storage_retry op={operation} attempt={attempt} error={e}")
                if attempt < self._retry_attempts:
                    await asyncio.sleep(self._retry_delay)
        logger.error(f"event=storage_failed op={operation} attempts={self._retry_attempts}")
        raise StorageError(f"Storage operation {operation} failed: {last_error}") from last_error

    async def load_active(self) -> WorkoutSession | None:
        async def _load(db: AsyncSession) -> WorkoutSession | None:
            record = await db.get(ActiveSessionRecord, ACTIVE_SLOT_KEY)
            if record is None:
                return None
            return WorkoutSession.model_validate(record.payload)

        return await self._run("load_active", _load)

    async def save_active(self, session: WorkoutSession) -> None:
        async def _save(db: AsyncSession) -> None:
            await db.merge(
                ActiveSessionRecord(
                    slot=ACTIVE_SLOT_KEY,
                    session_id=session.id,
                    payload=session.model_dump(mode="json"),
                )
            )

        await self._run("save_active", _save)

    async def clear_active(self) -> None:
        async def _clear(db: AsyncSession) -> None:
            await db.execute(delete(ActiveSessionRecord).where(ActiveSessionRecord.slot == ACTIVE_SLOT_KEY))

        await self._run("clear_active", _clear)

    @staticmethod
    def _history_record(session: WorkoutSession) -> HistoryRecord:
        if session.ended_at is None:
            raise ValueError(f"Workout {session.id} is not completed")
        return HistoryRecord(
            id=session.id,
            started_at=session.started_at,
            ended_at=session.ended_at,
            payload=session.model_dump(mode="json"),
        )

    async def append_history(self, session: WorkoutSession) -> None:
        self._history_record(session)

        async def _append(db: AsyncSession) -> None:
            db.add(self._history_record(session))

        await self._run("append_history", _append)

    async def archive(self, session: WorkoutSession) -> None:
        """Append to history and clear the active slot in one transaction."""
        self._history_record(session)

        async def _archive(db: AsyncSession) -> None:
            db.add(self._history_record(session))
            await db.execute(delete(ActiveSessionRecord).where(ActiveSessionRecord.slot == ACTIVE_SLOT_KEY))

        await self._run("archive", _archive)

    async def list_history(self) -> list[WorkoutSession]:
        """All completed sessions, most recent first."""

        async def _list(db: AsyncSession) -> list[WorkoutSession]:
            result = await db.execute(select(HistoryRecord.payload).order_by(HistoryRecord.started_at.desc()))
            return [WorkoutSession.model_validate(p) for p in result.scalars().all()]

        return await self._run("list_history", _list)

    async def get_history(self, session_id: str) -> WorkoutSession | None:
        async def _get(db: AsyncSession) -> WorkoutSession | None:
            record = await db.get(HistoryRecord, session_id)
            return WorkoutSession.model_validate(record.payload) if record else None

        return await self._run("get_history", _get)

    async def remove_history(self, session_id: str) -> bool:
        async def _remove(db: AsyncSession) -> bool:
            result = await db.execute(delete(HistoryRecord).where(HistoryRecord.id == session_id))
            return bool(result.rowcount)

        return await self._run("remove_history", _remove)
