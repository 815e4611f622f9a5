"""Stored workout sessions: the active slot and the completed history."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.db.base import Base

ACTIVE_SLOT_KEY = "current"


class ActiveSessionRecord(Base):
    """The in-progress session. Single row keyed by ACTIVE_SLOT_KEY."""

    __tablename__ = "active_session"

    slot: Mapped[str] = mapped_column(String(20), primary_key=True, default=ACTIVE_SLOT_KEY)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False)
    # Full session document: {"id", "name", "started_at", "exercises": [...], ...}
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)


class HistoryRecord(Base):
    """A completed session. started_at is copied out of the payload for ordering."""

    __tablename__ = "session_history"
    __table_args__ = (Index("ix_session_history_started_at", "started_at"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ended_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
