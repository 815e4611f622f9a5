"""Workout session, exercise entry and set schemas."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from liftlog.core.constants import MAX_REPS, MAX_REST_SECONDS, MAX_WEIGHT
from liftlog.core.enums import IntensityCategory, SessionState


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix naive and aware."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def intensity_category(reps: int) -> IntensityCategory:
    if reps >= 15:
        return IntensityCategory.LIGHT
    if reps >= 8:
        return IntensityCategory.MODERATE
    if reps >= 3:
        return IntensityCategory.HEAVY
    return IntensityCategory.MAX


class WorkoutSet(BaseModel):
    """One recorded set. Frozen: changes go through WorkoutSessionMachine.update_set."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    # strict: no coercion of "10", 10.0 or True into a rep count
    reps: int = Field(..., gt=0, le=MAX_REPS, strict=True)
    weight: float = Field(..., ge=0, le=MAX_WEIGHT, strict=True)
    completed: bool = Field(default=True, strict=True)
    rest_time_seconds: float = Field(default=0, ge=0, le=MAX_REST_SECONDS, strict=True)

    @property
    def volume(self) -> float:
        return self.reps * self.weight

    @computed_field  # type: ignore[prop-decorator]
    @property
    def intensity(self) -> IntensityCategory:
        return intensity_category(self.reps)


class ExerciseEntry(BaseModel):
    exercise_id: str = Field(..., min_length=1)
    sets: list[WorkoutSet] = []
    rest_time_seconds: int = Field(default=120, ge=0, le=MAX_REST_SECONDS)
    notes: str = ""


class WorkoutSession(BaseModel):
    """One workout attempt. ended_at is None while active; once set the session is final."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    started_at: datetime
    ended_at: datetime | None = None
    exercises: list[ExerciseEntry] = []
    notes: str = ""

    @field_validator("started_at", "ended_at")
    @classmethod
    def _aware(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    @model_validator(mode="after")
    def _check_invariants(self) -> "WorkoutSession":
        ids = [e.exercise_id for e in self.exercises]
        if len(ids) != len(set(ids)):
            raise ValueError("exercise ids must be unique within a session")
        if self.ended_at is not None and self.ended_at <= self.started_at:
            raise ValueError("ended_at must be after started_at")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def state(self) -> SessionState:
        return SessionState.ACTIVE if self.ended_at is None else SessionState.COMPLETED

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_volume(self) -> float:
        return sum(s.volume for e in self.exercises for s in e.sets)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_sets(self) -> int:
        return sum(len(e.sets) for e in self.exercises)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def duration_seconds(self) -> int | None:
        if self.ended_at is None:
            return None
        return int((self.ended_at - self.started_at).total_seconds())

    def find_exercise(self, exercise_id: str) -> ExerciseEntry | None:
        return next((e for e in self.exercises if e.exercise_id == exercise_id), None)


# Request bodies. Set values are typed Any so raw JSON reaches the session
# machine's strict WorkoutSet check and fails there as invalid_input.


class SessionStart(BaseModel):
    name: str | None = None


class ExerciseAdd(BaseModel):
    exercise_id: str


class ExerciseNotesUpdate(BaseModel):
    notes: str


class WorkoutSetCreate(BaseModel):
    reps: Any
    weight: Any
    completed: Any = True


class WorkoutSetUpdate(BaseModel):
    reps: Any = None
    weight: Any = None
    completed: Any = None
    rest_time_seconds: Any = None
