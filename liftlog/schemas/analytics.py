"""Read-only analytics records. Recomputed per request, never persisted."""

from datetime import datetime

from pydantic import BaseModel, field_validator, model_validator

from liftlog.core.enums import TrendDirection
from liftlog.schemas.workout import ensure_utc


class TimeRange(BaseModel):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _ordered(self) -> "TimeRange":
        if self.end < self.start:
            raise ValueError("time range end must not be before start")
        return self

    def contains(self, moment: datetime) -> bool:
        return self.start <= ensure_utc(moment) <= self.end


class ProgressMetrics(BaseModel):
    exercise_id: str
    exercise_name: str
    one_rep_max: float = 0.0
    total_volume: float = 0.0
    average_weight: float = 0.0
    total_sets: int = 0
    total_reps: int = 0
    progress_percentage: float = 0.0


class PersonalRecord(BaseModel):
    """Best-ever values for one exercise. Each dimension carries its own date."""

    exercise_id: str
    exercise_name: str
    max_weight: float
    max_weight_date: datetime
    max_reps: int
    max_reps_date: datetime
    max_volume: float
    max_volume_date: datetime
    one_rep_max: float
    one_rep_max_date: datetime
    achieved_at: datetime


class FrequencyData(BaseModel):
    total_workouts: int = 0
    average_per_week: float = 0.0
    longest_streak: int = 0
    current_streak: int = 0
    workout_dates: list[datetime] = []


class VolumePoint(BaseModel):
    date: datetime
    volume: float


class VolumeData(BaseModel):
    time_range: TimeRange
    total_volume: float = 0.0
    volume_by_date: list[VolumePoint] = []
    trend_direction: TrendDirection = TrendDirection.STABLE


class ConsistencyMetrics(BaseModel):
    workout_days: int = 0
    total_days: int = 0
    consistency_percentage: float = 0.0
    average_workouts_per_week: float = 0.0
    missed_days: int = 0


class StrengthPoint(BaseModel):
    date: datetime
    weight: float
    one_rep_max: float
    volume: float


class StrengthProgression(BaseModel):
    exercise_id: str
    exercise_name: str
    data_points: list[StrengthPoint] = []
    trend_direction: TrendDirection = TrendDirection.STABLE
    progress_rate: float = 0.0  # % 1RM change per week
