"""Progress analytics: per-exercise progress, frequency, PRs, volume, consistency, strength."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from liftlog.api.deps import get_progress
from liftlog.schemas.analytics import (
    ConsistencyMetrics,
    FrequencyData,
    PersonalRecord,
    ProgressMetrics,
    StrengthProgression,
    TimeRange,
    VolumeData,
)
from liftlog.services.progress_analytics import ProgressService

router = APIRouter()


def _time_range(
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    progress: ProgressService = Depends(get_progress),
) -> TimeRange:
    """from_date/to_date query params; defaults to the last default_range_days."""
    try:
        return progress.time_range(from_date, to_date)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail="from_date must not be after to_date") from e


@router.get("/progress/{exercise_id}", response_model=ProgressMetrics)
async def exercise_progress(
    exercise_id: str,
    time_range: TimeRange = Depends(_time_range),
    progress: ProgressService = Depends(get_progress),
):
    return await progress.exercise_progress(exercise_id, time_range)


@router.get("/frequency", response_model=FrequencyData)
async def workout_frequency(
    time_range: TimeRange = Depends(_time_range),
    progress: ProgressService = Depends(get_progress),
):
    """Workouts per week and streaks (sessions at most 7 days apart)."""
    return await progress.workout_frequency(time_range)


@router.get("/personal-records", response_model=list[PersonalRecord])
async def personal_records(progress: ProgressService = Depends(get_progress)):
    """All-time bests for every exercise in history."""
    return await progress.personal_records()


@router.get("/personal-records/{exercise_id}", response_model=PersonalRecord)
async def exercise_personal_record(exercise_id: str, progress: ProgressService = Depends(get_progress)):
    record = await progress.exercise_personal_record(exercise_id)
    if record is None:
        raise HTTPException(status_code=404, detail="No records for this exercise")
    return record


@router.get("/volume", response_model=VolumeData)
async def total_volume(
    time_range: TimeRange = Depends(_time_range),
    progress: ProgressService = Depends(get_progress),
):
    return await progress.total_volume(time_range)


@router.get("/consistency", response_model=ConsistencyMetrics)
async def consistency(
    time_range: TimeRange = Depends(_time_range),
    progress: ProgressService = Depends(get_progress),
):
    return await progress.consistency_metrics(time_range)


@router.get("/strength/{exercise_id}", response_model=StrengthProgression)
async def strength_progression(
    exercise_id: str,
    time_range: TimeRange = Depends(_time_range),
    progress: ProgressService = Depends(get_progress),
):
    """Per-session max weight, estimated 1RM and volume for charting."""
    return await progress.strength_progression(exercise_id, time_range)
