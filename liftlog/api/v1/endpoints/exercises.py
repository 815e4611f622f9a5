"""Exercise catalog endpoints (read-only)."""

from fastapi import APIRouter, Depends, HTTPException

from liftlog.api.deps import get_catalog
from liftlog.core.enums import ExerciseCategory
from liftlog.schemas.exercise import ExerciseInfo
from liftlog.services.exercise_catalog import JsonExerciseCatalog

router = APIRouter()


@router.get("", response_model=list[ExerciseInfo])
async def list_exercises(
    q: str | None = None,
    muscle_group: str | None = None,
    equipment: str | None = None,
    category: ExerciseCategory | None = None,
    catalog: JsonExerciseCatalog = Depends(get_catalog),
):
    """List exercises, optionally filtered by name, muscle group, equipment or category."""
    return catalog.search(q, muscle_group=muscle_group, equipment=equipment, category=category)


@router.get("/{exercise_id}", response_model=ExerciseInfo)
async def get_exercise(exercise_id: str, catalog: JsonExerciseCatalog = Depends(get_catalog)):
    exercise = catalog.get_by_id(exercise_id)
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise
