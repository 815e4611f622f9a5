"""Completed workout history."""

from fastapi import APIRouter, Depends, HTTPException, Query

from liftlog.api.deps import get_machine
from liftlog.schemas.workout import WorkoutSession
from liftlog.services.workout_session import WorkoutSessionMachine

router = APIRouter()


@router.get("", response_model=list[WorkoutSession])
async def list_history(
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    machine: WorkoutSessionMachine = Depends(get_machine),
):
    """Completed workouts, most recent first."""
    return await machine.history(limit=limit, offset=offset)


@router.get("/{session_id}", response_model=WorkoutSession)
async def get_session(session_id: str, machine: WorkoutSessionMachine = Depends(get_machine)):
    return await machine.get_from_history(session_id)


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str, machine: WorkoutSessionMachine = Depends(get_machine)):
    if not await machine.delete_from_history(session_id):
        raise HTTPException(status_code=404, detail="Workout not found")
    return None


@router.post("/{session_id}/duplicate", response_model=WorkoutSession, status_code=201)
async def duplicate_session(session_id: str, machine: WorkoutSessionMachine = Depends(get_machine)):
    """Start a new workout with the same exercises (sets are not copied)."""
    return await machine.duplicate(session_id)
