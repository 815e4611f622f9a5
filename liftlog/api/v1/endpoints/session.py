"""Active workout session commands."""

from fastapi import APIRouter, Depends, HTTPException

from liftlog.api.deps import get_machine
from liftlog.schemas.workout import (
    ExerciseAdd,
    ExerciseNotesUpdate,
    SessionStart,
    WorkoutSession,
    WorkoutSet,
    WorkoutSetCreate,
    WorkoutSetUpdate,
)
from liftlog.services.workout_session import WorkoutSessionMachine

router = APIRouter()


@router.post("", response_model=WorkoutSession, status_code=201)
async def start_session(
    payload: SessionStart | None = None,
    machine: WorkoutSessionMachine = Depends(get_machine),
):
    """Start a new workout. 409 if one is already in progress."""
    return await machine.start(payload.name if payload else None)


@router.get("", response_model=WorkoutSession)
async def get_active_session(machine: WorkoutSessionMachine = Depends(get_machine)):
    if machine.active is None:
        raise HTTPException(status_code=404, detail="No active workout")
    return machine.active


@router.post("/exercises", response_model=WorkoutSession, status_code=201)
async def add_exercise(payload: ExerciseAdd, machine: WorkoutSessionMachine = Depends(get_machine)):
    return await machine.add_exercise(payload.exercise_id)


@router.patch("/exercises/{exercise_id}")
async def update_exercise_notes(
    exercise_id: str,
    payload: ExerciseNotesUpdate,
    machine: WorkoutSessionMachine = Depends(get_machine),
):
    return {"updated": await machine.update_exercise_notes(exercise_id, payload.notes)}


@router.delete("/exercises/{exercise_id}")
async def remove_exercise(exercise_id: str, machine: WorkoutSessionMachine = Depends(get_machine)):
    """Remove an exercise and its sets. Reports removed=false if it was not there."""
    return {"removed": await machine.remove_exercise(exercise_id)}


@router.post("/exercises/{exercise_id}/sets", response_model=WorkoutSet, status_code=201)
async def add_set(
    exercise_id: str,
    payload: WorkoutSetCreate,
    machine: WorkoutSessionMachine = Depends(get_machine),
):
    return await machine.add_set(exercise_id, payload.reps, payload.weight, completed=payload.completed)


@router.patch("/exercises/{exercise_id}/sets/{index}", response_model=WorkoutSet)
async def update_set(
    exercise_id: str,
    index: int,
    payload: WorkoutSetUpdate,
    machine: WorkoutSessionMachine = Depends(get_machine),
):
    return await machine.update_set(exercise_id, index, **payload.model_dump(exclude_unset=True))


@router.delete("/exercises/{exercise_id}/sets/{index}")
async def remove_set(exercise_id: str, index: int, machine: WorkoutSessionMachine = Depends(get_machine)):
    return {"removed": await machine.remove_set(exercise_id, index)}


@router.post("/complete", response_model=WorkoutSession)
async def complete_session(machine: WorkoutSessionMachine = Depends(get_machine)):
    """Finish the workout and move it into history."""
    return await machine.complete()


@router.post("/abandon")
async def abandon_session(machine: WorkoutSessionMachine = Depends(get_machine)):
    """Discard the workout without saving it to history."""
    return {"abandoned": await machine.abandon()}
