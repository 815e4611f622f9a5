"""Health check endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from liftlog.api.deps import get_machine, get_store
from liftlog.core.exceptions import StorageError
from liftlog.services.session_store import SqlSessionStore
from liftlog.services.workout_session import WorkoutSessionMachine

router = APIRouter()


@router.get("")
async def health(machine: WorkoutSessionMachine = Depends(get_machine)):
    """Liveness, plus whether a workout is in progress."""
    active = machine.active
    return {"status": "ok", "active_session": active.id if active else None}


@router.get("/ready")
async def readiness(store: SqlSessionStore = Depends(get_store)):
    """Readiness: app + database reachable."""
    try:
        await store.load_active()
        return {"status": "ok", "database": "connected"}
    except StorageError as e:
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": e.message},
        )
