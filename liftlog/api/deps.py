"""Request dependencies: services created in the app lifespan."""

from fastapi import Request

from liftlog.services.exercise_catalog import JsonExerciseCatalog
from liftlog.services.progress_analytics import ProgressService
from liftlog.services.session_store import SqlSessionStore
from liftlog.services.workout_session import WorkoutSessionMachine


def get_machine(request: Request) -> WorkoutSessionMachine:
    return request.app.state.machine


def get_progress(request: Request) -> ProgressService:
    return request.app.state.progress


def get_catalog(request: Request) -> JsonExerciseCatalog:
    return request.app.state.catalog


def get_store(request: Request) -> SqlSessionStore:
    return request.app.state.store
