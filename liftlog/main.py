"""FastAPI application factory and lifespan."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from liftlog.api.v1 import api_router
from liftlog.core.config import Settings, get_settings
from liftlog.core.enums import ErrorKind
from liftlog.core.exceptions import WorkoutError
from liftlog.core.logging import configure_logging
from liftlog.db.session import build_engine, build_session_maker, create_tables
from liftlog.services.exercise_catalog import JsonExerciseCatalog
from liftlog.services.progress_analytics import ProgressService
from liftlog.services.session_store import SqlSessionStore
from liftlog.services.workout_session import WorkoutSessionMachine

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 422,
    ErrorKind.DUPLICATE_EXERCISE: 409,
    ErrorKind.UNKNOWN_EXERCISE: 404,
    ErrorKind.NO_ACTIVE_SESSION: 409,
    ErrorKind.ALREADY_ACTIVE: 409,
    ErrorKind.EMPTY_WORKOUT: 400,
    ErrorKind.SESSION_NOT_FOUND: 404,
    ErrorKind.STORAGE_FAILURE: 503,
}


def create_application(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup: open the database, restore the active workout; shutdown: dispose engine."""
        engine = build_engine(settings)
        if settings.create_tables:
            await create_tables(engine)
        store = SqlSessionStore(
            build_session_maker(engine),
            retry_attempts=settings.storage_retry_attempts,
            retry_delay_seconds=settings.storage_retry_delay_seconds,
        )
        catalog = JsonExerciseCatalog.from_file(settings.catalog_path)
        machine = WorkoutSessionMachine(store, default_rest_seconds=settings.default_rest_seconds)
        await machine.restore()

        app.state.engine = engine
        app.state.store = store
        app.state.catalog = catalog
        app.state.machine = machine
        app.state.progress = ProgressService(
            store,
            catalog,
            clock=machine.clock,
            default_range_days=settings.default_range_days,
            tz=settings.tzinfo,
        )
        logger.info(f"{settings.app_name} ready, database {settings.database_path}")
        yield
        await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    # Local single-user app: the UI runs on this machine
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else ["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(WorkoutError)
    async def workout_error_handler(request: Request, exc: WorkoutError) -> JSONResponse:
        status = ERROR_STATUS.get(exc.kind, 400)
        if exc.recoverable:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=status,
            content={"error": exc.kind.value, "detail": exc.message, "recoverable": exc.recoverable},
        )

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


app = create_application()
