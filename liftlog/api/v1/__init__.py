"""API v1 router aggregation."""

from fastapi import APIRouter

from liftlog.api.v1.endpoints import analytics, exercises, health, history, session

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(session.router, prefix="/session", tags=["session"])
api_router.include_router(history.router, prefix="/history", tags=["history"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
