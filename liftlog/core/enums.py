"""Shared enums for models, analytics and API."""

from enum import Enum


class SessionState(str, Enum):
    """Lifecycle of a workout session as stored."""

    ACTIVE = "active"
    COMPLETED = "completed"


class TrendDirection(str, Enum):
    """Direction of a series, first value vs last."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class IntensityCategory(str, Enum):
    """Rep-range bucket of a set."""

    LIGHT = "light"  # 15+ reps
    MODERATE = "moderate"  # 8-14
    HEAVY = "heavy"  # 3-7
    MAX = "max"  # 1-2


class ExerciseCategory(str, Enum):
    """Catalog category of an exercise."""

    STRENGTH = "strength"
    CARDIO = "cardio"
    FLEXIBILITY = "flexibility"
    SPORTS = "sports"


class ErrorKind(str, Enum):
    """Failure taxonomy of the workout core."""

    INVALID_INPUT = "invalid_input"
    DUPLICATE_EXERCISE = "duplicate_exercise"
    UNKNOWN_EXERCISE = "unknown_exercise"
    NO_ACTIVE_SESSION = "no_active_session"
    ALREADY_ACTIVE = "already_active"
    EMPTY_WORKOUT = "empty_workout"
    SESSION_NOT_FOUND = "session_not_found"
    STORAGE_FAILURE = "storage_failure"
