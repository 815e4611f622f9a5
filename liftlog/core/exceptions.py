"""Workout core errors, one class per ErrorKind."""

from liftlog.core.enums import ErrorKind


class WorkoutError(Exception):
    """Base error. `recoverable` errors may succeed if the caller retries."""

    kind: ErrorKind
    recoverable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(WorkoutError):
    kind = ErrorKind.INVALID_INPUT


class DuplicateExerciseError(WorkoutError):
    kind = ErrorKind.DUPLICATE_EXERCISE

    def __init__(self, exercise_id: str) -> None:
        super().__init__(f"Exercise {exercise_id} is already in the workout")
        self.exercise_id = exercise_id


class UnknownExerciseError(WorkoutError):
    kind = ErrorKind.UNKNOWN_EXERCISE

    def __init__(self, exercise_id: str) -> None:
        super().__init__(f"Exercise {exercise_id} is not in the workout")
        self.exercise_id = exercise_id


class NoActiveSessionError(WorkoutError):
    kind = ErrorKind.NO_ACTIVE_SESSION

    def __init__(self, message: str = "No active workout") -> None:
        super().__init__(message)


class AlreadyActiveError(WorkoutError):
    kind = ErrorKind.ALREADY_ACTIVE

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Workout {session_id} is already in progress")
        self.session_id = session_id


class EmptyWorkoutError(WorkoutError):
    kind = ErrorKind.EMPTY_WORKOUT

    def __init__(self) -> None:
        super().__init__("Cannot complete workout with no exercises")


class SessionNotFoundError(WorkoutError):
    kind = ErrorKind.SESSION_NOT_FOUND

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Workout {session_id} not found in history")
        self.session_id = session_id


class StorageError(WorkoutError):
    kind = ErrorKind.STORAGE_FAILURE
    recoverable = True

    def __init__(self, message: str, recoverable: bool = True) -> None:
        super().__init__(message)
        self.recoverable = recoverable
