"""Exercise catalog schemas."""

from pydantic import BaseModel, Field

from liftlog.core.enums import ExerciseCategory


class ExerciseInfo(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    muscle_groups: list[str] = []
    equipment: list[str] = []
    category: ExerciseCategory = ExerciseCategory.STRENGTH
    instructions: str = ""
