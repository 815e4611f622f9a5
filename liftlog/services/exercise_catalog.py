"""Read-only exercise catalog loaded from a bundled JSON file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from loguru import logger
from pydantic import TypeAdapter

from liftlog.core.enums import ExerciseCategory
from liftlog.schemas.exercise import ExerciseInfo

_exercise_list = TypeAdapter(list[ExerciseInfo])


class ExerciseCatalog(Protocol):
    def get_by_id(self, exercise_id: str) -> ExerciseInfo | None: ...


class JsonExerciseCatalog:
    """In-memory catalog. Lookups are by exact id; filters are case-insensitive."""

    def __init__(self, exercises: list[ExerciseInfo]) -> None:
        self._by_id: dict[str, ExerciseInfo] = {e.id: e for e in exercises}

    @classmethod
    def from_file(cls, path: Path) -> "JsonExerciseCatalog":
        exercises = _exercise_list.validate_python(json.loads(path.read_text(encoding="utf-8")))
        logger.info(f"Loaded {len(exercises)} exercises from {path}")
        return cls(exercises)

    def get_by_id(self, exercise_id: str) -> ExerciseInfo | None:
        return self._by_id.get(exercise_id)

    def all(self) -> list[ExerciseInfo]:
        return sorted(self._by_id.values(), key=lambda e: e.name)

    def search(
        self,
        query: str | None = None,
        muscle_group: str | None = None,
        equipment: str | None = None,
        category: ExerciseCategory | None = None,
    ) -> list[ExerciseInfo]:
        """Filter by name/muscle substring, muscle group, equipment and category (all optional, ANDed)."""
        results = self.all()
        if query:
            q = query.strip().lower()
            results = [
                e for e in results
                if q in e.name.lower() or any(q in m.lower() for m in e.muscle_groups)
            ]
        if muscle_group:
            mg = muscle_group.lower()
            results = [e for e in results if mg in (m.lower() for m in e.muscle_groups)]
        if equipment:
            eq = equipment.lower()
            results = [e for e in results if eq in (x.lower() for x in e.equipment)]
        if category:
            results = [e for e in results if e.category == category]
        return results
