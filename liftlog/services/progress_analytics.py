"""Progress analytics: volume, 1RM, streaks, consistency, personal records.

Module-level functions are pure: they take the session history, a time range and
(where needed) `now`, and never touch storage or the system clock. ProgressService
wires them to a SessionStore, an ExerciseCatalog and a clock.

Only completed sessions count. Time-range filters are inclusive on both ends and
apply to `started_at`. Calendar days are taken in the device timezone `tz` (the
timestamp's own zone when None). Empty input yields zero-valued records, never an error.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta, tzinfo

from loguru import logger

from liftlog.core.constants import BRZYCKI_MAX_REPS, STREAK_GAP_DAYS, TREND_THRESHOLD
from liftlog.core.enums import TrendDirection
from liftlog.schemas.analytics import (
    ConsistencyMetrics,
    FrequencyData,
    PersonalRecord,
    ProgressMetrics,
    StrengthPoint,
    StrengthProgression,
    TimeRange,
    VolumeData,
    VolumePoint,
)
from liftlog.schemas.workout import ExerciseEntry, WorkoutSession
from liftlog.services.exercise_catalog import ExerciseCatalog
from liftlog.services.session_store import SessionStore
from liftlog.services.workout_session import Clock, utc_now

_WEEK_SECONDS = 7 * 24 * 60 * 60


def one_rep_max(reps: int, weight: float) -> float:
    """Brzycki estimate. Above 36 reps the formula is not extrapolated: 1RM = weight."""
    if reps <= 0:
        return 0.0
    if reps == 1 or reps > BRZYCKI_MAX_REPS:
        return float(weight)
    return weight * 36 / (37 - reps)


def trend_direction(values: Sequence[float]) -> TrendDirection:
    """Classify first -> last relative change against a +/-5% band."""
    if len(values) < 2:
        return TrendDirection.STABLE
    first, last = values[0], values[-1]
    if first == 0:
        return TrendDirection.UP if last > 0 else TrendDirection.STABLE
    change = (last - first) / first
    if change > TREND_THRESHOLD:
        return TrendDirection.UP
    if change < -TREND_THRESHOLD:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def completed_sessions(sessions: Iterable[WorkoutSession]) -> list[WorkoutSession]:
    """Completed sessions, oldest first."""
    return sorted((s for s in sessions if s.ended_at is not None), key=lambda s: s.started_at)


def sessions_in_range(sessions: Iterable[WorkoutSession], time_range: TimeRange) -> list[WorkoutSession]:
    return [s for s in completed_sessions(sessions) if time_range.contains(s.started_at)]


def local_date(moment: datetime, tz: tzinfo | None = None) -> date:
    return moment.astimezone(tz).date() if tz is not None else moment.date()


def range_days(time_range: TimeRange, tz: tzinfo | None = None) -> int:
    """Calendar days covered by the range, counting both ends."""
    return (local_date(time_range.end, tz) - local_date(time_range.start, tz)).days + 1


def _display_name(catalog: ExerciseCatalog | None, exercise_id: str) -> str:
    info = catalog.get_by_id(exercise_id) if catalog is not None else None
    return info.name if info else exercise_id


def _entries(sessions: Iterable[WorkoutSession], exercise_id: str) -> list[tuple[WorkoutSession, ExerciseEntry]]:
    pairs = []
    for s in sessions:
        entry = s.find_exercise(exercise_id)
        if entry is not None:
            pairs.append((s, entry))
    return pairs


def _max_weight(entry: ExerciseEntry) -> float:
    return max((s.weight for s in entry.sets), default=0.0)


def progress_percentage(sessions: Sequence[WorkoutSession], exercise_id: str) -> float:
    """Max weight in the last session vs the first, as a percentage change."""
    pairs = _entries(completed_sessions(sessions), exercise_id)
    if len(pairs) < 2:
        return 0.0
    first = _max_weight(pairs[0][1])
    last = _max_weight(pairs[-1][1])
    if first == 0:
        return 0.0
    return (last - first) / first * 100


def exercise_progress(
    sessions: Sequence[WorkoutSession],
    exercise_id: str,
    time_range: TimeRange,
    catalog: ExerciseCatalog | None = None,
) -> ProgressMetrics:
    pairs = _entries(sessions_in_range(sessions, time_range), exercise_id)
    sets = [s for _, entry in pairs for s in entry.sets]
    return ProgressMetrics(
        exercise_id=exercise_id,
        exercise_name=_display_name(catalog, exercise_id),
        one_rep_max=max((one_rep_max(s.reps, s.weight) for s in sets), default=0.0),
        total_volume=sum(s.volume for s in sets),
        average_weight=sum(s.weight for s in sets) / len(sets) if sets else 0.0,
        total_sets=len(sets),
        total_reps=sum(s.reps for s in sets),
        progress_percentage=progress_percentage([s for s, _ in pairs], exercise_id),
    )


def calculate_streaks(workout_dates: Sequence[datetime], now: datetime) -> tuple[int, int]:
    """(longest, current) runs of sessions no more than STREAK_GAP_DAYS apart.

    The current run only counts if the latest session is within STREAK_GAP_DAYS of now.
    """
    if not workout_dates:
        return 0, 0
    ordered = sorted(workout_dates)
    gap = timedelta(days=STREAK_GAP_DAYS)

    longest = run = 1
    for previous, current in zip(ordered, ordered[1:]):
        if current - previous <= gap:
            run += 1
        else:
            run = 1
        longest = max(longest, run)

    current_streak = run if now - ordered[-1] <= gap else 0
    return longest, current_streak


def workout_frequency(
    sessions: Sequence[WorkoutSession], time_range: TimeRange, now: datetime, tz: tzinfo | None = None
) -> FrequencyData:
    matching = sessions_in_range(sessions, time_range)
    dates = [s.started_at for s in matching]
    weeks = range_days(time_range, tz) / 7
    longest, current = calculate_streaks(dates, now)
    return FrequencyData(
        total_workouts=len(matching),
        average_per_week=len(matching) / weeks if weeks > 0 else 0.0,
        longest_streak=longest,
        current_streak=current,
        workout_dates=dates,
    )


def personal_records(sessions: Sequence[WorkoutSession], catalog: ExerciseCatalog | None = None) -> list[PersonalRecord]:
    """All-time bests per exercise over every completed session (no time window).

    Sessions are scanned oldest first and each dimension only moves on a strict
    increase, so a record keeps the date it was first reached.
    """
    # exercise_id -> dimension -> (value, date)
    best: dict[str, dict[str, tuple[float, datetime]]] = {}
    for session in completed_sessions(sessions):
        when = session.started_at
        for entry in session.exercises:
            for s in entry.sets:
                values = {
                    "weight": s.weight,
                    "reps": s.reps,
                    "volume": s.volume,
                    "one_rep_max": one_rep_max(s.reps, s.weight),
                }
                record = best.get(entry.exercise_id)
                if record is None:
                    best[entry.exercise_id] = {k: (v, when) for k, v in values.items()}
                    continue
                for k, v in values.items():
                    if v > record[k][0]:
                        record[k] = (v, when)

    results = []
    for exercise_id, record in best.items():
        results.append(
            PersonalRecord(
                exercise_id=exercise_id,
                exercise_name=_display_name(catalog, exercise_id),
                max_weight=record["weight"][0],
                max_weight_date=record["weight"][1],
                max_reps=int(record["reps"][0]),
                max_reps_date=record["reps"][1],
                max_volume=record["volume"][0],
                max_volume_date=record["volume"][1],
                one_rep_max=record["one_rep_max"][0],
                one_rep_max_date=record["one_rep_max"][1],
                achieved_at=max(d for _, d in record.values()),
            )
        )
    return results


def exercise_personal_record(
    sessions: Sequence[WorkoutSession], exercise_id: str, catalog: ExerciseCatalog | None = None
) -> PersonalRecord | None:
    return next((r for r in personal_records(sessions, catalog) if r.exercise_id == exercise_id), None)


def total_volume(sessions: Sequence[WorkoutSession], time_range: TimeRange, tz: tzinfo | None = None) -> VolumeData:
    """Total volume in range plus a per-calendar-day series (midnight timestamps)."""
    by_day: dict[date, float] = {}
    tz_by_day: dict[date, tzinfo | None] = {}
    for session in sessions_in_range(sessions, time_range):
        day = local_date(session.started_at, tz)
        by_day[day] = by_day.get(day, 0.0) + session.total_volume
        tz_by_day.setdefault(day, tz if tz is not None else session.started_at.tzinfo)

    points = [
        VolumePoint(date=datetime.combine(day, time.min, tzinfo=tz_by_day[day]), volume=volume)
        for day, volume in sorted(by_day.items())
    ]
    return VolumeData(
        time_range=time_range,
        total_volume=sum(p.volume for p in points),
        volume_by_date=points,
        trend_direction=trend_direction([p.volume for p in points]),
    )


def consistency_metrics(
    sessions: Sequence[WorkoutSession], time_range: TimeRange, tz: tzinfo | None = None
) -> ConsistencyMetrics:
    matching = sessions_in_range(sessions, time_range)
    workout_days = len({local_date(s.started_at, tz) for s in matching})
    total_days = range_days(time_range, tz)
    return ConsistencyMetrics(
        workout_days=workout_days,
        total_days=total_days,
        consistency_percentage=workout_days / total_days * 100,
        average_workouts_per_week=len(matching) / total_days * 7,
        missed_days=total_days - workout_days,
    )


def progress_rate(points: Sequence[StrengthPoint]) -> float:
    """Percent 1RM change per week, first point vs last."""
    if len(points) < 2:
        return 0.0
    first, last = points[0], points[-1]
    weeks = (last.date - first.date).total_seconds() / _WEEK_SECONDS
    if weeks <= 0 or first.one_rep_max <= 0:
        return 0.0
    return (last.one_rep_max - first.one_rep_max) / first.one_rep_max / weeks * 100


def strength_progression(
    sessions: Sequence[WorkoutSession],
    exercise_id: str,
    time_range: TimeRange,
    catalog: ExerciseCatalog | None = None,
) -> StrengthProgression:
    points = [
        StrengthPoint(
            date=session.started_at,
            weight=_max_weight(entry),
            one_rep_max=max(one_rep_max(s.reps, s.weight) for s in entry.sets),
            volume=sum(s.volume for s in entry.sets),
        )
        for session, entry in _entries(sessions_in_range(sessions, time_range), exercise_id)
        if entry.sets
    ]
    return StrengthProgression(
        exercise_id=exercise_id,
        exercise_name=_display_name(catalog, exercise_id),
        data_points=points,
        trend_direction=trend_direction([p.one_rep_max for p in points]),
        progress_rate=progress_rate(points),
    )


class ProgressService:
    """Reads history from the store and runs the analytics with an injected clock."""

    def __init__(
        self,
        store: SessionStore,
        catalog: ExerciseCatalog | None = None,
        clock: Clock = utc_now,
        default_range_days: int = 30,
        tz: tzinfo | None = None,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.clock = clock
        self.default_range_days = default_range_days
        self.tz = tz

    def time_range(self, start: datetime | None = None, end: datetime | None = None) -> TimeRange:
        """Range ending at `end` (default now), starting default_range_days earlier."""
        end = end or self.clock()
        start = start or end - timedelta(days=self.default_range_days)
        return TimeRange(start=start, end=end)

    async def _history(self) -> list[WorkoutSession]:
        sessions = await self.store.list_history()
        logger.debug(f"Analytics over {len(sessions)} stored sessions")
        return sessions

    async def exercise_progress(self, exercise_id: str, time_range: TimeRange) -> ProgressMetrics:
        return exercise_progress(await self._history(), exercise_id, time_range, self.catalog)

    async def workout_frequency(self, time_range: TimeRange) -> FrequencyData:
        return workout_frequency(await self._history(), time_range, self.clock(), self.tz)

    async def personal_records(self) -> list[PersonalRecord]:
        return personal_records(await self._history(), self.catalog)

    async def exercise_personal_record(self, exercise_id: str) -> PersonalRecord | None:
        return exercise_personal_record(await self._history(), exercise_id, self.catalog)

    async def total_volume(self, time_range: TimeRange) -> VolumeData:
        return total_volume(await self._history(), time_range, self.tz)

    async def consistency_metrics(self, time_range: TimeRange) -> ConsistencyMetrics:
        return consistency_metrics(await self._history(), time_range, self.tz)

    async def strength_progression(self, exercise_id: str, time_range: TimeRange) -> StrengthProgression:
        return strength_progression(await self._history(), exercise_id, time_range, self.catalog)
