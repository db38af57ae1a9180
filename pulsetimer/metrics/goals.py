"""Daily goal progress derived from cardio logs and tracked counters."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Literal
from uuid import uuid4

from pulsetimer.core.dates import format_duration, start_of_day, today
from pulsetimer.metrics.pace import format_pace_for, format_speed_for


GoalType = Literal["duration", "distance", "exercises", "calories", "intervals"]

GOAL_TYPES: tuple[GoalType, ...] = (
    "duration",
    "distance",
    "exercises",
    "calories",
    "intervals",
)


def _new_id() -> str:
    return uuid4().hex


def _non_negative(value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


def _non_negative_count(value: object) -> int:
    try:
        count = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, count)


@dataclass(frozen=True)
class CardioLog:
    date: datetime
    distance_km: float
    duration_sec: float
    avg_hr: int | None = None
    id: str = field(default_factory=_new_id)

    @property
    def pace(self) -> str:
        return format_pace_for(self.distance_km, self.duration_sec)

    @property
    def speed(self) -> str:
        return format_speed_for(self.distance_km, self.duration_sec)


@dataclass(frozen=True)
class DailyGoal:
    type: GoalType
    target: float
    date: datetime = field(default_factory=today)
    progress: float = 0.0
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", start_of_day(self.date))

    @property
    def percent(self) -> float:
        if not self.target > 0:
            return 0.0
        ratio = self.progress / self.target
        if math.isnan(ratio):
            return 0.0
        return min(max(ratio, 0.0), 1.0)


@dataclass(frozen=True)
class GoalInputs:
    """Snapshot of the day's activity supplied by the caller."""

    date: datetime
    cardio: tuple[CardioLog, ...] = ()
    completed_intervals: int = 0
    completed_exercises: int = 0
    manual_calories: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", start_of_day(self.date))
        object.__setattr__(self, "cardio", tuple(self.cardio))
        for name in ("completed_intervals", "completed_exercises"):
            object.__setattr__(self, name, _non_negative_count(getattr(self, name)))
        object.__setattr__(self, "manual_calories", _non_negative(self.manual_calories))


def _logs_on(day: datetime, cardio: Iterable[CardioLog]) -> list[CardioLog]:
    key = start_of_day(day)
    return [log for log in cardio if start_of_day(log.date) == key]


def progress_value(goal: DailyGoal, inputs: GoalInputs) -> float:
    if goal.type == "duration":
        return sum(_non_negative(log.duration_sec) for log in _logs_on(goal.date, inputs.cardio))
    if goal.type == "distance":
        return sum(_non_negative(log.distance_km) for log in _logs_on(goal.date, inputs.cardio))
    if goal.type == "exercises":
        return float(inputs.completed_exercises)
    if goal.type == "calories":
        return inputs.manual_calories
    if goal.type == "intervals":
        return float(inputs.completed_intervals)
    return 0.0


def updated_goal(goal: DailyGoal, inputs: GoalInputs) -> DailyGoal:
    return replace(goal, progress=progress_value(goal, inputs))


def refresh_goals(goals: Iterable[DailyGoal], inputs: GoalInputs) -> list[DailyGoal]:
    return [updated_goal(goal, inputs) for goal in goals]


def format_goal_value(goal_type: str, value: float) -> str:
    if goal_type == "duration":
        return format_duration(value)
    if goal_type == "distance":
        return f"{value:.2f} km"
    return f"{value:.0f}"
