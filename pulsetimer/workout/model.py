"""Workout domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from pulsetimer.timer.phases import WorkRestConfig


SPORT_TAGS: tuple[str, ...] = (
    "American Football",
    "Soccer",
    "Basketball",
    "Tennis",
    "Running",
    "Cycling",
    "Swimming",
    "Boxing",
    "Crossfit",
    "Yoga",
)


def _new_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class ExerciseSet:
    reps: int
    weight: float = 0.0
    rest_sec: float = 60.0
    id: str = field(default_factory=_new_id)


@dataclass(frozen=True)
class Exercise:
    name: str
    notes: str = ""
    sport_tags: tuple[str, ...] = ()
    sets: tuple[ExerciseSet, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_new_id)


@dataclass(frozen=True)
class ExerciseTemplate:
    name: str
    default_sets: tuple[ExerciseSet, ...] = ()
    notes: str = ""
    tags: tuple[str, ...] = ()
    id: str = field(default_factory=_new_id)

    def instantiate(self) -> Exercise:
        return Exercise(
            name=self.name,
            notes=self.notes,
            sport_tags=self.tags,
            sets=self.default_sets,
        )


@dataclass(frozen=True)
class IntervalPreset:
    name: str
    work_sec: float
    rest_sec: float
    cycles: int
    color: str = "#22d3ee"
    id: str = field(default_factory=_new_id)

    def to_config(self) -> WorkRestConfig:
        return WorkRestConfig(work_sec=self.work_sec, rest_sec=self.rest_sec, cycles=self.cycles)

    @property
    def total_duration_sec(self) -> float:
        return self.to_config().total_planned_sec
