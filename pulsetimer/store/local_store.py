"""Local JSON persistence for exercises, goals, presets and cardio logs.

Each collection lives in its own ``<name>.json`` file holding an object
keyed by entity id. Mutations mark the collection dirty and a debounced
background save writes it shortly after; ``flush()`` writes immediately.
"""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar

from pulsetimer.core.dates import start_of_day
from pulsetimer.metrics.goals import GOAL_TYPES, CardioLog, DailyGoal
from pulsetimer.workout.model import Exercise, ExerciseSet, ExerciseTemplate, IntervalPreset


AUTOSAVE_DELAY_SEC = 0.3

T = TypeVar("T")


def _default_data_dir() -> Path:
    return Path.home() / ".pulse-timer"


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _encode(entity: Any) -> dict[str, Any]:
    return _jsonable(asdict(entity))


def _decode_set(raw: dict[str, Any]) -> ExerciseSet:
    return ExerciseSet(
        reps=int(raw["reps"]),
        weight=float(raw.get("weight", 0.0)),
        rest_sec=float(raw.get("rest_sec", 60.0)),
        id=str(raw["id"]),
    )


def _decode_exercise(raw: dict[str, Any]) -> Exercise:
    return Exercise(
        name=str(raw["name"]),
        notes=str(raw.get("notes", "")),
        sport_tags=tuple(str(tag) for tag in raw.get("sport_tags", [])),
        sets=tuple(_decode_set(item) for item in raw.get("sets", [])),
        created_at=datetime.fromisoformat(raw["created_at"]),
        id=str(raw["id"]),
    )


def _decode_template(raw: dict[str, Any]) -> ExerciseTemplate:
    return ExerciseTemplate(
        name=str(raw["name"]),
        default_sets=tuple(_decode_set(item) for item in raw.get("default_sets", [])),
        notes=str(raw.get("notes", "")),
        tags=tuple(str(tag) for tag in raw.get("tags", [])),
        id=str(raw["id"]),
    )


def _decode_goal(raw: dict[str, Any]) -> DailyGoal:
    goal_type = raw["type"]
    if goal_type not in GOAL_TYPES:
        raise ValueError(f"unknown goal type {goal_type!r}")
    return DailyGoal(
        type=goal_type,
        target=float(raw["target"]),
        date=datetime.fromisoformat(raw["date"]),
        progress=float(raw.get("progress", 0.0)),
        id=str(raw["id"]),
    )


def _decode_preset(raw: dict[str, Any]) -> IntervalPreset:
    return IntervalPreset(
        name=str(raw["name"]),
        work_sec=float(raw["work_sec"]),
        rest_sec=float(raw["rest_sec"]),
        cycles=int(raw["cycles"]),
        color=str(raw.get("color", "#22d3ee")),
        id=str(raw["id"]),
    )


def _decode_cardio_log(raw: dict[str, Any]) -> CardioLog:
    avg_hr = raw.get("avg_hr")
    return CardioLog(
        date=datetime.fromisoformat(raw["date"]),
        distance_km=float(raw["distance_km"]),
        duration_sec=float(raw["duration_sec"]),
        avg_hr=int(avg_hr) if avg_hr is not None else None,
        id=str(raw["id"]),
    )


@dataclass
class _Collection(Generic[T]):
    filename: str
    decode: Callable[[dict[str, Any]], T]
    items: dict[str, T] = field(default_factory=dict)


class LocalStore:
    def __init__(
        self,
        base_dir: Path | None = None,
        autosave_delay_sec: float | None = AUTOSAVE_DELAY_SEC,
    ) -> None:
        self.base_dir = base_dir or _default_data_dir()
        self._autosave_delay_sec = autosave_delay_sec
        self._lock = threading.RLock()
        self._timers: dict[str, threading.Timer] = {}
        self._dirty: set[str] = set()

        self._exercises: _Collection[Exercise] = _Collection("exercises.json", _decode_exercise)
        self._templates: _Collection[ExerciseTemplate] = _Collection(
            "templates.json", _decode_template
        )
        self._goals: _Collection[DailyGoal] = _Collection("goals.json", _decode_goal)
        self._presets: _Collection[IntervalPreset] = _Collection(
            "interval_presets.json", _decode_preset
        )
        self._cardio_logs: _Collection[CardioLog] = _Collection(
            "cardio_logs.json", _decode_cardio_log
        )
        self._collections: dict[str, _Collection[Any]] = {
            "exercises": self._exercises,
            "templates": self._templates,
            "goals": self._goals,
            "presets": self._presets,
            "cardio_logs": self._cardio_logs,
        }
        for collection in self._collections.values():
            self._load(collection)

    # ----- CRUD -----
    def upsert_exercise(self, exercise: Exercise) -> Exercise:
        return self._upsert("exercises", exercise.id, exercise)

    def upsert_template(self, template: ExerciseTemplate) -> ExerciseTemplate:
        return self._upsert("templates", template.id, template)

    def upsert_goal(self, goal: DailyGoal) -> DailyGoal:
        return self._upsert("goals", goal.id, goal)

    def upsert_preset(self, preset: IntervalPreset) -> IntervalPreset:
        return self._upsert("presets", preset.id, preset)

    def upsert_cardio_log(self, log: CardioLog) -> CardioLog:
        return self._upsert("cardio_logs", log.id, log)

    def remove_exercise(self, exercise_id: str) -> None:
        self._remove("exercises", exercise_id)

    def remove_template(self, template_id: str) -> None:
        self._remove("templates", template_id)

    def remove_goal(self, goal_id: str) -> None:
        self._remove("goals", goal_id)

    def remove_preset(self, preset_id: str) -> None:
        self._remove("presets", preset_id)

    def remove_cardio_log(self, log_id: str) -> None:
        self._remove("cardio_logs", log_id)

    def all_exercises(self, sort: bool = True) -> list[Exercise]:
        with self._lock:
            items = list(self._exercises.items.values())
        if sort:
            items.sort(key=lambda e: e.created_at, reverse=True)
        return items

    def exercises_on(self, day: datetime) -> list[Exercise]:
        key = start_of_day(day)
        return [e for e in self.all_exercises() if start_of_day(e.created_at) == key]

    def all_templates(self) -> list[ExerciseTemplate]:
        with self._lock:
            return sorted(self._templates.items.values(), key=lambda t: t.name)

    def all_goals(self, day: datetime | None = None) -> list[DailyGoal]:
        with self._lock:
            items = list(self._goals.items.values())
        if day is not None:
            key = start_of_day(day)
            return [goal for goal in items if start_of_day(goal.date) == key]
        return sorted(items, key=lambda g: g.date, reverse=True)

    def all_presets(self) -> list[IntervalPreset]:
        with self._lock:
            return sorted(self._presets.items.values(), key=lambda p: p.name)

    def find_preset(self, name: str) -> IntervalPreset | None:
        return next((p for p in self.all_presets() if p.name == name), None)

    def find_template(self, name: str) -> ExerciseTemplate | None:
        return next((t for t in self.all_templates() if t.name == name), None)

    def all_cardio_logs(self) -> list[CardioLog]:
        with self._lock:
            return sorted(self._cardio_logs.items.values(), key=lambda c: c.date, reverse=True)

    def reset_all(self) -> None:
        with self._lock:
            for name, collection in self._collections.items():
                collection.items.clear()
                self._mark_dirty(name)

    # ----- Persistence -----
    def flush(self) -> None:
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
            dirty = sorted(self._dirty)
            self._dirty.clear()
            for name in dirty:
                self._save(self._collections[name])

    def _upsert(self, name: str, entity_id: str, entity: T) -> T:
        with self._lock:
            self._collections[name].items[entity_id] = entity
            self._mark_dirty(name)
        return entity

    def _remove(self, name: str, entity_id: str) -> None:
        with self._lock:
            if self._collections[name].items.pop(entity_id, None) is not None:
                self._mark_dirty(name)

    def _mark_dirty(self, name: str) -> None:
        self._dirty.add(name)
        if self._autosave_delay_sec is None:
            return
        previous = self._timers.pop(name, None)
        if previous is not None:
            previous.cancel()
        timer = threading.Timer(self._autosave_delay_sec, self._autosave, args=(name,))
        timer.daemon = True
        self._timers[name] = timer
        timer.start()

    def _autosave(self, name: str) -> None:
        with self._lock:
            self._timers.pop(name, None)
            if name not in self._dirty:
                return
            self._dirty.discard(name)
            self._save(self._collections[name])

    def _path(self, collection: _Collection[Any]) -> Path:
        return self.base_dir / collection.filename

    def _load(self, collection: _Collection[Any]) -> None:
        path = self._path(collection)
        if not path.exists():
            return
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(payload, dict):
            return
        for key, raw in payload.items():
            try:
                collection.items[str(key)] = collection.decode(raw)
            except (KeyError, TypeError, ValueError):
                continue

    def _save(self, collection: _Collection[Any]) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(collection)
        payload = {key: _encode(entity) for key, entity in collection.items.items()}
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=True, indent=2), encoding="utf-8")
        tmp.replace(path)
