from __future__ import annotations

import pytest

from pulsetimer.workout.model import ExerciseSet, ExerciseTemplate, IntervalPreset
from pulsetimer.workout.presets import (
    INTERVAL_TEMPLATES,
    UnknownPresetError,
    get_breath_pattern,
    get_interval_template,
    list_interval_templates,
)


def test_interval_template_lookup_and_config() -> None:
    tabata = get_interval_template("tabata")
    cfg = tabata.to_config()
    assert (cfg.work_sec, cfg.rest_sec, cfg.cycles) == (20, 10, 8)
    assert cfg.total_planned_sec == 20 * 8 + 10 * 7

    preset = IntervalPreset(name=tabata.name, work_sec=20, rest_sec=10, cycles=8)
    assert preset.total_duration_sec == cfg.total_planned_sec


def test_unknown_keys_raise() -> None:
    with pytest.raises(UnknownPresetError):
        get_interval_template("nope")
    with pytest.raises(KeyError):
        get_breath_pattern("nope")


def test_list_filters_by_category() -> None:
    hiit = list_interval_templates("hiit")
    assert hiit
    assert all(t.category == "HIIT" for t in hiit)
    assert len(list_interval_templates()) == len(INTERVAL_TEMPLATES)


def test_breath_patterns() -> None:
    assert get_breath_pattern("box").config.total_planned_sec == 96
    assert get_breath_pattern("478").config.hold2_sec == 0


def test_template_instantiates_fresh_exercise() -> None:
    template = ExerciseTemplate(
        name="Push Routine",
        default_sets=(ExerciseSet(reps=10, weight=40.0), ExerciseSet(reps=8, weight=45.0)),
        tags=("Crossfit",),
    )
    first = template.instantiate()
    second = template.instantiate()
    assert first.name == "Push Routine"
    assert first.sets == template.default_sets
    assert first.sport_tags == ("Crossfit",)
    assert first.id != second.id
