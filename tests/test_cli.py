from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable

import pytest

from pulsetimer.cli.main import (
    breath_config_from_args,
    build_parser,
    interval_config_from_args,
    run_add_goal,
    run_add_template,
    run_delete_preset,
    run_goals,
    run_list_presets,
    run_log_cardio,
    run_pace,
    run_reps,
    run_reset_data,
    run_save_preset,
    run_timer,
)
from pulsetimer.store.local_store import LocalStore
from pulsetimer.timer.phases import WorkRestConfig
from pulsetimer.workout.presets import UnknownPresetError


def test_interval_args_override_preset() -> None:
    args = build_parser().parse_args(["--preset", "tabata", "--cycles", "4"])
    cfg = interval_config_from_args(args)
    assert (cfg.work_sec, cfg.rest_sec, cfg.cycles) == (20, 10, 4)

    args = build_parser().parse_args(["--preset", "missing"])
    with pytest.raises(UnknownPresetError):
        interval_config_from_args(args)


def test_breath_args_default_to_box() -> None:
    args = build_parser().parse_args(["--breath", "--hold2", "0"])
    cfg = breath_config_from_args(args)
    assert (cfg.inhale_sec, cfg.hold1_sec, cfg.exhale_sec, cfg.hold2_sec) == (4, 4, 4, 0)


def test_run_pace_prints_pace_and_speed(capsys: pytest.CaptureFixture[str]) -> None:
    assert run_pace("5", "25:00", miles=False) == 0
    out = capsys.readouterr().out
    assert "5:00 /km" in out
    assert "12.0 km/h" in out


def test_goal_flow_uses_logged_cardio(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store = LocalStore(base_dir=tmp_path, autosave_delay_sec=None)
    assert run_add_goal(store, "distance", "10") == 0
    assert run_add_goal(store, "pushups", "10") == 2
    assert run_log_cardio(store, "3", "18:00", miles=False, avg_hr=None) == 0
    assert run_log_cardio(store, "2.5", "15:00", miles=False, avg_hr=140) == 0
    capsys.readouterr()

    assert run_goals(store, calories=0.0, intervals_done=0, exercises_done=0) == 0
    out = capsys.readouterr().out
    assert "5.50 km" in out
    assert "55%" in out

    reloaded = LocalStore(base_dir=tmp_path, autosave_delay_sec=None)
    assert reloaded.all_goals()[0].progress == 5.5


def test_run_timer_finishes(capsys: pytest.CaptureFixture[str]) -> None:
    code = asyncio.run(run_timer(WorkRestConfig(work_sec=1, rest_sec=0, cycles=1), "Test"))
    assert code == 0
    out = capsys.readouterr().out
    assert "[TIMER] WORK - cycle 1/1" in out
    assert "[TIMER] finished" in out


def _keys(*commands: str) -> Callable[[str], str]:
    pending = list(commands)

    def read(_prompt: str) -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return read


def test_reps_session_saves_exercise_for_goals(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    store = LocalStore(base_dir=tmp_path, autosave_delay_sec=None)
    assert run_add_template(store, "Squat", sets=2, reps=3, tags=["Crossfit"]) == 0

    read = _keys("", "", "", "", "-", "x", "", "", "s")
    assert run_reps(store, "Squat", sets=None, reps=None, read=read) == 0
    out = capsys.readouterr().out
    assert "[REPS] Squat: 2 x 3" in out
    assert "Unknown command 'x'" in out
    assert "[STORE] exercise saved: Squat 2 sets, 5 reps" in out

    exercise = LocalStore(base_dir=tmp_path, autosave_delay_sec=None).all_exercises()[0]
    assert [s.reps for s in exercise.sets] == [3, 2]
    assert exercise.sport_tags == ("Crossfit",)

    assert run_add_goal(store, "exercises", "2") == 0
    capsys.readouterr()
    assert run_goals(store, calories=0.0, intervals_done=0, exercises_done=0) == 0
    assert "50%" in capsys.readouterr().out


def test_reps_session_without_sets_saves_nothing(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    store = LocalStore(base_dir=tmp_path, autosave_delay_sec=None)
    assert run_reps(store, "Plank", sets=3, reps=1, read=_keys("-", "q")) == 0
    assert "nothing saved" in capsys.readouterr().out
    assert store.all_exercises() == []


def test_saved_preset_resolves_by_name(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store = LocalStore(base_dir=tmp_path, autosave_delay_sec=None)
    parser = build_parser()
    args = parser.parse_args(["--save-preset", "Hills", "--work", "45", "--rest", "15", "--cycles", "5"])
    assert run_save_preset(store, "Hills", interval_config_from_args(args, store)) == 0
    args = parser.parse_args(["--save-preset", "Hills", "--preset", "Hills", "--cycles", "6"])
    assert run_save_preset(store, "Hills", interval_config_from_args(args, store)) == 0
    assert len(store.all_presets()) == 1

    cfg = interval_config_from_args(parser.parse_args(["--preset", "Hills"]), store)
    assert (cfg.work_sec, cfg.rest_sec, cfg.cycles) == (45, 15, 6)

    capsys.readouterr()
    assert run_list_presets(store) == 0
    out = capsys.readouterr().out
    assert "tabata" in out
    assert "Hills" in out

    assert run_delete_preset(store, "Hills") == 0
    assert run_delete_preset(store, "Hills") == 2
    with pytest.raises(UnknownPresetError):
        interval_config_from_args(parser.parse_args(["--preset", "Hills"]), store)


def test_reset_data_clears_store(tmp_path: Path) -> None:
    store = LocalStore(base_dir=tmp_path, autosave_delay_sec=None)
    run_add_goal(store, "calories", "300")
    assert run_reset_data(store) == 0
    assert LocalStore(base_dir=tmp_path, autosave_delay_sec=None).all_goals() == []
