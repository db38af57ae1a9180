"""Terminal CLI entrypoint for Pulse Timer."""

from __future__ import annotations

import argparse
import asyncio
import math
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable

from pulsetimer.core.dates import format_duration, parse_duration, today
from pulsetimer.metrics.goals import (
    GOAL_TYPES,
    CardioLog,
    DailyGoal,
    GoalInputs,
    format_goal_value,
    refresh_goals,
)
from pulsetimer.metrics.pace import (
    format_pace_for,
    format_speed_for,
    km_to_miles,
    miles_to_km,
)
from pulsetimer.store.local_store import LocalStore
from pulsetimer.timer.driver import AsyncioTickDriver
from pulsetimer.timer.engine import PhaseTimer, TimerSnapshot
from pulsetimer.timer.phases import BreathConfig, TimerConfig, WorkRestConfig
from pulsetimer.workout.model import SPORT_TAGS, ExerciseSet, ExerciseTemplate, IntervalPreset
from pulsetimer.workout.presets import (
    BREATH_PATTERNS,
    UnknownPresetError,
    get_breath_pattern,
    get_interval_template,
    list_interval_templates,
)
from pulsetimer.workout.reps import RepCounter, exercise_from_session


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pulse Timer terminal MVP")
    parser.add_argument("--interval", action="store_true", help="Run a work/rest interval timer")
    parser.add_argument(
        "--preset", default=None, help="Built-in interval preset key or saved preset name"
    )
    parser.add_argument("--work", type=float, default=None, help="Work phase seconds")
    parser.add_argument("--rest", type=float, default=None, help="Rest phase seconds (0 skips rest)")
    parser.add_argument("--cycles", type=int, default=None, help="Number of cycles")
    parser.add_argument(
        "--breath",
        nargs="?",
        const="box",
        default=None,
        help="Run a breathing timer (pattern key, default: box)",
    )
    parser.add_argument("--inhale", type=float, default=None, help="Inhale seconds")
    parser.add_argument("--hold1", type=float, default=None, help="Hold after inhale, seconds")
    parser.add_argument("--exhale", type=float, default=None, help="Exhale seconds")
    parser.add_argument("--hold2", type=float, default=None, help="Hold after exhale, seconds")
    parser.add_argument(
        "--list-presets", action="store_true", help="List interval presets and breath patterns"
    )
    parser.add_argument(
        "--save-preset",
        default=None,
        metavar="NAME",
        help="Save --work/--rest/--cycles (or --preset) as a named interval preset",
    )
    parser.add_argument("--delete-preset", default=None, metavar="NAME", help="Delete a saved preset")
    parser.add_argument(
        "--reps",
        default=None,
        metavar="EXERCISE",
        help="Count sets and reps for an exercise, saved when the session ends",
    )
    parser.add_argument("--sets", type=int, default=None, help="Target sets for --reps/--add-template")
    parser.add_argument(
        "--target-reps", type=int, default=None, help="Target reps per set for --reps/--add-template"
    )
    parser.add_argument(
        "--add-template", default=None, metavar="EXERCISE", help="Save an exercise template"
    )
    parser.add_argument(
        "--sport", action="append", default=None, choices=SPORT_TAGS, help="Sport tag for --add-template"
    )
    parser.add_argument(
        "--pace",
        nargs=2,
        metavar=("DISTANCE", "DURATION"),
        default=None,
        help="Compute pace/speed from distance and duration (SS, MM:SS or HH:MM:SS)",
    )
    parser.add_argument(
        "--miles", action="store_true", help="Interpret distances as miles instead of km"
    )
    parser.add_argument(
        "--log-cardio",
        nargs=2,
        metavar=("DISTANCE", "DURATION"),
        default=None,
        help="Save a cardio session for today",
    )
    parser.add_argument("--avg-hr", type=int, default=None, help="Average heart rate for --log-cardio")
    parser.add_argument(
        "--add-goal",
        nargs=2,
        metavar=("TYPE", "TARGET"),
        default=None,
        help=f"Add a goal for today ({', '.join(GOAL_TYPES)})",
    )
    parser.add_argument("--goals", action="store_true", help="Show today's goals with progress")
    parser.add_argument("--calories", type=float, default=0.0, help="Calories burned today")
    parser.add_argument("--intervals-done", type=int, default=0, help="Intervals completed today")
    parser.add_argument("--exercises-done", type=int, default=0, help="Exercises completed today")
    parser.add_argument(
        "--data-dir", type=Path, default=None, help="Data directory (default: ~/.pulse-timer)"
    )
    parser.add_argument("--reset-data", action="store_true", help="Delete all saved data")
    parser.add_argument("--ui-web", action="store_true", help="Launch web UI (NiceGUI)")
    parser.add_argument("--web-host", default="127.0.0.1", help="Host bind for --ui-web")
    parser.add_argument("--web-port", type=int, default=8090, help="Port for --ui-web")
    return parser


def _preset_config(key: str, store: LocalStore | None) -> WorkRestConfig:
    try:
        return get_interval_template(key).to_config()
    except UnknownPresetError:
        saved = store.find_preset(key) if store is not None else None
        if saved is None:
            raise
        return saved.to_config()


def interval_config_from_args(
    args: argparse.Namespace, store: LocalStore | None = None
) -> WorkRestConfig:
    base = WorkRestConfig()
    if args.preset:
        base = _preset_config(args.preset, store)
    return WorkRestConfig(
        work_sec=args.work if args.work is not None else base.work_sec,
        rest_sec=args.rest if args.rest is not None else base.rest_sec,
        cycles=args.cycles if args.cycles is not None else base.cycles,
    )


def breath_config_from_args(args: argparse.Namespace) -> BreathConfig:
    base = get_breath_pattern(args.breath).config
    return BreathConfig(
        inhale_sec=args.inhale if args.inhale is not None else base.inhale_sec,
        hold1_sec=args.hold1 if args.hold1 is not None else base.hold1_sec,
        exhale_sec=args.exhale if args.exhale is not None else base.exhale_sec,
        hold2_sec=args.hold2 if args.hold2 is not None else base.hold2_sec,
        cycles=args.cycles if args.cycles is not None else base.cycles,
    )


def _progress_line(snap: TimerSnapshot) -> str:
    return (
        f"{snap.phase_label:<7} {math.ceil(snap.remaining_sec):>4}s"
        f" | cycle {snap.cycle}/{snap.cycles}"
        f" | elapsed {format_duration(snap.elapsed_sec)}"
        f" | total {snap.total_progress * 100:.0f}%"
    )


async def run_timer(config: TimerConfig, title: str) -> int:
    timer = PhaseTimer(driver=AsyncioTickDriver())
    done = asyncio.Event()
    last_phase: tuple[str | None, int] = (None, 0)
    last_second: int | None = None

    def on_update(snap: TimerSnapshot) -> None:
        nonlocal last_phase, last_second
        if snap.status == "finished":
            print(f"[TIMER] finished in {format_duration(snap.elapsed_sec)}")
            done.set()
            return
        if snap.status != "running":
            return
        if (snap.phase, snap.cycle) != last_phase:
            last_phase = (snap.phase, snap.cycle)
            last_second = None
            print(f"[TIMER] {snap.phase_label} - cycle {snap.cycle}/{snap.cycles}")
        second = math.ceil(snap.remaining_sec)
        if second != last_second:
            last_second = second
            print(_progress_line(snap))

    timer.subscribe(on_update)
    print(f"{title} | planned {format_duration(config.total_planned_sec)}")
    timer.start(config)
    try:
        await done.wait()
    finally:
        if timer.status != "finished":
            timer.reset()
    return 0


def _distance_km(raw: str, miles: bool) -> float:
    value = float(raw)
    return miles_to_km(value) if miles else value


def run_pace(distance: str, duration: str, miles: bool) -> int:
    distance_km = _distance_km(distance, miles)
    duration_sec = parse_duration(duration)
    print(f"Distance: {distance_km:.2f} km ({km_to_miles(distance_km):.2f} mi)")
    print(f"Duration: {format_duration(duration_sec)}")
    print(f"Pace:     {format_pace_for(distance_km, duration_sec)}")
    print(f"Speed:    {format_speed_for(distance_km, duration_sec)}")
    return 0


def run_log_cardio(
    store: LocalStore, distance: str, duration: str, miles: bool, avg_hr: int | None
) -> int:
    log = CardioLog(
        date=datetime.now(),
        distance_km=max(0.0, _distance_km(distance, miles)),
        duration_sec=max(0.0, parse_duration(duration)),
        avg_hr=avg_hr,
    )
    store.upsert_cardio_log(log)
    store.flush()
    print(f"[STORE] cardio saved: {log.distance_km:.2f} km in {format_duration(log.duration_sec)}")
    print(f"Pace: {log.pace} | Speed: {log.speed}")
    return 0


def run_add_goal(store: LocalStore, goal_type: str, target: str) -> int:
    if goal_type not in GOAL_TYPES:
        print(f"Unknown goal type '{goal_type}'. Use one of: {', '.join(GOAL_TYPES)}")
        return 2
    goal = DailyGoal(type=goal_type, target=float(target))  # type: ignore[arg-type]
    store.upsert_goal(goal)
    store.flush()
    print(f"[STORE] goal saved: {goal.type} target {goal.target:g}")
    return 0


def run_goals(
    store: LocalStore, calories: float, intervals_done: int, exercises_done: int
) -> int:
    day = today()
    inputs = GoalInputs(
        date=day,
        cardio=tuple(store.all_cardio_logs()),
        completed_intervals=intervals_done,
        completed_exercises=exercises_done + len(store.exercises_on(day)),
        manual_calories=calories,
    )
    goals = refresh_goals(store.all_goals(day=inputs.date), inputs)
    if not goals:
        print("No goals for today")
        return 0
    for goal in goals:
        store.upsert_goal(goal)
        print(
            f"{goal.type:<10} {format_goal_value(goal.type, goal.progress):>14}"
            f" / {format_goal_value(goal.type, goal.target):<14}"
            f" {goal.percent * 100:>3.0f}%"
        )
    store.flush()
    return 0


def run_save_preset(store: LocalStore, name: str, config: WorkRestConfig) -> int:
    existing = store.find_preset(name)
    preset = IntervalPreset(
        name=name,
        work_sec=config.work_sec,
        rest_sec=config.rest_sec,
        cycles=config.cycles,
    )
    if existing is not None:
        preset = replace(preset, color=existing.color, id=existing.id)
    store.upsert_preset(preset)
    store.flush()
    print(
        f"[STORE] preset saved: {name} {preset.work_sec:g}s/{preset.rest_sec:g}s"
        f" x{preset.cycles} ({format_duration(preset.total_duration_sec)})"
    )
    return 0


def run_delete_preset(store: LocalStore, name: str) -> int:
    preset = store.find_preset(name)
    if preset is None:
        print(f"No saved preset named '{name}'")
        return 2
    store.remove_preset(preset.id)
    store.flush()
    print(f"[STORE] preset deleted: {name}")
    return 0


def run_add_template(
    store: LocalStore,
    name: str,
    sets: int | None,
    reps: int | None,
    tags: list[str] | None = None,
) -> int:
    count = max(1, sets or 3)
    template = ExerciseTemplate(
        name=name,
        default_sets=tuple(ExerciseSet(reps=max(1, reps or 10)) for _ in range(count)),
        tags=tuple(tags or ()),
    )
    store.upsert_template(template)
    store.flush()
    print(f"[STORE] template saved: {name} {count} x {template.default_sets[0].reps}")
    return 0


REPS_HELP = "Enter = rep | - = remove rep | s = finish set | u = undo set | q = quit"


def run_reps(
    store: LocalStore,
    name: str,
    sets: int | None,
    reps: int | None,
    read: Callable[[str], str] = input,
) -> int:
    template = store.find_template(name)
    target_sets, target_reps = 3, 10
    if template is not None and template.default_sets:
        target_sets = len(template.default_sets)
        target_reps = template.default_sets[0].reps
    counter = RepCounter(
        target_sets=sets if sets is not None else target_sets,
        target_reps=reps if reps is not None else target_reps,
    )
    counter.start_session()
    print(f"[REPS] {name}: {counter.target_sets} x {counter.target_reps}")
    print(REPS_HELP)

    while not counter.is_finished:
        try:
            command = read(
                f"{counter.title} | reps {counter.current_reps}/{counter.target_reps} > "
            )
        except EOFError:
            break
        command = command.strip().lower()
        if command == "":
            counter.increment_rep()
        elif command == "-":
            counter.decrement_rep()
        elif command == "s":
            counter.complete_set()
        elif command == "u":
            counter.undo_set()
        elif command == "q":
            break
        else:
            print(f"Unknown command '{command}'. {REPS_HELP}")

    if not counter.set_reps:
        print("[REPS] no sets completed, nothing saved")
        return 0
    exercise = exercise_from_session(name, counter.set_reps, template)
    store.upsert_exercise(exercise)
    store.flush()
    print(
        f"[STORE] exercise saved: {name} {len(exercise.sets)} sets,"
        f" {sum(s.reps for s in exercise.sets)} reps"
    )
    return 0


def run_reset_data(store: LocalStore) -> int:
    store.reset_all()
    store.flush()
    print(f"[STORE] all data cleared in {store.base_dir}")
    return 0


def run_list_presets(store: LocalStore | None = None) -> int:
    print("Interval presets:")
    for template in list_interval_templates():
        total = format_duration(template.to_config().total_planned_sec)
        print(
            f"  {template.key:<14} {template.name:<16} "
            f"{template.work_sec}s/{template.rest_sec}s x{template.cycles} ({total})"
        )
    print("Breath patterns:")
    for pattern in BREATH_PATTERNS:
        cfg = pattern.config
        print(
            f"  {pattern.key:<14} {pattern.name:<16} "
            f"{cfg.inhale_sec:g}-{cfg.hold1_sec:g}-{cfg.exhale_sec:g}-{cfg.hold2_sec:g}"
            f" x{cfg.cycles}"
        )
    if store is None:
        return 0
    presets = store.all_presets()
    if presets:
        print("Saved presets:")
        for preset in presets:
            print(
                f"  {preset.name:<31} {preset.work_sec:g}s/{preset.rest_sec:g}s"
                f" x{preset.cycles} ({format_duration(preset.total_duration_sec)})"
            )
    templates = store.all_templates()
    if templates:
        print("Exercise templates:")
        for template in templates:
            reps = template.default_sets[0].reps if template.default_sets else 0
            tags = f" [{', '.join(template.tags)}]" if template.tags else ""
            print(f"  {template.name:<31} {len(template.default_sets)} x {reps}{tags}")
    return 0


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    if args.ui_web:
        from pulsetimer.ui.web_app import run_web_ui

        return run_web_ui(host=args.web_host, port=args.web_port, data_dir=args.data_dir)

    try:
        if args.pace is not None:
            return run_pace(args.pace[0], args.pace[1], args.miles)

        store = LocalStore(base_dir=args.data_dir, autosave_delay_sec=None)
        if args.list_presets:
            return run_list_presets(store)
        if args.reset_data:
            return run_reset_data(store)
        if args.log_cardio is not None:
            return run_log_cardio(
                store, args.log_cardio[0], args.log_cardio[1], args.miles, args.avg_hr
            )
        if args.add_goal is not None:
            return run_add_goal(store, args.add_goal[0], args.add_goal[1])
        if args.goals:
            return run_goals(store, args.calories, args.intervals_done, args.exercises_done)
        if args.add_template is not None:
            return run_add_template(
                store, args.add_template, args.sets, args.target_reps, args.sport
            )
        if args.reps is not None:
            return run_reps(store, args.reps, args.sets, args.target_reps)
        if args.delete_preset is not None:
            return run_delete_preset(store, args.delete_preset)
        if args.save_preset is not None:
            return run_save_preset(store, args.save_preset, interval_config_from_args(args, store))

        config: TimerConfig
        if args.breath is not None:
            config = breath_config_from_args(args)
            title = f"Breathing {args.breath}"
        elif args.interval or args.preset:
            config = interval_config_from_args(args, store)
            title = f"Interval {args.preset or 'custom'}"
        else:
            parser.print_help()
            return 1
    except UnknownPresetError as exc:
        print(exc.args[0])
        return 2
    except ValueError as exc:
        print(f"Error: {exc}")
        return 2

    try:
        return asyncio.run(run_timer(config, title))
    except KeyboardInterrupt:
        print("\n[TIMER] stopped")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
