"""NiceGUI web UI for Pulse Timer."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, cast

from nicegui import ui

from pulsetimer.core.dates import format_duration, parse_duration, today
from pulsetimer.metrics.goals import (
    GOAL_TYPES,
    DailyGoal,
    GoalInputs,
    GoalType,
    format_goal_value,
    refresh_goals,
)
from pulsetimer.metrics.pace import format_pace_for, format_speed_for
from pulsetimer.store.local_store import LocalStore
from pulsetimer.timer.driver import AsyncioTickDriver
from pulsetimer.timer.engine import PhaseTimer, TimerSnapshot
from pulsetimer.timer.phases import TimerConfig, WorkRestConfig
from pulsetimer.workout.presets import BREATH_PATTERNS, INTERVAL_TEMPLATES, get_breath_pattern
from pulsetimer.workout.reps import RepCounter, exercise_from_session

REFRESH_SEC = 0.2

_PHASE_COLORS: dict[str, str] = {
    "work": "#22d3ee",
    "rest": "#f59e0b",
    "inhale": "#22c55e",
    "hold1": "#a78bfa",
    "exhale": "#38bdf8",
    "hold2": "#a78bfa",
}


@dataclass
class WebState:
    mode: str = "interval"  # interval | breath
    completed_intervals: int = 0
    manual_calories: float = 0.0
    status: str = "Ready"
    notice: str | None = None
    goals_dirty: bool = False
    reps: RepCounter = field(default_factory=RepCounter)
    reps_name: str = ""
    reps_exercise_id: str | None = None


def _fmt_remaining(snap: TimerSnapshot) -> str:
    if snap.status == "idle":
        return "--"
    return format_duration(snap.remaining_sec + 0.999)


def run_web_ui(
    *,
    host: str = "127.0.0.1",
    port: int = 8090,
    data_dir: Path | None = None,
) -> int:
    store = LocalStore(base_dir=data_dir)
    timer = PhaseTimer(driver=AsyncioTickDriver())
    state = WebState()
    ui.add_head_html(
        """
        <style>
          body { background: #0b1220; color: #e5e7eb; font-family: Arial, "Segoe UI", sans-serif; }
          .pt-card {
            background: linear-gradient(180deg, #0f1b35 0%, #132449 100%);
            border: 1px solid rgba(148, 163, 184, 0.22);
            border-radius: 14px;
          }
          .pt-number { font-size: 3rem; font-weight: 700; }
          .pt-muted { color: #9caecf; }
        </style>
        """
    )

    with ui.column().classes("w-full max-w-[960px] mx-auto gap-3 p-4"):
        ui.label("Pulse Timer").classes("text-2xl font-bold")
        status_label = ui.label("Status: Ready").classes("pt-muted")

        with ui.card().classes("w-full pt-card"):
            with ui.row().classes("w-full items-end gap-2"):
                mode_select = ui.select(
                    {"interval": "Interval", "breath": "Breathing"},
                    value="interval",
                    label="Mode",
                ).classes("w-40")
                preset_select = ui.select(
                    {t.key: t.name for t in INTERVAL_TEMPLATES},
                    value="hiit_30_15",
                    label="Interval preset",
                ).classes("w-48")
                work_input = ui.number("Work sec", value=30, min=1, max=3600)
                rest_input = ui.number("Rest sec", value=15, min=0, max=3600)
                cycles_input = ui.number("Cycles", value=8, min=1, max=99)
                breath_select = ui.select(
                    {p.key: p.name for p in BREATH_PATTERNS},
                    value="box",
                    label="Breath pattern",
                ).classes("w-48")
            with ui.row().classes("gap-2"):
                start_btn = ui.button("Start").props("color=primary")
                pause_btn = ui.button("Pause")
                resume_btn = ui.button("Resume")
                reset_btn = ui.button("Reset").props("outline")

        with ui.card().classes("w-full pt-card items-center"):
            phase_label = ui.label("-").classes("text-xl font-semibold")
            remaining_label = ui.label("--").classes("pt-number")
            cycle_label = ui.label("Cycle -").classes("pt-muted")
            ui.label("Phase").classes("text-xs pt-muted self-start")
            phase_bar = ui.linear_progress(value=0.0, show_value=False).classes("w-full")
            ui.label("Session").classes("text-xs pt-muted self-start")
            total_bar = ui.linear_progress(value=0.0, show_value=False).classes("w-full")
            planned_label = ui.label("Planned: -").classes("pt-muted")

        with ui.row().classes("w-full gap-3 no-wrap"):
            with ui.card().classes("w-1/2 pt-card"):
                ui.label("Pace calculator").classes("text-lg font-semibold")
                distance_input = ui.number("Distance km", value=5.0, min=0, step=0.1)
                duration_input = ui.input("Duration (MM:SS or HH:MM:SS)", value="25:00")
                pace_label = ui.label("Pace: -")
                speed_label = ui.label("Speed: -")

            with ui.card().classes("w-1/2 pt-card"):
                ui.label("Today's goals").classes("text-lg font-semibold")
                goals_column = ui.column().classes("w-full gap-1")
                with ui.row().classes("items-end gap-2"):
                    goal_type_select = ui.select(list(GOAL_TYPES), value="duration", label="Type")
                    goal_target_input = ui.number("Target", value=1800, min=0)
                    add_goal_btn = ui.button("Add goal")
                calories_input = ui.number("Calories today", value=0, min=0)
                exercises_label = ui.label("Exercises today: 0").classes("pt-muted")

        with ui.card().classes("w-full pt-card"):
            ui.label("Reps counter").classes("text-lg font-semibold")
            with ui.row().classes("items-end gap-2"):
                exercise_input = ui.input("Exercise", value="Push-ups")
                sets_input = ui.number("Sets", value=3, min=1, max=20)
                reps_input = ui.number("Reps per set", value=10, min=1, max=200)
                reps_start_btn = ui.button("Start session").props("color=primary")
            reps_title = ui.label("Not started").classes("text-xl font-semibold")
            reps_count = ui.label("0 / 0").classes("pt-number")
            ui.label("Sets").classes("text-xs pt-muted self-start")
            sets_bar = ui.linear_progress(value=0.0, show_value=False).classes("w-full")
            with ui.row().classes("gap-2"):
                rep_minus_btn = ui.button("-1")
                rep_plus_btn = ui.button("+1").props("color=primary")
                set_done_btn = ui.button("Set done")
                undo_set_btn = ui.button("Undo set").props("outline")

    def current_config() -> TimerConfig:
        if state.mode == "breath":
            return get_breath_pattern(str(breath_select.value or "box")).config
        return WorkRestConfig(
            work_sec=float(work_input.value or 0),
            rest_sec=float(rest_input.value or 0),
            cycles=int(cycles_input.value or 1),
        )

    def refresh_goals_view() -> None:
        day = today()
        exercises_done = len(store.exercises_on(day))
        inputs = GoalInputs(
            date=day,
            cardio=tuple(store.all_cardio_logs()),
            completed_intervals=state.completed_intervals,
            completed_exercises=exercises_done,
            manual_calories=state.manual_calories,
        )
        goals = refresh_goals(store.all_goals(day=inputs.date), inputs)
        exercises_label.text = f"Exercises today: {exercises_done}"
        goals_column.clear()
        with goals_column:
            if not goals:
                ui.label("No goals for today").classes("pt-muted")
            for goal in goals:
                store.upsert_goal(goal)
                ui.label(
                    f"{goal.type.capitalize()}: {format_goal_value(goal.type, goal.progress)}"
                    f" / {format_goal_value(goal.type, goal.target)}"
                )
                ui.linear_progress(value=goal.percent, show_value=False).classes("w-full")

    def refresh_pace() -> None:
        distance_km = float(distance_input.value or 0)
        try:
            duration_sec = parse_duration(str(duration_input.value or "0"))
        except ValueError:
            duration_sec = 0.0
        pace_label.text = f"Pace: {format_pace_for(distance_km, duration_sec)}"
        speed_label.text = f"Speed: {format_speed_for(distance_km, duration_sec)}"

    def refresh_reps() -> None:
        counter = state.reps
        started = counter.is_active or counter.is_finished
        reps_title.text = f"{state.reps_name}: {counter.title}" if started else "Not started"
        reps_count.text = f"{counter.current_reps} / {counter.target_reps}"
        sets_bar.value = counter.sets_progress
        rep_minus_btn.set_enabled(counter.is_active)
        rep_plus_btn.set_enabled(counter.is_active)
        set_done_btn.set_enabled(counter.is_active)
        undo_set_btn.set_enabled(counter.completed_sets > 0)

    def on_reps_action(action: Callable[[], None]) -> None:
        action()
        counter = state.reps
        if counter.is_finished:
            exercise = exercise_from_session(
                state.reps_name, counter.set_reps, store.find_template(state.reps_name)
            )
            # Undo then finish again rewrites the same entry.
            if state.reps_exercise_id is not None:
                exercise = replace(exercise, id=state.reps_exercise_id)
            store.upsert_exercise(exercise)
            if state.reps_exercise_id is None:
                ui.notify(f"{state.reps_name} logged", color="positive")
            state.reps_exercise_id = exercise.id
            refresh_goals_view()
        refresh_reps()

    def on_reps_start() -> None:
        state.reps_name = str(exercise_input.value or "").strip() or "Exercise"
        state.reps_exercise_id = None
        state.reps = RepCounter(
            target_sets=int(sets_input.value or 1),
            target_reps=int(reps_input.value or 1),
        )
        state.reps.start_session()
        refresh_reps()

    def on_exercise_change() -> None:
        template = store.find_template(str(exercise_input.value or "").strip())
        if template is not None and template.default_sets:
            sets_input.value = len(template.default_sets)
            reps_input.value = template.default_sets[0].reps

    def refresh_ui() -> None:
        snap = timer.snapshot()
        status_label.text = f"Status: {state.status}"
        phase_label.text = snap.phase_label
        phase_label.style(f"color: {_PHASE_COLORS.get(snap.phase or '', '#e5e7eb')};")
        remaining_label.text = _fmt_remaining(snap)
        cycle_label.text = f"Cycle {snap.cycle}/{snap.cycles}" if snap.cycle else "Cycle -"
        phase_bar.value = snap.phase_progress
        total_bar.value = snap.total_progress
        planned_label.text = f"Planned: {format_duration(current_config().total_planned_sec)}"

        is_interval = state.mode == "interval"
        preset_select.set_visibility(is_interval)
        work_input.set_visibility(is_interval)
        rest_input.set_visibility(is_interval)
        cycles_input.set_visibility(is_interval)
        breath_select.set_visibility(not is_interval)

        start_btn.set_enabled(snap.status != "running")
        pause_btn.set_enabled(snap.status == "running")
        resume_btn.set_enabled(snap.status == "paused")
        reset_btn.set_enabled(snap.status != "idle")
        mode_select.set_enabled(snap.status in {"idle", "finished"})

        if state.goals_dirty:
            state.goals_dirty = False
            refresh_goals_view()
        if state.notice is not None:
            ui.notify(state.notice, color="positive")
            state.notice = None

    def on_timer_update(snap: TimerSnapshot) -> None:
        if snap.status == "finished" and state.status != "Finished":
            state.status = "Finished"
            if state.mode == "interval":
                state.completed_intervals += 1
                state.goals_dirty = True
            state.notice = "Session complete"

    def on_start() -> None:
        state.status = "Running"
        timer.start(current_config())
        refresh_ui()

    def on_pause() -> None:
        timer.pause()
        state.status = "Paused"
        refresh_ui()

    def on_resume() -> None:
        timer.resume()
        state.status = "Running"
        refresh_ui()

    def on_reset() -> None:
        timer.reset()
        state.status = "Ready"
        refresh_ui()

    def on_mode_change() -> None:
        state.mode = str(mode_select.value or "interval")
        refresh_ui()

    def on_preset_change() -> None:
        key = preset_select.value
        for template in INTERVAL_TEMPLATES:
            if template.key == key:
                work_input.value = template.work_sec
                rest_input.value = template.rest_sec
                cycles_input.value = template.cycles
        refresh_ui()

    def on_add_goal() -> None:
        target = float(goal_target_input.value or 0)
        if target <= 0:
            ui.notify("Target must be > 0", color="negative")
            return
        goal_type = cast(GoalType, goal_type_select.value or "duration")
        store.upsert_goal(DailyGoal(type=goal_type, target=target))
        ui.notify(f"Goal added: {goal_type}", color="positive")
        refresh_goals_view()

    def on_calories_change() -> None:
        state.manual_calories = float(calories_input.value or 0)
        refresh_goals_view()

    timer.subscribe(on_timer_update)
    mode_select.on_value_change(lambda _: on_mode_change())
    preset_select.on_value_change(lambda _: on_preset_change())
    distance_input.on_value_change(lambda _: refresh_pace())
    duration_input.on_value_change(lambda _: refresh_pace())
    calories_input.on_value_change(lambda _: on_calories_change())
    start_btn.on_click(on_start)
    pause_btn.on_click(on_pause)
    resume_btn.on_click(on_resume)
    reset_btn.on_click(on_reset)
    add_goal_btn.on_click(on_add_goal)
    exercise_input.on_value_change(lambda _: on_exercise_change())
    reps_start_btn.on_click(on_reps_start)
    rep_plus_btn.on_click(lambda: on_reps_action(state.reps.increment_rep))
    rep_minus_btn.on_click(lambda: on_reps_action(state.reps.decrement_rep))
    set_done_btn.on_click(lambda: on_reps_action(state.reps.complete_set))
    undo_set_btn.on_click(lambda: on_reps_action(state.reps.undo_set))

    refresh_pace()
    refresh_goals_view()
    refresh_reps()
    refresh_ui()
    ui.timer(REFRESH_SEC, refresh_ui)
    ui.run(host=host, port=port, reload=False, title="Pulse Timer")
    store.flush()
    return 0
