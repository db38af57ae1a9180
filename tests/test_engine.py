from __future__ import annotations

from pulsetimer.timer.driver import ManualTickDriver
from pulsetimer.timer.engine import PhaseTimer, TimerSnapshot
from pulsetimer.timer.phases import BOX_BREATHING, BreathConfig, WorkRestConfig


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _make_timer() -> tuple[PhaseTimer, ManualTickDriver, FakeClock]:
    driver = ManualTickDriver()
    clock = FakeClock()
    return PhaseTimer(driver=driver, clock=clock), driver, clock


def _run_for(driver: ManualTickDriver, clock: FakeClock, seconds: float, step: float = 0.1) -> None:
    for _ in range(int(round(seconds / step))):
        clock.now += step
        driver.fire()


def _phase_trail(snaps: list[TimerSnapshot]) -> list[tuple[str | None, int]]:
    trail: list[tuple[str | None, int]] = []
    for snap in snaps:
        if snap.status != "running":
            continue
        key = (snap.phase, snap.cycle)
        if not trail or trail[-1] != key:
            trail.append(key)
    return trail


def test_initial_state_is_idle() -> None:
    timer, driver, _clock = _make_timer()
    snap = timer.snapshot()
    assert snap.status == "idle"
    assert snap.cycle == 0
    assert snap.phase is None
    assert snap.total_progress == 0.0
    assert not driver.is_active


def test_start_enters_first_phase_immediately() -> None:
    timer, driver, _clock = _make_timer()
    timer.start(WorkRestConfig(work_sec=30, rest_sec=15, cycles=3))
    snap = timer.snapshot()
    assert snap.status == "running"
    assert snap.phase == "work"
    assert snap.cycle == 1
    assert snap.remaining_sec == 30
    assert snap.total_planned_sec == 120
    assert driver.is_active


def test_work_rest_runs_to_completion() -> None:
    timer, driver, clock = _make_timer()
    snaps: list[TimerSnapshot] = []
    timer.subscribe(snaps.append)
    timer.start(WorkRestConfig(work_sec=30, rest_sec=15, cycles=3))

    _run_for(driver, clock, 119.0)
    assert timer.status == "running"

    _run_for(driver, clock, 1.5)
    snap = timer.snapshot()
    assert snap.status == "finished"
    assert snap.total_progress == 1.0
    assert snap.phase_progress == 1.0
    assert snap.elapsed_sec == 120
    assert snap.remaining_sec == 0.0
    assert not driver.is_active
    assert _phase_trail(snaps) == [
        ("work", 1),
        ("rest", 1),
        ("work", 2),
        ("rest", 2),
        ("work", 3),
    ]


def test_zero_rest_never_observes_rest_phase() -> None:
    timer, driver, clock = _make_timer()
    snaps: list[TimerSnapshot] = []
    timer.subscribe(snaps.append)
    timer.start(WorkRestConfig(work_sec=30, rest_sec=0, cycles=3))
    assert timer.total_planned_sec == 90

    _run_for(driver, clock, 91.0)
    assert timer.status == "finished"
    assert all(s.phase == "work" for s in snaps)
    assert _phase_trail(snaps) == [("work", 1), ("work", 2), ("work", 3)]


def test_box_breathing_cycles_in_order() -> None:
    timer, driver, clock = _make_timer()
    snaps: list[TimerSnapshot] = []
    timer.subscribe(snaps.append)
    timer.start(BOX_BREATHING)
    assert timer.total_planned_sec == 96

    _run_for(driver, clock, 97.0)
    assert timer.status == "finished"
    expected = [
        (name, cycle)
        for cycle in range(1, 7)
        for name in ("inhale", "hold1", "exhale", "hold2")
    ]
    assert _phase_trail(snaps) == expected


def test_breath_without_holds_alternates_inhale_exhale() -> None:
    timer, driver, clock = _make_timer()
    snaps: list[TimerSnapshot] = []
    timer.subscribe(snaps.append)
    timer.start(BreathConfig(inhale_sec=3, hold1_sec=0, exhale_sec=3, hold2_sec=0, cycles=2))

    _run_for(driver, clock, 13.0)
    assert timer.status == "finished"
    assert _phase_trail(snaps) == [("inhale", 1), ("exhale", 1), ("inhale", 2), ("exhale", 2)]


def test_progress_tracks_wall_clock_not_tick_count() -> None:
    timer, driver, clock = _make_timer()
    timer.start(WorkRestConfig(work_sec=30, rest_sec=15, cycles=3))

    # One late tick after 10s must land exactly where 100 ticks would.
    clock.now += 10.0
    driver.fire()
    snap = timer.snapshot()
    assert abs(snap.remaining_sec - 20.0) < 1e-9
    assert abs(snap.elapsed_sec - 10.0) < 1e-9
    assert abs(snap.phase_progress - (10.0 / 30.0)) < 1e-9
    assert abs(snap.total_progress - (10.0 / 120.0)) < 1e-9


def test_pause_and_resume_keep_total_progress_monotonic() -> None:
    timer, driver, clock = _make_timer()
    timer.start(WorkRestConfig(work_sec=30, rest_sec=15, cycles=3))
    _run_for(driver, clock, 12.0)

    timer.pause()
    paused = timer.snapshot()
    assert paused.status == "paused"
    assert abs(paused.remaining_sec - 18.0) < 1e-6
    assert not driver.is_active

    clock.now += 50.0
    assert driver.fire() is False
    assert timer.snapshot().total_progress == paused.total_progress

    timer.resume()
    resumed = timer.snapshot()
    assert resumed.status == "running"
    assert resumed.total_progress >= paused.total_progress
    assert resumed.phase == "work"
    assert abs(resumed.remaining_sec - 18.0) < 1e-6

    previous = resumed.total_progress
    for _ in range(1100):
        clock.now += 0.1
        driver.fire()
        current = timer.snapshot().total_progress
        assert current >= previous
        previous = current
    assert timer.status == "finished"
    assert timer.snapshot().elapsed_sec == 120


def test_resume_measures_phase_progress_against_remaining_time() -> None:
    timer, driver, clock = _make_timer()
    timer.start(WorkRestConfig(work_sec=20, rest_sec=10, cycles=2))
    _run_for(driver, clock, 10.0)
    timer.pause()
    timer.resume()
    assert timer.snapshot().phase_progress == 0.0

    _run_for(driver, clock, 5.0)
    snap = timer.snapshot()
    assert abs(snap.phase_progress - 0.5) < 1e-6
    assert abs(snap.elapsed_sec - 15.0) < 1e-6


def test_pause_after_phase_deadline_moves_to_next_phase() -> None:
    timer, driver, clock = _make_timer()
    timer.start(WorkRestConfig(work_sec=10, rest_sec=5, cycles=2))
    clock.now += 10.0

    timer.pause()
    paused = timer.snapshot()
    assert paused.status == "paused"
    assert (paused.phase, paused.cycle) == ("rest", 1)
    assert abs(paused.remaining_sec - 5.0) < 1e-6
    assert abs(paused.elapsed_sec - 10.0) < 1e-6

    timer.resume()
    clock.now += 1.0
    driver.fire()
    snap = timer.snapshot()
    assert snap.phase == "rest"
    assert abs(snap.elapsed_sec - 11.0) < 1e-6


def test_pause_after_final_deadline_finishes() -> None:
    timer, _driver, clock = _make_timer()
    timer.start(WorkRestConfig(work_sec=5, rest_sec=0, cycles=1))
    clock.now += 6.0
    timer.pause()
    assert timer.status == "finished"
    assert timer.snapshot().elapsed_sec == 5


def test_invalid_operations_are_noops() -> None:
    timer, driver, _clock = _make_timer()
    timer.pause()
    timer.resume()
    assert timer.status == "idle"
    assert driver.start_count == 0

    timer.start(WorkRestConfig(work_sec=5, rest_sec=0, cycles=1))
    timer.resume()
    assert timer.status == "running"

    timer.pause()
    timer.pause()
    assert timer.status == "paused"


def test_finished_is_terminal_until_next_start() -> None:
    timer, driver, clock = _make_timer()
    timer.start(WorkRestConfig(work_sec=1, rest_sec=0, cycles=1))
    _run_for(driver, clock, 1.5)
    assert timer.status == "finished"

    timer.pause()
    timer.resume()
    timer.tick()
    assert timer.status == "finished"

    timer.start(WorkRestConfig(work_sec=2, rest_sec=0, cycles=1))
    assert timer.status == "running"
    assert timer.snapshot().elapsed_sec == 0.0


def test_start_while_running_fully_resets() -> None:
    timer, driver, clock = _make_timer()
    timer.start(WorkRestConfig(work_sec=30, rest_sec=15, cycles=3))
    _run_for(driver, clock, 40.0)
    assert timer.snapshot().phase == "rest"

    timer.start(BreathConfig(inhale_sec=4, hold1_sec=0, exhale_sec=4, hold2_sec=0, cycles=1))
    snap = timer.snapshot()
    assert snap.status == "running"
    assert snap.phase == "inhale"
    assert snap.cycle == 1
    assert snap.elapsed_sec == 0.0
    assert snap.total_planned_sec == 8
    assert driver.is_active


def test_reset_returns_to_idle_from_any_state() -> None:
    timer, driver, clock = _make_timer()
    timer.start(WorkRestConfig(work_sec=30, rest_sec=15, cycles=3))
    _run_for(driver, clock, 5.0)
    timer.pause()
    timer.reset()

    snap = timer.snapshot()
    assert snap.status == "idle"
    assert snap.phase is None
    assert snap.cycle == 0
    assert snap.remaining_sec == 0.0
    assert snap.elapsed_sec == 0.0
    assert snap.phase_progress == 0.0
    assert snap.total_progress == 0.0
    assert not driver.is_active

    timer.resume()
    assert timer.status == "idle"


def test_unsubscribe_stops_notifications() -> None:
    timer, driver, clock = _make_timer()
    seen: list[TimerSnapshot] = []
    unsubscribe = timer.subscribe(seen.append)
    timer.start(WorkRestConfig(work_sec=10, rest_sec=0, cycles=1))
    count = len(seen)
    assert count > 0

    unsubscribe()
    _run_for(driver, clock, 1.0)
    assert len(seen) == count
