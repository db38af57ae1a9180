"""Phase-based countdown engine shared by interval and breathing timers."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from pulsetimer.timer.driver import AsyncioTickDriver, Clock, TickDriver
from pulsetimer.timer.phases import PhaseSequence, PhaseStep, TimerConfig, phase_label


TimerStatus = Literal["idle", "running", "paused", "finished"]

MIN_PHASE_SEC = 0.01
PHASE_END_EPSILON = 0.0001


@dataclass(frozen=True)
class TimerSnapshot:
    status: TimerStatus
    phase: str | None
    cycle: int
    cycles: int
    remaining_sec: float
    elapsed_sec: float
    phase_progress: float
    total_progress: float
    total_planned_sec: float

    @property
    def phase_label(self) -> str:
        return phase_label(self.phase)


StateListener = Callable[[TimerSnapshot], None]


def _clamp_unit(value: float) -> float:
    return min(1.0, max(0.0, value))


class PhaseTimer:
    """Runs a ``TimerConfig`` phase by phase against a clock.

    Remaining time is always derived from the current phase deadline, never
    from counting ticks, so late or dropped ticks self-correct. Every
    operation is valid in every state; calls that make no sense for the
    current status are no-ops.
    """

    def __init__(
        self,
        driver: TickDriver | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._driver: TickDriver = driver or AsyncioTickDriver()
        self._clock = clock
        self._listeners: list[StateListener] = []

        self._config: Optional[TimerConfig] = None
        self._sequence: Optional[PhaseSequence] = None
        self._step: Optional[PhaseStep] = None

        self._status: TimerStatus = "idle"
        self._remaining_sec = 0.0
        self._elapsed_sec = 0.0
        self._phase_progress = 0.0
        self._total_progress = 0.0

        self._phase_end: Optional[float] = None
        self._phase_duration_sec = 0.0
        self._elapsed_before_phase = 0.0

    # ----- Observation -----
    @property
    def status(self) -> TimerStatus:
        return self._status

    @property
    def config(self) -> Optional[TimerConfig]:
        return self._config

    @property
    def total_planned_sec(self) -> float:
        return self._sequence.total_planned_sec if self._sequence is not None else 0.0

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            status=self._status,
            phase=self._step.phase.name if self._step is not None else None,
            cycle=self._step.cycle if self._step is not None else 0,
            cycles=self._sequence.cycles if self._sequence is not None else 0,
            remaining_sec=self._remaining_sec,
            elapsed_sec=self._elapsed_sec,
            phase_progress=self._phase_progress,
            total_progress=self._total_progress,
            total_planned_sec=self.total_planned_sec,
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ----- Control -----
    def start(self, config: TimerConfig) -> None:
        self._driver.stop()
        self._config = config
        self._sequence = config.sequence()
        self._status = "running"
        self._remaining_sec = 0.0
        self._elapsed_sec = 0.0
        self._phase_progress = 0.0
        self._total_progress = 0.0
        self._elapsed_before_phase = 0.0

        self._step = self._sequence.first_step()
        if self._step is None:
            self._complete()
            return
        self._begin_phase(self._step.phase.duration_sec)

    def pause(self) -> None:
        if self._status != "running" or self._phase_end is None:
            return
        if self._phase_end - self._clock() <= PHASE_END_EPSILON:
            # Phase already ran out: advance first, then pause the next one.
            self.tick()
            if self._status != "running" or self._phase_end is None:
                return
        self._driver.stop()
        remaining = max(0.0, self._phase_end - self._clock())
        # Bank the part of the phase already played so resuming never rewinds.
        self._elapsed_before_phase += max(0.0, self._phase_duration_sec - remaining)
        self._remaining_sec = remaining
        self._elapsed_sec = min(self.total_planned_sec, self._elapsed_before_phase)
        self._total_progress = self._progress_of_total()
        self._phase_end = None
        self._status = "paused"
        self._emit()

    def resume(self) -> None:
        if self._status != "paused":
            return
        self._status = "running"
        self._begin_phase(self._remaining_sec)

    def reset(self) -> None:
        self._driver.stop()
        self._status = "idle"
        self._step = None
        self._remaining_sec = 0.0
        self._elapsed_sec = 0.0
        self._phase_progress = 0.0
        self._total_progress = 0.0
        self._phase_end = None
        self._phase_duration_sec = 0.0
        self._elapsed_before_phase = 0.0
        self._emit()

    def tick(self) -> None:
        if self._status != "running" or self._phase_end is None:
            return
        remaining = max(0.0, self._phase_end - self._clock())
        elapsed_in_phase = max(0.0, self._phase_duration_sec - remaining)

        self._remaining_sec = remaining
        self._elapsed_sec = min(
            self.total_planned_sec, self._elapsed_before_phase + elapsed_in_phase
        )
        self._phase_progress = _clamp_unit(elapsed_in_phase / self._phase_duration_sec)
        self._total_progress = self._progress_of_total()

        if remaining <= PHASE_END_EPSILON:
            self._advance()
            return
        self._emit()

    # ----- Internals -----
    def _begin_phase(self, duration_sec: float) -> None:
        self._phase_duration_sec = max(MIN_PHASE_SEC, duration_sec)
        self._phase_end = self._clock() + self._phase_duration_sec
        self._driver.start(self.tick)
        self.tick()

    def _advance(self) -> None:
        assert self._sequence is not None and self._step is not None
        self._elapsed_before_phase += self._phase_duration_sec
        step = self._sequence.next_step(self._step.index, self._step.cycle)
        if step is None:
            self._complete()
            return
        self._step = step
        self._begin_phase(step.phase.duration_sec)

    def _complete(self) -> None:
        self._driver.stop()
        self._phase_end = None
        self._status = "finished"
        self._remaining_sec = 0.0
        self._elapsed_sec = self.total_planned_sec
        self._phase_progress = 1.0
        self._total_progress = 1.0
        self._emit()

    def _progress_of_total(self) -> float:
        total = self.total_planned_sec
        if total <= 0:
            return 0.0
        return _clamp_unit(self._elapsed_sec / total)

    def _emit(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)
