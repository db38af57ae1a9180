"""Phase topologies for the countdown engine (work/rest and breathing)."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Union


WORK = "work"
REST = "rest"
INHALE = "inhale"
HOLD1 = "hold1"
EXHALE = "exhale"
HOLD2 = "hold2"

MIN_MANDATORY_SEC = 1.0

_PHASE_LABELS: dict[str, str] = {
    WORK: "WORK",
    REST: "REST",
    INHALE: "INHALE",
    HOLD1: "HOLD",
    EXHALE: "EXHALE",
    HOLD2: "HOLD",
}


def phase_label(name: str | None) -> str:
    if name is None:
        return "-"
    return _PHASE_LABELS.get(name, name.upper())


def _clamp_seconds(value: object, floor: float) -> float:
    try:
        seconds = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return floor
    if math.isnan(seconds):
        return floor
    return max(floor, seconds)


def _clamp_cycles(value: object) -> int:
    try:
        cycles = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, cycles)


@dataclass(frozen=True)
class PhaseSpec:
    name: str
    duration_sec: float
    skippable: bool = False


@dataclass(frozen=True)
class PhaseStep:
    index: int
    cycle: int
    phase: PhaseSpec


@dataclass(frozen=True)
class PhaseSequence:
    """Ordered phases repeated for ``cycles`` rounds.

    Skippable phases with a zero duration are never entered. When
    ``omit_trailing_on_last_cycle`` is set, phases after the last mandatory
    phase are dropped from the final cycle (no rest after the last work).
    """

    phases: tuple[PhaseSpec, ...]
    cycles: int
    omit_trailing_on_last_cycle: bool = False

    def _last_mandatory_index(self) -> int:
        indexes = [i for i, phase in enumerate(self.phases) if not phase.skippable]
        return indexes[-1] if indexes else len(self.phases) - 1

    def is_played(self, index: int, cycle: int) -> bool:
        phase = self.phases[index]
        if phase.skippable and phase.duration_sec <= 0:
            return False
        if (
            self.omit_trailing_on_last_cycle
            and cycle >= self.cycles
            and index > self._last_mandatory_index()
        ):
            return False
        return True

    @property
    def total_planned_sec(self) -> float:
        return sum(
            phase.duration_sec
            for cycle in range(1, self.cycles + 1)
            for index, phase in enumerate(self.phases)
            if self.is_played(index, cycle)
        )

    def first_step(self) -> PhaseStep | None:
        return self._scan(index=0, cycle=1)

    def next_step(self, index: int, cycle: int) -> PhaseStep | None:
        return self._scan(index=index + 1, cycle=cycle)

    def _scan(self, *, index: int, cycle: int) -> PhaseStep | None:
        if not self.phases:
            return None
        while cycle <= self.cycles:
            if index >= len(self.phases):
                cycle += 1
                index = 0
                continue
            if self.is_played(index, cycle):
                return PhaseStep(index=index, cycle=cycle, phase=self.phases[index])
            index += 1
        return None


@dataclass(frozen=True)
class WorkRestConfig:
    work_sec: float = 30.0
    rest_sec: float = 15.0
    cycles: int = 8

    kind: ClassVar[str] = "work_rest"

    def __post_init__(self) -> None:
        object.__setattr__(self, "work_sec", _clamp_seconds(self.work_sec, MIN_MANDATORY_SEC))
        object.__setattr__(self, "rest_sec", _clamp_seconds(self.rest_sec, 0.0))
        object.__setattr__(self, "cycles", _clamp_cycles(self.cycles))

    def sequence(self) -> PhaseSequence:
        return PhaseSequence(
            phases=(
                PhaseSpec(WORK, self.work_sec),
                PhaseSpec(REST, self.rest_sec, skippable=True),
            ),
            cycles=self.cycles,
            omit_trailing_on_last_cycle=True,
        )

    @property
    def total_planned_sec(self) -> float:
        return self.sequence().total_planned_sec


@dataclass(frozen=True)
class BreathConfig:
    inhale_sec: float = 4.0
    hold1_sec: float = 4.0
    exhale_sec: float = 4.0
    hold2_sec: float = 4.0
    cycles: int = 6

    kind: ClassVar[str] = "breath"

    def __post_init__(self) -> None:
        object.__setattr__(self, "inhale_sec", _clamp_seconds(self.inhale_sec, MIN_MANDATORY_SEC))
        object.__setattr__(self, "hold1_sec", _clamp_seconds(self.hold1_sec, 0.0))
        object.__setattr__(self, "exhale_sec", _clamp_seconds(self.exhale_sec, MIN_MANDATORY_SEC))
        object.__setattr__(self, "hold2_sec", _clamp_seconds(self.hold2_sec, 0.0))
        object.__setattr__(self, "cycles", _clamp_cycles(self.cycles))

    def sequence(self) -> PhaseSequence:
        # The final hold2 always plays out; only work/rest drops its trailing phase.
        return PhaseSequence(
            phases=(
                PhaseSpec(INHALE, self.inhale_sec),
                PhaseSpec(HOLD1, self.hold1_sec, skippable=True),
                PhaseSpec(EXHALE, self.exhale_sec),
                PhaseSpec(HOLD2, self.hold2_sec, skippable=True),
            ),
            cycles=self.cycles,
            omit_trailing_on_last_cycle=False,
        )

    @property
    def cycle_duration_sec(self) -> float:
        return self.inhale_sec + self.hold1_sec + self.exhale_sec + self.hold2_sec

    @property
    def total_planned_sec(self) -> float:
        return self.sequence().total_planned_sec


TimerConfig = Union[WorkRestConfig, BreathConfig]


BOX_BREATHING = BreathConfig(inhale_sec=4, hold1_sec=4, exhale_sec=4, hold2_sec=4, cycles=6)
FOUR_SEVEN_EIGHT = BreathConfig(inhale_sec=4, hold1_sec=7, exhale_sec=8, hold2_sec=0, cycles=6)
