"""Built-in interval presets and breathing patterns."""

from __future__ import annotations

from dataclasses import dataclass

from pulsetimer.timer.phases import BOX_BREATHING, FOUR_SEVEN_EIGHT, BreathConfig, WorkRestConfig


class UnknownPresetError(KeyError):
    """Raised when a preset key is not one of the built-ins."""


@dataclass(frozen=True)
class IntervalTemplate:
    key: str
    name: str
    category: str
    work_sec: int
    rest_sec: int
    cycles: int

    def to_config(self) -> WorkRestConfig:
        return WorkRestConfig(work_sec=self.work_sec, rest_sec=self.rest_sec, cycles=self.cycles)


@dataclass(frozen=True)
class BreathPattern:
    key: str
    name: str
    config: BreathConfig


INTERVAL_TEMPLATES: tuple[IntervalTemplate, ...] = (
    IntervalTemplate("tabata", "Tabata 20/10", "HIIT", 20, 10, 8),
    IntervalTemplate("hiit_30_15", "HIIT 30/15", "HIIT", 30, 15, 8),
    IntervalTemplate("hiit_40_20", "HIIT 40/20", "HIIT", 40, 20, 10),
    IntervalTemplate("emom_10", "EMOM 10", "Strength", 60, 0, 10),
    IntervalTemplate("sprints_6x30", "Sprints 6x30", "Running", 30, 90, 6),
    IntervalTemplate("rounds_3x3", "Boxing 3x3", "Boxing", 180, 60, 3),
)

BREATH_PATTERNS: tuple[BreathPattern, ...] = (
    BreathPattern("box", "Box 4-4-4-4", BOX_BREATHING),
    BreathPattern("478", "Relax 4-7-8", FOUR_SEVEN_EIGHT),
    BreathPattern(
        "coherent",
        "Coherent 5-5",
        BreathConfig(inhale_sec=5, hold1_sec=0, exhale_sec=5, hold2_sec=0, cycles=6),
    ),
)


def list_interval_templates(category: str | None = None) -> list[IntervalTemplate]:
    if category is None:
        return list(INTERVAL_TEMPLATES)
    wanted = category.strip().lower()
    return [t for t in INTERVAL_TEMPLATES if t.category.lower() == wanted]


def get_interval_template(key: str) -> IntervalTemplate:
    for template in INTERVAL_TEMPLATES:
        if template.key == key:
            return template
    valid = ", ".join(t.key for t in INTERVAL_TEMPLATES)
    raise UnknownPresetError(f"Unknown interval preset '{key}'. Use one of: {valid}")


def get_breath_pattern(key: str) -> BreathPattern:
    for pattern in BREATH_PATTERNS:
        if pattern.key == key:
            return pattern
    valid = ", ".join(p.key for p in BREATH_PATTERNS)
    raise UnknownPresetError(f"Unknown breath pattern '{key}'. Use one of: {valid}")
