"""Set/rep counter for strength sessions."""

from __future__ import annotations

from pulsetimer.workout.model import Exercise, ExerciseSet, ExerciseTemplate


class RepCounter:
    def __init__(self, target_sets: int = 4, target_reps: int = 12) -> None:
        self.target_sets = max(1, target_sets)
        self.target_reps = max(1, target_reps)
        self.current_set = 1
        self.current_reps = 0
        self.completed_sets = 0
        self.total_reps = 0
        self.set_reps: list[int] = []
        self.is_active = False
        self.is_finished = False

    def start_session(self) -> None:
        self.reset_session()
        self.is_active = True

    def increment_rep(self) -> None:
        if not self.is_active or self.is_finished:
            return
        self.current_reps += 1
        self.total_reps += 1
        if self.current_reps >= self.target_reps:
            self.complete_set()

    def decrement_rep(self) -> None:
        if not self.is_active or self.is_finished:
            return
        if self.current_reps <= 0:
            return
        self.current_reps -= 1
        self.total_reps = max(0, self.total_reps - 1)

    def complete_set(self) -> None:
        if not self.is_active or self.is_finished:
            return
        self.completed_sets += 1
        self.set_reps.append(self.current_reps)
        if self.current_set >= self.target_sets:
            self.is_finished = True
            self.is_active = False
        else:
            self.current_set += 1
            self.current_reps = 0

    def undo_set(self) -> None:
        if self.completed_sets <= 0:
            return
        self.completed_sets -= 1
        if self.set_reps:
            self.set_reps.pop()
        if not self.is_finished:
            self.current_set = max(1, self.current_set - 1)
        self.current_reps = 0
        self.is_finished = False
        self.is_active = True

    def reset_session(self) -> None:
        self.current_set = 1
        self.current_reps = 0
        self.completed_sets = 0
        self.total_reps = 0
        self.set_reps = []
        self.is_finished = False
        self.is_active = False

    @property
    def sets_progress(self) -> float:
        if self.target_sets <= 0:
            return 0.0
        return min(self.completed_sets / self.target_sets, 1.0)

    @property
    def reps_progress(self) -> float:
        if self.target_reps <= 0:
            return 0.0
        return min(self.current_reps / self.target_reps, 1.0)

    @property
    def title(self) -> str:
        if self.is_finished:
            return "Session complete"
        return f"Set {self.current_set} of {self.target_sets}"


def exercise_from_session(
    name: str, set_reps: list[int], template: ExerciseTemplate | None = None
) -> Exercise:
    """Build a logged exercise from the reps of each completed set.

    Weight and rest of the template's matching set carry over.
    """
    base = template.instantiate() if template is not None else Exercise(name=name)
    sets: list[ExerciseSet] = []
    for index, reps in enumerate(set_reps):
        if index < len(base.sets):
            default = base.sets[index]
            sets.append(ExerciseSet(reps=reps, weight=default.weight, rest_sec=default.rest_sec))
        else:
            sets.append(ExerciseSet(reps=reps))
    return Exercise(name=base.name, notes=base.notes, sport_tags=base.sport_tags, sets=tuple(sets))
