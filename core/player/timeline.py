# =============================================================================
# core/player/timeline.py - Exercise Timelines
# =============================================================================
# Flattens any exercise into an ordered list of timed phases so one player
# engine can drive all three exercise types:
#
#   PMR         one phase per step (tense / hold / release / rest)
#   Breathing   inhale -> hold -> exhale -> hold, repeated `cycles` times
#   Meditation  one phase per narrated step
#
# Zero-length phases are dropped here, so the engine never has to skip.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from core.models.exercise import BreathingPattern, Exercise, ExerciseType, PMRPhase
from app.exceptions import InvalidExerciseError


# -----------------------------------------------------------------------------
# Breathing defaults
# -----------------------------------------------------------------------------

DEFAULT_BREATH_SECONDS = 4
DEFAULT_BREATH_CYCLES = 8

# (kind, label, narration) for each breathing phase, in order
BREATHING_PHASES = (
    ("inhale", "Breathe In", "Breathe in"),
    ("hold_in", "Hold", "Hold"),
    ("exhale", "Breathe Out", "Breathe out"),
    ("hold_out", "Hold", "Hold"),
)

PMR_LABELS = {
    PMRPhase.TENSE: "Tense",
    PMRPhase.HOLD: "Hold",
    PMRPhase.RELEASE: "Release",
    PMRPhase.REST: "Rest",
}


@dataclass(frozen=True)
class Phase:
    """One timed phase of an exercise."""

    index: int
    kind: str
    label: str
    duration: int
    narration: str | None = None
    instruction: str | None = None
    cycle: int = 0
    muscle_group: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "kind": self.kind,
            "label": self.label,
            "duration": self.duration,
            "narration": self.narration,
            "instruction": self.instruction,
            "cycle": self.cycle,
            "muscle_group": self.muscle_group,
        }


@dataclass(frozen=True)
class Timeline:
    """All phases of one exercise, in play order."""

    exercise_id: str
    exercise_type: ExerciseType
    title: str
    phases: tuple[Phase, ...] = field(default_factory=tuple)
    cycles: int = 1

    @property
    def total_seconds(self) -> int:
        return sum(phase.duration for phase in self.phases)

    def to_dict(self) -> dict[str, Any]:
        return {
            "exercise_id": self.exercise_id,
            "exercise_type": self.exercise_type.value,
            "title": self.title,
            "cycles": self.cycles,
            "total_seconds": self.total_seconds,
            "phases": [phase.to_dict() for phase in self.phases],
        }


def breathing_cycle(pattern: BreathingPattern | None) -> list[tuple[str, str, str, int]]:
    """
    Resolve one breathing cycle to (kind, label, narration, seconds).

    No pattern at all plays 4-4-4-4 box breathing. With a pattern, a
    missing/zero inhale or exhale falls back to 4 seconds and a missing
    hold is skipped.
    """
    if pattern is None:
        durations = [DEFAULT_BREATH_SECONDS] * 4
    else:
        durations = [
            pattern.inhale or DEFAULT_BREATH_SECONDS,
            pattern.hold or 0,
            pattern.exhale or DEFAULT_BREATH_SECONDS,
            pattern.hold_after_exhale or 0,
        ]

    return [
        (kind, label, narration, seconds)
        for (kind, label, narration), seconds in zip(BREATHING_PHASES, durations)
        if seconds > 0
    ]


def _breathing_phases(exercise: Exercise) -> tuple[list[Phase], int]:
    pattern = exercise.breathing_pattern
    cycles = (pattern.cycles if pattern else None) or DEFAULT_BREATH_CYCLES
    cycle = breathing_cycle(pattern)

    phases: list[Phase] = []
    for cycle_number in range(cycles):
        for kind, label, narration, seconds in cycle:
            phases.append(Phase(
                index=len(phases),
                kind=kind,
                label=label,
                duration=seconds,
                narration=narration,
                instruction=label,
                cycle=cycle_number,
            ))
    return phases, cycles


def _pmr_phases(exercise: Exercise) -> list[Phase]:
    phases: list[Phase] = []
    for step in exercise.pmr_steps():
        if step.duration <= 0:
            continue
        phases.append(Phase(
            index=len(phases),
            kind=step.phase.value,
            label=PMR_LABELS[step.phase],
            duration=step.duration,
            narration=step.instruction,
            instruction=step.instruction,
            muscle_group=step.muscle_group,
        ))
    return phases


def _meditation_phases(exercise: Exercise) -> list[Phase]:
    phases: list[Phase] = []
    for step in exercise.meditation_steps():
        if step.duration <= 0:
            continue
        phases.append(Phase(
            index=len(phases),
            kind="step",
            label=f"Step {len(phases) + 1}",
            duration=step.duration,
            narration=step.audio_script or step.instruction,
            instruction=step.instruction,
        ))
    return phases


def build_timeline(exercise: Exercise) -> Timeline:
    """
    Build the phase list for an exercise.

    Args:
        exercise: Any exercise, stored or built in

    Returns:
        Timeline with at least one phase

    Raises:
        InvalidExerciseError: If the exercise has no playable phase
    """
    cycles = 1
    if exercise.type == ExerciseType.BREATHING:
        phases, cycles = _breathing_phases(exercise)
    elif exercise.type == ExerciseType.MEDITATION:
        phases = _meditation_phases(exercise)
    else:
        phases = _pmr_phases(exercise)

    if not phases:
        raise InvalidExerciseError(exercise.id, "exercise has no timed steps")

    return Timeline(
        exercise_id=exercise.id,
        exercise_type=exercise.type,
        title=exercise.title,
        phases=tuple(phases),
        cycles=cycles,
    )
