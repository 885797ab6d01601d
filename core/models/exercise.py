# =============================================================================
# core/models/exercise.py - Exercise Schemas
# =============================================================================
# These models define one row of the `exercises` table and the three shapes
# its content can take:
# - PMRStep: one tense/hold/release/rest step for a muscle group
# - BreathingPattern: inhale/hold/exhale/hold timings repeated for N cycles
# - MeditationStep: one timed instruction with an optional narration script
#
# Content JSON is written by the web client in camelCase (muscleGroup,
# holdAfterExhale, audioScript). Models accept both spellings; API responses
# dump by alias, so the client gets back the shape it wrote.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ExerciseType(str, Enum):
    """
    The three player families.

    - pmr: Progressive Muscle Relaxation, tense then release muscle groups
    - breathing: paced breathing driven by a BreathingPattern
    - meditation: guided, narrated steps
    """
    PMR = "pmr"
    BREATHING = "breathing"
    MEDITATION = "meditation"


class PMRPhase(str, Enum):
    """Phase of a single PMR step."""
    TENSE = "tense"
    HOLD = "hold"
    RELEASE = "release"
    REST = "rest"


# Display labels used by the player and the library filters
TARGET_AREA_LABELS: dict[str, str] = {
    "jaw": "Jaw & Face",
    "face": "Face",
    "neck": "Neck",
    "shoulders": "Shoulders",
    "back": "Back",
    "arms": "Arms",
    "core": "Core",
    "full_body": "Full Body",
    "anxiety": "Anxiety",
    "sleep": "Sleep",
    "focus": "Focus",
    "calm": "Calm",
}


class PMRStep(BaseModel):
    """
    One step of a PMR exercise.

    Example:
        {
            "muscleGroup": "shoulders",
            "phase": "tense",
            "instruction": "Raise your shoulders up toward your ears.",
            "duration": 10
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    muscle_group: str = Field(
        ...,
        alias="muscleGroup",
        description="Muscle group worked in this step (neck, shoulders, ...)"
    )
    instruction: str = Field(..., description="Text spoken when the step starts")
    duration: int = Field(..., ge=0, description="Step length in seconds")
    phase: PMRPhase = Field(..., description="tense, hold, release or rest")


class BreathingPattern(BaseModel):
    """
    Timings for a breathing exercise, in seconds.

    Missing or zero inhale/exhale fall back to 4 seconds; missing holds are
    skipped; missing cycles fall back to 8.

    Example (box breathing):
        {"inhale": 4, "hold": 4, "exhale": 4, "holdAfterExhale": 4, "cycles": 8}
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    inhale: int | None = Field(default=4, ge=0)
    hold: int | None = Field(default=None, ge=0)
    exhale: int | None = Field(default=4, ge=0)
    hold_after_exhale: int | None = Field(default=None, ge=0, alias="holdAfterExhale")
    cycles: int | None = Field(default=8, ge=0)


class MeditationStep(BaseModel):
    """One narrated meditation step."""

    model_config = ConfigDict(populate_by_name=True)

    instruction: str = Field(..., description="Text shown on screen")
    duration: int = Field(..., ge=0, description="Step length in seconds")
    audio_script: str | None = Field(
        default=None,
        alias="audioScript",
        description="Longer text spoken aloud (falls back to instruction)"
    )


class Exercise(BaseModel):
    """
    Schema for an exercise, stored or built in.

    Built-in "quick" exercises use string IDs such as "quick-pmr" and are
    never written to the database.
    """

    id: str = Field(..., description="Exercise UUID, or a quick-* ID")
    program_id: str | None = Field(default=None, description="Owning program, if any")
    title: str
    description: str | None = None
    type: ExerciseType
    duration_seconds: int = Field(..., ge=0, description="Nominal length in seconds")
    day_number: int | None = Field(default=None, ge=0, description="Program day")
    order_index: int = 0
    content: dict[str, Any] = Field(default_factory=dict, description="Raw step JSON")
    audio_script: str | None = None
    muscle_groups: list[str] | None = None
    breathing_pattern: BreathingPattern | None = None
    target_areas: list[str] | None = None
    is_featured: bool = False
    created_at: datetime | None = None

    @property
    def is_quick(self) -> bool:
        return self.id.startswith("quick-")

    def pmr_steps(self) -> list[PMRStep]:
        """Parse content.steps as PMR steps."""
        return [PMRStep.model_validate(step) for step in self.content.get("steps") or []]

    def meditation_steps(self) -> list[MeditationStep]:
        """
        Parse content.steps as meditation steps.

        An exercise without steps plays as a single step built from its
        description, duration and audio_script.
        """
        steps = self.content.get("steps") or []
        if steps:
            return [MeditationStep.model_validate(step) for step in steps]
        return [
            MeditationStep(
                instruction=self.description or self.title,
                duration=self.duration_seconds,
                audio_script=self.audio_script,
            )
        ]


class ExerciseList(BaseModel):
    """Filtered library listing."""

    exercises: list[Exercise] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    target_areas: dict[str, str] = Field(
        default_factory=dict,
        description="Target areas present in the library, with display labels"
    )
