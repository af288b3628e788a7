"""Data models for the workout log and the exercise library."""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",  # Ignore extra fields from UI
    )


class WorkoutSet(CamelModel):
    """One set: load in kg and rep count."""

    model_config = ConfigDict(frozen=True)

    weight: float = 0
    reps: int = 0


class Exercise(CamelModel):
    """An exercise performed within a workout, sets in performed order."""
    name: str
    sets: List[WorkoutSet] = Field(default_factory=list)


class WorkoutDraft(CamelModel):
    """A workout before it has been assigned an id."""
    date: str  # YYYY-MM-DD
    title: str
    muscle_groups: List[str] = Field(default_factory=list)
    exercises: List[Exercise] = Field(default_factory=list)
    notes: Optional[str] = None


class Workout(WorkoutDraft):
    """A logged training session."""
    id: str


class PrefabExerciseDraft(CamelModel):
    """Library entry fields supplied by the user."""
    name: str
    primary_muscle: str = ""
    secondary_muscles: str = ""  # Comma-separated free text
    equipment: str = ""
    form: str = ""


class PrefabExercise(PrefabExerciseDraft):
    """An exercise library entry; ``name`` is the match target for extraction."""
    id: str


class WorkoutSummary(CamelModel):
    """Dashboard card for one workout."""
    workout: Workout
    total_volume: float
    total_sets: int


class ExerciseSessionStats(CamelModel):
    """One point of an exercise's history chart."""
    date: str
    workout_id: str
    max_weight: float
    total_volume: float
    estimated_one_rep_max: float = Field(alias="estimated1RM")


class ExerciseSummary(CamelModel):
    """An exercise that appears in the log, with how often and how recently."""
    name: str
    session_count: int
    last_date: str
