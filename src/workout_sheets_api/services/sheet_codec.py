"""Conversion between workout/library records and spreadsheet rows.

Workouts sheet: one row per set
    [workoutId, date, title, muscleGroups, notes, exerciseName, weight, reps]

Exercises sheet: header + one row per library entry
    [id, name, primaryMuscle, secondaryMuscles, equipment, form]
"""
import logging
from datetime import date, datetime
from typing import Dict, List, Sequence

from workout_sheets_api.models import Exercise, PrefabExercise, Workout, WorkoutSet
from workout_sheets_api.utils import format_number, parse_integer, parse_number

logger = logging.getLogger(__name__)

WORKOUT_HEADER = [
    "workoutId", "date", "title", "muscleGroups", "notes", "exerciseName", "weight", "reps",
]
LIBRARY_HEADER = ["id", "name", "primaryMuscle", "secondaryMuscles", "equipment", "form"]

Rows = List[List[str]]


def _cell(row: Sequence[str], index: int) -> str:
    """Return a cell as text; the read API omits trailing empty cells."""
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index])


def _sort_key(workout: Workout) -> date:
    try:
        return datetime.strptime(workout.date.strip(), "%Y-%m-%d").date()
    except (ValueError, AttributeError):
        return date.min


def _split_muscle_groups(text: str) -> List[str]:
    if not text:
        return []
    return [part.strip() for part in text.split(",")]


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------

def encode_workout(workout: Workout) -> Rows:
    """Flatten a workout into one row per set.

    A workout without any sets produces no rows and so vanishes from the sheet
    once saved.
    """
    muscle_groups = ", ".join(workout.muscle_groups)
    notes = workout.notes or ""

    rows: Rows = []
    for exercise in workout.exercises:
        for workout_set in exercise.sets:
            rows.append([
                workout.id,
                workout.date,
                workout.title,
                muscle_groups,
                notes,
                exercise.name,
                format_number(workout_set.weight),
                format_number(workout_set.reps),
            ])
    return rows


def decode_workouts(rows: Sequence[Sequence[str]]) -> List[Workout]:
    """Group set rows back into workouts, newest first.

    The first row is a header. Workout-level columns are taken from the first
    row seen for each id; every row contributes exactly one set. Unreadable
    weights and reps become 0.
    """
    if not rows or len(rows) < 2:
        return []

    workouts: Dict[str, Workout] = {}
    skipped = 0

    for row in rows[1:]:
        workout_id = _cell(row, 0)
        if not workout_id:
            skipped += 1
            continue

        workout = workouts.get(workout_id)
        if workout is None:
            workout = Workout(
                id=workout_id,
                date=_cell(row, 1),
                title=_cell(row, 2),
                muscle_groups=_split_muscle_groups(_cell(row, 3)),
                notes=_cell(row, 4) or None,
                exercises=[],
            )
            workouts[workout_id] = workout

        exercise_name = _cell(row, 5)
        exercise = next((e for e in workout.exercises if e.name == exercise_name), None)
        if exercise is None:
            exercise = Exercise(name=exercise_name, sets=[])
            workout.exercises.append(exercise)

        exercise.sets.append(WorkoutSet(
            weight=parse_number(_cell(row, 6)) or 0,
            reps=parse_integer(_cell(row, 7)) or 0,
        ))

    if skipped:
        logger.debug(f"Skipped {skipped} workout rows without an id")

    return sorted(workouts.values(), key=_sort_key, reverse=True)


# ---------------------------------------------------------------------------
# Exercise library
# ---------------------------------------------------------------------------

def encode_library(entries: Sequence[PrefabExercise]) -> Rows:
    """Header row followed by one row per library entry."""
    rows: Rows = [list(LIBRARY_HEADER)]
    for entry in entries:
        rows.append([
            entry.id,
            entry.name,
            entry.primary_muscle,
            entry.secondary_muscles,
            entry.equipment,
            entry.form,
        ])
    return rows


def decode_library(rows: Sequence[Sequence[str]]) -> List[PrefabExercise]:
    """Read library rows, dropping any without both an id and a name."""
    if not rows or len(rows) < 2:
        return []

    entries: List[PrefabExercise] = []
    for row in rows[1:]:
        entry_id = _cell(row, 0)
        name = _cell(row, 1)
        if not entry_id or not name:
            continue
        entries.append(PrefabExercise(
            id=entry_id,
            name=name,
            primary_muscle=_cell(row, 2),
            secondary_muscles=_cell(row, 3),
            equipment=_cell(row, 4),
            form=_cell(row, 5),
        ))
    return entries
