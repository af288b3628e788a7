"""Derived training metrics computed from decoded workouts."""
from typing import Dict, List, Optional, Sequence

from workout_sheets_api.models import (
    Exercise,
    ExerciseSessionStats,
    ExerciseSummary,
    Workout,
    WorkoutSummary,
)
from workout_sheets_api.utils import round_half_up


def exercise_volume(exercise: Exercise) -> float:
    """Sum of weight x reps over the exercise's sets."""
    return sum(s.weight * s.reps for s in exercise.sets)


def total_volume(workout: Workout) -> float:
    return sum(exercise_volume(e) for e in workout.exercises)


def total_sets(workout: Workout) -> int:
    return sum(len(e.sets) for e in workout.exercises)


def max_weight(exercise: Exercise) -> float:
    return max((s.weight for s in exercise.sets), default=0)


def estimate_one_rep_max(weight: float, reps: int) -> float:
    """Epley estimate; a single rep is taken as the exact max."""
    if reps == 1:
        return weight
    return round_half_up(weight * (1 + reps / 30))


def estimated_one_rep_max(exercise: Exercise) -> float:
    return max((estimate_one_rep_max(s.weight, s.reps) for s in exercise.sets), default=0)


def workout_summary(workout: Workout) -> WorkoutSummary:
    return WorkoutSummary(
        workout=workout,
        total_volume=total_volume(workout),
        total_sets=total_sets(workout),
    )


def _find_exercise(workout: Workout, name: str) -> Optional[Exercise]:
    return next((e for e in workout.exercises if e.name == name), None)


def session_stats(workout: Workout, name: str) -> Optional[ExerciseSessionStats]:
    """Chart point for one exercise in one session, or None if it has no sets there."""
    exercise = _find_exercise(workout, name)
    if exercise is None or not exercise.sets:
        return None
    return ExerciseSessionStats(
        date=workout.date,
        workout_id=workout.id,
        max_weight=max_weight(exercise),
        total_volume=exercise_volume(exercise),
        estimated_one_rep_max=estimated_one_rep_max(exercise),
    )


def exercise_history(workouts: Sequence[Workout], name: str) -> List[ExerciseSessionStats]:
    """Per-session series for one exercise, oldest first.

    ``workouts`` is expected newest-first, as decoded from the sheet.
    """
    if not name:
        return []
    history = [stats for stats in (session_stats(w, name) for w in workouts) if stats is not None]
    history.reverse()
    return history


def exercise_summaries(workouts: Sequence[Workout]) -> List[ExerciseSummary]:
    """Every logged exercise with its session count and most recent date, by name."""
    counts: Dict[str, int] = {}
    last_dates: Dict[str, str] = {}

    for workout in workouts:
        for exercise in workout.exercises:
            counts[exercise.name] = counts.get(exercise.name, 0) + 1
            # newest-first input: the first date seen is the most recent
            last_dates.setdefault(exercise.name, workout.date)

    return [
        ExerciseSummary(name=name, session_count=counts[name], last_date=last_dates[name])
        for name in sorted(counts, key=str.casefold)
    ]
