"""Tests for derived training metrics."""
import pytest

from workout_sheets_api.models import Exercise, Workout, WorkoutSet
from workout_sheets_api.services import metrics
from workout_sheets_api.services.sheet_codec import decode_workouts


def _workout(workout_id, date, *exercises) -> Workout:
    return Workout(id=workout_id, date=date, title="T", exercises=list(exercises))


def _exercise(name, *sets) -> Exercise:
    return Exercise(name=name, sets=[WorkoutSet(weight=w, reps=r) for w, r in sets])


class TestVolumeAndSets:

    def test_exercise_volume(self):
        assert metrics.exercise_volume(_exercise("Press", (50, 10), (60, 8))) == 980

    def test_workout_totals(self):
        workout = _workout(
            "w", "2024-01-01",
            _exercise("Press", (50, 10), (60, 8)),
            _exercise("Remo", (20, 10)),
        )

        assert metrics.total_volume(workout) == 1180
        assert metrics.total_sets(workout) == 3

    def test_empty_workout(self):
        workout = _workout("w", "2024-01-01")

        assert metrics.total_volume(workout) == 0
        assert metrics.total_sets(workout) == 0

    def test_workout_summary(self):
        workout = _workout("w", "2024-01-01", _exercise("Press", (50, 10)))

        summary = metrics.workout_summary(workout)

        assert summary.workout == workout
        assert summary.total_volume == 500
        assert summary.total_sets == 1


class TestOneRepMax:

    @pytest.mark.parametrize(
        "weight,reps,expected",
        [
            (100, 1, 100),
            (100, 10, 133),
            (100, 5, 117),
            (60, 15, 90),
            (12.5, 1, 12.5),
            (45, 15, 68),  # 67.5 rounds half up
            (0, 12, 0),
        ],
    )
    def test_epley(self, weight, reps, expected):
        assert metrics.estimate_one_rep_max(weight, reps) == expected

    def test_best_estimate_across_sets(self):
        exercise = _exercise("Press", (100, 1), (90, 6), (80, 10))

        # 100, 108, 107
        assert metrics.estimated_one_rep_max(exercise) == 108
        assert metrics.max_weight(exercise) == 100


class TestExerciseHistory:

    def test_history_is_chronological(self, workout_rows):
        workouts = decode_workouts(workout_rows)

        history = metrics.exercise_history(workouts, "Press Banca con Barra")

        assert [h.date for h in history] == ["2024-01-01", "2024-03-01"]
        first, second = history
        assert first.max_weight == 45
        assert first.total_volume == 40 * 10 + 45 * 8
        assert first.estimated_one_rep_max == 57  # 45 x 8 -> 57
        assert second.max_weight == 60
        assert second.estimated_one_rep_max == 60
        assert second.workout_id == "w-2"

    def test_sessions_without_the_exercise_are_skipped(self, workout_rows):
        workouts = decode_workouts(workout_rows)

        history = metrics.exercise_history(workouts, "Press Militar con Mancuernas")

        assert [h.workout_id for h in history] == ["w-1"]

    def test_exercise_without_sets_is_skipped(self):
        workouts = [_workout("w", "2024-01-01", Exercise(name="Press", sets=[]))]

        assert metrics.exercise_history(workouts, "Press") == []
        assert metrics.exercise_history(workouts, "") == []

    def test_summaries_sorted_by_name_with_latest_date(self, workout_rows):
        workouts = decode_workouts(workout_rows)

        summaries = metrics.exercise_summaries(workouts)

        assert [(s.name, s.session_count, s.last_date) for s in summaries] == [
            ("Press Banca con Barra", 2, "2024-03-01"),
            ("Press Militar con Mancuernas", 1, "2024-01-01"),
        ]
