"""Input checks run before anything is sent to the spreadsheet."""
from datetime import datetime

from workout_sheets_api.config import TrackerSettings
from workout_sheets_api.errors import ValidationError
from workout_sheets_api.models import PrefabExerciseDraft, WorkoutDraft


def validate_workout_draft(draft: WorkoutDraft) -> WorkoutDraft:
    """Check a workout before saving and return it with date, title and muscle groups trimmed.

    Raises:
        ValidationError: missing date/title, a malformed date, or an exercise
            without a name or without sets.
    """
    if not draft.date.strip() or not draft.title.strip():
        raise ValidationError("Please fill in the date and the title.")

    try:
        datetime.strptime(draft.date.strip(), "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"Date '{draft.date}' must be in YYYY-MM-DD format.")

    if any(not e.name.strip() or not e.sets for e in draft.exercises):
        raise ValidationError("Every exercise needs a name and at least one set.")

    return draft.model_copy(update={
        "date": draft.date.strip(),
        "title": draft.title.strip(),
        "muscle_groups": [m.strip() for m in draft.muscle_groups if m.strip()],
    })


def validate_library_entry(draft: PrefabExerciseDraft) -> PrefabExerciseDraft:
    required = {
        "name": draft.name,
        "primaryMuscle": draft.primary_muscle,
        "equipment": draft.equipment,
        "form": draft.form,
    }
    missing = [field for field, value in required.items() if not value.strip()]
    if missing:
        raise ValidationError(
            "Name, primary muscle, equipment and form are required "
            f"(missing: {', '.join(missing)})."
        )
    return draft


def validate_tracker_settings(tracker_settings: TrackerSettings) -> TrackerSettings:
    if not tracker_settings.is_complete:
        raise ValidationError("API key, sheet id and script URL are all required.")
    return tracker_settings
