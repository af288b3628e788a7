"""In-memory views of the spreadsheet, refreshed from the remote store.

The spreadsheet owns the data. Each repository keeps the last fetched
snapshot and replaces it wholesale; nothing is merged locally.

Workout writes are always followed by a re-fetch. Library writes replace the
cached library optimistically and only re-fetch when the write fails.
"""
import logging
from typing import List, Tuple

from workout_sheets_api.errors import NotFoundError, TransportError, ValidationError
from workout_sheets_api.models import PrefabExercise, PrefabExerciseDraft, Workout, WorkoutDraft
from workout_sheets_api.services.sheet_codec import decode_library, decode_workouts
from workout_sheets_api.services.sheets_service import EXERCISES_RANGE, WORKOUTS_RANGE, SheetsClient
from workout_sheets_api.utils import generate_id

logger = logging.getLogger(__name__)


class WorkoutRepository:
    """Workout log backed by the ``Workouts`` range."""

    def __init__(self, client: SheetsClient):
        self.client = client
        self._workouts: Tuple[Workout, ...] = ()
        self._loaded = False

    def snapshot(self) -> Tuple[Workout, ...]:
        """Workouts from the last fetch, newest first (copies)."""
        if not self._loaded:
            self.refresh()
        return tuple(w.model_copy(deep=True) for w in self._workouts)

    def refresh(self) -> Tuple[Workout, ...]:
        rows = self.client.get_range(WORKOUTS_RANGE)
        self._workouts = tuple(decode_workouts(rows))
        self._loaded = True
        logger.info(f"Loaded {len(self._workouts)} workouts")
        return self.snapshot()

    def add(self, draft: WorkoutDraft) -> Workout:
        """Save a new workout under a fresh id, then re-fetch the log."""
        workout = Workout(id=generate_id(), **draft.model_dump())
        try:
            self.client.save_workout(workout)
        except TransportError as e:
            logger.error(f"Could not save workout {workout.id}: {e}")
            raise
        self.refresh()
        return workout

    def delete(self, workout_id: str) -> Tuple[Workout, ...]:
        try:
            self.client.delete_workout(workout_id)
        except TransportError as e:
            logger.error(f"Could not delete workout {workout_id}: {e}")
            raise
        return self.refresh()


class ExerciseLibraryRepository:
    """Exercise library backed by the ``Exercises`` range."""

    def __init__(self, client: SheetsClient):
        self.client = client
        self._entries: Tuple[PrefabExercise, ...] = ()
        self._loaded = False

    def snapshot(self) -> Tuple[PrefabExercise, ...]:
        if not self._loaded:
            self.refresh()
        return tuple(e.model_copy() for e in self._entries)

    def refresh(self) -> Tuple[PrefabExercise, ...]:
        rows = self.client.get_range(EXERCISES_RANGE)
        self._entries = tuple(decode_library(rows))
        self._loaded = True
        logger.info(f"Loaded {len(self._entries)} library exercises")
        return self.snapshot()

    def add(self, draft: PrefabExerciseDraft) -> PrefabExercise:
        current = self.snapshot()
        _ensure_unique_name(current, draft.name)

        entry = PrefabExercise(id=generate_id(), **draft.model_dump())
        self._replace_remote([*current, entry])
        return entry

    def update(self, entry_id: str, draft: PrefabExerciseDraft) -> PrefabExercise:
        current = self.snapshot()
        if not any(e.id == entry_id for e in current):
            raise NotFoundError(f"Exercise '{entry_id}' not found")
        _ensure_unique_name([e for e in current if e.id != entry_id], draft.name)

        updated = PrefabExercise(id=entry_id, **draft.model_dump())
        self._replace_remote([updated if e.id == entry_id else e for e in current])
        return updated

    def delete(self, entry_id: str) -> Tuple[PrefabExercise, ...]:
        current = self.snapshot()
        if not any(e.id == entry_id for e in current):
            raise NotFoundError(f"Exercise '{entry_id}' not found")

        self._replace_remote([e for e in current if e.id != entry_id])
        return self.snapshot()

    def _replace_remote(self, entries: List[PrefabExercise]) -> None:
        """Send the full desired library; keep it locally unless the write fails."""
        try:
            self.client.update_exercises(entries)
        except TransportError as e:
            logger.error(f"Could not update the exercise library: {e}")
            try:
                self.refresh()
            except TransportError as refresh_error:
                logger.error(f"Re-fetch after failed library update also failed: {refresh_error}")
            raise
        self._entries = tuple(entries)
        self._loaded = True


def _ensure_unique_name(entries, name: str) -> None:
    """Library names are the match keys for extraction; compared case-insensitively."""
    key = name.strip().casefold()
    if any(e.name.strip().casefold() == key for e in entries):
        raise ValidationError(f"An exercise named '{name.strip()}' already exists in the library.")
