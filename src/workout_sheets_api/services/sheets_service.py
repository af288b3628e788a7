"""
Spreadsheet store client.

Reads go through the Sheets v4 values API using the user's read-only API key:

    GET {base}/{sheetId}/values/{range}?key={apiKey}  ->  {"values": [[...], ...]}

Writes go through the user's Apps Script web app, which receives a JSON body

    {"action": "saveWorkout" | "deleteWorkout" | "updateExercises", "payload": {...}}

and applies it to the sheet. Nothing here is retried; every failure surfaces
as a ``TransportError``.
"""

import logging
from typing import Any, List, Optional, Sequence
from urllib.parse import quote

import requests

from workout_sheets_api.config import DEFAULT_SHEETS_API_BASE_URL, TrackerSettings
from workout_sheets_api.errors import ConfigurationRequiredError, TransportError
from workout_sheets_api.models import PrefabExercise, Workout
from workout_sheets_api.services.sheet_codec import encode_library, encode_workout

logger = logging.getLogger(__name__)

WORKOUTS_RANGE = "Workouts"
EXERCISES_RANGE = "Exercises"

ACTION_SAVE_WORKOUT = "saveWorkout"
ACTION_DELETE_WORKOUT = "deleteWorkout"
ACTION_UPDATE_EXERCISES = "updateExercises"

DEFAULT_TIMEOUT = 30.0


class SheetsClient:
    """Reads sheet ranges and posts write actions to the script endpoint."""

    def __init__(
        self,
        tracker_settings: TrackerSettings,
        base_url: str = DEFAULT_SHEETS_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.tracker_settings = tracker_settings
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # ------------------------
    # READ PATH
    # ------------------------

    def get_range(self, range_name: str) -> List[List[str]]:
        """Fetch a whole named range as a row matrix (empty when the range has no values)."""
        if not self.tracker_settings.can_read:
            raise ConfigurationRequiredError(
                "Spreadsheet API key and sheet id must be configured before reading."
            )

        url = f"{self.base_url}/{quote(self.tracker_settings.sheet_id, safe='')}/values/{quote(range_name, safe='')}"
        try:
            response = self.session.get(
                url,
                params={"key": self.tracker_settings.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Sheets read of '{range_name}' failed: {e}")
            raise TransportError(f"Could not reach the spreadsheet API: {e}") from e

        if not response.ok:
            logger.error(f"Sheets read of '{range_name}' returned {response.status_code}")
            raise TransportError(
                f"Google Sheets API request failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Google Sheets API returned invalid JSON: {e}") from e

        return data.get("values") or []

    # ------------------------
    # WRITE PATH
    # ------------------------

    def post_action(self, action: str, payload: Any) -> Any:
        """POST one action to the script endpoint and return its decoded response."""
        script_url = self.tracker_settings.script_url
        if not script_url:
            raise ConfigurationRequiredError("Script URL must be configured before saving.")

        try:
            response = self.session.post(
                script_url,
                json={"action": action, "payload": payload},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Script action '{action}' failed: {e}")
            raise TransportError(f"Could not reach the script endpoint: {e}") from e

        if not response.ok:
            logger.error(f"Script action '{action}' returned {response.status_code}: {response.text}")
            raise TransportError(
                f"Google Apps Script request failed: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return response.json()
        except ValueError:
            logger.debug(f"Script action '{action}' returned a non-JSON body")
            return None

    def save_workout(self, workout: Workout) -> Any:
        rows = encode_workout(workout)
        if not rows:
            logger.warning(
                f"Workout {workout.id} has no sets; saving it writes no rows and "
                f"removes it from the sheet"
            )
        return self.post_action(ACTION_SAVE_WORKOUT, {"workoutId": workout.id, "rows": rows})

    def delete_workout(self, workout_id: str) -> Any:
        return self.post_action(ACTION_DELETE_WORKOUT, {"workoutId": workout_id})

    def update_exercises(self, entries: Sequence[PrefabExercise]) -> Any:
        """Replace the whole library sheet with ``entries`` (header included)."""
        return self.post_action(ACTION_UPDATE_EXERCISES, {"rows": encode_library(entries)})
