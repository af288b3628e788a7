"""Per-application service wiring for the API routes."""
import logging
from typing import Optional

import requests
from fastapi import Request

from workout_sheets_api.config import Settings, SettingsStore, TrackerSettings
from workout_sheets_api.errors import ConfigurationRequiredError
from workout_sheets_api.services.interpreter_base import StructuredTextInterpreter
from workout_sheets_api.services.llm_service import WorkoutTextExtractor, create_interpreter
from workout_sheets_api.services.repositories import ExerciseLibraryRepository, WorkoutRepository
from workout_sheets_api.services.sheets_service import SheetsClient

logger = logging.getLogger(__name__)


class TrackerServices:
    """Holds the repositories and extractor built from the current settings.

    Saving new tracker settings drops the cached repositories so the next
    request fetches from the newly configured spreadsheet.
    """

    def __init__(
        self,
        settings: Settings,
        settings_store: SettingsStore,
        interpreter: Optional[StructuredTextInterpreter] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings
        self.settings_store = settings_store
        self.session = session
        self._interpreter = interpreter
        self._tracker_settings: Optional[TrackerSettings] = None
        self._workouts: Optional[WorkoutRepository] = None
        self._library: Optional[ExerciseLibraryRepository] = None

    @property
    def tracker_settings(self) -> TrackerSettings:
        if self._tracker_settings is None:
            self._tracker_settings = self.settings_store.load()
        return self._tracker_settings

    def configure(self, tracker_settings: TrackerSettings) -> TrackerSettings:
        self.settings_store.save(tracker_settings)
        self._tracker_settings = tracker_settings
        self._workouts = None
        self._library = None
        return tracker_settings

    def _client(self) -> SheetsClient:
        if not self.tracker_settings.can_read:
            raise ConfigurationRequiredError(
                "The spreadsheet is not configured yet. Save an API key, sheet id and script URL first."
            )
        return SheetsClient(
            self.tracker_settings,
            base_url=self.settings.SHEETS_API_BASE_URL,
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
            session=self.session,
        )

    @property
    def workouts(self) -> WorkoutRepository:
        if self._workouts is None:
            self._workouts = WorkoutRepository(self._client())
        return self._workouts

    @property
    def library(self) -> ExerciseLibraryRepository:
        if self._library is None:
            self._library = ExerciseLibraryRepository(self._client())
        return self._library

    @property
    def extractor(self) -> WorkoutTextExtractor:
        if self._interpreter is None:
            self._interpreter = create_interpreter(self.settings)
            logger.info(f"Using '{self._interpreter.name}' text interpreter")
        return WorkoutTextExtractor(self._interpreter)


def get_services(request: Request) -> TrackerServices:
    return request.app.state.services
