"""
Test fixtures for workout-sheets-api.

Provides an in-memory stand-in for the spreadsheet (both the read API and the
script endpoint) and a deterministic text interpreter, so tests run offline.
"""

import json
import sys
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make src/ importable so tests can do `import workout_sheets_api...`
for p in {ROOT, SRC}:
    p_str = str(p)
    if p_str not in sys.path:
        sys.path.insert(0, p_str)

from workout_sheets_api.config import Settings, SettingsStore, TrackerSettings
from workout_sheets_api.main import create_app
from workout_sheets_api.models import PrefabExercise
from workout_sheets_api.services.interpreter_base import ExtractionRequest, StructuredTextInterpreter
from workout_sheets_api.services.sheet_codec import LIBRARY_HEADER, WORKOUT_HEADER


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


def make_response(status_code: int = 200, json_data=None, text: Optional[str] = None) -> MagicMock:
    """Build a requests.Response-like mock."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if json_data is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = json_data
    response.text = text if text is not None else json.dumps(json_data)
    return response


class FakeSheetSession:
    """In-memory spreadsheet behind a requests.Session-like interface.

    GET .../values/<range> serves the stored rows; POST applies the script
    actions the way the Apps Script endpoint does.
    """

    def __init__(self, ranges: Optional[Dict[str, List[List[str]]]] = None):
        self.ranges = ranges if ranges is not None else {
            "Workouts": [list(WORKOUT_HEADER)],
            "Exercises": [list(LIBRARY_HEADER)],
        }
        self.get_calls: List[dict] = []
        self.post_calls: List[dict] = []
        self.fail_posts_with: Optional[int] = None
        self.fail_gets_with: Optional[int] = None

    def get(self, url, params=None, timeout=None):
        self.get_calls.append({"url": url, "params": params, "timeout": timeout})
        if self.fail_gets_with:
            return make_response(self.fail_gets_with, text="backend error")
        range_name = url.rsplit("/", 1)[-1]
        rows = self.ranges.get(range_name)
        if rows is None:
            return make_response(400, text="Unable to parse range")
        return make_response(200, {"range": range_name, "values": [list(r) for r in rows]})

    def post(self, url, json=None, headers=None, timeout=None):
        self.post_calls.append({"url": url, "json": json, "headers": headers})
        if self.fail_posts_with:
            return make_response(self.fail_posts_with, text="Script error: sheet is locked")

        action, payload = json["action"], json["payload"]
        workouts = self.ranges["Workouts"]
        if action == "saveWorkout":
            kept = [r for r in workouts[1:] if r[0] != payload["workoutId"]]
            self.ranges["Workouts"] = [workouts[0], *kept, *payload["rows"]]
        elif action == "deleteWorkout":
            kept = [r for r in workouts[1:] if r[0] != payload["workoutId"]]
            self.ranges["Workouts"] = [workouts[0], *kept]
        elif action == "updateExercises":
            self.ranges["Exercises"] = [list(r) for r in payload["rows"]]
        else:
            return make_response(400, text=f"Unknown action {action}")
        return make_response(200, {"status": "success"})


class StubInterpreter(StructuredTextInterpreter):
    """Returns a canned response and records the requests it received."""

    name = "stub"

    def __init__(self, response: Optional[str] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.requests: List[ExtractionRequest] = []

    def interpret(self, request: ExtractionRequest) -> Optional[str]:
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.response


# ---------------------------------------------------------------------------
# Sample Data Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_library() -> List[PrefabExercise]:
    return [
        PrefabExercise(
            id="ex-1",
            name="Press Banca con Barra",
            primary_muscle="Pecho",
            secondary_muscles="Tríceps, Hombro anterior",
            equipment="Barra",
            form="Banco plano",
        ),
        PrefabExercise(
            id="ex-2",
            name="Aperturas Inclinadas con Mancuernas",
            primary_muscle="Pecho",
            secondary_muscles="Hombro anterior",
            equipment="Mancuernas",
            form="Banco inclinado",
        ),
        PrefabExercise(
            id="ex-3",
            name="Press Militar con Mancuernas",
            primary_muscle="Hombros",
            secondary_muscles="Tríceps",
            equipment="Mancuernas",
            form="Sentado",
        ),
        PrefabExercise(
            id="ex-4",
            name="Extensión de Tríceps en Polea Alta",
            primary_muscle="Tríceps",
            secondary_muscles="",
            equipment="Polea",
            form="De pie",
        ),
        PrefabExercise(
            id="ex-5",
            name="Goblet Squat",
            primary_muscle="Cuádriceps",
            secondary_muscles="Glúteos",
            equipment="Peso corporal",
            form="De pie",
        ),
    ]


@pytest.fixture
def workout_rows() -> List[List[str]]:
    """Workouts sheet with two sessions, rows as the read API returns them."""
    return [
        list(WORKOUT_HEADER),
        ["w-1", "2024-01-01", "Push", "Pecho, Hombros", "", "Press Banca con Barra", "40", "10"],
        ["w-1", "2024-01-01", "Push", "Pecho, Hombros", "", "Press Banca con Barra", "45", "8"],
        ["w-1", "2024-01-01", "Push", "Pecho, Hombros", "", "Press Militar con Mancuernas", "10", "12"],
        ["w-2", "2024-03-01", "Push B", "Pecho", "Felt strong", "Press Banca con Barra", "50", "5"],
        ["w-2", "2024-03-01", "Push B", "Pecho", "Felt strong", "Press Banca con Barra", "60", "1"],
    ]


@pytest.fixture
def tracker_settings() -> TrackerSettings:
    return TrackerSettings(
        api_key="test-api-key",
        sheet_id="sheet-123",
        script_url="https://script.example.com/macros/s/abc/exec",
    )


@pytest.fixture
def fake_session(workout_rows, sample_library) -> FakeSheetSession:
    library_rows = [list(LIBRARY_HEADER)] + [
        [e.id, e.name, e.primary_muscle, e.secondary_muscles, e.equipment, e.form]
        for e in sample_library
    ]
    return FakeSheetSession({"Workouts": workout_rows, "Exercises": library_rows})


# ---------------------------------------------------------------------------
# Core Test Client
# ---------------------------------------------------------------------------


@pytest.fixture
def settings_store(tmp_path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings.json")


@pytest.fixture
def stub_interpreter() -> StubInterpreter:
    return StubInterpreter()


@pytest.fixture
def unconfigured_client(settings_store, stub_interpreter, fake_session) -> TestClient:
    app = create_app(
        settings=Settings(),
        settings_store=settings_store,
        interpreter=stub_interpreter,
        session=fake_session,
    )
    return TestClient(app)


@pytest.fixture
def client(settings_store, tracker_settings, stub_interpreter, fake_session) -> TestClient:
    """Per-test client against a configured in-memory spreadsheet."""
    settings_store.save(tracker_settings)
    app = create_app(
        settings=Settings(),
        settings_store=settings_store,
        interpreter=stub_interpreter,
        session=fake_session,
    )
    return TestClient(app)
