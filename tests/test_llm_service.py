"""Tests for the workout text extractor."""
import json
from datetime import date

import pytest

from conftest import StubInterpreter
from workout_sheets_api.errors import (
    ConfigurationRequiredError,
    ExtractionFormatError,
    ValidationError,
)
from workout_sheets_api.services.llm_service import (
    WORKOUT_RESPONSE_SCHEMA,
    WorkoutTextExtractor,
    build_extraction_prompt,
)
from workout_sheets_api.services.log_text_parser import RuleBasedInterpreter


LOG_TEXT = "PUSH 13/02/2026\n- Pecho\nPress banca con barra 20x10, 22.5x8"


def _response(**overrides) -> str:
    data = {
        "date": "2026-02-13",
        "title": "PUSH",
        "muscleGroups": ["Pecho"],
        "exercises": [
            {"name": "Press Banca con Barra", "sets": [{"weight": 40, "reps": 10}, {"weight": 45, "reps": 8}]},
        ],
        "notes": "Buena sesión",
    }
    data.update(overrides)
    return json.dumps(data)


class TestPrompt:

    def test_prompt_embeds_library_and_log(self, sample_library):
        prompt = build_extraction_prompt(LOG_TEXT, sample_library)

        assert LOG_TEXT in prompt
        assert '"primaryMuscle": "Pecho"' in prompt
        assert "Extensión de Tríceps en Polea Alta" in prompt
        assert "per side" in prompt


class TestWorkoutTextExtractor:

    def test_successful_extraction(self, sample_library):
        interpreter = StubInterpreter(_response())

        draft = WorkoutTextExtractor(interpreter).extract(LOG_TEXT, sample_library)

        assert draft.date == "2026-02-13"
        assert draft.title == "PUSH"
        assert draft.muscle_groups == ["Pecho"]
        assert draft.notes == "Buena sesión"
        assert [(s.weight, s.reps) for s in draft.exercises[0].sets] == [(40, 10), (45, 8)]

    def test_request_carries_prompt_and_schema(self, sample_library):
        interpreter = StubInterpreter(_response())

        WorkoutTextExtractor(interpreter).extract(LOG_TEXT, sample_library)

        [request] = interpreter.requests
        assert request.text == LOG_TEXT
        assert request.library == sample_library
        assert request.schema is WORKOUT_RESPONSE_SCHEMA
        assert LOG_TEXT in request.prompt

    def test_notes_are_optional(self, sample_library):
        data = json.loads(_response())
        del data["notes"]

        draft = WorkoutTextExtractor(StubInterpreter(json.dumps(data))).extract(LOG_TEXT, sample_library)

        assert draft.notes is None

    def test_exercises_outside_library_are_dropped(self, sample_library):
        interpreter = StubInterpreter(_response(exercises=[
            {"name": "Press Banca con Barra", "sets": [{"weight": 40, "reps": 10}]},
            {"name": "Press banca", "sets": [{"weight": 40, "reps": 10}]},
        ]))

        draft = WorkoutTextExtractor(interpreter).extract(LOG_TEXT, sample_library)

        assert [e.name for e in draft.exercises] == ["Press Banca con Barra"]

    @pytest.mark.parametrize("text", ["", "   \n\t"])
    def test_blank_text_makes_no_call(self, sample_library, text):
        interpreter = StubInterpreter(_response())

        with pytest.raises(ValidationError):
            WorkoutTextExtractor(interpreter).extract(text, sample_library)

        assert interpreter.requests == []

    def test_empty_library_makes_no_call(self):
        interpreter = StubInterpreter(_response())

        with pytest.raises(ValidationError):
            WorkoutTextExtractor(interpreter).extract(LOG_TEXT, [])

        assert interpreter.requests == []

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "",
            "   ",
            "not json",
            "[]",
            '{"title": "PUSH", "muscleGroups": [], "exercises": []}',
            _response(exercises=[{"name": "Press Banca con Barra", "sets": [{"weight": "heavy", "reps": 10}]}]),
            _response(muscleGroups="Pecho"),
        ],
    )
    def test_non_conforming_output(self, sample_library, raw):
        with pytest.raises(ExtractionFormatError) as exc_info:
            WorkoutTextExtractor(StubInterpreter(raw)).extract(LOG_TEXT, sample_library)

        assert exc_info.value.message == ExtractionFormatError.DEFAULT_MESSAGE

    @pytest.mark.parametrize("date_text", ["13/02/2026", "2026-02-30", ""])
    def test_non_iso_date(self, sample_library, date_text):
        with pytest.raises(ExtractionFormatError):
            WorkoutTextExtractor(StubInterpreter(_response(date=date_text))).extract(LOG_TEXT, sample_library)

    def test_backend_failure(self, sample_library):
        interpreter = StubInterpreter(error=RuntimeError("Error code: 503 - Service unavailable"))

        with pytest.raises(ExtractionFormatError):
            WorkoutTextExtractor(interpreter).extract(LOG_TEXT, sample_library)

    def test_configuration_errors_pass_through(self, sample_library):
        interpreter = StubInterpreter(error=ConfigurationRequiredError("OpenAI API key not configured."))

        with pytest.raises(ConfigurationRequiredError):
            WorkoutTextExtractor(interpreter).extract(LOG_TEXT, sample_library)

    def test_with_rule_based_backend(self, sample_library):
        draft = WorkoutTextExtractor(RuleBasedInterpreter()).extract(LOG_TEXT, sample_library)

        assert draft.date == "2026-02-13"
        assert draft.exercises[0].name == "Press Banca con Barra"
        assert [(s.weight, s.reps) for s in draft.exercises[0].sets] == [(40, 10), (45, 8)]

    def test_rule_based_backend_reads_heading_without_year(self, sample_library):
        text = "17/12 - Push (Pecho, hombros, triceps)\n\n- Pecho\nPress plano con barra recta 0kgx15, 17.5x10"

        draft = WorkoutTextExtractor(RuleBasedInterpreter()).extract(text, sample_library)

        assert draft.date.endswith("-12-17")
        assert date.fromisoformat(draft.date) <= date.today()
        assert draft.title == "Push (Pecho, hombros, triceps)"
        assert [(s.weight, s.reps) for s in draft.exercises[0].sets] == [(0, 15), (35, 10)]
