"""LLM service for turning free-text workout logs into structured workouts."""
import json
import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from workout_sheets_api.ai import AIClientFactory
from workout_sheets_api.config import Settings
from workout_sheets_api.errors import (
    ConfigurationRequiredError,
    ExtractionFormatError,
    TrackerError,
    ValidationError,
)
from workout_sheets_api.models import PrefabExercise, WorkoutDraft
from workout_sheets_api.services.interpreter_base import ExtractionRequest, StructuredTextInterpreter


logger = logging.getLogger(__name__)

# Low temperature for structured output
EXTRACTION_TEMPERATURE = 0.05

WORKOUT_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "date": {
            "type": "string",
            "description": "Workout date in YYYY-MM-DD format.",
        },
        "title": {
            "type": "string",
            "description": "Short title for the workout, e.g. 'Push'.",
        },
        "muscleGroups": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Muscle groups worked, taken from the section headings.",
        },
        "exercises": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Exercise name; must match EXACTLY one name from the exercise library.",
                    },
                    "sets": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "weight": {"type": "number", "description": "Weight lifted in kg."},
                                "reps": {"type": "number", "description": "Number of repetitions."},
                            },
                            "required": ["weight", "reps"],
                        },
                    },
                },
                "required": ["name", "sets"],
            },
        },
        "notes": {
            "type": "string",
            "description": "Extra notes: comments, warm-up summaries or plans for future sessions.",
        },
    },
    "required": ["date", "title", "muscleGroups", "exercises"],
}


EXTRACTION_PROMPT_TEMPLATE = """You are an expert fitness data analyst. Your task is to analyze a user's detailed, unstructured workout log and convert it into one clean, structured JSON object.

The user has a personal exercise library with specific details. Your goal is to match each exercise in the log to the BEST and MOST LOGICAL exercise in this library.

Here is the user's exercise library in JSON format:
---
{library}
---

Here is the user's workout log:
---
{text}
---

Follow these rules STRICTLY when analyzing the text:
1.  **Output format:** The result MUST be a single JSON object matching the provided schema.
2.  **Date and title:** Take the title (e.g. "PUSH") and the date (e.g. "13/02/2026") from the first line. Convert the date to YYYY-MM-DD.
3.  **Muscle groups:** Identify the main muscle groups from the section headings (e.g. "- CHEST", "- Shoulders") and list them in 'muscleGroups'.
4.  **Exercise matching (CRITICAL RULE):** For each exercise in the log, analyze its name, the implement used (e.g. "dumbbell") and the form or body position (e.g. "incline bench"). Then find the library exercise that BEST matches all of these. In your JSON you MUST use the exact value of the 'name' field of the matched library exercise, never the user's own wording. If nothing in the library matches, leave the exercise out.
5.  **Ignore warm-up and approach sets:** Completely discard any section labeled as warm-up, stretching, stationary bike or cardio/aerobic movements. Also ignore any approach sets written in parentheses, such as "(approach with bar 0x15, 8x5, 12.5x2)". Only process real working sets.
6.  **Set analysis:**
    -   A set is written as "weight x reps" (e.g. "17.5x10").
    -   **Drop sets:** If a set is written as "20x10(+10x10 no rest)" or similar, treat it as TWO separate sets in order: 20kg x 10 reps, then 10kg x 10 reps.
7.  **Weight calculation (CRITICAL RULES):**
    -   **Barbell (straight, EZ, etc.):** If the exercise uses a barbell, the recorded weight is 'per side'. You MUST double it for the final value (e.g. "2.5x10" becomes a weight of 5). If the weight is 0, it stays 0.
    -   **Dumbbell:** If it uses a dumbbell, the recorded weight is that of ONE dumbbell. Use it directly (e.g. "15x10" is a weight of 15). Ignore parenthetical clarifications such as "(two dumbbells of 5)"; the main value is what counts.
    -   **Machine or cable/pulley:** The recorded weight is the total load. Use it directly.
    -   **Bodyweight:** For a bodyweight exercise (e.g. "Goblet squat"), the weight is that of the dumbbell/kettlebell used, not 0. If no extra weight is used, it is 0.
8.  **Notes:** Any text that is not an exercise (comments starting with '*', notes about the session, plans for future sessions such as "Next workout is tomorrow...") must be collected into a single top-level 'notes' field.

Return ONLY valid JSON, no additional text."""


def build_extraction_prompt(text: str, library: Sequence[PrefabExercise]) -> str:
    """Render the instruction prompt with the library and the raw log embedded."""
    library_json = json.dumps(
        [entry.model_dump(by_alias=True) for entry in library],
        indent=2,
        ensure_ascii=False,
    )
    return EXTRACTION_PROMPT_TEMPLATE.format(library=library_json, text=text)


class OpenAIInterpreter(StructuredTextInterpreter):
    """OpenAI chat completions constrained by the JSON schema."""

    name = "openai"

    def __init__(self, settings: Settings, model: Optional[str] = None, client: Any = None):
        self.settings = settings
        self.model = model or settings.OPENAI_MODEL
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            try:
                self._client = AIClientFactory.create_openai_client(self.settings)
            except ValueError as e:
                raise ConfigurationRequiredError(str(e)) from e
        return self._client

    def interpret(self, request: ExtractionRequest) -> Optional[str]:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": request.prompt}],
            temperature=EXTRACTION_TEMPERATURE,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "workout", "schema": request.schema},
            },
        )
        return response.choices[0].message.content


class AnthropicInterpreter(StructuredTextInterpreter):
    """Anthropic Claude messages; the JSON object is located in the reply text."""

    name = "anthropic"

    def __init__(self, settings: Settings, model: Optional[str] = None, client: Any = None):
        self.settings = settings
        self.model = model or settings.ANTHROPIC_MODEL
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            try:
                self._client = AIClientFactory.create_anthropic_client(self.settings)
            except ValueError as e:
                raise ConfigurationRequiredError(str(e)) from e
        return self._client

    def interpret(self, request: ExtractionRequest) -> Optional[str]:
        schema_text = json.dumps(request.schema, indent=2)
        message = self.client.messages.create(
            model=self.model,
            max_tokens=4096,
            messages=[
                {
                    "role": "user",
                    "content": f"{request.prompt}\n\nThe JSON must match this schema:\n{schema_text}",
                }
            ],
            temperature=EXTRACTION_TEMPERATURE,
        )
        if not message.content:
            return None
        result_text = message.content[0].text
        # Extract JSON from response (Claude may add markdown formatting)
        json_match = re.search(r'\{.*\}', result_text, re.DOTALL)
        return json_match.group(0) if json_match else result_text


def create_interpreter(settings: Settings) -> StructuredTextInterpreter:
    """Build the interpreter selected by ``settings.LLM_PROVIDER``."""
    provider = settings.LLM_PROVIDER
    if provider == "openai":
        return OpenAIInterpreter(settings)
    elif provider == "anthropic":
        return AnthropicInterpreter(settings)
    elif provider == "rules":
        from workout_sheets_api.services.log_text_parser import RuleBasedInterpreter
        return RuleBasedInterpreter()
    else:
        raise ValueError(f"Unknown LLM provider: {provider}. Use 'openai', 'anthropic' or 'rules'.")


class WorkoutTextExtractor:
    """Turns a free-text log into a ``WorkoutDraft``, all or nothing."""

    def __init__(self, interpreter: StructuredTextInterpreter):
        self.interpreter = interpreter

    def extract(self, text: str, library: Sequence[PrefabExercise]) -> WorkoutDraft:
        """
        Extract a workout from ``text`` using ``library`` as the name pool.

        Raises:
            ValidationError: blank text or empty library (no backend call made)
            ExtractionFormatError: the backend failed or its output does not
                fit the schema
        """
        if not text or not text.strip():
            raise ValidationError("Please enter your workout text.")
        if not library:
            raise ValidationError("Add exercises to your library before parsing workout text.")

        request = ExtractionRequest(
            text=text,
            library=list(library),
            prompt=build_extraction_prompt(text, library),
            schema=WORKOUT_RESPONSE_SCHEMA,
        )

        try:
            raw = self.interpreter.interpret(request)
        except TrackerError:
            raise
        except Exception as e:
            logger.error(f"{self.interpreter.name} extraction call failed: {e}")
            raise ExtractionFormatError() from e

        if not raw or not raw.strip():
            logger.error(f"{self.interpreter.name} returned an empty response")
            raise ExtractionFormatError()

        try:
            data = json.loads(raw)
            draft = WorkoutDraft.model_validate(data)
        except (ValueError, PydanticValidationError) as e:
            logger.error(f"{self.interpreter.name} returned non-conforming output: {e}")
            raise ExtractionFormatError() from e

        try:
            datetime.strptime(draft.date, "%Y-%m-%d")
        except ValueError as e:
            logger.error(f"{self.interpreter.name} returned a non-ISO date: {draft.date!r}")
            raise ExtractionFormatError() from e

        return self._keep_library_exercises(draft, library)

    @staticmethod
    def _keep_library_exercises(draft: WorkoutDraft, library: Sequence[PrefabExercise]) -> WorkoutDraft:
        known = {entry.name for entry in library}
        kept: List = []
        for exercise in draft.exercises:
            if exercise.name in known:
                kept.append(exercise)
            else:
                logger.warning(f"Dropping extracted exercise not in library: {exercise.name!r}")
        return draft.model_copy(update={"exercises": kept})
