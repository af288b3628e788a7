"""Configuration for the workout sheets API.

Two layers:

- ``Settings``: process configuration read from environment variables
  (AI provider keys, endpoints, timeouts).
- ``TrackerSettings``: the user's spreadsheet connection record
  (``apiKey``, ``sheetId``, ``scriptUrl``), persisted by ``SettingsStore``.

Both are passed explicitly to whatever needs them.
"""
import json
import logging
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


logger = logging.getLogger(__name__)

EnvironmentType = Literal["development", "staging", "production"]
ProviderType = Literal["openai", "anthropic", "rules"]

DEFAULT_SHEETS_API_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
DEFAULT_SETTINGS_FILE = Path.home() / ".workout-sheets" / "settings.json"

# Key the settings record is stored under inside the settings file
SETTINGS_STORAGE_KEY = "gym-tracker-settings"


class Settings:
    """Application settings."""

    # Environment
    ENVIRONMENT: EnvironmentType = "development"

    # Extraction backend
    LLM_PROVIDER: ProviderType = "openai"
    OPENAI_MODEL: str = "gpt-4o-mini"
    ANTHROPIC_MODEL: str = "claude-3-5-sonnet-20241022"

    # API Keys
    OPENAI_API_KEY: str | None = None
    ANTHROPIC_API_KEY: str | None = None

    # Remote store
    SHEETS_API_BASE_URL: str = DEFAULT_SHEETS_API_BASE_URL
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Local persisted settings
    TRACKER_SETTINGS_FILE: Path = DEFAULT_SETTINGS_FILE

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"

        provider = os.getenv("LLM_PROVIDER", "openai").lower()
        if provider in ("openai", "anthropic", "rules"):
            self.LLM_PROVIDER = provider  # type: ignore
        else:
            logger.warning(f"Unknown LLM_PROVIDER '{provider}', using 'openai'")
            self.LLM_PROVIDER = "openai"

        self.OPENAI_MODEL = os.getenv("OPENAI_MODEL", self.OPENAI_MODEL)
        self.ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", self.ANTHROPIC_MODEL)

        # API Keys
        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
        self.ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")

        self.SHEETS_API_BASE_URL = os.getenv("SHEETS_API_BASE_URL", DEFAULT_SHEETS_API_BASE_URL).rstrip("/")
        try:
            self.HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
        except ValueError:
            self.HTTP_TIMEOUT_SECONDS = 30.0

        settings_file = os.getenv("TRACKER_SETTINGS_FILE")
        self.TRACKER_SETTINGS_FILE = Path(settings_file) if settings_file else DEFAULT_SETTINGS_FILE


class TrackerSettings(BaseModel):
    """Connection record for the user's spreadsheet."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    api_key: str = ""
    sheet_id: str = ""
    script_url: str = ""

    @property
    def can_read(self) -> bool:
        return bool(self.api_key and self.sheet_id)

    @property
    def is_complete(self) -> bool:
        """False when first-run configuration is still required."""
        return bool(self.api_key and self.sheet_id and self.script_url)


class SettingsStore:
    """Persists ``TrackerSettings`` as JSON under a fixed key in a local file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> TrackerSettings:
        if not self.path.exists():
            return TrackerSettings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return TrackerSettings.model_validate(data.get(SETTINGS_STORAGE_KEY) or {})
        except (OSError, ValueError, AttributeError) as e:
            logger.error(f"Failed to load settings from {self.path}: {e}")
            return TrackerSettings()

    def save(self, tracker_settings: TrackerSettings) -> None:
        data = {}
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning(f"Overwriting unreadable settings file {self.path}: {e}")
                data = {}
        if not isinstance(data, dict):
            data = {}
        data[SETTINGS_STORAGE_KEY] = tracker_settings.model_dump(by_alias=True)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        logger.info(f"Saved tracker settings to {self.path}")
