"""
Structured Text Interpreter

Abstract base class for backends that turn a free-text workout log into
JSON matching the workout extraction schema.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from workout_sheets_api.models import PrefabExercise


@dataclass
class ExtractionRequest:
    """Everything a backend may need for one extraction call."""

    text: str
    library: List[PrefabExercise]
    prompt: str
    schema: Dict[str, Any] = field(default_factory=dict)


class StructuredTextInterpreter(ABC):
    """Abstract base class for extraction backends"""

    name: str = "base"

    @abstractmethod
    def interpret(self, request: ExtractionRequest) -> Optional[str]:
        """
        Run one extraction.

        Args:
            request: Log text, library, rendered prompt and response schema

        Returns:
            Raw JSON text, or None/empty when the backend produced nothing
        """
        pass
