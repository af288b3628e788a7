"""AI client factory for the text extraction backends."""
import logging
from typing import Any

from anthropic import Anthropic
from openai import OpenAI

from workout_sheets_api.config import Settings


logger = logging.getLogger(__name__)

# Default client timeout
DEFAULT_TIMEOUT = 60.0


class AIClientFactory:
    """Factory for creating AI SDK clients from explicit settings."""

    @staticmethod
    def create_openai_client(
        settings: Settings,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> Any:
        """
        Create an OpenAI client.

        Args:
            settings: Application settings holding the API key
            timeout: Client timeout in seconds

        Returns:
            OpenAI client instance

        Raises:
            ValueError: If the API key is not configured
        """
        api_key = settings.OPENAI_API_KEY
        if not api_key:
            raise ValueError("OpenAI API key not configured. Set OPENAI_API_KEY environment variable.")

        logger.debug("Creating OpenAI client")
        # The SDK retries by default; extraction calls are single-shot
        return OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    @staticmethod
    def create_anthropic_client(
        settings: Settings,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> Any:
        """
        Create an Anthropic client.

        Args:
            settings: Application settings holding the API key
            timeout: Client timeout in seconds

        Returns:
            Anthropic client instance

        Raises:
            ValueError: If the API key is not configured
        """
        api_key = settings.ANTHROPIC_API_KEY
        if not api_key:
            raise ValueError("Anthropic API key not configured. Set ANTHROPIC_API_KEY environment variable.")

        logger.debug("Creating Anthropic client")
        return Anthropic(api_key=api_key, timeout=timeout, max_retries=0)
