"""
LLM client for an OpenAI-compatible endpoint.

Provides a wrapper around the OpenAI SDK that sends one multimodal
chat-completions request per call. There are no retries: a failed call
is reported to the user, who decides whether to try again.
"""

import logging
from typing import Any

from openai import APIConnectionError, APIStatusError, OpenAI, RateLimitError

from anatomy_guru.config import Settings, get_settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Raised when the LLM API call fails."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class LLMClient:
    """
    Client for the model provider.

    Uses the OpenAI SDK with a custom base URL. The SDK's own retry
    loop is disabled.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the LLM client.

        Args:
            settings: Configuration settings. Uses global settings if not provided.
        """
        self._settings = settings or get_settings()
        self._client: OpenAI | None = None

    @property
    def client(self) -> OpenAI:
        """
        The underlying SDK client, created on first use.

        Raises:
            LLMError: If no API key is configured.
        """
        if not self._settings.api_key:
            raise LLMError("API key is not configured. Set the API_KEY environment variable.")

        if self._client is None:
            self._client = OpenAI(
                api_key=self._settings.api_key,
                base_url=self._settings.api_base_url,
                max_retries=0,
            )
        return self._client

    def generate(
        self,
        system_prompt: str,
        user_content: list[dict[str, Any]],
        response_format: dict[str, Any] | None = None,
    ) -> str:
        """
        Generate a response from the LLM.

        Args:
            system_prompt: System message defining the model's role.
            user_content: Multimodal content parts for the user message.
            response_format: Structured output declaration, if any.

        Returns:
            The generated text response.

        Raises:
            LLMError: If the call fails or returns no content.
        """
        client = self.client

        messages: list[dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]

        kwargs: dict[str, Any] = {}
        if response_format is not None:
            kwargs["response_format"] = response_format

        logger.debug(
            "Sending request to %s (model %s)", self._settings.api_base_url, self._settings.model
        )

        try:
            response = client.chat.completions.create(
                model=self._settings.model,
                messages=messages,  # type: ignore[arg-type]
                temperature=self._settings.llm_temperature,
                max_tokens=self._settings.max_output_tokens,
                **kwargs,
            )
        except RateLimitError as e:
            raise LLMError("Rate limit exceeded. Please wait a moment and try again.", cause=e) from e
        except APIConnectionError as e:
            raise LLMError(f"Could not reach the model provider: {e}", cause=e) from e
        except APIStatusError as e:
            raise LLMError(f"API error ({e.status_code}): {e.message}", cause=e) from e
        except Exception as e:
            raise LLMError(f"Unexpected error: {e}", cause=e) from e

        if response.choices and response.choices[0].message.content:
            return response.choices[0].message.content

        raise LLMError("Empty response from LLM")

    def health_check(self) -> bool:
        """
        Check if the API is reachable.

        Returns:
            True if API is healthy, False otherwise.
        """
        try:
            response = self.client.chat.completions.create(
                model=self._settings.model,
                messages=[{"role": "user", "content": "ping"}],
                max_tokens=5,
            )
            return bool(response.choices)
        except Exception as e:
            logger.warning("Health check failed: %s", e)
            return False
