"""Anthropic Claude API client wrapper."""

import logging
from typing import Optional

from anthropic import APIConnectionError, AsyncAnthropic, RateLimitError

from ..config import Config
from ..retry import with_retry

logger = logging.getLogger(__name__)


def _is_transient(error: BaseException) -> bool:
    return isinstance(error, (RateLimitError, APIConnectionError))


class AnthropicClient:
    """Client wrapper for Anthropic Claude API with retry logic."""

    def __init__(
        self,
        config: Config,
        model: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        client: Optional[AsyncAnthropic] = None,
    ) -> None:
        """Initialize the Anthropic client.

        Args:
            config: Application configuration holding the API key.
            model: Model to use. Defaults to config.default_model.
            max_retries: Maximum number of attempts for transient failures.
            retry_delay: Base delay between retries in seconds (exponential backoff).
            client: Pre-built SDK client, mainly for tests.
        """
        if client is None:
            config.require("anthropic_api_key")
            # The SDK's own retries are disabled; with_retry owns backoff.
            client = AsyncAnthropic(api_key=config.anthropic_api_key, max_retries=0)

        self._client = client
        self._model = model or config.default_model
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    async def create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        """Create a message using Claude.

        Args:
            prompt: The user prompt to send.
            max_tokens: Maximum tokens in the response.
            system: Optional system prompt.
            temperature: Sampling temperature (0.0-1.0).

        Returns:
            The text content of Claude's response.

        Raises:
            APIError: If the API request fails after all retries.
        """
        kwargs = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        async def _send():
            logger.debug(f"Sending request to Claude ({self._model})")
            return await self._client.messages.create(**kwargs)

        response = await with_retry(
            _send,
            attempts=self._max_retries,
            delay=self._retry_delay,
            should_retry=_is_transient,
        )

        content = response.content[0]
        if hasattr(content, "text"):
            return content.text
        return str(content)
