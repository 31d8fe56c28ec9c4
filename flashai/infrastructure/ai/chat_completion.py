"""Shared base for providers built on a chat-completions SDK.

Subclasses pick the SDK module, the client constructor and the defaults;
this class sends the word information prompt, translates SDK exceptions and
decodes the JSON reply.
"""

import abc
import asyncio
import logging
import os
import time
from types import ModuleType
from typing import Any, Dict, Optional

from flashai.domain.errors import ConfigurationError, MalformedResponseError
from flashai.domain.interfaces.word_info_provider import WordInfoProvider
from flashai.infrastructure.ai.json_extraction import extract_json_payload
from flashai.infrastructure.ai.prompts import build_messages
from flashai.infrastructure.ai.sdk_errors import translate_sdk_error

logger = logging.getLogger(__name__)

class ChatCompletionWordInfoProvider(WordInfoProvider):
    """WordInfoProvider backed by a synchronous chat-completions SDK client."""

    sdk: ModuleType
    api_key_env: str = ""
    DEFAULT_MODEL: str = ""
    DEFAULT_TEMPERATURE = 0.3
    DEFAULT_MAX_TOKENS = 2500

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        """Initializes the provider.

        Args:
            api_key: Provider API key. Read from the provider's env var if None.
            model: Model name; the provider default when None.
            temperature: Sampling temperature.
            max_tokens: Completion token limit.

        Raises:
            ConfigurationError: If no API key is available.
        """
        effective_api_key = api_key or os.getenv(self.api_key_env)
        if not effective_api_key:
            raise ConfigurationError(f"{self.api_key_env} is not set in environment variables")

        self.client = self._create_client(effective_api_key)
        self.model = model or self.DEFAULT_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens
        logger.info(f"{type(self).__name__} initialized for model: {self.model}")

    @abc.abstractmethod
    def _create_client(self, api_key: str) -> Any:
        """Builds the SDK client for `api_key`."""
        pass

    async def generate_word_info(self, word: str, language: str) -> Dict[str, Any]:
        logger.debug(f"Requesting word info from {self.name} ({self.model}): word='{word}', language={language}")
        start_time = time.perf_counter()
        try:
            # The SDK client is synchronous; keep the event loop free
            completion = await asyncio.to_thread(
                self.client.chat.completions.create,
                messages=build_messages(word, language),
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            raise translate_sdk_error(e, self.sdk, self.name) from e
        latency_ms = (time.perf_counter() - start_time) * 1000

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedResponseError(f"Invalid response structure from {self.name}: {e}") from e
        if not content:
            raise MalformedResponseError(f"No content received from {self.name}")

        logger.debug(f"Received {len(content)} chars from {self.name} in {latency_ms:.2f}ms")
        return extract_json_payload(content)
