"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates the work
to the WordInfoService and turns failures into user-facing messages.
"""

import asyncio
import logging
import math
from typing import List, Optional

# Core Services Imports
from flashai.core.services.word_info_service import WordInfoService, normalize_cache_key

# Domain Layer Imports
from flashai.domain.errors import (
    ConfigurationError, MalformedResponseError, RateLimitError, TransientNetworkError
)
from flashai.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)

STATUS_POLL_INTERVAL_SECONDS = 1.0

def describe_error(error: BaseException) -> str:
    """Turns a lookup failure into a message for the user."""
    if isinstance(error, ConfigurationError):
        return f"AI service not configured: {error}"
    if isinstance(error, RateLimitError):
        if error.retry_after:
            return f"Rate limit exceeded. Try again in {math.ceil(error.retry_after)}s."
        return "Rate limit exceeded. Please try again later."
    if isinstance(error, TransientNetworkError):
        return f"AI service temporarily unavailable: {error}"
    if isinstance(error, MalformedResponseError):
        return "The AI service returned an unreadable response. Please try again."
    if isinstance(error, ValueError):
        return str(error)
    return f"Lookup failed: {error}"

class CommandHandler:
    """Handles incoming commands and delegates to the word info service."""

    def __init__(self, word_info_service: WordInfoService, ui: UserInterface):
        self.word_info_service = word_info_service
        self.ui = ui

    async def handle_lookup(self, word: str, language: str) -> bool:
        """Handles the 'lookup' command. Returns True on success."""
        logger.info(f"Handling 'lookup' command for word: '{word}' ({language})")
        try:
            info = await self.word_info_service.fetch_word_info(word, language)
        except Exception as e:
            logger.debug(f"Lookup of '{word}' failed: {type(e).__name__}: {e}")
            self.ui.display_error(describe_error(e))
            return False
        self.ui.display_word_info(info)
        return True

    async def handle_batch(
        self,
        words: List[str],
        language: str,
        poll_interval: float = STATUS_POLL_INTERVAL_SECONDS,
    ) -> int:
        """Handles the 'batch' command: looks up all words through the shared queue.

        Words are submitted together, so the rate limiter paces them in order.
        While they run, the limiter status is polled and shown every
        `poll_interval` seconds. Returns the number of failed lookups.
        """
        unique_words: List[str] = []
        seen = set()
        for word in words:
            try:
                key = normalize_cache_key(word)
            except ValueError:
                continue
            if key not in seen:
                seen.add(key)
                unique_words.append(word.strip())

        if not unique_words:
            self.ui.display_error("No words given.")
            return 0

        logger.info(f"Handling 'batch' command for {len(unique_words)} words ({language})")
        poller = asyncio.create_task(self._poll_status(poll_interval))
        try:
            results = await asyncio.gather(
                *(self.word_info_service.fetch_word_info(word, language) for word in unique_words),
                return_exceptions=True,
            )
        finally:
            poller.cancel()
            try:
                await poller
            except asyncio.CancelledError:
                pass

        failures = 0
        for word, result in zip(unique_words, results):
            if isinstance(result, Exception):
                failures += 1
                self.ui.display_error(f"{word}: {describe_error(result)}")
            else:
                self.ui.display_word_info(result, compact=True)

        self.ui.display_info(f"Fetched {len(unique_words) - failures} of {len(unique_words)} words.")
        return failures

    async def _poll_status(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            status = self.word_info_service.get_status()
            if status.queue_length:
                self.ui.display_status(status)

    def handle_status(self) -> None:
        """Handles the 'status' command."""
        self.ui.display_status(
            self.word_info_service.get_status(),
            cache_stats=self.word_info_service.cache_stats(),
        )

    def handle_clear_cache(self, word: Optional[str] = None) -> None:
        """Handles the 'clear-cache' command."""
        logger.info(f"Handling 'clear-cache' command for: {word or 'all words'}")
        try:
            self.word_info_service.clear_cache(word)
        except ValueError as e:
            self.ui.display_error(str(e))
            return
        if word is None:
            self.ui.display_info("Cache cleared.")
        else:
            self.ui.display_info(f"Removed '{word.strip()}' from the cache.")
