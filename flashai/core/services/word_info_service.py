"""Word Information Service: cache-first, rate-limited AI lookups.

Application service behind every word lookup. A cache hit is returned
immediately without touching the rate limiter. A miss submits one task to
the shared RateLimiter; that task is the provider call wrapped by the retry
service. Only successfully validated results are cached.
"""

import logging
import time
from typing import Any, Dict, Optional

# Domain Layer Imports
from flashai.domain.errors import FatalError, TransientNetworkError, WordInfoError
from flashai.domain.events.api_events import (
    ApiCallFailed, ApiCallSucceeded, CacheHit, EventSink, dispatch_event
)
from flashai.domain.interfaces.cache import ResponseCache
from flashai.domain.interfaces.word_info_provider import WordInfoProvider
from flashai.domain.models.common import CacheKey, RateLimitStatus
from flashai.domain.models.word_info import WordInfo

# Infrastructure Layer Imports
from flashai.infrastructure.resilience.api_retry import NETWORK_EXCEPTIONS, ApiRetryService
from flashai.infrastructure.resilience.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

def normalize_cache_key(word: str) -> CacheKey:
    """Trims and case-folds a user-entered word into a cache key.

    Raises:
        ValueError: If the word is empty after trimming.
    """
    key = word.strip().casefold()
    if not key:
        raise ValueError("Word is required")
    return CacheKey(key)

class WordInfoService:
    """Fetches word information through cache, rate limiter and retries."""

    def __init__(
        self,
        provider: WordInfoProvider,
        cache: ResponseCache,
        rate_limiter: RateLimiter,
        retry_service: Optional[ApiRetryService] = None,
        event_sink: Optional[EventSink] = None,
    ):
        """Initializes the service.

        Args:
            provider: Performs the outbound AI call.
            cache: Response cache consulted before any call.
            rate_limiter: The limiter holding the quota shared by all callers.
            retry_service: Wraps each provider call. Defaults to ApiRetryService().
            event_sink: Receives lookup events. Defaults to debug logging.
        """
        self.provider = provider
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.retry_service = retry_service or ApiRetryService()
        self._event_sink = event_sink

    async def fetch_word_info(self, word: str, language: str) -> WordInfo:
        """Returns information about `word` studied in `language`.

        Args:
            word: Raw user input; normalized for the cache lookup.
            language: Target language code.

        Raises:
            ValueError: If `word` is blank.
            WordInfoError: The provider failure, after retries where applicable.
        """
        key = normalize_cache_key(word)
        # Single read: the entry may expire between a has() and a get()
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Word info for '{key}' served from cache")
            dispatch_event(self._event_sink, CacheHit(key=key))
            return cached

        lookup_word = word.strip()

        async def call_provider() -> WordInfo:
            payload = await self.provider.generate_word_info(lookup_word, language)
            return WordInfo.from_payload(payload, lookup_word, language)

        async def operation() -> WordInfo:
            return await self.retry_service.execute_with_retry(call_provider)

        provider_name = getattr(self.provider, 'name', type(self.provider).__name__)
        start_time = time.perf_counter()
        try:
            info = await self.rate_limiter.execute(operation)
        except Exception as e:
            logger.error(f"Failed to fetch word info for '{lookup_word}' from {provider_name}: {type(e).__name__}: {e}")
            dispatch_event(self._event_sink, ApiCallFailed(
                provider=provider_name, word=lookup_word,
                error_type=type(e).__name__, error_message=str(e),
            ))
            if isinstance(e, WordInfoError):
                raise
            if isinstance(e, NETWORK_EXCEPTIONS):
                raise TransientNetworkError(f"{provider_name} network failure: {type(e).__name__}: {e}") from e
            raise FatalError(f"{provider_name} lookup failed: {type(e).__name__}: {e}") from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        self.cache.set(key, info)
        logger.info(f"Fetched word info for '{lookup_word}' from {provider_name} in {latency_ms:.0f}ms")
        dispatch_event(self._event_sink, ApiCallSucceeded(
            provider=provider_name, word=lookup_word, latency_ms=latency_ms
        ))
        return info

    def get_status(self) -> RateLimitStatus:
        return self.rate_limiter.get_status()

    def clear_cache(self, word: Optional[str] = None) -> None:
        """Clears the whole cache, or only the entry for `word`."""
        self.cache.clear(normalize_cache_key(word) if word is not None else None)

    def cache_stats(self) -> Dict[str, Any]:
        stats = getattr(self.cache, 'stats', None)
        if callable(stats):
            return stats()
        return {'size': len(self.cache), 'max_size': None, 'utilization': None}
