"""Error taxonomy for word information lookups.

Every failure that reaches a caller of `WordInfoService.fetch_word_info`
is one of these kinds. The `retriable` class attribute is what the retry
policy inspects; messages are never parsed.
"""

from typing import Optional


class WordInfoError(Exception):
    """Base class for all word information errors."""

    retriable: bool = False


class ConfigurationError(WordInfoError):
    """A required credential or setting is missing or rejected."""


class RateLimitError(WordInfoError):
    """The provider signaled throttling (HTTP 429 or equivalent)."""

    retriable = True

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class TransientNetworkError(WordInfoError):
    """Connection reset, timeout or 5xx response from the provider."""

    retriable = True

    def __init__(self, message: str = "Transient network failure", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(WordInfoError):
    """The provider answered, but not with the expected structure."""


class FatalError(WordInfoError):
    """Any other provider failure. Never retried."""
