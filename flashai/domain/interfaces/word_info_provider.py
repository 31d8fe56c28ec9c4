"""Interface for AI providers that generate word information.

Defines the contract for the outbound call made on a cache miss. The core
only relies on the provider raising errors from `flashai.domain.errors`
so that rate limiting can be told apart from other failures.
"""

import abc
from typing import Any, Dict


class WordInfoProvider(abc.ABC):
    """Abstract Base Class for word information providers."""

    name: str = "provider"

    @abc.abstractmethod
    async def generate_word_info(self, word: str, language: str) -> Dict[str, Any]:
        """Asks the provider for information about a word.

        Args:
            word: The word as entered by the user (trimmed).
            language: Target language code the word is studied in.

        Returns:
            The decoded JSON object returned by the model.

        Raises:
            RateLimitError: The provider throttled the request.
            TransientNetworkError: Connection failure, timeout or 5xx.
            MalformedResponseError: The reply could not be decoded as JSON.
            ConfigurationError: Credentials are missing or rejected.
            FatalError: Any other provider failure.
        """
        pass
