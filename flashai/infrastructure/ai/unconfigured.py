"""Placeholder provider used when no AI provider could be configured.

Lets commands that never reach the provider (status, clear-cache, cache
hits) keep working; every actual call fails with the stored
ConfigurationError.
"""

from typing import Any, Dict

from flashai.domain.errors import ConfigurationError
from flashai.domain.interfaces.word_info_provider import WordInfoProvider

class UnconfiguredProvider(WordInfoProvider):

    def __init__(self, name: str, error: ConfigurationError):
        self.name = name
        self.error = error

    async def generate_word_info(self, word: str, language: str) -> Dict[str, Any]:
        raise ConfigurationError(str(self.error))
