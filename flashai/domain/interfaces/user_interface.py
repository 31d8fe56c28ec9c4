"""Interface for interacting with the user (output only).

Defines the contract for displaying word information, limiter status,
errors and informational messages, allowing different UI implementations
(e.g., console, GUI).
"""

import abc
from typing import Any, Dict

# Import relevant domain models
from flashai.domain.models.common import RateLimitStatus
from flashai.domain.models.word_info import WordInfo

class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_word_info(self, info: WordInfo, **kwargs: Any) -> None:
        """Displays the information fetched for a word.

        Args:
            info: The word information to render.
            **kwargs: Additional arguments for formatting (e.g., compact=True).
        """
        pass

    @abc.abstractmethod
    def display_status(self, status: RateLimitStatus, cache_stats: Dict[str, Any] = None) -> None:
        """Displays a rate limiter snapshot and, optionally, cache statistics."""
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass
