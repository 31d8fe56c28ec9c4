"""Interface for the response cache.

Defines the contract for storing and retrieving previously fetched word
information. The cache is a pure mapping: callers normalize keys.
"""

import abc
from typing import Any, Optional

# Import relevant domain models
from ..models.common import CacheKey

class ResponseCache(abc.ABC):
    """Abstract Base Class for response cache operations.

    All operations are synchronous and never block; within a single event
    loop they are atomic with respect to other coroutines.
    """

    @abc.abstractmethod
    def get(self, key: CacheKey) -> Optional[Any]:
        """Retrieves an item from the cache.

        Args:
            key: The normalized cache key.

        Returns:
            The cached value, or None if absent (or expired).
        """
        pass

    @abc.abstractmethod
    def set(self, key: CacheKey, value: Any) -> None:
        """Stores an item, unconditionally overwriting any existing entry.

        Args:
            key: The normalized cache key.
            value: The value to store.
        """
        pass

    @abc.abstractmethod
    def has(self, key: CacheKey) -> bool:
        """Returns True if a live entry exists for the key."""
        pass

    @abc.abstractmethod
    def clear(self, key: Optional[CacheKey] = None) -> None:
        """Clears the whole cache, or only `key` when one is given."""
        pass

    @abc.abstractmethod
    def __len__(self) -> int:
        pass
