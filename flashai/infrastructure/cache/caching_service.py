"""Concrete implementations of the ResponseCache interface.

`InMemoryResponseCache` is a session-scoped mapping. Without arguments it
never evicts; `max_items` adds least-recently-used eviction and `ttl`
makes old entries expire. `PersistentResponseCache` additionally snapshots
its entries to a pickle file so lookups survive process restarts.
"""

import logging
import os
import pickle
import time
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

# Domain Layer Imports
from flashai.domain.interfaces.cache import ResponseCache
from flashai.domain.models.common import CacheKey

logger = logging.getLogger(__name__)

DEFAULT_CACHE_PATH = Path.home() / ".flashai" / "word_cache.pkl"

@dataclass
class CacheEntry:
    """Internal representation of a cache entry."""
    key: CacheKey
    value: Any
    stored_at: float # Unix timestamp of the last write

class InMemoryResponseCache(ResponseCache):
    """In-memory response cache with optional LRU bound and TTL."""

    def __init__(
        self,
        max_items: Optional[int] = None,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initializes the cache.

        Args:
            max_items: Capacity; the least recently used entry is evicted beyond it.
                None means unbounded.
            ttl: Seconds an entry stays valid after being stored. None means forever.
            clock: Wall clock used for `stored_at` and expiry checks.
        """
        if max_items is not None and max_items < 1:
            raise ValueError(f"max_items must be at least 1, got {max_items}")
        if ttl is not None and ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self._entries: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        self.max_items = max_items
        self.ttl = ttl
        self._clock = clock
        logger.info(f"Response cache initialized (max_items={max_items or 'unbounded'}, ttl={ttl or 'none'})")

    def _is_expired(self, entry: CacheEntry) -> bool:
        return self.ttl is not None and self._clock() - entry.stored_at > self.ttl

    def _live_entry(self, key: CacheKey) -> Optional[CacheEntry]:
        """Returns the entry for `key`, removing it first if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry):
            logger.debug(f"Cache entry expired for key: {key}")
            del self._entries[key]
            self._on_change()
            return None
        return entry

    def _evict_overflow(self) -> None:
        while self.max_items is not None and len(self._entries) > self.max_items:
            oldest_key, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted least recently used cache entry: {oldest_key}")

    def _on_change(self) -> None:
        """Hook called after every mutation."""

    # --- ResponseCache Interface Implementation ---

    def get(self, key: CacheKey) -> Optional[Any]:
        entry = self._live_entry(key)
        if entry is None:
            return None
        if self.max_items is not None:
            self._entries.move_to_end(key)
        logger.debug(f"Cache hit for key: {key}")
        return entry.value

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())
        self._entries.move_to_end(key)
        self._evict_overflow()
        self._on_change()
        logger.debug(f"Stored item in cache: key={key}")

    def has(self, key: CacheKey) -> bool:
        return self._live_entry(key) is not None

    def clear(self, key: Optional[CacheKey] = None) -> None:
        if key is None:
            self._entries.clear()
            logger.info("Cleared response cache.")
        elif self._entries.pop(key, None) is not None:
            logger.debug(f"Deleted item from cache: key={key}")
        else:
            return
        self._on_change()

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Returns size, capacity and utilization (percent, None when unbounded)."""
        size = len(self._entries)
        return {
            'size': size,
            'max_size': self.max_items,
            'utilization': (size / self.max_items) * 100 if self.max_items else None,
        }

class PersistentResponseCache(InMemoryResponseCache):
    """Response cache that snapshots its entries to a pickle file."""

    def __init__(self, path: Path = DEFAULT_CACHE_PATH, **kwargs: Any):
        super().__init__(**kwargs)
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.debug(f"No cache snapshot at {self.path}")
            return
        try:
            with open(self.path, 'rb') as f:
                entries = pickle.load(f)
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError, OSError) as e:
            logger.warning(f"Failed to read cache snapshot {self.path}: {e}. Starting empty.")
            return
        if not isinstance(entries, list):
            logger.warning(f"Cache snapshot {self.path} has unexpected format. Starting empty.")
            return

        loaded = [e for e in entries if isinstance(e, CacheEntry) and not self._is_expired(e)]
        for entry in sorted(loaded, key=lambda e: e.stored_at):
            self._entries[entry.key] = entry
        self._evict_overflow()
        logger.info(f"Restored {len(self._entries)} cache entries from {self.path}")
        if len(self._entries) != len(entries):
            logger.info(f"Dropped {len(entries) - len(self._entries)} expired or invalid cache entries")
            self._save()

    def _save(self) -> None:
        temp_path = self.path.with_suffix('.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'wb') as f:
                pickle.dump(list(self._entries.values()), f)
            # os.replace is atomic on both Windows and Unix
            os.replace(str(temp_path), str(self.path))
        except (pickle.PicklingError, OSError) as e:
            logger.error(f"Failed to write cache snapshot {self.path}: {e}")
            temp_path.unlink(missing_ok=True)

    def _on_change(self) -> None:
        self._save()
