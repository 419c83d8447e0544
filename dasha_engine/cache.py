import logging
import threading
from collections import OrderedDict
from datetime import datetime
from typing import Any, Callable, Optional, Tuple

from .config import settings

logger = logging.getLogger(__name__)


class CacheKeys:
    """
    Centralized cache key builders.
    """

    # ─────────────────────────────────────────────
    # Period trees
    # ─────────────────────────────────────────────

    @staticmethod
    def periods(chart_identity: str, system: str, cycles: int, depth: int) -> str:
        return f"periods:{chart_identity}:{system}:{cycles}:{depth}"

    # ─────────────────────────────────────────────
    # Point-in-time queries
    # ─────────────────────────────────────────────

    @staticmethod
    def current(chart_identity: str, system: str, cycles: int, depth: int,
                as_of: datetime) -> str:
        return f"current:{chart_identity}:{system}:{cycles}:{depth}:{as_of.isoformat()}"


class PeriodCache:
    """
    Bounded in-memory cache for computed results.

    Instances are handed to the report functions by the caller; nothing in
    the engine keeps one at module level. One instance may be shared by the
    worker threads of a host.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries or settings.CACHE_MAX_ENTRIES
        self._entries: "OrderedDict[str, Any]" = OrderedDict()
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0


    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    # ─────────────────────────────────────────────
    # Core operations
    # ─────────────────────────────────────────────

    def _lookup_unlocked(self, key: str) -> Tuple[bool, Any]:
        if key not in self._entries:
            return False, None
        self._entries.move_to_end(key)
        return True, self._entries[key]

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.
        Returns None if key does not exist.
        """
        with self._lock:
            return self._lookup_unlocked(key)[1]

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Cache evicted %s", evicted)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_or_compute(self, key: str, factory: Callable[[], Any]) -> Any:
        with self._lock:
            found, value = self._lookup_unlocked(key)
            if found:
                self.hits += 1
                logger.debug("Cache hit %s", key)
                return value
            self.misses += 1
        logger.debug("Cache miss %s", key)
        # computed outside the lock; a racing thread may store the same value
        value = factory()
        self.set(key, value)
        return value
