"""In-memory cache with per-key time-to-live."""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from finflow.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


@dataclass
class _Entry:
    value: Any
    expires_at: float


def make_key(prefix: str, *params: object) -> str:
    """Build a cache key like ``prefix:param1:param2``."""
    return ":".join([prefix, *(str(p) for p in params)])


class TTLCache:
    """Key/value store whose entries expire a fixed time after being set.

    Expired entries are dropped lazily on read and in bulk by purge_expired,
    which the scheduler runs on an interval. Instances are owned and passed
    around explicitly; there is no process-wide cache.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize cache.

        Args:
            default_ttl: TTL in seconds used when set() is given none
            clock: Function returning the current time in seconds
                (defaults to time.monotonic)
        """
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.default_ttl = default_ttl
        self._clock = clock or time.monotonic
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store value under key for ttl seconds."""
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        with self._lock:
            self._entries[key] = _Entry(value, self._clock() + ttl)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for key, or default."""
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                self._misses += 1
                return default
            self._hits += 1
            return entry.value

    def has(self, key: str) -> bool:
        """Return True if key holds a live value."""
        with self._lock:
            return self._live_entry(key) is not None

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every key starting with prefix. Returns how many were dropped."""
        with self._lock:
            keys = [k for k in self._entries if k.startswith(prefix)]
            for key in keys:
                del self._entries[key]
        return len(keys)

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were dropped."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.expires_at <= now]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Purged %d expired cache entries", len(expired))
        return len(expired)

    def stats(self) -> dict[str, int]:
        """Return entry count and hit/miss counters."""
        with self._lock:
            return {"size": len(self._entries), "hits": self._hits, "misses": self._misses}

    def __len__(self) -> int:
        return len(self._entries)

    def _live_entry(self, key: str) -> Optional[_Entry]:
        # Caller holds the lock.
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry
