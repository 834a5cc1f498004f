"""Key-set cache for coverage queries.

Memoizes, per locale tag, the ordered dotted key paths reachable in that
locale's resource tree. Derived data only: the store invalidates an entry
whenever its locale is loaded or reset.

Architecture:
    - Plain dict keyed by normalized locale tag (one entry per locale, so no
      eviction policy is needed)
    - Values are tuples, so callers cannot mutate cached key lists
    - threading.RLock guards entries and metrics

Python 3.13+.
"""

from threading import RLock

__all__ = ["KeySetCache"]


class KeySetCache:
    """Thread-safe memo of locale tag -> reachable key paths.

    Attributes:
        hits: Number of cache hits (for metrics)
        misses: Number of cache misses (for metrics)
    """

    __slots__ = ("_entries", "_hits", "_invalidations", "_lock", "_misses")

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, ...]] = {}
        self._lock = RLock()
        self._hits = 0
        self._misses = 0
        self._invalidations = 0

    def get(self, locale_code: str) -> tuple[str, ...] | None:
        """Get cached key paths, or None on a miss."""
        with self._lock:
            keys = self._entries.get(locale_code)
            if keys is None:
                self._misses += 1
            else:
                self._hits += 1
            return keys

    def put(self, locale_code: str, keys: tuple[str, ...]) -> None:
        """Store key paths for a locale, replacing any previous entry."""
        with self._lock:
            self._entries[locale_code] = keys

    def invalidate(self, locale_code: str) -> bool:
        """Drop one locale's entry.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            removed = self._entries.pop(locale_code, None) is not None
            if removed:
                self._invalidations += 1
            return removed

    def clear(self) -> None:
        """Drop every entry and reset metrics."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._invalidations = 0

    def get_stats(self) -> dict[str, int | float]:
        """Get cache statistics.

        Returns:
            Dict with keys:
            - size (int): Number of cached locales
            - hits (int): Number of cache hits
            - misses (int): Number of cache misses
            - hit_rate (float): Hit rate as percentage (0.0-100.0)
            - invalidations (int): Entries dropped by invalidate()
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
                "invalidations": self._invalidations,
            }

    def __contains__(self, locale_code: object) -> bool:
        with self._lock:
            return locale_code in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def hits(self) -> int:
        """Number of cache hits."""
        with self._lock:
            return self._hits

    @property
    def misses(self) -> int:
        """Number of cache misses."""
        with self._lock:
            return self._misses
