"""DistanceCache: LRU-backed memo for pairwise node distances.

Unordered arrays and misaligned ordered arrays need the distance between
many element pairs, and the same sub-pairs recur at every level of the
recursion.  The cache keys on node identity, so it is only valid while the
compared trees are alive; the engine clears it at the start of every
comparison.

By default the memo is unbounded: pairing ``n`` records against ``m``
records needs ``n * m`` entries at once, and evicting any of them means
recomputing whole subtrees.  A ``max_size`` bounds memory instead, with
silent LRU eviction when it is exceeded.

Each ``DistanceCache`` instance maintains its own ``LRUCache``; there is
no class-level shared state, so two comparators never interfere.
"""

from __future__ import annotations

import math
from collections.abc import Hashable

from cachetools import LRUCache

__all__ = ["DistanceCache"]


class DistanceCache:
    """LRU memo of ``distance(expected, actual)`` results.

    Args:
        max_size: Maximum number of distances to hold in memory, or ``None``
            (the default) for no limit.  When exceeded, the
            least-recently-used entry is evicted.
    """

    def __init__(self, max_size: int | None = None) -> None:
        if max_size is not None and max_size < 1:
            msg = f"max_size must be >= 1, got {max_size}"
            raise ValueError(msg)
        self._cache: LRUCache[Hashable, float] = LRUCache(
            maxsize=math.inf if max_size is None else max_size
        )
        self.hits = 0
        self.misses = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def max_size(self) -> int | None:
        """The maximum number of entries this cache can hold; None if unbounded."""
        if math.isinf(self._cache.maxsize):
            return None
        return int(self._cache.maxsize)

    @property
    def curr_size(self) -> int:
        """The current number of entries stored in the cache."""
        return int(self._cache.currsize)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, key: Hashable) -> float | None:
        value = self._cache.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: Hashable, distance: float) -> None:
        self._cache[key] = distance

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
        self.misses = 0
