"""Evaluation cache with memoization.

Caches fitness values keyed by the order-independent, quantized form of a
genome. Entries are never evicted: runs are bounded by simulation cost,
not memory.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .constants import CACHE_VERSION, EXIT_PRECISION
from .encoding import canonical_locations


@dataclass(frozen=True)
class CacheKey:
    """Immutable cache key for evaluation results."""

    locations: tuple[float, ...]
    version: str


def make_cache_key(
    x: np.ndarray | Sequence[float],
    perimeter_length: float,
    precision: float = EXIT_PRECISION,
) -> CacheKey:
    """Create cache key from a genome.

    Args:
        x: Decision vector (fractions of the perimeter).
        perimeter_length: Perimeter length P.
        precision: Location granularity in perimeter units.

    Returns:
        CacheKey equal for every permutation of the same exits.
    """
    return CacheKey(
        locations=canonical_locations(x, perimeter_length, precision),
        version=CACHE_VERSION,
    )


class EvalCache:
    """In-memory fitness cache for one optimization run.

    Lookups and stores are individually locked. Check-then-simulate-then-store
    is not atomic: two workers may both simulate the same candidate, and the
    later store overwrites the earlier one with an equally valid value.
    """

    def __init__(self, perimeter_length: float, precision: float = EXIT_PRECISION) -> None:
        self.perimeter_length = perimeter_length
        self.precision = precision
        self._cache: dict[CacheKey, float] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def key(self, x: np.ndarray | Sequence[float]) -> CacheKey:
        return make_cache_key(x, self.perimeter_length, self.precision)

    def get(self, x: np.ndarray | Sequence[float]) -> float | None:
        """Retrieve cached fitness if available.

        Args:
            x: Decision vector.

        Returns:
            Cached fitness or None if not found.
        """
        key = self.key(x)
        with self._lock:
            result = self._cache.get(key)
            if result is not None:
                self._hits += 1
            else:
                self._misses += 1
        return result

    def put(self, x: np.ndarray | Sequence[float], fitness: float) -> None:
        """Store fitness in cache.

        Args:
            x: Decision vector.
            fitness: Fitness to cache.
        """
        key = self.key(x)
        with self._lock:
            self._cache[key] = float(fitness)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        return len(self._cache)

    @property
    def stats(self) -> dict[str, int]:
        """Return cache statistics."""
        with self._lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._cache),
            }
