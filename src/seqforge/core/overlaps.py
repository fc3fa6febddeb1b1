"""Feature overlap queries.

Rendering code repeatedly asks how many features cover a window and how
deeply features stack, so both answers are memoized in an OverlapCache.
The cache is owned by the analyzer and must be invalidated whenever a
feature or one of its ranges changes.

Example:
    >>> analyzer = OverlapAnalyzer(features)
    >>> analyzer.count_features_in_range(0, 99)
    3
    >>> analyzer.max_overlap_depth()
    2
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Sequence

from seqforge.config import DEFAULT_MAX_OVERLAP_ITERATIONS
from seqforge.core.models import Feature, Range

logger = logging.getLogger(__name__)

# Cache key for the single depth estimate
_DEPTH_KEY = ("max_overlap_depth",)


# =============================================================================
# Cache
# =============================================================================


class OverlapCache:
    """Keyed store for memoized overlap query results.

    Attributes:
        hits: Lookups answered from the store.
        misses: Lookups that had to compute.
        invalidations: Number of invalidate() calls.
    """

    def __init__(self) -> None:
        self._store: dict[Hashable, Any] = {}
        self.hits = 0
        self.misses = 0
        self.invalidations = 0

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the stored value for key, computing and storing it if absent."""
        if key in self._store:
            self.hits += 1
            return self._store[key]
        self.misses += 1
        value = compute()
        self._store[key] = value
        return value

    def invalidate(self) -> None:
        """Drop every stored result."""
        self._store.clear()
        self.invalidations += 1

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._store


# =============================================================================
# Analyzer
# =============================================================================


class OverlapAnalyzer:
    """Overlap queries over a live feature list.

    The analyzer reads the list it was given on every query; callers that
    modify the list or its ranges must call invalidate().

    Attributes:
        features: The feature list being analyzed.
        cache: Memoized query results.
        max_iterations: Safety cap for max_overlap_depth().
    """

    def __init__(
        self,
        features: Sequence[Feature],
        cache: OverlapCache | None = None,
        max_iterations: int = DEFAULT_MAX_OVERLAP_ITERATIONS,
    ) -> None:
        self.features = features
        self.cache = cache if cache is not None else OverlapCache()
        self.max_iterations = max_iterations

    def invalidate(self) -> None:
        self.cache.invalidate()

    def features_in_range(self, start: int, end: int) -> list[Feature]:
        """Get every feature with at least one range overlapping [start, end].

        Not memoized; the result holds copies of the matching features.
        """
        return [f.copy() for f in self.features if f.overlaps(start, end)]

    def count_features_in_range(self, start: int, end: int) -> int:
        """Count features overlapping [start, end] (memoized per window)."""
        return self.cache.get_or_compute(
            (start, end),
            lambda: sum(1 for f in self.features if f.overlaps(start, end)),
        )

    def max_overlap_depth(self) -> int:
        """Estimate how many ranges stack on top of each other.

        This is an approximation by iterative peeling, not an exact
        maximum clique. Each pass takes the ranges that overlap at least
        one other range and removes a greedy layer of mutually disjoint
        ones among them (earliest end first). Peeling stops when a pass
        removes nothing, at most one range is left, or max_iterations
        passes have run. The depth is the number of passes plus one.

        Returns:
            1 for pairwise disjoint ranges, k for k mutually overlapping
            ranges (k <= max_iterations + 1).
        """
        return self.cache.get_or_compute(_DEPTH_KEY, self._estimate_depth)

    def _estimate_depth(self) -> int:
        ranges = [r for f in self.features for r in f.ranges]
        iterations = 0

        while len(ranges) > 1 and iterations < self.max_iterations:
            layer = _peel_layer(ranges)
            if not layer:
                break
            peeled = {id(r) for r in layer}
            ranges = [r for r in ranges if id(r) not in peeled]
            iterations += 1

        if iterations >= self.max_iterations and len(ranges) > 1:
            logger.warning(f"Overlap depth estimate hit the {self.max_iterations} iteration cap")

        return iterations + 1


def _peel_layer(ranges: list[Range]) -> list[Range]:
    """Pick disjoint ranges among those overlapping another distinct range."""
    stacked = [
        r for r in ranges if any(other is not r and r.overlaps_range(other) for other in ranges)
    ]

    layer: list[Range] = []
    for r in sorted(stacked, key=lambda r: (r.end, r.start)):
        if not layer or r.start > layer[-1].end:
            layer.append(r)
    return layer
