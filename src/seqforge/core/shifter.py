"""Feature coordinate maintenance under sequence edits.

When bases are inserted or deleted, every feature range has to follow
the bases it annotates. RangeShifter applies a signed edit to a feature
list in place:

- offset > 0: offset bases were inserted before `base`
- offset < 0: -offset bases were deleted starting at `base`

Ranges that collapse (start >= end) are dropped, and features left
without ranges are dropped with them.

Example:
    >>> features = [Feature("orf", [Range(5, 8)])]
    >>> RangeShifter().shift(features, 3, 3)
    []
    >>> features[0].ranges[0]
    Range(start=8, end=11)
"""

from __future__ import annotations

import logging
from typing import Callable

from seqforge.core.models import Feature, Range

logger = logging.getLogger(__name__)


class RangeShifter:
    """Re-position feature ranges after an insertion or deletion.

    Attributes:
        invalidate: Hook run after every shift, whether or not anything
            moved. Documents pass the overlap cache invalidation here.
    """

    def __init__(self, invalidate: Callable[[], None] | None = None) -> None:
        self.invalidate = invalidate

    def shift(self, features: list[Feature], offset: int, base: int) -> list[Feature]:
        """Apply an edit of signed length offset at base to every range.

        Args:
            features: Feature list, modified in place.
            offset: Inserted (positive) or deleted (negative) base count.
            base: Insertion point, or first deleted base.

        Returns:
            Features removed because all of their ranges collapsed.
        """
        removed: list[Feature] = []

        if offset != 0:
            kept: list[Feature] = []
            for feature in features:
                feature.ranges[:] = [
                    r for r in feature.ranges if self._shift_range(r, offset, base)
                ]
                if feature.ranges:
                    kept.append(feature)
                else:
                    removed.append(feature)
            features[:] = kept

        for feature in removed:
            logger.info(f"Removed feature '{feature.name}': all ranges deleted")

        if self.invalidate is not None:
            self.invalidate()

        return removed

    @staticmethod
    def _shift_range(r: Range, offset: int, base: int) -> bool:
        """Move one range; return False if it collapsed."""
        if offset > 0:
            if r.start >= base:
                r.start += offset
            if r.end >= base:
                r.end += offset
        else:
            last_deleted = base - offset - 1
            if last_deleted < r.start:
                # Entirely after the deleted window
                r.start += offset
                r.end += offset
            else:
                # Head first, so the tail trim also counts deleted bases
                # lying before the original start
                if r.start > base:
                    r.start = base
                if r.end >= base:
                    overlap_start = max(r.start, base)
                    overlap_end = min(r.end, last_deleted)
                    r.end -= overlap_end - overlap_start + 1

        return not r.is_collapsed
