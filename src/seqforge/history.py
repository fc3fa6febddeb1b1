"""Edit history for sequence documents.

A document appends one HistoryStep per applied edit. The log is
append-only: the document never reads back or rewrites earlier steps.

Example:
    >>> from seqforge.history import EditHistory
    >>> history = EditHistory()
    >>> doc = SequenceDocument("ATGAAATAG", history=history)
    >>> doc.insert_bases("CCC", 3)
    >>> history.steps[-1].operation
    '@3+CCC'
"""

from __future__ import annotations

import time
from typing import Any, Iterable, Iterator, Mapping, Protocol

from seqforge.core.models import HISTORY_DELETE, HISTORY_INSERT, HistoryStep

# =============================================================================
# Interface
# =============================================================================


class HistoryLog(Protocol):
    """Append-only sink for edit history steps."""

    def add(self, step: HistoryStep) -> None: ...


# =============================================================================
# Step Construction
# =============================================================================


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def insert_step(position: int, bases: str, timestamp: int | None = None) -> HistoryStep:
    """Build the history step for an insertion of bases before position."""
    return HistoryStep(
        type=HISTORY_INSERT,
        position=position,
        value=bases,
        operation=f"@{position}+{bases}",
        timestamp=now_ms() if timestamp is None else timestamp,
    )


def delete_step(position: int, removed: str, timestamp: int | None = None) -> HistoryStep:
    """Build the history step for a deletion of removed bases at position."""
    return HistoryStep(
        type=HISTORY_DELETE,
        position=position,
        value=removed,
        operation=f"@{position}-{removed}",
        timestamp=now_ms() if timestamp is None else timestamp,
    )


# =============================================================================
# In-memory Log
# =============================================================================


class EditHistory:
    """In-memory, append-only edit history.

    Example:
        >>> history = EditHistory()
        >>> history.add(insert_step(0, "A"))
        >>> len(history)
        1
    """

    def __init__(self, steps: Iterable[HistoryStep] = ()) -> None:
        self._steps: list[HistoryStep] = list(steps)

    def add(self, step: HistoryStep) -> None:
        """Append a step to the log."""
        self._steps.append(step)

    @property
    def steps(self) -> tuple[HistoryStep, ...]:
        """All steps, oldest first."""
        return tuple(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[HistoryStep]:
        return iter(tuple(self._steps))

    def to_list(self) -> list[dict[str, Any]]:
        return [step.to_dict() for step in self._steps]

    @classmethod
    def from_list(cls, data: Iterable[Mapping[str, Any]]) -> EditHistory:
        return cls(HistoryStep.from_dict(item) for item in data)
