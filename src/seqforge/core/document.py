"""Annotated sequence document.

SequenceDocument owns a nucleotide sequence and its features, and is the
only way to read or edit them. Each edit runs as one step under the
document lock:

1. feature ranges are shifted (RangeShifter)
2. the sequence string is spliced
3. overlap caches are invalidated
4. a HistoryStep is appended to the history log
5. a coalesced save is triggered

Example:
    >>> from seqforge import Feature, Range, SequenceDocument
    >>> doc = SequenceDocument("ATGAAATAG", [Feature("orf", [Range(5, 8)])])
    >>> doc.insert_bases("CCC", 3)
    >>> doc.get_subsequence(0, 11)
    'ATGCCCAAATAG'
    >>> doc.features[0].ranges
    [Range(start=8, end=11)]
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Any, Callable, Iterable, Mapping

from seqforge.config import DocumentConfig
from seqforge.core.frames import FrameTranslator
from seqforge.core.models import (
    AminoAcid,
    Codon,
    DisplaySettings,
    Feature,
    HistoryStep,
    InvalidRangeError,
    TransformOptions,
)
from seqforge.core.overlaps import OverlapAnalyzer
from seqforge.core.shifter import RangeShifter
from seqforge.history import EditHistory, HistoryLog, delete_step, insert_step, now_ms
from seqforge.persistence import Persistence, SaveDebouncer
from seqforge.utils.sequences import TranslationProvider

logger = logging.getLogger(__name__)

EditListener = Callable[["SequenceDocument", HistoryStep], None]


def generate_document_id() -> str:
    """Generate an id of the form '<epoch-ms>-<0..9999>'."""
    return f"{now_ms()}-{random.randint(0, 9999)}"


class SequenceDocument:
    """A mutable nucleotide sequence with positioned features.

    Attributes:
        id: Document identifier.
        name: Display name.
        display_settings: Presentation options.
        history: Edit history log.
        frames: Frame translator over this document.
    """

    def __init__(
        self,
        sequence: str = "",
        features: Iterable[Feature] = (),
        *,
        name: str = "",
        id: str | None = None,
        display_settings: DisplaySettings | None = None,
        history: HistoryLog | None = None,
        persistence: Persistence | None = None,
        translation: TranslationProvider | None = None,
        config: DocumentConfig | None = None,
    ) -> None:
        """Initialize a document, fresh or from loaded state.

        Args:
            sequence: Nucleotide letters.
            features: Initial features; the document keeps its own copies.
            name: Display name.
            id: Document id; generated when omitted.
            display_settings: Presentation options.
            history: Edit history log; an in-memory one when omitted.
            persistence: Save target; saves are skipped when omitted.
            translation: Codon/complement provider for translated views.
            config: Document configuration.
        """
        self.config = config if config is not None else DocumentConfig()
        self.id = id if id is not None else generate_document_id()
        self.name = name
        self.display_settings = (
            display_settings if display_settings is not None else DisplaySettings()
        )
        self.history: HistoryLog = history if history is not None else EditHistory()
        self.persistence = persistence

        self._sequence = sequence
        self._features: list[Feature] = [f.copy() for f in features]
        self._lock = threading.RLock()
        self._listeners: list[EditListener] = []

        self.overlaps = OverlapAnalyzer(
            self._features,
            max_iterations=self.config.max_overlap_iterations,
        )
        self.shifter = RangeShifter(invalidate=self.overlaps.invalidate)
        self.frames = FrameTranslator(self, translation)
        self._saver = SaveDebouncer(self._save, wait=self.config.save_debounce_seconds)

    def __repr__(self) -> str:
        return (
            f"SequenceDocument(id={self.id!r}, name={self.name!r}, "
            f"length={self.length}, features={len(self._features)})"
        )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def length(self) -> int:
        """Number of bases in the sequence."""
        return len(self._sequence)

    def __len__(self) -> int:
        return self.length

    @property
    def sequence(self) -> str:
        return self._sequence

    @property
    def features(self) -> tuple[Feature, ...]:
        """Copies of the current features, in order."""
        with self._lock:
            return tuple(f.copy() for f in self._features)

    def get_subsequence(self, start: int, end: int | None = None) -> str:
        """Get the bases between start and end, both inclusive.

        Bounds are clamped into the sequence. With no end, a single base
        is returned. If an explicit end is given and both bounds lie past
        the sequence, the result is empty.

        Args:
            start: First base (0-based).
            end: Last base (0-based, inclusive).

        Returns:
            The subsequence.
        """
        with self._lock:
            length = len(self._sequence)
            if length == 0:
                return ""
            if end is None:
                return self._sequence[min(max(0, start), length - 1)]
            if start >= length and end >= length:
                return ""
            end = min(length - 1, end)
            start = min(max(0, start), length - 1)
            if end < start:
                return ""
            return self._sequence[start : end + 1]

    def get_transformed_subsequence(
        self,
        variation: str,
        options: TransformOptions | Mapping[str, Any] | None,
        start: int,
        end: int,
    ) -> str:
        """Get a complemented ('complements') or translated ('aa-long',
        'aa-short') view of the bases between start and end."""
        with self._lock:
            return self.frames.get_transformed_subsequence(variation, options, start, end)

    def get_codon(self, base: int, frame_offset: int | None = None) -> Codon:
        """Get the codon containing base; the frame offset defaults to
        display_settings.aa_offset."""
        if frame_offset is None:
            frame_offset = self.display_settings.aa_offset
        with self._lock:
            return self.frames.get_codon(base, frame_offset)

    def get_amino_acid(self, mode: str, base: int, frame_offset: int | None = None) -> AminoAcid:
        if frame_offset is None:
            frame_offset = self.display_settings.aa_offset
        with self._lock:
            return self.frames.get_amino_acid(mode, base, frame_offset)

    def features_in_range(self, start: int, end: int) -> list[Feature]:
        with self._lock:
            return self.overlaps.features_in_range(start, end)

    def count_features_in_range(self, start: int, end: int) -> int:
        with self._lock:
            return self.overlaps.count_features_in_range(start, end)

    def max_overlap_depth(self) -> int:
        with self._lock:
            return self.overlaps.max_overlap_depth()

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def insert_bases(self, bases: str, before_base: int, record_history: bool = True) -> None:
        """Insert bases before before_base.

        Features at or after the insertion point move right; features
        spanning it grow.

        Args:
            bases: Bases to insert.
            before_base: Insertion point, clamped into [0, length].
            record_history: Append a history step for the edit.
        """
        if not bases:
            logger.debug("Ignoring empty insertion")
            return

        with self._lock:
            before_base = min(max(0, before_base), len(self._sequence))

            self.shifter.shift(self._features, len(bases), before_base)
            self._sequence = (
                self._sequence[:before_base] + bases + self._sequence[before_base:]
            )
            logger.debug(f"Inserted {len(bases)} bases before {before_base} in {self.id}")

            step = insert_step(before_base, bases)
            self._finish_edit(step, record_history)

    def delete_bases(self, first_base: int, count: int, record_history: bool = True) -> None:
        """Delete count bases starting at first_base.

        Deletions running past the end of the sequence are truncated.
        Ranges inside the deleted window are removed, and so are features
        left without ranges.

        Args:
            first_base: First base to delete, clamped into [0, length].
            count: Number of bases to delete.
            record_history: Append a history step for the edit.

        Raises:
            InvalidRangeError: If count is negative.
        """
        if count < 0:
            raise InvalidRangeError(f"Deletion count must be >= 0, got {count}")

        with self._lock:
            first_base = min(max(0, first_base), len(self._sequence))
            removed = self._sequence[first_base : first_base + count]
            if not removed:
                logger.debug(f"Ignoring empty deletion at {first_base}")
                return

            self.shifter.shift(self._features, -len(removed), first_base)
            self._sequence = (
                self._sequence[:first_base] + self._sequence[first_base + len(removed) :]
            )
            logger.debug(f"Deleted {len(removed)} bases at {first_base} in {self.id}")

            step = delete_step(first_base, removed)
            self._finish_edit(step, record_history)

    def add_feature(self, feature: Feature) -> None:
        """Add a copy of feature to the document."""
        with self._lock:
            self._features.append(feature.copy())
            self.overlaps.invalidate()

    def remove_feature(self, feature: Feature) -> None:
        """Remove the first feature equal to feature.

        Raises:
            ValueError: If no feature of this document equals it.
        """
        with self._lock:
            for i, existing in enumerate(self._features):
                if existing == feature:
                    del self._features[i]
                    self.overlaps.invalidate()
                    return
        raise ValueError(f"Feature '{feature.name}' is not part of document {self.id}")

    def _finish_edit(self, step: HistoryStep, record_history: bool) -> None:
        if record_history:
            self.history.add(step)
        if self.persistence is not None:
            self._saver.trigger()
        for listener in list(self._listeners):
            try:
                listener(self, step)
            except Exception:
                logger.exception(f"Edit listener failed for {step.operation} in {self.id}")

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, listener: EditListener) -> None:
        """Register a callback run with (document, step) after every edit."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: EditListener) -> None:
        with self._lock:
            self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _save(self) -> None:
        if self.persistence is None:
            return
        self.persistence.save(self.to_dict())

    @property
    def save_pending(self) -> bool:
        return self._saver.pending

    def flush(self) -> None:
        """Run a pending save now instead of waiting for the window."""
        self._saver.flush()

    def close(self) -> None:
        """Flush a pending save before the document is discarded."""
        self._saver.flush()
        logger.debug(f"Closed document {self.id}")

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Snapshot the document state as plain data."""
        with self._lock:
            history = self.history.to_list() if isinstance(self.history, EditHistory) else []
            return {
                "id": self.id,
                "name": self.name,
                "sequence": self._sequence,
                "features": [f.to_dict() for f in self._features],
                "display_settings": self.display_settings.to_dict(),
                "history": history,
            }

    def serialize(self, current_id: str | None = None) -> dict[str, Any]:
        """Snapshot the document for a presentation layer.

        Args:
            current_id: Id of the document the caller considers current.

        Returns:
            to_dict() plus an 'is_current' flag.
        """
        data = self.to_dict()
        data["is_current"] = current_id is not None and current_id == self.id
        return data

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        persistence: Persistence | None = None,
        translation: TranslationProvider | None = None,
        config: DocumentConfig | None = None,
    ) -> SequenceDocument:
        """Rebuild a document from to_dict() output."""
        return cls(
            data.get("sequence", ""),
            [Feature.from_dict(f) for f in data.get("features", [])],
            name=data.get("name", ""),
            id=data.get("id"),
            display_settings=DisplaySettings.from_dict(data.get("display_settings", {})),
            history=EditHistory.from_list(data.get("history", [])),
            persistence=persistence,
            translation=translation,
            config=config,
        )
