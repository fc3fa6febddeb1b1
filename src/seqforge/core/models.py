"""Data models for annotated sequence documents.

This module defines the records a sequence document is built from:

- Range: an inclusive, 0-based span of bases
- Feature: a named annotation over one or more ranges
- DisplaySettings: presentation options carried on a document
- HistoryStep: a single entry of the edit history

Plus the small result records returned by the frame translator.

Coordinate conventions:
    - Ranges are 0-based and inclusive on both ends
    - A live range always has start < end
    - A live feature always has at least one range

Example:
    >>> from seqforge.core.models import Feature, Range
    >>> gene = Feature("lacZ", [Range(5, 8)], type="gene")
    >>> gene.overlaps(0, 5)
    True
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Literal, Mapping

import attrs

# =============================================================================
# Constants
# =============================================================================

AA_MODES = ("none", "short", "long")

HISTORY_INSERT = "insert"
HISTORY_DELETE = "delete"

AAMode = Literal["none", "short", "long"]
StepType = Literal["insert", "delete"]


# =============================================================================
# Exceptions
# =============================================================================


class InvalidRangeError(ValueError):
    """Raised when a caller violates a coordinate pre-condition."""

    pass


# =============================================================================
# Ranges and Features
# =============================================================================


@attrs.define(slots=True)
class Range:
    """An inclusive span of bases belonging to a feature.

    Bounds are checked on construction only. The range shifter moves
    ranges in place and removes any that collapse.

    Attributes:
        start: First base (0-based, inclusive).
        end: Last base (0-based, inclusive).
    """

    start: int
    end: int

    def __attrs_post_init__(self) -> None:
        if self.start < 0:
            raise InvalidRangeError(f"Range start must be >= 0, got {self.start}")
        if self.start >= self.end:
            raise InvalidRangeError(f"Range start must be < end: {self.start}-{self.end}")

    @property
    def length(self) -> int:
        """Number of bases covered."""
        return self.end - self.start + 1

    @property
    def is_collapsed(self) -> bool:
        return self.start >= self.end

    def overlaps(self, start: int, end: int) -> bool:
        """Check if this range shares at least one base with [start, end].

        Args:
            start: Window start (inclusive).
            end: Window end (inclusive).

        Returns:
            True if the range overlaps the window.
        """
        return self.start <= end and self.end >= start

    def overlaps_range(self, other: Range) -> bool:
        """Check if this range shares at least one base with another range."""
        return self.overlaps(other.start, other.end)

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Range:
        return cls(int(data["start"]), int(data["end"]))


@attrs.define(slots=True)
class Feature:
    """A named annotation spanning one or more ranges.

    Several ranges model spliced or otherwise discontinuous features,
    e.g. the exons of a CDS.

    Attributes:
        name: Display name of the feature.
        ranges: Ordered list of ranges.
        type: Feature type (gene, CDS, primer_bind, ...).
        metadata: Free-form qualifiers.
    """

    name: str
    ranges: list[Range]
    type: str = "misc_feature"
    metadata: dict[str, Any] = attrs.Factory(dict)

    def __attrs_post_init__(self) -> None:
        self.ranges = list(self.ranges)
        if not self.ranges:
            raise InvalidRangeError(f"Feature '{self.name}' must have at least one range")

    @property
    def start(self) -> int:
        """Lowest base covered by any range."""
        return min(r.start for r in self.ranges)

    @property
    def end(self) -> int:
        """Highest base covered by any range."""
        return max(r.end for r in self.ranges)

    def overlaps(self, start: int, end: int) -> bool:
        """Check if any range of the feature overlaps [start, end]."""
        return any(r.overlaps(start, end) for r in self.ranges)

    def copy(self) -> Feature:
        """Return a copy that shares no ranges or metadata with this one."""
        return Feature(
            name=self.name,
            ranges=[attrs.evolve(r) for r in self.ranges],
            type=self.type,
            metadata=deepcopy(self.metadata),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "ranges": [r.to_dict() for r in self.ranges],
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Feature:
        return cls(
            name=data["name"],
            ranges=[Range.from_dict(r) for r in data.get("ranges", [])],
            type=data.get("type", "misc_feature"),
            metadata=dict(data.get("metadata", {})),
        )


# =============================================================================
# Document Records
# =============================================================================


@attrs.define(slots=True)
class DisplaySettings:
    """Presentation options for a sequence document.

    Only aa_offset is read by the core, as the default frame offset.

    Attributes:
        numbering: Show base numbering rows.
        features: Show feature rows.
        aa: Amino-acid row mode (none, short, long).
        aa_offset: Base at which codon boundaries start.
    """

    numbering: bool = True
    features: bool = True
    aa: AAMode = attrs.field(default="none", validator=attrs.validators.in_(AA_MODES))
    aa_offset: int = attrs.field(default=0, validator=attrs.validators.ge(0))

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DisplaySettings:
        return cls(**data)


@attrs.define(slots=True, frozen=True)
class HistoryStep:
    """A single, immutable edit history entry.

    Attributes:
        type: Kind of edit (insert or delete).
        position: Base at which the edit was applied.
        value: Inserted or removed bases.
        operation: Compact operation text, '@<pos>+<bases>' or '@<pos>-<bases>'.
        timestamp: Milliseconds since the epoch.
    """

    type: StepType = attrs.field(validator=attrs.validators.in_((HISTORY_INSERT, HISTORY_DELETE)))
    position: int
    value: str
    operation: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HistoryStep:
        return cls(**data)


# =============================================================================
# Frame Translation Records
# =============================================================================


@attrs.define(slots=True, frozen=True)
class TransformOptions:
    """Options for translated views.

    Attributes:
        offset: Frame offset (base where codon boundaries start).
        complements: Complement each codon before translating it.
    """

    offset: int = 0
    complements: bool = False

    @classmethod
    def from_value(cls, value: TransformOptions | Mapping[str, Any] | None) -> TransformOptions:
        """Coerce None, a mapping, or an instance into TransformOptions."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls(
            offset=value.get("offset") or 0,
            complements=value.get("complements") is True,
        )


@attrs.define(slots=True, frozen=True)
class PaddedSubsequence:
    """A subsequence expanded to block boundaries.

    Attributes:
        sequence: Bases covered by the expanded window.
        start: Expanded start base.
        end: Expanded end base (may equal the sequence length).
    """

    sequence: str
    start: int
    end: int


@attrs.define(slots=True, frozen=True)
class Codon:
    """A codon and the position of the queried base within it (0-2)."""

    sequence: str
    position: int


@attrs.define(slots=True, frozen=True)
class AminoAcid:
    """An amino-acid code (or blank placeholder) and the codon position."""

    sequence: str
    position: int
