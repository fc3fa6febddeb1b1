"""Core document logic for seqforge.

This module contains the sequence document and its engines:

- models: Range, Feature and the other records
- shifter: Keeps feature ranges consistent under insertions and deletions
- frames: Codon-aligned translated and complemented views
- overlaps: Memoized feature overlap queries
- document: The SequenceDocument tying them together
"""

from seqforge.core.models import (
    AminoAcid,
    Codon,
    DisplaySettings,
    Feature,
    HistoryStep,
    InvalidRangeError,
    PaddedSubsequence,
    Range,
    TransformOptions,
)
from seqforge.core.shifter import RangeShifter
from seqforge.core.overlaps import OverlapAnalyzer, OverlapCache
from seqforge.core.frames import FrameTranslator
from seqforge.core.document import SequenceDocument

__all__ = [
    "AminoAcid",
    "Codon",
    "DisplaySettings",
    "Feature",
    "FrameTranslator",
    "HistoryStep",
    "InvalidRangeError",
    "OverlapAnalyzer",
    "OverlapCache",
    "PaddedSubsequence",
    "Range",
    "RangeShifter",
    "SequenceDocument",
    "TransformOptions",
]
