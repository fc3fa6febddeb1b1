"""seqforge: in-memory annotated sequence documents.

seqforge keeps a nucleotide sequence and its features (genes, primers,
spliced CDSs) consistent while the sequence is edited, and serves the
views a sequence editor needs: subsequences, codon-aligned translations,
complements and feature overlap counts.

Example:
    >>> import seqforge
    >>> doc = seqforge.SequenceDocument("ATGAAATAG")
    >>> doc.get_transformed_subsequence("aa-short", None, 0, 8)
    'M  K  *  '

Modules:
    core: Document, feature models and the shift/frame/overlap engines
    config: Configuration
    history: Edit history log
    persistence: Save targets and the coalescing save trigger
    utils: Translation tables and logging
"""

__version__ = "0.1.0-alpha"

from seqforge.config import Config, DocumentConfig
from seqforge.core import (
    DisplaySettings,
    Feature,
    InvalidRangeError,
    Range,
    SequenceDocument,
    TransformOptions,
)
from seqforge.history import EditHistory
from seqforge.persistence import MemoryStore

__all__ = [
    "__version__",
    "Config",
    "DisplaySettings",
    "DocumentConfig",
    "EditHistory",
    "Feature",
    "InvalidRangeError",
    "MemoryStore",
    "Range",
    "SequenceDocument",
    "TransformOptions",
]
