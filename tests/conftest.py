"""Pytest configuration and shared fixtures for seqforge tests.

Fixtures are organized by category:

- Sequence fixtures: Literal and synthetic nucleotide sequences
- Document fixtures: Documents with features and a recording store
"""

from typing import Generator

import numpy as np
import pytest

from seqforge import Feature, MemoryStore, Range, SequenceDocument
from seqforge.config import DocumentConfig


# =============================================================================
# Sequence Fixtures
# =============================================================================


@pytest.fixture
def orf_sequence() -> str:
    """A minimal open reading frame: Met-Lys-Stop."""
    return "ATGAAATAG"


@pytest.fixture
def synthetic_sequence() -> str:
    """Create a reproducible 300 bp random sequence."""
    rng = np.random.default_rng(42)
    return "".join(rng.choice(list("ACGT"), 300))


# =============================================================================
# Document Fixtures
# =============================================================================


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def orf_document(orf_sequence: str) -> SequenceDocument:
    """The ORF sequence with one feature over bases 5-8."""
    return SequenceDocument(
        orf_sequence,
        [Feature("tail", [Range(5, 8)], type="misc_feature")],
        name="orf",
    )


@pytest.fixture
def annotated_document(
    synthetic_sequence: str, store: MemoryStore
) -> Generator[SequenceDocument, None, None]:
    """A 300 bp document with overlapping, spliced and disjoint features.

    Layout:
    - gene:    10-120
    - cds:     20-50, 80-110 (spliced)
    - primer:  15-35
    - site:    200-210
    """
    features = [
        Feature("gene", [Range(10, 120)], type="gene"),
        Feature("cds", [Range(20, 50), Range(80, 110)], type="CDS"),
        Feature("primer", [Range(15, 35)], type="primer_bind"),
        Feature("site", [Range(200, 210)], type="misc_feature"),
    ]
    doc = SequenceDocument(
        synthetic_sequence,
        features,
        name="synthetic",
        persistence=store,
        config=DocumentConfig(save_debounce_seconds=60.0),
    )
    yield doc
    doc.close()
