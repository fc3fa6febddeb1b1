"""Utility functions for seqforge.

- Codon translation and complement tables
- Logging configuration

Example:
    >>> from seqforge.utils import STANDARD_TRANSLATION, setup_logging
    >>> setup_logging(verbosity=0)
    >>> STANDARD_TRANSLATION.codon_to_amino_acid_short("TGG")
    'W'
"""

from seqforge.utils.logging import get_logger, setup_logging
from seqforge.utils.sequences import (
    STANDARD_TRANSLATION,
    StandardTranslation,
    TranslationProvider,
    complement,
    reverse_complement,
)

__all__ = [
    "STANDARD_TRANSLATION",
    "StandardTranslation",
    "TranslationProvider",
    "complement",
    "reverse_complement",
    "get_logger",
    "setup_logging",
]
