"""Codon translation and complement tables.

This module provides the translation provider used by the frame
translator:

- Complement (IUPAC, case-preserving)
- Codon to one-letter amino acid
- Codon to three-letter amino acid

Any object implementing TranslationProvider can be handed to a
document instead of the standard genetic code.

Example:
    >>> from seqforge.utils.sequences import STANDARD_TRANSLATION
    >>> STANDARD_TRANSLATION.codon_to_amino_acid_long("ATG")
    'Met'
    >>> STANDARD_TRANSLATION.complement("ATgc")
    'TAcg'
"""

from __future__ import annotations

from typing import Protocol

# =============================================================================
# Constants
# =============================================================================

# IUPAC complement mapping (upper case; lower case derived below)
_COMPLEMENT_UPPER = {
    "A": "T",
    "T": "A",
    "U": "A",
    "G": "C",
    "C": "G",
    "R": "Y",
    "Y": "R",
    "S": "S",
    "W": "W",
    "K": "M",
    "M": "K",
    "B": "V",
    "V": "B",
    "D": "H",
    "H": "D",
    "N": "N",
}

COMPLEMENT = {
    **_COMPLEMENT_UPPER,
    **{base.lower(): pair.lower() for base, pair in _COMPLEMENT_UPPER.items()},
}

_COMPLEMENT_TABLE = str.maketrans(COMPLEMENT)

# Standard genetic code (NCBI Table 1), grouped by amino acid
_CODONS_BY_AMINO_ACID = {
    "F": ("TTT", "TTC"),
    "L": ("TTA", "TTG", "CTT", "CTC", "CTA", "CTG"),
    "I": ("ATT", "ATC", "ATA"),
    "M": ("ATG",),
    "V": ("GTT", "GTC", "GTA", "GTG"),
    "S": ("TCT", "TCC", "TCA", "TCG", "AGT", "AGC"),
    "P": ("CCT", "CCC", "CCA", "CCG"),
    "T": ("ACT", "ACC", "ACA", "ACG"),
    "A": ("GCT", "GCC", "GCA", "GCG"),
    "Y": ("TAT", "TAC"),
    "*": ("TAA", "TAG", "TGA"),
    "H": ("CAT", "CAC"),
    "Q": ("CAA", "CAG"),
    "N": ("AAT", "AAC"),
    "K": ("AAA", "AAG"),
    "D": ("GAT", "GAC"),
    "E": ("GAA", "GAG"),
    "C": ("TGT", "TGC"),
    "W": ("TGG",),
    "R": ("CGT", "CGC", "CGA", "CGG", "AGA", "AGG"),
    "G": ("GGT", "GGC", "GGA", "GGG"),
}

CODON_TABLE_STANDARD = {
    codon: aa for aa, codons in _CODONS_BY_AMINO_ACID.items() for codon in codons
}

THREE_LETTER_CODES = {
    "A": "Ala",
    "R": "Arg",
    "N": "Asn",
    "D": "Asp",
    "C": "Cys",
    "Q": "Gln",
    "E": "Glu",
    "G": "Gly",
    "H": "His",
    "I": "Ile",
    "L": "Leu",
    "K": "Lys",
    "M": "Met",
    "F": "Phe",
    "P": "Pro",
    "S": "Ser",
    "T": "Thr",
    "W": "Trp",
    "Y": "Tyr",
    "V": "Val",
    "*": "Ter",
}


# =============================================================================
# Provider Interface
# =============================================================================


class TranslationProvider(Protocol):
    """Pure functions mapping codons to amino acids and bases to pairs.

    A codon that cannot be translated returns None or an empty string;
    callers render it as a blank placeholder.
    """

    def codon_to_amino_acid_long(self, codon: str) -> str | None: ...

    def codon_to_amino_acid_short(self, codon: str) -> str | None: ...

    def complement(self, sequence: str) -> str: ...


class StandardTranslation:
    """Translation provider for the standard genetic code.

    Attributes:
        codon_table: Mapping of upper-case codon to one-letter code.
    """

    def __init__(self, codon_table: dict[str, str] | None = None) -> None:
        self.codon_table = dict(codon_table or CODON_TABLE_STANDARD)

    def codon_to_amino_acid_short(self, codon: str) -> str | None:
        """Translate a codon to its one-letter code.

        Args:
            codon: Three bases, any case; U is read as T.

        Returns:
            One-letter code ('*' for stops), or None for partial or
            ambiguous codons.
        """
        if len(codon) != 3:
            return None
        return self.codon_table.get(codon.upper().replace("U", "T"))

    def codon_to_amino_acid_long(self, codon: str) -> str | None:
        """Translate a codon to its three-letter code ('Ter' for stops)."""
        short = self.codon_to_amino_acid_short(codon)
        if short is None:
            return None
        return THREE_LETTER_CODES.get(short)

    def complement(self, sequence: str) -> str:
        """Get the complement of a nucleotide sequence.

        Case is preserved; characters outside the IUPAC alphabet
        (gaps, spaces) are returned unchanged.

        Args:
            sequence: Nucleotide sequence.

        Returns:
            Complement sequence of the same length.
        """
        return sequence.translate(_COMPLEMENT_TABLE)


STANDARD_TRANSLATION = StandardTranslation()


# =============================================================================
# Module-level Helpers
# =============================================================================


def complement(sequence: str) -> str:
    """Complement a sequence with the standard provider."""
    return STANDARD_TRANSLATION.complement(sequence)


def reverse_complement(sequence: str) -> str:
    """Get the reverse complement of a nucleotide sequence."""
    return complement(sequence)[::-1]
