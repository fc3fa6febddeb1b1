"""Reading-frame aligned views of a sequence.

Codon boundaries are defined by a frame offset: the base at which the
first codon starts. Windows requested by a viewer rarely line up with
those boundaries, so they are first padded outward to whole codons,
translated, and then trimmed back to the requested bases.

In translated views every codon occupies as many columns as it has
bases ('Met', 'M  '), so the result lines up with the nucleotide row.

Example:
    >>> frames = FrameTranslator(SequenceDocument("ATGAAATAG"))
    >>> frames.get_transformed_subsequence("aa-long", None, 0, 8)
    'MetLysTer'
    >>> frames.get_codon(4)
    Codon(sequence='AAA', position=1)
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Protocol

from seqforge.core.models import AminoAcid, Codon, PaddedSubsequence, TransformOptions
from seqforge.utils.sequences import STANDARD_TRANSLATION, TranslationProvider

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

CODON_SIZE = 3

VARIATION_AA_LONG = "aa-long"
VARIATION_AA_SHORT = "aa-short"
VARIATION_COMPLEMENTS = "complements"

VARIATIONS = (VARIATION_AA_LONG, VARIATION_AA_SHORT, VARIATION_COMPLEMENTS)


class SequenceSource(Protocol):
    """Anything that exposes a length and clamped subsequence lookup."""

    @property
    def length(self) -> int: ...

    def get_subsequence(self, start: int, end: int | None = None) -> str: ...


def _remainder(value: int, block: int) -> int:
    """Remainder with the sign of the dividend.

    A window starting before the frame offset must be pushed forward to
    the first codon boundary, not back past the start of the sequence.
    """
    return int(math.fmod(value, block))


# =============================================================================
# Translator
# =============================================================================


class FrameTranslator:
    """Codon-aligned and complemented views over a sequence source.

    Attributes:
        source: Sequence the views are computed from.
        translation: Translation provider for codons and complements.
    """

    def __init__(
        self,
        source: SequenceSource,
        translation: TranslationProvider | None = None,
    ) -> None:
        self.source = source
        self.translation = translation if translation is not None else STANDARD_TRANSLATION

    def get_padded_subsequence(
        self,
        start: int,
        end: int,
        block_size: int,
        frame_offset: int = 0,
    ) -> PaddedSubsequence:
        """Expand [start, end] outward to whole blocks.

        Args:
            start: First requested base.
            end: Last requested base.
            block_size: Block length (3 for codons).
            frame_offset: Base at which the first block starts.

        Returns:
            Expanded bounds and the bases they cover. The start is
            clamped at 0 and the end at the sequence length.
        """
        padded_start = max(start - _remainder(start - frame_offset, block_size), 0)
        padded_end = min(
            end - _remainder(end - frame_offset, block_size) + block_size - 1,
            self.source.length,
        )
        return PaddedSubsequence(
            sequence=self.source.get_subsequence(padded_start, padded_end),
            start=padded_start,
            end=padded_end,
        )

    def get_codon(self, base: int, frame_offset: int = 0) -> Codon:
        """Get the codon containing base and the base's position in it.

        Near the start of the sequence the aligned window can begin after
        base; the base then has no codon and a single-character codon with
        position 1 is returned.
        """
        padded = self.get_padded_subsequence(base, base, CODON_SIZE, frame_offset)
        if padded.start > base:
            return Codon(sequence=self.source.get_subsequence(base), position=1)
        return Codon(
            sequence=padded.sequence,
            position=_remainder(base - frame_offset, CODON_SIZE),
        )

    def get_amino_acid(self, mode: str, base: int, frame_offset: int = 0) -> AminoAcid:
        """Translate the codon containing base.

        Args:
            mode: 'short' for one-letter codes, anything else for three-letter.
            base: Base whose codon is translated.
            frame_offset: Base at which the first codon starts.

        Returns:
            The amino-acid code, or one blank per codon base when the codon
            is partial or unknown, and the codon position.
        """
        codon = self.get_codon(base, frame_offset)
        if mode == "short":
            aa = self.translation.codon_to_amino_acid_short(codon.sequence)
        else:
            aa = self.translation.codon_to_amino_acid_long(codon.sequence)
        return AminoAcid(sequence=aa or " " * CODON_SIZE, position=codon.position)

    def get_transformed_subsequence(
        self,
        variation: str,
        options: TransformOptions | Mapping[str, Any] | None,
        start: int,
        end: int,
    ) -> str:
        """Build a complemented or translated view of [start, end].

        Args:
            variation: 'complements', 'aa-long' or 'aa-short'.
            options: Frame offset and codon complementing (translated views).
            start: First base of the view.
            end: Last base of the view.

        Returns:
            One character per requested base. Unknown variations give ''.
        """
        opts = TransformOptions.from_value(options)

        if variation == VARIATION_COMPLEMENTS:
            return self.translation.complement(self.source.get_subsequence(start, end))

        if variation not in (VARIATION_AA_LONG, VARIATION_AA_SHORT):
            logger.warning(f"Unknown sequence variation '{variation}'")
            return ""

        padded = self.get_padded_subsequence(start, end, CODON_SIZE, opts.offset)
        translated = "".join(
            self._translate_cell(padded.sequence[i : i + CODON_SIZE], variation, opts.complements)
            for i in range(0, len(padded.sequence), CODON_SIZE)
        )

        requested = max(0, end - start + 1)
        left_pad = min(max(0, padded.start - start), requested)
        skip = max(0, start - padded.start)
        keep = requested - left_pad
        return " " * left_pad + translated[skip : skip + keep]

    def _translate_cell(self, codon: str, variation: str, complements: bool) -> str:
        if complements:
            codon = self.translation.complement(codon)
        if variation == VARIATION_AA_LONG:
            aa = self.translation.codon_to_amino_acid_long(codon)
        else:
            aa = self.translation.codon_to_amino_acid_short(codon)
        width = len(codon)
        return (aa or "")[:width].ljust(width)
