"""Tests for SequenceDocument.

Covers subsequence clamping, edits and their effect on features,
history, caches, listeners and serialization.
"""

import threading
import time

import pytest

from seqforge import (
    DisplaySettings,
    EditHistory,
    Feature,
    InvalidRangeError,
    MemoryStore,
    Range,
    SequenceDocument,
)
from seqforge.config import DocumentConfig
from seqforge.core.models import AminoAcid, Codon


def _bounds(doc: SequenceDocument) -> list[list[tuple[int, int]]]:
    return [[(r.start, r.end) for r in f.ranges] for f in doc.features]


# =============================================================================
# Test Construction
# =============================================================================


class TestConstruction:
    """Tests for document creation."""

    def test_defaults(self):
        doc = SequenceDocument()
        assert doc.length == 0
        assert len(doc) == 0
        assert doc.features == ()
        assert isinstance(doc.history, EditHistory)
        assert doc.display_settings == DisplaySettings()

    def test_generated_id_format(self):
        millis, suffix = SequenceDocument("A").id.split("-")
        assert millis.isdigit()
        assert 0 <= int(suffix) <= 9999

    def test_explicit_id(self):
        assert SequenceDocument("A", id="doc-1").id == "doc-1"

    def test_features_copied(self):
        features = [Feature("f", [Range(0, 2)])]
        doc = SequenceDocument("ATGC", features)
        features[0].ranges[0].end = 3
        features.clear()
        assert len(doc.features) == 1
        assert doc.features[0].ranges == [Range(0, 2)]

    def test_repr(self, orf_document):
        assert "length=9" in repr(orf_document)


# =============================================================================
# Test Subsequence
# =============================================================================


class TestGetSubsequence:
    """Tests for get_subsequence clamping."""

    def test_literal_substrings(self, synthetic_sequence):
        doc = SequenceDocument(synthetic_sequence)
        for start, end in [(0, 0), (0, 299), (10, 20), (299, 299), (150, 151)]:
            sub = doc.get_subsequence(start, end)
            assert sub == synthetic_sequence[start : end + 1]
            assert len(sub) == end - start + 1

    def test_single_base(self, orf_document):
        assert orf_document.get_subsequence(2) == "G"

    def test_single_base_clamped(self, orf_document):
        assert orf_document.get_subsequence(50) == "G"
        assert orf_document.get_subsequence(-5) == "A"

    def test_both_bounds_past_end(self, orf_document):
        assert orf_document.get_subsequence(9, 12) == ""
        assert orf_document.get_subsequence(20, 20) == ""

    def test_end_clamped(self, orf_document):
        assert orf_document.get_subsequence(6, 100) == "TAG"

    def test_start_clamped(self, orf_document):
        assert orf_document.get_subsequence(-3, 2) == "ATG"

    def test_end_before_start(self, orf_document):
        assert orf_document.get_subsequence(5, 2) == ""

    def test_empty_sequence(self):
        doc = SequenceDocument("")
        assert doc.get_subsequence(0) == ""
        assert doc.get_subsequence(0, 5) == ""


# =============================================================================
# Test Edits
# =============================================================================


class TestInsertBases:
    """Tests for insert_bases."""

    def test_scenario(self, orf_document):
        orf_document.insert_bases("CCC", 3)
        assert orf_document.sequence == "ATGCCCAAATAG"
        assert orf_document.length == 12
        assert _bounds(orf_document) == [[(8, 11)]]

    def test_history(self, orf_document):
        orf_document.insert_bases("CCC", 3)
        step = orf_document.history.steps[-1]
        assert step.type == "insert"
        assert step.position == 3
        assert step.value == "CCC"
        assert step.operation == "@3+CCC"
        assert step.timestamp > 0

    def test_without_history(self, orf_document):
        orf_document.insert_bases("CCC", 3, record_history=False)
        assert len(orf_document.history) == 0

    def test_insert_at_ends(self):
        doc = SequenceDocument("ATG")
        doc.insert_bases("CC", 0)
        doc.insert_bases("TT", 5)
        assert doc.sequence == "CCATGTT"

    def test_position_clamped(self):
        doc = SequenceDocument("ATG", [Feature("f", [Range(0, 2)])])
        doc.insert_bases("C", 40)
        assert doc.sequence == "ATGC"
        assert doc.history.steps[-1].position == 3
        assert _bounds(doc) == [[(0, 2)]]

    def test_empty_insertion_is_noop(self, orf_document):
        orf_document.insert_bases("", 3)
        assert orf_document.sequence == "ATGAAATAG"
        assert len(orf_document.history) == 0


class TestDeleteBases:
    """Tests for delete_bases."""

    def test_scenario_reverts_insertion(self, orf_document):
        orf_document.insert_bases("CCC", 3)
        orf_document.delete_bases(3, 3)
        assert orf_document.sequence == "ATGAAATAG"
        assert _bounds(orf_document) == [[(5, 8)]]

    def test_history(self, orf_document):
        orf_document.delete_bases(1, 3)
        step = orf_document.history.steps[-1]
        assert step.type == "delete"
        assert step.value == "TGA"
        assert step.operation == "@1-TGA"

    def test_count_truncated_to_tail(self, orf_document):
        orf_document.delete_bases(6, 50)
        assert orf_document.sequence == "ATGAAA"
        assert orf_document.history.steps[-1].value == "TAG"

    def test_feature_inside_window_removed(self, orf_document):
        orf_document.delete_bases(4, 5)
        assert orf_document.features == ()

    def test_negative_count(self, orf_document):
        with pytest.raises(InvalidRangeError):
            orf_document.delete_bases(2, -1)

    def test_nothing_to_delete(self, orf_document):
        orf_document.delete_bases(9, 3)
        orf_document.delete_bases(2, 0)
        assert orf_document.sequence == "ATGAAATAG"
        assert len(orf_document.history) == 0


class TestRoundTrip:
    """insert then delete restores the document."""

    @pytest.mark.parametrize("position", [0, 7, 15, 60, 121, 250, 300])
    def test_restores_sequence_and_outside_ranges(self, annotated_document, position):
        original_sequence = annotated_document.sequence
        before = _bounds(annotated_document)

        annotated_document.insert_bases("GATTACA", position)
        annotated_document.delete_bases(position, 7)

        assert annotated_document.sequence == original_sequence
        for old, new in zip(before, _bounds(annotated_document)):
            for (s, e), restored in zip(old, new):
                if e < position or s >= position:
                    assert restored == (s, e)


# =============================================================================
# Test Feature Queries
# =============================================================================


class TestFeatureQueries:
    """Tests for overlap queries through the document."""

    def test_features_in_range(self, annotated_document):
        names = [f.name for f in annotated_document.features_in_range(30, 40)]
        assert names == ["gene", "cds", "primer"]

    def test_count_tracks_edits(self, annotated_document):
        assert annotated_document.count_features_in_range(200, 205) == 1
        annotated_document.delete_bases(195, 20)
        assert annotated_document.count_features_in_range(200, 205) == 0

    def test_depth(self, annotated_document):
        assert annotated_document.max_overlap_depth() == 3

    def test_depth_tracks_feature_changes(self, annotated_document):
        assert annotated_document.max_overlap_depth() == 3
        annotated_document.add_feature(Feature("oligo", [Range(25, 30)]))
        assert annotated_document.max_overlap_depth() == 4
        annotated_document.remove_feature(annotated_document.features[-1])
        assert annotated_document.max_overlap_depth() == 3

    def test_remove_feature_by_value(self, annotated_document):
        annotated_document.remove_feature(Feature("primer", [Range(15, 35)], type="primer_bind"))
        assert [f.name for f in annotated_document.features] == ["gene", "cds", "site"]

    def test_remove_unknown_feature(self, annotated_document):
        with pytest.raises(ValueError):
            annotated_document.remove_feature(Feature("gene", [Range(11, 120)], type="gene"))

    def test_returned_features_are_copies(self, annotated_document):
        """Moving a returned range changes neither the document nor its counts."""
        assert annotated_document.count_features_in_range(130, 140) == 0
        annotated_document.features[0].ranges[0].end = 135
        assert annotated_document.features[0].ranges[0].end == 120
        assert annotated_document.features_in_range(130, 140) == []
        assert annotated_document.count_features_in_range(130, 140) == 0

        found = annotated_document.features_in_range(200, 205)
        found[0].ranges[0].start = 0
        assert annotated_document.count_features_in_range(0, 5) == 0
        assert annotated_document.to_dict()["features"][3]["ranges"] == [
            {"start": 200, "end": 210}
        ]

    def test_added_feature_is_copied(self, orf_document):
        feature = Feature("head", [Range(0, 2)])
        orf_document.add_feature(feature)
        feature.ranges[0].end = 8
        feature.metadata["note"] = "edited"
        assert orf_document.count_features_in_range(3, 4) == 0
        assert orf_document.features[1].metadata == {}

    def test_cache_cleared_by_edit(self, annotated_document):
        annotated_document.count_features_in_range(0, 10)
        assert len(annotated_document.overlaps.cache) == 1
        annotated_document.insert_bases("A", 299)
        assert len(annotated_document.overlaps.cache) == 0


# =============================================================================
# Test Frames Through the Document
# =============================================================================


class TestFrames:
    """Tests for translated views through the document."""

    def test_complements(self):
        assert SequenceDocument("ATG").get_transformed_subsequence("complements", {}, 0, 2) == "TAC"

    def test_codon_uses_display_offset(self, orf_document):
        orf_document.display_settings.aa_offset = 1
        assert orf_document.get_codon(4) == Codon("AAT", 0)
        assert orf_document.get_codon(4, 0) == Codon("AAA", 1)

    def test_amino_acid(self, orf_document):
        assert orf_document.get_amino_acid("long", 3) == AminoAcid("Lys", 0)

    def test_translation_follows_edits(self, orf_document):
        orf_document.insert_bases("TGG", 3)
        assert orf_document.get_transformed_subsequence("aa-short", None, 0, 5) == "M  W  "


# =============================================================================
# Test Listeners
# =============================================================================


class TestListeners:
    """Tests for opt-in edit listeners."""

    def test_called_after_edit(self, orf_document):
        seen = []
        orf_document.add_listener(lambda doc, step: seen.append((doc.sequence, step.operation)))
        orf_document.insert_bases("C", 0)
        orf_document.delete_bases(0, 1)
        assert seen == [("CATGAAATAG", "@0+C"), ("ATGAAATAG", "@0-C")]

    def test_called_without_history(self, orf_document):
        seen = []
        orf_document.add_listener(lambda doc, step: seen.append(step))
        orf_document.insert_bases("C", 0, record_history=False)
        assert len(seen) == 1

    def test_removed_listener(self, orf_document):
        seen = []

        def listener(doc, step):
            seen.append(step)

        orf_document.add_listener(listener)
        orf_document.remove_listener(listener)
        orf_document.insert_bases("C", 0)
        assert seen == []

    def test_failing_listener_does_not_block_edit(self, annotated_document, store):
        """A raising listener is logged; later listeners and the save still run."""
        seen = []

        def broken(doc, step):
            raise RuntimeError("listener failed")

        annotated_document.add_listener(broken)
        annotated_document.add_listener(lambda doc, step: seen.append(step.operation))
        annotated_document.insert_bases("A", 0)

        assert seen == ["@0+A"]
        assert len(annotated_document.history) == 1
        assert annotated_document.save_pending
        annotated_document.flush()
        assert store.save_count == 1


# =============================================================================
# Test Persistence and Serialization
# =============================================================================


class TestPersistence:
    """Tests for coalesced saves."""

    def test_edits_coalesced_into_one_save(self, annotated_document, store):
        for i in range(20):
            annotated_document.insert_bases("A", i)
        assert annotated_document.save_pending
        assert store.save_count == 0
        annotated_document.flush()
        assert store.save_count == 1
        assert store.saved[annotated_document.id]["sequence"] == annotated_document.sequence

    def test_timer_save(self):
        store = MemoryStore()
        doc = SequenceDocument(
            "ATG", persistence=store, config=DocumentConfig(save_debounce_seconds=0.05)
        )
        for _ in range(5):
            doc.insert_bases("C", 0)
        # Wait for the timer thread
        for _ in range(100):
            if store.save_count:
                break
            time.sleep(0.02)
        assert store.save_count == 1
        assert store.saved[doc.id]["sequence"] == "CCCCCATG"

    def test_no_persistence(self, orf_document):
        """Without a save target, edits never arm the save timer."""
        orf_document.insert_bases("C", 0)
        assert not orf_document.save_pending
        orf_document.delete_bases(0, 1)
        assert not orf_document.save_pending


class TestSerialization:
    """Tests for to_dict, serialize and from_dict."""

    def test_round_trip(self, annotated_document):
        annotated_document.insert_bases("CC", 5)
        data = annotated_document.to_dict()
        restored = SequenceDocument.from_dict(data)
        assert restored.id == annotated_document.id
        assert restored.sequence == annotated_document.sequence
        assert _bounds(restored) == _bounds(annotated_document)
        assert restored.history.steps == annotated_document.history.steps

    def test_serialize_current_flag(self, orf_document):
        assert orf_document.serialize(orf_document.id)["is_current"] is True
        assert orf_document.serialize("other")["is_current"] is False
        assert orf_document.serialize()["is_current"] is False


# =============================================================================
# Test Concurrency
# =============================================================================


class TestConcurrency:
    """Edits from several threads are applied atomically."""

    def test_parallel_inserts(self, orf_document):
        def worker():
            for _ in range(50):
                orf_document.insert_bases("A", 0)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert orf_document.length == 209
        assert _bounds(orf_document) == [[(205, 208)]]
        assert len(orf_document.history) == 200
        assert orf_document.get_subsequence(205, 208) == "ATAG"
