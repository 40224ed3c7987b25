"""Unit tests for src/features/topic_modeling/dtm.py: build_dtm."""

import numpy as np
import pytest

from src.features.topic_modeling import (
    EmptyVocabularyError,
    FrequencyBounds,
    InvalidHyperparameterError,
    build_dtm,
)
from src.features.topic_modeling.dtm import tokens_in_vocabulary


class TestVocabulary:
    """Tests for vocabulary construction and column order."""

    def test_min_doc_freq_drops_rare_terms(self, two_topic_dtm):
        assert two_topic_dtm.vocabulary == ("apple", "banana", "engine", "motor")

    def test_columns_are_lexicographic(self, mixed_corpus):
        dtm = build_dtm(mixed_corpus)
        assert list(dtm.vocabulary) == sorted(dtm.vocabulary)

    def test_identical_input_gives_identical_matrix(self, mixed_corpus):
        a = build_dtm(mixed_corpus)
        b = build_dtm(mixed_corpus)
        assert a.vocabulary == b.vocabulary
        assert (a.matrix != b.matrix).nnz == 0

    def test_term_index_maps_columns(self, two_topic_dtm):
        assert two_topic_dtm.term_index() == {"apple": 0, "banana": 1, "engine": 2, "motor": 3}


class TestFrequencyBounds:
    """Every retained column must have document frequency within [min, max]."""

    @pytest.mark.parametrize("bounds", [
        FrequencyBounds(),
        FrequencyBounds(min_doc_freq=2),
        FrequencyBounds(min_doc_freq=2, max_doc_freq=3),
        FrequencyBounds(min_doc_freq=0.3, max_doc_freq=0.6),
    ])
    def test_document_frequency_within_bounds(self, mixed_corpus, bounds):
        dtm = build_dtm(mixed_corpus, bounds)
        low, high = bounds.resolve(len(mixed_corpus))
        dfs = np.asarray((dtm.matrix > 0).sum(axis=0)).ravel()
        assert np.all(dfs >= low)
        assert np.all(dfs <= high)
        assert tuple(dfs) == dtm.document_frequencies

    def test_fractional_max_removes_common_terms(self, mixed_corpus):
        # "market" and "risk" appear in 3 of 6 documents, "credit" in 3
        dtm = build_dtm(mixed_corpus, FrequencyBounds(max_doc_freq=0.4))
        assert "market" not in dtm.vocabulary
        assert "risk" not in dtm.vocabulary
        assert "equity" in dtm.vocabulary

    def test_row_sums_match_retained_tokens(self, mixed_corpus):
        dtm = build_dtm(mixed_corpus, FrequencyBounds(min_doc_freq=2))
        kept_docs = [mixed_corpus[i] for i in dtm.doc_ids]
        expected = tokens_in_vocabulary(kept_docs, dtm.vocabulary)
        assert list(dtm.doc_lengths()) == expected

    def test_negative_bound_rejected(self, mixed_corpus):
        with pytest.raises(InvalidHyperparameterError, match="min_doc_freq"):
            build_dtm(mixed_corpus, FrequencyBounds(min_doc_freq=-1))

    def test_fraction_above_one_rejected(self, mixed_corpus):
        with pytest.raises(InvalidHyperparameterError, match="fraction"):
            build_dtm(mixed_corpus, FrequencyBounds(max_doc_freq=1.5))

    def test_inverted_bounds_rejected(self, mixed_corpus):
        with pytest.raises(InvalidHyperparameterError, match="exceeds"):
            build_dtm(mixed_corpus, FrequencyBounds(min_doc_freq=4, max_doc_freq=2))


class TestEmptyDocuments:
    """Documents with no retained terms are dropped and tracked."""

    def test_empty_documents_dropped(self, mixed_corpus):
        dtm = build_dtm(mixed_corpus, FrequencyBounds(min_doc_freq=2))
        # doc 1 is empty, doc 4 only has the rare term "unique"
        assert dtm.doc_ids == (0, 2, 3, 5)
        assert dtm.shape == (4, len(dtm.vocabulary))

    def test_every_row_has_tokens(self, mixed_corpus):
        dtm = build_dtm(mixed_corpus)
        assert np.all(dtm.doc_lengths() > 0)

    def test_empty_vocabulary_raises(self):
        corpus = [["alpha"], ["beta"], ["gamma"]]
        with pytest.raises(EmptyVocabularyError, match="3 documents"):
            build_dtm(corpus, FrequencyBounds(min_doc_freq=2))

    def test_all_empty_documents_raise(self):
        with pytest.raises(EmptyVocabularyError):
            build_dtm([[], []])
