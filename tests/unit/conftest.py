"""
Lightweight fixtures for unit tests - NO real data dependencies.
All fixtures use synthetic corpora that fit in well under a second.
"""

from typing import List

import numpy as np
import pytest
from scipy import sparse

from src.features.topic_modeling import (
    DocumentTermMatrix,
    FrequencyBounds,
    GibbsHyperparameters,
    build_dtm,
)


# =============================================================================
# Corpus Fixtures
# =============================================================================

@pytest.fixture
def two_topic_corpus() -> List[List[str]]:
    """
    Six documents from two disjoint vocabularies (fruit vs. machines).

    ``zebra`` and ``yacht`` appear in one document each and are removed by
    ``min_doc_freq=2``, leaving exactly four terms.
    """
    return [
        ["apple"] * 5 + ["banana"] * 4,
        ["apple"] * 4 + ["banana"] * 5 + ["zebra"],
        ["banana", "apple"] * 3 + ["apple"] * 2,
        ["engine"] * 5 + ["motor"] * 4,
        ["engine"] * 4 + ["motor"] * 5 + ["yacht"],
        ["motor", "engine"] * 4,
    ]


@pytest.fixture
def two_topic_bounds() -> FrequencyBounds:
    return FrequencyBounds(min_doc_freq=2)


@pytest.fixture
def two_topic_dtm(two_topic_corpus, two_topic_bounds) -> DocumentTermMatrix:
    return build_dtm(two_topic_corpus, two_topic_bounds)


@pytest.fixture
def mixed_corpus() -> List[List[str]]:
    """Overlapping vocabulary, one empty document and one with only a rare term."""
    return [
        ["risk", "market", "market", "credit"],
        [],
        ["credit", "liquidity", "risk"],
        ["market", "equity", "equity", "risk"],
        ["unique"],
        ["liquidity", "credit", "market"],
    ]


# =============================================================================
# Sampler Fixtures
# =============================================================================

@pytest.fixture
def quick_hyperparameters() -> GibbsHyperparameters:
    """Short chain for tests that only check structure, not convergence."""
    return GibbsHyperparameters(iterations=30, burn_in=10, alpha=0.1, eta=0.01, seed=7)


@pytest.fixture
def scenario_hyperparameters() -> GibbsHyperparameters:
    """Settings for the six-document, two-topic end-to-end scenario."""
    return GibbsHyperparameters(iterations=500, burn_in=100, alpha=0.1, eta=0.01, seed=42)


def make_dtm(rows: List[List[int]], vocabulary: List[str]) -> DocumentTermMatrix:
    """Build a DocumentTermMatrix directly from dense counts."""
    matrix = sparse.csr_matrix(np.asarray(rows))
    return DocumentTermMatrix(
        matrix=matrix,
        vocabulary=tuple(vocabulary),
        doc_ids=tuple(range(matrix.shape[0])),
        document_frequencies=tuple(int(x) for x in (np.asarray(rows) > 0).sum(axis=0)),
    )


@pytest.fixture
def dtm_factory():
    """Factory turning dense count rows into a DocumentTermMatrix."""
    return make_dtm
