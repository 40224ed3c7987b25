"""Unit tests for src/features/topic_modeling/metrics.py: topic-count metrics."""

import math

import numpy as np
import pytest

from src.features.topic_modeling import (
    ARUN_2010,
    CAO_JUAN_2009,
    DEVEAUD_2014,
    GRIFFITHS_2004,
    arun_2010,
    cao_juan_2009,
    compute_metrics,
    deveaud_2014,
    fit_lda,
    griffiths_2004,
)


@pytest.fixture
def orthogonal_beta() -> np.ndarray:
    """Three topics with disjoint support."""
    return np.array([
        [0.5, 0.5, 0.0, 0.0, 0.0, 0.0],
        [0.0, 0.0, 0.5, 0.5, 0.0, 0.0],
        [0.0, 0.0, 0.0, 0.0, 0.5, 0.5],
    ])


@pytest.fixture
def redundant_beta() -> np.ndarray:
    """Three near-identical topics."""
    base = np.array([0.2, 0.2, 0.2, 0.2, 0.1, 0.1])
    return np.vstack([base, base + [0.01, -0.01, 0, 0, 0, 0], base + [0, 0, 0.01, -0.01, 0, 0]])


class TestCaoJuan2009:

    def test_orthogonal_topics_score_lower_than_redundant(self, orthogonal_beta, redundant_beta):
        assert cao_juan_2009(orthogonal_beta) < cao_juan_2009(redundant_beta)

    def test_orthogonal_topics_score_zero(self, orthogonal_beta):
        assert cao_juan_2009(orthogonal_beta) == pytest.approx(0.0)

    def test_identical_topics_score_one(self):
        beta = np.array([[0.25, 0.75], [0.25, 0.75]])
        assert cao_juan_2009(beta) == pytest.approx(1.0)


class TestDeveaud2014:

    def test_disjoint_topics_have_maximal_divergence(self, orthogonal_beta):
        assert deveaud_2014(orthogonal_beta) == pytest.approx(1.0, abs=1e-6)

    def test_identical_topics_have_zero_divergence(self):
        beta = np.array([[0.25, 0.75], [0.25, 0.75]])
        assert deveaud_2014(beta) == pytest.approx(0.0, abs=1e-9)

    def test_separated_topics_score_higher(self, orthogonal_beta, redundant_beta):
        assert deveaud_2014(orthogonal_beta) > deveaud_2014(redundant_beta)


class TestArun2010:

    def test_balanced_structure_has_zero_divergence(self):
        beta = np.eye(2)
        gamma = np.array([[0.9, 0.1], [0.1, 0.9]])
        assert arun_2010(beta, gamma, np.array([10, 10])) == pytest.approx(0.0, abs=1e-9)

    def test_unbalanced_mass_increases_divergence(self):
        beta = np.eye(2)
        balanced = arun_2010(beta, np.array([[0.9, 0.1], [0.1, 0.9]]), np.array([10, 10]))
        skewed = arun_2010(beta, np.array([[0.9, 0.1], [0.8, 0.2]]), np.array([10, 10]))
        assert skewed > balanced

    def test_more_topics_than_terms(self):
        beta = np.array([[0.5, 0.5], [0.9, 0.1], [0.1, 0.9]])
        gamma = np.full((4, 3), 1 / 3)
        score = arun_2010(beta, gamma, np.array([3, 4, 5, 6]))
        assert math.isfinite(score)
        assert score >= 0


class TestGriffiths2004:

    def test_constant_trace_returns_constant(self):
        assert griffiths_2004([-100.0] * 10, burn_in=0) == pytest.approx(-100.0)

    def test_burn_in_is_ignored(self):
        trace = [-5000.0] * 5 + [-100.0] * 5
        assert griffiths_2004(trace, burn_in=5) == pytest.approx(-100.0)

    def test_large_magnitudes_do_not_overflow(self):
        score = griffiths_2004([-1e6, -1e6 + 3, -1e6 - 2], burn_in=0)
        assert math.isfinite(score)


class TestComputeMetrics:

    def test_all_metrics_tolerate_k_of_two(self, two_topic_dtm, quick_hyperparameters):
        fit = fit_lda(two_topic_dtm, 2, quick_hyperparameters)
        scores = compute_metrics(
            fit, two_topic_dtm, [ARUN_2010, CAO_JUAN_2009, DEVEAUD_2014, GRIFFITHS_2004]
        )
        assert list(scores) == [ARUN_2010, CAO_JUAN_2009, DEVEAUD_2014, GRIFFITHS_2004]
        assert all(math.isfinite(v) for v in scores.values())

    def test_unknown_metric_rejected(self, two_topic_dtm, quick_hyperparameters):
        fit = fit_lda(two_topic_dtm, 2, quick_hyperparameters)
        with pytest.raises(ValueError, match="Unknown metric"):
            compute_metrics(fit, two_topic_dtm, ["Perplexity"])

    def test_empty_metric_list_rejected(self, two_topic_dtm, quick_hyperparameters):
        fit = fit_lda(two_topic_dtm, 2, quick_hyperparameters)
        with pytest.raises(ValueError, match="At least one"):
            compute_metrics(fit, two_topic_dtm, [])
