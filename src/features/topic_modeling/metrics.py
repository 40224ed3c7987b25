"""
Topic-Count Quality Metrics

Scores a fitted model so that curves over candidate topic counts can be
compared. Each metric is an independent function of the fit's posterior
matrices; none of them ranks or selects k.

    Arun2010       symmetric KL between the singular-value distribution of
                   beta and the length-weighted topic mass of gamma (minimize)
    CaoJuan2009    mean pairwise cosine similarity of beta rows (minimize)
    Deveaud2014    mean pairwise Jensen-Shannon divergence of beta rows,
                   base 2 so each pair lies in [0, 1] (maximize)
    Griffiths2004  harmonic-mean estimate of log p(w | k) over the
                   post-burn-in log-likelihood trace (maximize)
"""

import logging
from itertools import combinations
from typing import Callable, Dict, Sequence

import numpy as np
from scipy.spatial.distance import jensenshannon
from scipy.special import logsumexp

from .constants import (
    ARUN_2010,
    CAO_JUAN_2009,
    DEVEAUD_2014,
    GRIFFITHS_2004,
    PROBABILITY_FLOOR,
)
from .schemas import DocumentTermMatrix, LDAFitResult

logger = logging.getLogger(__name__)


def _normalize(v: np.ndarray) -> np.ndarray:
    v = np.clip(v, PROBABILITY_FLOOR, None)
    return v / v.sum()


def arun_2010(beta: np.ndarray, gamma: np.ndarray, doc_lengths: np.ndarray) -> float:
    """
    Arun et al. (2010) divergence.

    Args:
        beta: Topic-term matrix (k, V)
        gamma: Document-topic matrix (N, k)
        doc_lengths: Token count of each document (N,)

    Returns:
        Symmetric KL divergence; lower is better
    """
    k = beta.shape[0]
    singular_values = np.linalg.svd(beta, compute_uv=False)
    if singular_values.size < k:
        singular_values = np.pad(singular_values, (0, k - singular_values.size))
    cm1 = _normalize(np.sort(singular_values)[::-1])

    topic_mass = np.asarray(doc_lengths, dtype=float) @ gamma
    cm2 = _normalize(np.sort(topic_mass)[::-1])

    return float(np.sum(cm1 * np.log(cm1 / cm2)) + np.sum(cm2 * np.log(cm2 / cm1)))


def cao_juan_2009(beta: np.ndarray) -> float:
    """
    Cao Juan et al. (2009) average pairwise cosine similarity between topics.

    Lower values mean less topic overlap.
    """
    norms = np.linalg.norm(beta, axis=1)
    norms[norms == 0] = 1.0
    unit = beta / norms[:, None]
    similarity = unit @ unit.T
    upper = np.triu_indices(beta.shape[0], k=1)
    return float(similarity[upper].mean())


def deveaud_2014(beta: np.ndarray) -> float:
    """
    Deveaud et al. (2014) average pairwise Jensen-Shannon divergence.

    Higher values mean better separated topics.
    """
    rows = [_normalize(row) for row in beta]
    # scipy returns the JS distance, i.e. the square root of the divergence
    divergences = [
        jensenshannon(rows[i], rows[j], base=2) ** 2
        for i, j in combinations(range(len(rows)), 2)
    ]
    return float(np.mean(divergences))


def griffiths_2004(log_likelihoods: Sequence[float], burn_in: int) -> float:
    """
    Griffiths & Steyvers (2004) harmonic-mean marginal likelihood.

    Args:
        log_likelihoods: log p(w | z) after every sweep
        burn_in: Leading sweeps to ignore

    Returns:
        Estimated log p(w | k); higher is better
    """
    trace = np.asarray(log_likelihoods[burn_in:], dtype=float)
    if trace.size == 0:
        trace = np.asarray(log_likelihoods[-1:], dtype=float)
    return float(np.log(trace.size) - logsumexp(-trace))


MetricFunction = Callable[[LDAFitResult, DocumentTermMatrix], float]

METRIC_FUNCTIONS: Dict[str, MetricFunction] = {
    ARUN_2010: lambda fit, dtm: arun_2010(fit.beta, fit.gamma, dtm.doc_lengths()),
    CAO_JUAN_2009: lambda fit, dtm: cao_juan_2009(fit.beta),
    DEVEAUD_2014: lambda fit, dtm: deveaud_2014(fit.beta),
    GRIFFITHS_2004: lambda fit, dtm: griffiths_2004(
        fit.log_likelihoods, fit.hyperparameters.burn_in
    ),
}


def validate_metrics(metrics: Sequence[str]) -> None:
    """Raise ValueError if any requested metric is unknown."""
    unknown = [m for m in metrics if m not in METRIC_FUNCTIONS]
    if unknown:
        raise ValueError(
            f"Unknown metric(s) {unknown}; supported: {sorted(METRIC_FUNCTIONS)}"
        )
    if not metrics:
        raise ValueError("At least one metric must be requested")


def compute_metrics(
    fit: LDAFitResult,
    dtm: DocumentTermMatrix,
    metrics: Sequence[str],
) -> Dict[str, float]:
    """
    Score one fit with each requested metric.

    Args:
        fit: Result of ``fit_lda`` on ``dtm``
        dtm: The document-term matrix the fit was computed on
        metrics: Metric names, see ``SUPPORTED_METRICS``

    Returns:
        Dict of metric name -> score, in request order
    """
    validate_metrics(metrics)
    scores = {name: METRIC_FUNCTIONS[name](fit, dtm) for name in metrics}
    logger.info(
        f"k={fit.num_topics}: "
        + ", ".join(f"{name}={score:.4f}" for name, score in scores.items())
    )
    return scores
