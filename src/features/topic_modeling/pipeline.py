"""
Topic Discovery Pipeline

One batch run over a tokenized corpus:

    tokens -> DTM -> (optional) topic-count sweep -> final fit at k
           -> beta/gamma tables, clusters, 2D projection, top terms

The sweep never chooses k; the caller passes ``num_topics`` for the final
fit after inspecting the metric curves (or re-runs with ``run_sweep=False``).

Usage:
    from src.features.topic_modeling.pipeline import run_topic_pipeline

    output = run_topic_pipeline(tokenized_docs, num_topics=6)
    output.metric_table      # (k, metric, score)
    output.top_terms[0]      # ['apple', 'banana', ...]
"""

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd
from pydantic import BaseModel, ConfigDict

from src.config import settings
from src.config.features.topic_modeling import TopicModelingConfig

from .analyzer import TopicModelingAnalyzer
from .dtm import build_dtm
from .sampler import CancelFlag, fit_lda
from .schemas import (
    DocumentTermMatrix,
    FrequencyBounds,
    GibbsHyperparameters,
    LDAFitResult,
    TopicCountSweep,
)
from .selector import TopicCountSelector

logger = logging.getLogger(__name__)


class TopicPipelineOutput(BaseModel):
    """
    Everything reporting and visualization collaborators consume.

    Attributes:
        dtm: Document-term matrix the models were fitted on
        sweep: Topic-count metric records (None when the sweep was skipped)
        fit: Final LDA fit
        metric_table: (k, metric, score) rows; empty without a sweep
        beta_table: (topic, term, probability) rows
        gamma_table: (document, topic, probability) rows
        clusters: Cluster id per document, indexed by document id
        projection: (pc1, pc2) per document, indexed by document id
        top_terms: Topic id -> ranked term list
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    dtm: DocumentTermMatrix
    sweep: Optional[TopicCountSweep]
    fit: LDAFitResult
    metric_table: pd.DataFrame
    beta_table: pd.DataFrame
    gamma_table: pd.DataFrame
    clusters: pd.Series
    projection: pd.DataFrame
    top_terms: Dict[int, List[str]]


def hyperparameters_from_config(config: TopicModelingConfig) -> GibbsHyperparameters:
    sampler = config.sampler
    return GibbsHyperparameters(
        iterations=sampler.iterations,
        burn_in=sampler.burn_in,
        thin=sampler.thin,
        alpha=sampler.alpha,
        eta=sampler.eta,
        seed=sampler.seed,
    )


def run_topic_pipeline(
    documents: Sequence[Sequence[str]],
    num_topics: int,
    config: Optional[TopicModelingConfig] = None,
    run_sweep: bool = True,
    cluster_seed: Optional[int] = None,
    cancel_event: Optional[CancelFlag] = None,
) -> TopicPipelineOutput:
    """
    Run the full topic discovery pipeline.

    Any precondition failure aborts the run; partial output is never returned.

    Args:
        documents: One token sequence per document
        num_topics: Topic count for the final fit
        config: Settings (defaults to ``settings.topic_modeling``)
        run_sweep: Whether to sweep [k_min, k_max] before the final fit
        cluster_seed: k-means seed (defaults to the global reproducibility seed)
        cancel_event: Cooperative cancellation flag for the sweep and the fit

    Returns:
        TopicPipelineOutput
    """
    config = config or settings.topic_modeling
    cluster_seed = settings.reproducibility.random_seed if cluster_seed is None else cluster_seed
    hyperparameters = hyperparameters_from_config(config)

    logger.info("Step 1: Building document-term matrix...")
    dtm = build_dtm(
        documents,
        FrequencyBounds(
            min_doc_freq=config.vocabulary.min_doc_freq,
            max_doc_freq=config.vocabulary.max_doc_freq,
        ),
    )

    sweep = None
    if run_sweep:
        logger.info("Step 2: Sweeping candidate topic counts...")
        selection = config.selection
        selector = TopicCountSelector(
            hyperparameters=hyperparameters,
            metrics=selection.metrics,
            max_workers=selection.max_workers,
        )
        sweep = selector.sweep(
            dtm, range(selection.k_min, selection.k_max + 1), cancel_event=cancel_event
        )

    logger.info(f"Step 3: Fitting final model with k={num_topics}...")
    fit = fit_lda(dtm, num_topics, hyperparameters, cancel_event=cancel_event)

    logger.info("Step 4: Computing posterior analytics...")
    analyzer = TopicModelingAnalyzer(fit)
    metric_table = (
        sweep.to_frame() if sweep is not None
        else pd.DataFrame(columns=['k', 'metric', 'score'])
    )

    return TopicPipelineOutput(
        dtm=dtm,
        sweep=sweep,
        fit=fit,
        metric_table=metric_table,
        beta_table=analyzer.beta_table(),
        gamma_table=analyzer.gamma_table(),
        clusters=analyzer.cluster_documents(config.analytics.n_clusters, seed=cluster_seed),
        projection=analyzer.project_documents(),
        top_terms=analyzer.top_terms(config.analytics.top_n_terms),
    )
