"""
Topic Modeling Schemas

Pydantic models for the document-term matrix, Gibbs sampler settings,
fit results, topic-count metric records and per-document features.
"""

import math
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator
from scipy import sparse

from .constants import (
    DEFAULT_ALPHA,
    DEFAULT_BURN_IN,
    DEFAULT_ETA,
    DEFAULT_ITERATIONS,
    DEFAULT_RANDOM_STATE,
    DEFAULT_THIN,
    MAX_DOCUMENT_FREQUENCY,
    MIN_DOCUMENT_FREQUENCY,
)


class FrequencyBounds(BaseModel):
    """
    Document-frequency window a term must fall into to enter the vocabulary.

    An ``int`` bound is a raw document count, a ``float`` bound in (0, 1]
    is a fraction of the corpus size, and ``inf`` disables the upper bound.

    Attributes:
        min_doc_freq: Lower bound (inclusive)
        max_doc_freq: Upper bound (inclusive)
    """
    model_config = ConfigDict(frozen=True)

    min_doc_freq: int | float = Field(default=MIN_DOCUMENT_FREQUENCY)
    max_doc_freq: int | float = Field(default=MAX_DOCUMENT_FREQUENCY)

    def resolve(self, num_documents: int) -> Tuple[float, float]:
        """
        Convert both bounds to absolute document counts.

        Args:
            num_documents: Number of documents in the input corpus

        Returns:
            (low, high) inclusive document-count window
        """
        return (
            _resolve_bound(self.min_doc_freq, num_documents),
            _resolve_bound(self.max_doc_freq, num_documents),
        )


def _resolve_bound(bound: int | float, num_documents: int) -> float:
    if isinstance(bound, float) and not math.isinf(bound):
        return bound * num_documents
    return float(bound)


class GibbsHyperparameters(BaseModel):
    """
    Settings for one collapsed Gibbs sampling run.

    Range checks happen in ``fit_lda`` so that violations surface as
    ``InvalidHyperparameterError`` rather than pydantic validation errors.

    Attributes:
        iterations: Total number of sweeps over every token occurrence
        burn_in: Leading sweeps discarded before averaging
        thin: Keep every ``thin``-th sweep after burn-in
        alpha: Symmetric Dirichlet prior on document-topic proportions
        eta: Symmetric Dirichlet prior on topic-term distributions
        seed: Seed for the sampler's random generator
    """
    model_config = ConfigDict(frozen=True)

    iterations: int = DEFAULT_ITERATIONS
    burn_in: int = DEFAULT_BURN_IN
    thin: int = DEFAULT_THIN
    alpha: float = DEFAULT_ALPHA
    eta: float = DEFAULT_ETA
    seed: int = DEFAULT_RANDOM_STATE


class DocumentTermMatrix(BaseModel):
    """
    Sparse document-term count matrix with its vocabulary.

    Attributes:
        matrix: CSR matrix of shape (documents, terms) holding term counts
        vocabulary: Terms in column order (lexicographic)
        doc_ids: Input index of the document behind each row
        document_frequencies: Number of rows containing each column's term
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    matrix: sparse.csr_matrix
    vocabulary: Tuple[str, ...]
    doc_ids: Tuple[int, ...]
    document_frequencies: Tuple[int, ...]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.matrix.shape

    @property
    def num_documents(self) -> int:
        return self.matrix.shape[0]

    @property
    def num_terms(self) -> int:
        return self.matrix.shape[1]

    @property
    def num_tokens(self) -> int:
        return int(self.matrix.sum())

    def doc_lengths(self) -> np.ndarray:
        """Total retained-token count per row."""
        return np.asarray(self.matrix.sum(axis=1)).ravel()

    def term_index(self) -> Dict[str, int]:
        """Map each term to its column index."""
        return {term: idx for idx, term in enumerate(self.vocabulary)}


class LDAFitResult(BaseModel):
    """
    Posterior estimates from one collapsed Gibbs LDA fit.

    Both matrices are read-only; analytics never mutate them.

    Attributes:
        num_topics: Number of topics k
        beta: Topic-term distribution, shape (k, V), rows sum to 1
        gamma: Document-topic distribution, shape (N, k), rows sum to 1
        vocabulary: Terms in beta column order
        doc_ids: Input index of the document behind each gamma row
        hyperparameters: Sampler settings used for the fit
        log_likelihoods: log p(w | z) recorded after every completed sweep
        num_samples: Number of post-burn-in sweeps averaged into beta/gamma
        complete: False when the fit was cancelled and returned early
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    num_topics: int = Field(..., ge=2)
    beta: np.ndarray
    gamma: np.ndarray
    vocabulary: Tuple[str, ...]
    doc_ids: Tuple[int, ...]
    hyperparameters: GibbsHyperparameters
    log_likelihoods: Tuple[float, ...] = ()
    num_samples: int = Field(default=0, ge=0)
    complete: bool = True

    @field_validator('beta', 'gamma')
    @classmethod
    def freeze_array(cls, v: np.ndarray) -> np.ndarray:
        """Store matrices as read-only float arrays."""
        v = np.array(v, dtype=float)
        v.flags.writeable = False
        return v

    def beta_table(self) -> pd.DataFrame:
        """Long-format (topic, term, probability) rows."""
        k, num_terms = self.beta.shape
        return pd.DataFrame({
            'topic': np.repeat(np.arange(k), num_terms),
            'term': np.tile(np.asarray(self.vocabulary, dtype=object), k),
            'probability': self.beta.ravel(),
        })

    def gamma_table(self) -> pd.DataFrame:
        """Long-format (document, topic, probability) rows keyed by input document id."""
        n_docs, k = self.gamma.shape
        return pd.DataFrame({
            'document': np.repeat(np.asarray(self.doc_ids, dtype=int), k),
            'topic': np.tile(np.arange(k), n_docs),
            'probability': self.gamma.ravel(),
        })


class MetricRecord(BaseModel):
    """One (k, metric, score) measurement from a topic-count sweep."""
    model_config = ConfigDict(frozen=True)

    k: int = Field(..., ge=2)
    metric: str
    score: float


class TopicCountSweep(BaseModel):
    """
    Every metric record produced by one topic-count sweep.

    The sweep ranks nothing; choosing k from the curves is up to the caller.

    Attributes:
        records: Measurements ordered by k, then by requested metric order
        metrics: Metric names that were requested
        k_values: Candidate topic counts in sweep order
    """
    model_config = ConfigDict(frozen=True)

    records: Tuple[MetricRecord, ...]
    metrics: Tuple[str, ...]
    k_values: Tuple[int, ...]

    def to_frame(self) -> pd.DataFrame:
        """Long-format (k, metric, score) table."""
        return pd.DataFrame(
            [(r.k, r.metric, r.score) for r in self.records],
            columns=['k', 'metric', 'score'],
        )

    def curve(self, metric: str) -> Dict[int, float]:
        """k -> score for a single metric."""
        return {r.k: r.score for r in self.records if r.metric == metric}


class TopicModelingFeatures(BaseModel):
    """
    Topic exposure features for a single document, derived from its gamma row.

    Attributes:
        document_id: Input index of the document
        topic_probabilities: Dict mapping topic_id -> probability
        dominant_topic_id: ID of the most prominent topic
        dominant_topic_probability: Probability of the dominant topic
        topic_entropy: Shannon entropy of topic distribution (higher = more diverse)
        num_topics: Total number of topics in the model
        num_significant_topics: Number of topics with probability >= threshold
    """
    document_id: int = Field(..., ge=0)
    topic_probabilities: Dict[int, float] = Field(default_factory=dict)
    dominant_topic_id: Optional[int] = Field(default=None)
    dominant_topic_probability: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    topic_entropy: float = Field(default=0.0, ge=0.0)
    num_topics: int = Field(default=0, ge=0)
    num_significant_topics: int = Field(default=0, ge=0)

    @field_validator('topic_probabilities')
    @classmethod
    def validate_probabilities_sum(cls, v: Dict[int, float]) -> Dict[int, float]:
        """Validate that probabilities sum to approximately 1.0."""
        if v:
            total = sum(v.values())
            if not (0.99 <= total <= 1.01):
                raise ValueError(
                    f"Topic probabilities must sum to ~1.0, got {total:.4f}"
                )
        return v

    def to_feature_vector(self) -> List[float]:
        """Dense list of probabilities ordered by topic ID."""
        return [
            self.topic_probabilities.get(i, 0.0)
            for i in range(self.num_topics)
        ]


class LDAModelInfo(BaseModel):
    """
    Summary of a trained LDA model.

    Attributes:
        num_topics: Number of topics
        num_documents: Number of DTM rows the model was fitted on
        num_dropped_documents: Input documents with no retained terms
        vocabulary_size: Size of vocabulary
        num_tokens: Total retained token occurrences
        iterations: Number of Gibbs sweeps
        burn_in: Discarded leading sweeps
        alpha: Document-topic prior
        eta: Topic-term prior
        seed: Sampler seed
        log_likelihood: log p(w | z) after the final sweep
        perplexity: exp(-log p(w) / tokens) under the posterior estimates
        topic_top_words: Top words for each topic with probabilities
        topic_labels: Human-readable topic labels
    """
    num_topics: int = Field(..., ge=2)
    num_documents: int = Field(..., ge=0)
    num_dropped_documents: int = Field(default=0, ge=0)
    vocabulary_size: int = Field(..., ge=0)
    num_tokens: int = Field(..., ge=0)
    iterations: int = Field(..., ge=1)
    burn_in: int = Field(..., ge=0)
    alpha: float
    eta: float
    seed: int
    log_likelihood: Optional[float] = Field(default=None)
    perplexity: Optional[float] = Field(default=None)
    topic_top_words: Optional[Dict[int, List[Tuple[str, float]]]] = Field(default=None)
    topic_labels: Optional[Dict[int, str]] = Field(default=None)

    def get_topic_description(self, topic_id: int, num_words: int = 10) -> str:
        """
        Get human-readable description of a topic.

        Args:
            topic_id: Topic ID
            num_words: Number of top words to include

        Returns:
            String description of the topic
        """
        label = self.topic_labels.get(topic_id, f"Topic {topic_id}") if self.topic_labels else f"Topic {topic_id}"

        if self.topic_top_words and topic_id in self.topic_top_words:
            words = self.topic_top_words[topic_id][:num_words]
            word_str = ", ".join([w[0] for w in words])
            return f"{label}: {word_str}"

        return label
