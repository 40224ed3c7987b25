"""
Topic Modeling Posterior Analyzer

Interprets a fitted LDA model: ranked terms per topic, long-format beta and
gamma tables, document clustering and a 2D projection of the document-topic
matrix. Nothing here re-runs inference or mutates the fit.

Usage:
    from src.features.topic_modeling import TopicModelingAnalyzer

    analyzer = TopicModelingAnalyzer(fit_result)
    analyzer.top_terms(n=10)
    labels = analyzer.cluster_documents(n_clusters=4, seed=42)
    coords = analyzer.project_documents()
    features = analyzer.extract_features(document_id=0)
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.cluster import KMeans

from .constants import (
    DEFAULT_KMEANS_N_INIT,
    DEFAULT_RANDOM_STATE,
    DEFAULT_TOP_N_TERMS,
    DOMINANT_TOPIC_THRESHOLD,
)
from .exceptions import InvalidClusterCountError
from .schemas import LDAFitResult, TopicModelingFeatures

logger = logging.getLogger(__name__)


def top_terms(
    beta: np.ndarray,
    vocabulary: Sequence[str],
    n: int = DEFAULT_TOP_N_TERMS,
) -> Dict[int, List[str]]:
    """
    Highest-probability terms of every topic.

    Ties are broken by lexicographic term order.

    Args:
        beta: Topic-term matrix (k, V)
        vocabulary: Terms in column order
        n: Terms per topic (capped at V)

    Returns:
        Dict of topic id -> ranked term list
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    terms = np.asarray(vocabulary, dtype=object)
    # rank of each column in lexicographic term order
    lexical_rank = np.argsort(np.argsort(terms.astype(str), kind='stable'), kind='stable')

    result = {}
    for topic_id, row in enumerate(beta):
        # lexsort sorts by the last key first
        order = np.lexsort((lexical_rank, -row))[:n]
        result[topic_id] = [str(terms[i]) for i in order]
    return result


def cluster_documents(
    gamma: np.ndarray,
    n_clusters: int,
    seed: int = DEFAULT_RANDOM_STATE,
) -> np.ndarray:
    """
    Partition documents by k-means over their gamma rows.

    Args:
        gamma: Document-topic matrix (N, k)
        n_clusters: Number of clusters c, 1 <= c <= N
        seed: Seed for centroid initialisation

    Returns:
        Integer cluster id per document, shape (N,)

    Raises:
        InvalidClusterCountError: If c < 1 or c > N
    """
    num_docs = gamma.shape[0]
    if n_clusters < 1 or n_clusters > num_docs:
        raise InvalidClusterCountError(
            f"Cluster count must be between 1 and the number of documents "
            f"({num_docs}), got {n_clusters}"
        )

    kmeans = KMeans(
        n_clusters=n_clusters,
        n_init=DEFAULT_KMEANS_N_INIT,
        random_state=seed,
    )
    labels = kmeans.fit_predict(np.asarray(gamma, dtype=float))
    logger.info(
        f"Clustered {num_docs} documents into {n_clusters} clusters "
        f"(inertia {kmeans.inertia_:.4f})"
    )
    return labels.astype(int)


def project_documents(gamma: np.ndarray) -> np.ndarray:
    """
    Project gamma onto its top two principal components.

    Columns are standardized first (constant columns are only centred), then
    projected onto the leading eigenvectors of their covariance matrix. Each
    eigenvector's sign is fixed so that its largest-magnitude entry is
    positive, which makes the output fully deterministic.

    Args:
        gamma: Document-topic matrix (N, k), N >= 2

    Returns:
        Coordinates, shape (N, 2)
    """
    gamma = np.asarray(gamma, dtype=float)
    if gamma.shape[0] < 2:
        raise ValueError(f"Projection needs at least 2 documents, got {gamma.shape[0]}")

    std = gamma.std(axis=0, ddof=1)
    std[std == 0] = 1.0
    standardized = (gamma - gamma.mean(axis=0)) / std

    covariance = np.atleast_2d(np.cov(standardized, rowvar=False))
    eigenvalues, eigenvectors = np.linalg.eigh(covariance)
    order = np.argsort(eigenvalues)[::-1][:2]
    components = eigenvectors[:, order]

    pivots = np.argmax(np.abs(components), axis=0)
    signs = np.sign(components[pivots, np.arange(components.shape[1])])
    signs[signs == 0] = 1.0
    components = components * signs

    coords = standardized @ components
    if coords.shape[1] < 2:
        coords = np.hstack([coords, np.zeros((coords.shape[0], 2 - coords.shape[1]))])
    return coords


class TopicModelingAnalyzer:
    """
    Posterior analytics over one LDA fit.

    This class:
    1. Ranks terms per topic from beta
    2. Exposes beta and gamma as long-format tables
    3. Clusters and projects documents from gamma
    4. Summarizes each document's topic exposure

    Every method is a pure function of the fit; call them in any order.
    """

    def __init__(self, result: LDAFitResult):
        """
        Initialize analyzer.

        Args:
            result: Output of ``fit_lda``
        """
        self.result = result
        self.num_topics = result.num_topics
        self._row_of_document = {doc_id: row for row, doc_id in enumerate(result.doc_ids)}
        logger.info(
            f"Initialized TopicModelingAnalyzer with {self.num_topics} topics, "
            f"{len(result.doc_ids)} documents"
        )

    def top_terms(self, n: int = DEFAULT_TOP_N_TERMS) -> Dict[int, List[str]]:
        """Ranked terms per topic."""
        return top_terms(self.result.beta, self.result.vocabulary, n)

    def top_terms_with_weights(self, n: int = DEFAULT_TOP_N_TERMS) -> Dict[int, List[tuple]]:
        """Ranked (term, probability) pairs per topic."""
        index = {term: i for i, term in enumerate(self.result.vocabulary)}
        return {
            topic_id: [(term, float(self.result.beta[topic_id, index[term]])) for term in terms]
            for topic_id, terms in self.top_terms(n).items()
        }

    def beta_table(self) -> pd.DataFrame:
        return self.result.beta_table()

    def gamma_table(self) -> pd.DataFrame:
        return self.result.gamma_table()

    def cluster_documents(self, n_clusters: int, seed: int = DEFAULT_RANDOM_STATE) -> pd.Series:
        """Cluster id per document, indexed by input document id."""
        labels = cluster_documents(self.result.gamma, n_clusters, seed)
        return pd.Series(labels, index=pd.Index(self.result.doc_ids, name='document'), name='cluster')

    def project_documents(self) -> pd.DataFrame:
        """(pc1, pc2) per document, indexed by input document id."""
        coords = project_documents(self.result.gamma)
        return pd.DataFrame(
            coords,
            columns=['pc1', 'pc2'],
            index=pd.Index(self.result.doc_ids, name='document'),
        )

    def extract_features(
        self,
        document_id: int,
        threshold: float = DOMINANT_TOPIC_THRESHOLD,
    ) -> TopicModelingFeatures:
        """
        Summarize one document's topic exposure.

        Args:
            document_id: Input index of the document
            threshold: Probability at or above which a topic counts as significant

        Returns:
            TopicModelingFeatures

        Raises:
            KeyError: If the document was dropped or never existed
        """
        row = self._row_of_document.get(document_id)
        if row is None:
            raise KeyError(f"Document {document_id} is not part of the fitted corpus")

        probs = self.result.gamma[row]
        topic_probabilities = {i: float(p) for i, p in enumerate(probs)}
        dominant = int(np.argmax(probs))

        return TopicModelingFeatures(
            document_id=document_id,
            topic_probabilities=topic_probabilities,
            dominant_topic_id=dominant,
            dominant_topic_probability=min(float(probs[dominant]), 1.0),
            topic_entropy=self._calculate_entropy(probs),
            num_topics=self.num_topics,
            num_significant_topics=int(np.sum(probs >= threshold)),
        )

    def extract_all_features(
        self,
        threshold: float = DOMINANT_TOPIC_THRESHOLD,
    ) -> List[TopicModelingFeatures]:
        return [self.extract_features(doc_id, threshold) for doc_id in self.result.doc_ids]

    @staticmethod
    def _calculate_entropy(probs: Sequence[float]) -> float:
        """
        Shannon entropy of a topic distribution in nats.

        Low entropy means the document concentrates on few topics.
        """
        entropy = -sum(p * math.log(p) for p in probs if p > 0)
        return max(entropy, 0.0)

    def describe(self, n: int = DEFAULT_TOP_N_TERMS, labels: Optional[Dict[int, str]] = None) -> List[str]:
        """One line per topic: label followed by its top terms."""
        lines = []
        for topic_id, terms in self.top_terms(n).items():
            label = labels.get(topic_id, f"Topic {topic_id}") if labels else f"Topic {topic_id}"
            lines.append(f"{label}: {', '.join(terms)}")
        return lines
