"""
LDA Model Training Utilities

Builds the document-term matrix for a tokenized corpus, runs the final
collapsed Gibbs fit at a chosen topic count and summarizes the model.

Usage:
    from src.features.topic_modeling.lda_trainer import LDATrainer

    trainer = LDATrainer(num_topics=8)
    model_info = trainer.train(tokenized_docs)
    trainer.print_topics(num_words=10)
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

import numpy as np

from .analyzer import TopicModelingAnalyzer
from .constants import (
    DEFAULT_ALPHA,
    DEFAULT_BURN_IN,
    DEFAULT_ETA,
    DEFAULT_ITERATIONS,
    DEFAULT_RANDOM_STATE,
    DEFAULT_THIN,
    RECOMMENDED_MIN_CORPUS_SIZE,
)
from .dtm import build_dtm
from .sampler import CancelFlag, fit_lda
from .schemas import (
    DocumentTermMatrix,
    FrequencyBounds,
    GibbsHyperparameters,
    LDAFitResult,
    LDAModelInfo,
)

logger = logging.getLogger(__name__)


def corpus_perplexity(result: LDAFitResult, dtm: DocumentTermMatrix) -> float:
    """
    Per-token perplexity of the corpus under the posterior estimates.

    Args:
        result: Fit computed on ``dtm``
        dtm: Document-term matrix

    Returns:
        exp(-sum log p(w | d) / tokens)
    """
    coo = dtm.matrix.tocoo()
    word_probs = np.einsum('ik,ki->i', result.gamma[coo.row], result.beta[:, coo.col])
    log_likelihood = float(np.sum(coo.data * np.log(word_probs)))
    return math.exp(-log_likelihood / dtm.num_tokens)


class LDATrainer:
    """
    LDA Topic Model Trainer.

    This class handles:
    1. Building the vocabulary and document-term matrix
    2. Fitting LDA by collapsed Gibbs sampling
    3. Evaluating the fit (log-likelihood, perplexity)
    4. Collecting top words per topic into LDAModelInfo

    Usage:
        trainer = LDATrainer(num_topics=8, iterations=500, burn_in=100)
        model_info = trainer.train(tokenized_docs)
        analyzer = trainer.analyzer()
    """

    def __init__(
        self,
        num_topics: int,
        iterations: int = DEFAULT_ITERATIONS,
        burn_in: int = DEFAULT_BURN_IN,
        thin: int = DEFAULT_THIN,
        alpha: float = DEFAULT_ALPHA,
        eta: float = DEFAULT_ETA,
        random_state: int = DEFAULT_RANDOM_STATE,
        bounds: Optional[FrequencyBounds] = None,
        topic_labels: Optional[Dict[int, str]] = None,
    ):
        """
        Initialize LDA trainer.

        Args:
            num_topics: Number of topics to fit
            iterations: Number of Gibbs sweeps
            burn_in: Leading sweeps discarded before averaging
            thin: Keep every Nth sweep after burn-in
            alpha: Document-topic prior
            eta: Topic-term prior
            random_state: Random seed for reproducibility
            bounds: Document-frequency window for the vocabulary
            topic_labels: Human-readable names by topic id, used in summaries
        """
        self.num_topics = num_topics
        self.hyperparameters = GibbsHyperparameters(
            iterations=iterations,
            burn_in=burn_in,
            thin=thin,
            alpha=alpha,
            eta=eta,
            seed=random_state,
        )
        self.bounds = bounds or FrequencyBounds()
        self.topic_labels = topic_labels

        # Model components (initialized during training)
        self.dtm: Optional[DocumentTermMatrix] = None
        self.result: Optional[LDAFitResult] = None
        self.model_info: Optional[LDAModelInfo] = None

        logger.info(
            f"Initialized LDATrainer with {num_topics} topics, "
            f"{iterations} iterations, burn-in {burn_in}"
        )

    def train(
        self,
        documents: Sequence[Sequence[str]],
        cancel_event: Optional[CancelFlag] = None,
    ) -> LDAModelInfo:
        """
        Train LDA on a tokenized corpus.

        Args:
            documents: One token sequence per document
            cancel_event: Cooperative cancellation flag checked between sweeps

        Returns:
            LDAModelInfo with training metadata
        """
        if len(documents) < RECOMMENDED_MIN_CORPUS_SIZE:
            logger.warning(
                f"Corpus size ({len(documents)}) is below recommended minimum "
                f"({RECOMMENDED_MIN_CORPUS_SIZE}). Results may be unreliable."
            )

        dtm = build_dtm(documents, self.bounds)
        return self.train_dtm(dtm, num_input_documents=len(documents), cancel_event=cancel_event)

    def train_dtm(
        self,
        dtm: DocumentTermMatrix,
        num_input_documents: Optional[int] = None,
        cancel_event: Optional[CancelFlag] = None,
    ) -> LDAModelInfo:
        """
        Train LDA on an already-built document-term matrix.

        Args:
            dtm: Document-term matrix
            num_input_documents: Corpus size before empty documents were dropped
            cancel_event: Cooperative cancellation flag checked between sweeps

        Returns:
            LDAModelInfo with training metadata
        """
        self.dtm = dtm
        self.result = fit_lda(dtm, self.num_topics, self.hyperparameters, cancel_event=cancel_event)

        perplexity = corpus_perplexity(self.result, dtm)
        logger.info(f"Model perplexity: {perplexity:.4f}")

        analyzer = TopicModelingAnalyzer(self.result)
        hp = self.hyperparameters
        num_input = num_input_documents if num_input_documents is not None else dtm.num_documents

        self.model_info = LDAModelInfo(
            num_topics=self.num_topics,
            num_documents=dtm.num_documents,
            num_dropped_documents=num_input - dtm.num_documents,
            vocabulary_size=dtm.num_terms,
            num_tokens=dtm.num_tokens,
            iterations=hp.iterations,
            burn_in=hp.burn_in,
            alpha=hp.alpha,
            eta=hp.eta,
            seed=hp.seed,
            log_likelihood=self.result.log_likelihoods[-1],
            perplexity=perplexity,
            topic_top_words=analyzer.top_terms_with_weights(n=20),
            topic_labels=self.topic_labels,
        )
        return self.model_info

    def analyzer(self) -> TopicModelingAnalyzer:
        """Posterior analyzer over the trained fit."""
        if self.result is None:
            raise ValueError("Model not trained")
        return TopicModelingAnalyzer(self.result)

    def print_topics(self, num_words: int = 10) -> None:
        """
        Print human-readable topic descriptions.

        Args:
            num_words: Number of top words to show per topic
        """
        if self.result is None:
            raise ValueError("Model not trained")

        print(f"\nDiscovered Topics (n={self.num_topics}):")
        print("=" * 80)

        for topic_id, top_words in self.analyzer().top_terms_with_weights(num_words).items():
            label = self.topic_labels.get(topic_id, f"Topic {topic_id}") if self.topic_labels else f"Topic {topic_id}"
            words_str = ", ".join([f"{word}({weight:.3f})" for word, weight in top_words])

            print(f"\n{label}:")
            print(f"  {words_str}")

        print("\n" + "=" * 80)

    def topic_descriptions(self, num_words: int = 10) -> List[str]:
        if self.model_info is None:
            raise ValueError("Model not trained")
        return [
            self.model_info.get_topic_description(topic_id, num_words)
            for topic_id in range(self.num_topics)
        ]
