"""
Vocabulary and Document-Term Matrix Builder

Turns already-tokenized documents into a sparse document-term matrix whose
columns are the terms that survive document-frequency filtering.

Usage:
    from src.features.topic_modeling.dtm import build_dtm

    dtm = build_dtm(tokenized_docs, FrequencyBounds(min_doc_freq=2, max_doc_freq=0.7))
    print(dtm.shape, dtm.vocabulary[:10])
"""

import logging
import math
from typing import Iterable, List, Optional, Sequence

import numpy as np
from gensim import corpora
from gensim.matutils import corpus2csc

from .exceptions import EmptyVocabularyError, InvalidHyperparameterError
from .schemas import DocumentTermMatrix, FrequencyBounds

logger = logging.getLogger(__name__)


def build_dtm(
    documents: Sequence[Sequence[str]],
    bounds: Optional[FrequencyBounds] = None,
) -> DocumentTermMatrix:
    """
    Build the vocabulary and sparse document-term matrix for a corpus.

    Columns are ordered lexicographically so identical input always yields
    an identical matrix. Documents left with no retained terms are dropped;
    ``doc_ids`` records which input document each row came from.

    Args:
        documents: One token sequence per document
        bounds: Document-frequency window (defaults to keeping every term)

    Returns:
        DocumentTermMatrix

    Raises:
        InvalidHyperparameterError: If the bounds are negative or inverted
        EmptyVocabularyError: If no term survives filtering
    """
    bounds = bounds or FrequencyBounds()
    documents = [list(doc) for doc in documents]
    num_input = len(documents)

    low, high = _validate_bounds(bounds, num_input)

    # Dictionary.dfs holds the number of distinct documents per token id
    dictionary = corpora.Dictionary(documents)
    logger.info(
        f"Counted {len(dictionary)} distinct terms across {num_input} documents"
    )

    retained = sorted(
        token for token, token_id in dictionary.token2id.items()
        if low <= dictionary.dfs[token_id] <= high
    )
    if not retained:
        raise EmptyVocabularyError(
            f"No terms have document frequency within "
            f"[{bounds.min_doc_freq}, {bounds.max_doc_freq}] "
            f"(corpus of {num_input} documents, {len(dictionary)} distinct terms)"
        )

    vocabulary = corpora.Dictionary()
    vocabulary.token2id = {token: idx for idx, token in enumerate(retained)}

    bows = []
    doc_ids: List[int] = []
    for doc_id, doc in enumerate(documents):
        bow = vocabulary.doc2bow(doc)
        if not bow:
            continue
        bows.append(bow)
        doc_ids.append(doc_id)

    dropped = num_input - len(doc_ids)
    if dropped:
        logger.warning(
            f"Dropped {dropped} of {num_input} documents with no retained terms"
        )

    matrix = corpus2csc(
        bows, num_terms=len(retained), num_docs=len(bows), dtype=int
    ).T.tocsr()
    matrix.sort_indices()

    document_frequencies = tuple(
        int(df) for df in np.asarray((matrix > 0).sum(axis=0)).ravel()
    )

    logger.info(
        f"Built DTM with {matrix.shape[0]} documents x {matrix.shape[1]} terms "
        f"({int(matrix.sum())} tokens)"
    )

    return DocumentTermMatrix(
        matrix=matrix,
        vocabulary=tuple(retained),
        doc_ids=tuple(doc_ids),
        document_frequencies=document_frequencies,
    )


def _validate_bounds(bounds: FrequencyBounds, num_documents: int) -> tuple:
    for name, value in (('min_doc_freq', bounds.min_doc_freq),
                        ('max_doc_freq', bounds.max_doc_freq)):
        if value < 0:
            raise InvalidHyperparameterError(f"{name} must be >= 0, got {value}")
        if isinstance(value, float) and not math.isinf(value) and value > 1.0:
            raise InvalidHyperparameterError(
                f"{name} given as a fraction must be <= 1.0, got {value}"
            )

    low, high = bounds.resolve(num_documents)
    if low > high:
        raise InvalidHyperparameterError(
            f"min_doc_freq ({bounds.min_doc_freq}) exceeds max_doc_freq "
            f"({bounds.max_doc_freq}) for {num_documents} documents"
        )
    return low, high


def tokens_in_vocabulary(documents: Iterable[Sequence[str]], vocabulary: Iterable[str]) -> List[int]:
    """
    Count, per document, the tokens that belong to ``vocabulary``.

    Useful for checking that DTM row sums match the retained portion of the
    input corpus.
    """
    vocab = set(vocabulary)
    return [sum(1 for token in doc if token in vocab) for doc in documents]
