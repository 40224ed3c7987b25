"""
Topic Modeling Module

This package discovers latent topics in a tokenized corpus with Latent
Dirichlet Allocation fitted by collapsed Gibbs sampling.

Key Components:
- build_dtm: Vocabulary and sparse document-term matrix with frequency bounds
- TopicCountSelector: Metric curves (Arun2010, CaoJuan2009, Deveaud2014) over candidate k
- fit_lda: Seeded, reproducible collapsed Gibbs sampler returning beta and gamma
- TopicModelingAnalyzer: Top terms, beta/gamma tables, clustering, 2D projection
- LDATrainer: Tokens -> DTM -> final fit -> LDAModelInfo
- run_topic_pipeline: The whole batch run in one call

Workflow:
1. Build the document-term matrix:
    ```python
    from src.features.topic_modeling import build_dtm, FrequencyBounds

    dtm = build_dtm(tokenized_docs, FrequencyBounds(min_doc_freq=2, max_doc_freq=0.7))
    ```

2. Measure candidate topic counts and inspect the curves:
    ```python
    from src.features.topic_modeling import TopicCountSelector

    sweep = TopicCountSelector(max_workers=4).sweep(dtm, range(2, 16))
    sweep.to_frame().pivot(index="k", columns="metric", values="score")
    ```

3. Fit the chosen k and analyze:
    ```python
    from src.features.topic_modeling import fit_lda, TopicModelingAnalyzer

    result = fit_lda(dtm, k=8)
    analyzer = TopicModelingAnalyzer(result)
    analyzer.top_terms(n=10)
    analyzer.cluster_documents(n_clusters=4)
    analyzer.project_documents()
    ```

Errors:
- EmptyVocabularyError: no term survives frequency filtering
- InvalidTopicCountError: k < 2 or k > number of documents
- InvalidHyperparameterError: alpha/eta <= 0, iterations < burn_in, bad bounds
- InvalidClusterCountError: clusters < 1 or > number of documents
- CancelledError: cancellation flag set mid-fit or mid-sweep
"""

from .analyzer import (
    TopicModelingAnalyzer,
    cluster_documents,
    project_documents,
    top_terms,
)
from .constants import (
    TOPIC_MODELING_MODULE_VERSION,
    DEFAULT_METRICS,
    SUPPORTED_METRICS,
    ARUN_2010,
    CAO_JUAN_2009,
    DEVEAUD_2014,
    GRIFFITHS_2004,
)
from .dtm import build_dtm
from .exceptions import (
    TopicModelingError,
    EmptyVocabularyError,
    InvalidTopicCountError,
    InvalidHyperparameterError,
    InvalidClusterCountError,
    CancelledError,
)
from .lda_trainer import LDATrainer, corpus_perplexity
from .metrics import (
    arun_2010,
    cao_juan_2009,
    deveaud_2014,
    griffiths_2004,
    compute_metrics,
)
from .pipeline import TopicPipelineOutput, run_topic_pipeline
from .sampler import GibbsState, fit_lda
from .schemas import (
    DocumentTermMatrix,
    FrequencyBounds,
    GibbsHyperparameters,
    LDAFitResult,
    LDAModelInfo,
    MetricRecord,
    TopicCountSweep,
    TopicModelingFeatures,
)
from .selector import TopicCountSelector

__all__ = [
    # Main entry points
    "build_dtm",
    "fit_lda",
    "TopicCountSelector",
    "TopicModelingAnalyzer",
    "LDATrainer",
    "run_topic_pipeline",
    "TopicPipelineOutput",
    "GibbsState",
    # Analytics
    "top_terms",
    "cluster_documents",
    "project_documents",
    "corpus_perplexity",
    # Metrics
    "arun_2010",
    "cao_juan_2009",
    "deveaud_2014",
    "griffiths_2004",
    "compute_metrics",
    # Schemas
    "DocumentTermMatrix",
    "FrequencyBounds",
    "GibbsHyperparameters",
    "LDAFitResult",
    "LDAModelInfo",
    "MetricRecord",
    "TopicCountSweep",
    "TopicModelingFeatures",
    # Errors
    "TopicModelingError",
    "EmptyVocabularyError",
    "InvalidTopicCountError",
    "InvalidHyperparameterError",
    "InvalidClusterCountError",
    "CancelledError",
    # Constants
    "TOPIC_MODELING_MODULE_VERSION",
    "DEFAULT_METRICS",
    "SUPPORTED_METRICS",
    "ARUN_2010",
    "CAO_JUAN_2009",
    "DEVEAUD_2014",
    "GRIFFITHS_2004",
]

__version__ = TOPIC_MODELING_MODULE_VERSION
