"""
Feature Engineering Module

This package contains the topic discovery engine: document-term matrix
construction, topic-count selection metrics, collapsed Gibbs LDA and
posterior analytics.

Usage:
    from src.features import LDATrainer, TopicModelingAnalyzer

    trainer = LDATrainer(num_topics=6)
    trainer.train(tokenized_docs)
    analyzer = trainer.analyzer()
    analyzer.top_terms(n=10)
"""

# Lazy imports keep `import src.features` free of numerical dependencies
# Use explicit imports: from src.features.topic_modeling import fit_lda

__all__ = [
    "TopicModelingAnalyzer",
    "TopicModelingFeatures",
    "TopicCountSelector",
    "LDATrainer",
]


def __getattr__(name):
    """Lazy import of the topic modeling public API."""
    if name in __all__:
        from . import topic_modeling
        return getattr(topic_modeling, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
