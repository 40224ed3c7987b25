"""
Topic Modeling Exceptions

Every precondition failure in the topic modeling engine is raised at the
boundary of the component that owns it. Callers are expected to handle
these explicitly; no component substitutes a default for a failed check.
"""


class TopicModelingError(ValueError):
    """Base class for topic modeling precondition failures."""


class EmptyVocabularyError(TopicModelingError):
    """Raised when frequency-bound filtering leaves no terms in the vocabulary."""


class InvalidTopicCountError(TopicModelingError):
    """Raised when a requested topic count is below 2 or above the document count."""


class InvalidHyperparameterError(TopicModelingError):
    """Raised for non-positive priors, burn-in longer than the chain, or negative counts."""


class InvalidClusterCountError(TopicModelingError):
    """Raised when a requested cluster count is below 1 or above the document count."""


class CancelledError(Exception):
    """Raised when a fit or sweep is interrupted through its cancellation flag."""
