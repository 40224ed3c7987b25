"""
Topic Modeling Constants and Configuration

This module defines defaults for the collapsed Gibbs LDA engine, the
topic-count selection metrics and the posterior analytics.
"""

from typing import List

# ===========================
# Module Version
# ===========================
TOPIC_MODELING_MODULE_VERSION = "0.2.0"

# ===========================
# Default Gibbs Sampler Parameters
# ===========================
DEFAULT_ITERATIONS = 500
"""Number of full sweeps over every token occurrence"""

DEFAULT_BURN_IN = 100
"""Leading sweeps discarded before posterior averaging starts"""

DEFAULT_THIN = 1
"""Keep every Nth sweep after burn-in"""

DEFAULT_ALPHA = 0.1
"""Symmetric Dirichlet prior on document-topic proportions"""

DEFAULT_ETA = 0.01
"""Symmetric Dirichlet prior on topic-term distributions"""

DEFAULT_RANDOM_STATE = 42
"""Random seed for reproducibility"""

DEFAULT_LOG_EVERY = 50
"""Emit a DEBUG progress line every N sweeps"""

# ===========================
# Vocabulary Parameters
# ===========================
MIN_DOCUMENT_FREQUENCY = 1
"""Minimum number (int) or fraction (float) of documents a term must appear in"""

MAX_DOCUMENT_FREQUENCY = float("inf")
"""Maximum number (int) or fraction (float) of documents a term may appear in"""

# ===========================
# Topic Count Selection
# ===========================
MIN_TOPICS = 2
"""Smallest decomposable topic count"""

ARUN_2010 = "Arun2010"
CAO_JUAN_2009 = "CaoJuan2009"
DEVEAUD_2014 = "Deveaud2014"
GRIFFITHS_2004 = "Griffiths2004"

DEFAULT_METRICS: List[str] = [ARUN_2010, CAO_JUAN_2009, DEVEAUD_2014]
"""Metrics computed when the caller does not name any"""

SUPPORTED_METRICS: List[str] = [ARUN_2010, CAO_JUAN_2009, DEVEAUD_2014, GRIFFITHS_2004]
"""Every metric name the selector accepts; sets of names are ordered like this list"""

# ===========================
# Posterior Analytics
# ===========================
DEFAULT_TOP_N_TERMS = 10

DEFAULT_KMEANS_N_INIT = 10
"""Number of k-means restarts, best inertia wins"""

DOMINANT_TOPIC_THRESHOLD = 0.25
"""Minimum probability to count a topic as significant for a document"""

# ===========================
# Numerical
# ===========================
PROBABILITY_FLOOR = 1e-12
"""Lower clip applied before taking logarithms of probabilities"""

RECOMMENDED_MIN_CORPUS_SIZE = 50
"""Minimum number of documents recommended for stable topics"""
