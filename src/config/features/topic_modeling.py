"""Topic modeling configuration."""

from typing import List, Optional, Union

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config._loader import load_yaml_section


def _get_config() -> dict:
    return load_yaml_section("features/topic_modeling.yaml", "topic_modeling")


class TopicModelingVocabularyConfig(BaseSettings):
    """Document-frequency bounds for the vocabulary (int = count, float = fraction)."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_VOCAB_',
        case_sensitive=False
    )

    min_doc_freq: Union[int, float] = Field(
        default_factory=lambda: _get_config().get('vocabulary', {}).get('min_doc_freq', 1)
    )
    max_doc_freq: Union[int, float] = Field(
        default_factory=lambda: _get_config().get('vocabulary', {}).get('max_doc_freq', float('inf'))
    )


class TopicModelingSamplerConfig(BaseSettings):
    """Collapsed Gibbs sampler settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_SAMPLER_',
        case_sensitive=False
    )

    iterations: int = Field(
        default_factory=lambda: _get_config().get('sampler', {}).get('iterations', 500)
    )
    burn_in: int = Field(
        default_factory=lambda: _get_config().get('sampler', {}).get('burn_in', 100)
    )
    thin: int = Field(
        default_factory=lambda: _get_config().get('sampler', {}).get('thin', 1)
    )
    alpha: float = Field(
        default_factory=lambda: _get_config().get('sampler', {}).get('alpha', 0.1)
    )
    eta: float = Field(
        default_factory=lambda: _get_config().get('sampler', {}).get('eta', 0.01)
    )
    seed: int = Field(
        default_factory=lambda: _get_config().get('sampler', {}).get('seed', 42)
    )


class TopicModelingSelectionConfig(BaseSettings):
    """Topic-count sweep settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_SELECTION_',
        case_sensitive=False
    )

    k_min: int = Field(
        default_factory=lambda: _get_config().get('selection', {}).get('k_min', 2)
    )
    k_max: int = Field(
        default_factory=lambda: _get_config().get('selection', {}).get('k_max', 15)
    )
    metrics: List[str] = Field(
        default_factory=lambda: _get_config().get('selection', {}).get(
            'metrics', ['Arun2010', 'CaoJuan2009', 'Deveaud2014']
        )
    )
    max_workers: Optional[int] = Field(
        default_factory=lambda: _get_config().get('selection', {}).get('max_workers', 1)
    )


class TopicModelingAnalyticsConfig(BaseSettings):
    """Posterior analytics settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_ANALYTICS_',
        case_sensitive=False
    )

    n_clusters: int = Field(
        default_factory=lambda: _get_config().get('analytics', {}).get('n_clusters', 3)
    )
    top_n_terms: int = Field(
        default_factory=lambda: _get_config().get('analytics', {}).get('top_n_terms', 10)
    )


class TopicModelingConfig(BaseSettings):
    """
    Topic modeling configuration.
    Loads from configs/features/topic_modeling.yaml with environment variable overrides.
    """
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_',
        env_nested_delimiter='__',
        case_sensitive=False
    )

    vocabulary: TopicModelingVocabularyConfig = Field(
        default_factory=TopicModelingVocabularyConfig
    )
    sampler: TopicModelingSamplerConfig = Field(
        default_factory=TopicModelingSamplerConfig
    )
    selection: TopicModelingSelectionConfig = Field(
        default_factory=TopicModelingSelectionConfig
    )
    analytics: TopicModelingAnalyticsConfig = Field(
        default_factory=TopicModelingAnalyticsConfig
    )
