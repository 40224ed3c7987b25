"""
Topic Discovery Configuration Package.

This module uses Pydantic Settings to:
1. Define the schema for all configuration
2. Load defaults from configs/config.yaml and configs/features/*.yaml
3. Automatically override with environment variables from .env

Usage:
    from src.config import settings

    # Sampler settings
    iterations = settings.topic_modeling.sampler.iterations

    # Candidate topic counts
    k_range = (settings.topic_modeling.selection.k_min, settings.topic_modeling.selection.k_max)
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config.reproducibility import ReproducibilityConfig
from src.config.features import TopicModelingConfig


class Settings(BaseSettings):
    """
    Main settings class that combines all configuration sections.

    Usage:
        from src.config import settings

        settings.topic_modeling.vocabulary.min_doc_freq
        settings.reproducibility.random_seed
    """
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    reproducibility: ReproducibilityConfig = Field(default_factory=ReproducibilityConfig)
    topic_modeling: TopicModelingConfig = Field(default_factory=TopicModelingConfig)


# ===========================
# Global Settings Instance
# ===========================

settings = Settings()


__all__ = [
    "settings",
    "Settings",
    "ReproducibilityConfig",
    "TopicModelingConfig",
]
