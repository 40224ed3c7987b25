"""
Cached YAML configuration loader.

Settings classes call this from their ``default_factory`` lambdas so that
YAML supplies defaults and environment variables still take precedence.

Usage:
    from src.config._loader import load_yaml_section

    # Load entire file
    config = load_yaml_section("config.yaml")

    # Load specific section
    topic_modeling = load_yaml_section("features/topic_modeling.yaml", "topic_modeling")
"""

from functools import lru_cache
from pathlib import Path
from typing import Any
import yaml


def _get_configs_dir() -> Path:
    """Repository-level configs/ directory."""
    return Path(__file__).parent.parent.parent / "configs"


@lru_cache(maxsize=16)
def load_yaml_section(config_file: str, section: str | None = None) -> dict[str, Any]:
    """
    Load and cache YAML configuration.

    Args:
        config_file: Path relative to configs/ directory
            (e.g., "config.yaml" or "features/topic_modeling.yaml")
        section: Optional top-level key to extract (e.g., "topic_modeling")

    Returns:
        Configuration dictionary (empty dict if file or section not found)

    Note:
        Results are cached. Use clear_config_cache() to reload.
    """
    config_path = _get_configs_dir() / config_file

    if not config_path.exists():
        return {}

    with open(config_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    return (data.get(section) or {}) if section else data


def clear_config_cache() -> None:
    """Clear all cached configurations. Useful for testing."""
    load_yaml_section.cache_clear()
