"""Shared utilities for batch processing."""

from src.utils.parallel import ParallelProcessor

__all__ = [
    'ParallelProcessor',
]
