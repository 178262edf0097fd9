#!/usr/bin/env python3
"""
Similarity package with strategy pattern implementation.

Theme-based scoring today; the engine contract stays the same for other
strategies.
"""

from .strategies import (
    SimilarityStrategy,
    ThemeJaccardStrategy,
    score_similarity,
    normalize_label
)
from .engine import SimilarityEngine

__all__ = [
    'SimilarityStrategy',
    'ThemeJaccardStrategy',
    'score_similarity',
    'normalize_label',
    'SimilarityEngine'
]
