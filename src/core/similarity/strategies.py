#!/usr/bin/env python3
"""
Similarity Strategies

Scores how related two feedback items are from their extracted themes,
using the Strategy pattern so the scoring method can be swapped without
changing the lookup contract.
"""

import math
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Set

from ..models.analysis import Theme
from ..models.similarity import ThemeMatch

logger = logging.getLogger(__name__)


def normalize_label(label: str) -> str:
    """Canonical form of a theme label for comparison."""
    return label.strip().lower()


def _label_set(themes: List[Theme]) -> Set[str]:
    return {normalize_label(theme.theme) for theme in themes}


def round_score(value: float) -> float:
    """Round to 2 decimals, .005 going up."""
    return math.floor(value * 100 + 0.5) / 100


def score_similarity(source_themes: List[Theme], candidate_themes: List[Theme]) -> Optional[ThemeMatch]:
    """
    Jaccard similarity over normalized theme labels.

    Args:
        source_themes: Themes of the item being matched
        candidate_themes: Themes of the candidate item

    Returns:
        ThemeMatch with the rounded score and sorted shared labels, or None
        when the two items share no theme
    """
    source_labels = _label_set(source_themes)
    candidate_labels = _label_set(candidate_themes)

    intersection = source_labels & candidate_labels
    if not intersection:
        return None

    union = source_labels | candidate_labels
    return ThemeMatch(
        score=round_score(len(intersection) / len(union)),
        matching_themes=sorted(intersection)
    )


class SimilarityStrategy(ABC):
    """Abstract base class for similarity scoring strategies."""

    @abstractmethod
    def score(self, source_themes: List[Theme], candidate_themes: List[Theme]) -> Optional[ThemeMatch]:
        """
        Score a candidate against the source item.

        Returns:
            ThemeMatch, or None when the items are unrelated
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Get human-readable name of this strategy."""
        pass


class ThemeJaccardStrategy(SimilarityStrategy):
    """Jaccard coefficient over case-insensitive theme labels."""

    def score(self, source_themes: List[Theme], candidate_themes: List[Theme]) -> Optional[ThemeMatch]:
        return score_similarity(source_themes, candidate_themes)

    def get_name(self) -> str:
        return "theme_jaccard"
