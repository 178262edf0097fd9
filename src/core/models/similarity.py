#!/usr/bin/env python3
"""
Similarity result data models.
"""

from typing import List, Dict, Any
from dataclasses import dataclass, field


@dataclass
class ThemeMatch:
    """Score and evidence produced by comparing two theme collections."""
    score: float
    matching_themes: List[str]


@dataclass
class SimilarityResult:
    """A ranked candidate returned by a similarity lookup."""
    feedback_id: int
    similarity_score: float
    matching_themes: List[str]
    feedback: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten candidate feedback fields next to the score."""
        return {
            **self.feedback,
            'feedback_id': self.feedback_id,
            'similarity_score': self.similarity_score,
            'matching_themes': list(self.matching_themes)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimilarityResult':
        feedback = {
            key: value for key, value in data.items()
            if key not in ('feedback_id', 'similarity_score', 'matching_themes')
        }
        return cls(
            feedback_id=data['feedback_id'],
            similarity_score=data['similarity_score'],
            matching_themes=list(data['matching_themes']),
            feedback=feedback
        )
