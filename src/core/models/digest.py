#!/usr/bin/env python3
"""
Digest report data model.

Windowed aggregate statistics over analyzed feedback.
"""

from typing import List, Dict, Any
from dataclasses import dataclass, field


@dataclass
class DigestReport:
    """Aggregate view of feedback created inside a time window."""
    window: str
    total_feedback: int
    sentiment_breakdown: Dict[str, int]
    avg_urgency: int
    top_themes: List[Dict[str, Any]] = field(default_factory=list)
    sources: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'window': self.window,
            'total_feedback': self.total_feedback,
            'sentiment_breakdown': dict(self.sentiment_breakdown),
            'avg_urgency': self.avg_urgency,
            'top_themes': [dict(item) for item in self.top_themes],
            'sources': [dict(item) for item in self.sources]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DigestReport':
        return cls(
            window=data['window'],
            total_feedback=data['total_feedback'],
            sentiment_breakdown=dict(data['sentiment_breakdown']),
            avg_urgency=data['avg_urgency'],
            top_themes=list(data.get('top_themes', [])),
            sources=list(data.get('sources', []))
        )
