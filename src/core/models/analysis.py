#!/usr/bin/env python3
"""
Analysis result data models.

Contains the validated inference output and the persisted analysis record.
"""

import json
from datetime import datetime
from typing import List, Dict, Any, Optional
from dataclasses import dataclass

from ..exceptions import MalformedStoredDataError
from .feedback import _parse_datetime_safe

SENTIMENT_LABELS = ("positive", "neutral", "negative")


@dataclass
class Sentiment:
    label: str
    confidence: float


@dataclass
class Urgency:
    score: int
    reason: str


@dataclass
class Theme:
    """Extracted topic label with supporting evidence."""
    theme: str
    impact_area: str
    evidence_quote: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'theme': self.theme,
            'impact_area': self.impact_area,
            'evidence_quote': self.evidence_quote
        }


@dataclass
class FeedbackAnalysis:
    """Structured analysis of one feedback item, as returned by the model."""
    sentiment: Sentiment
    urgency: Urgency
    themes: List[Theme]
    summary: str
    next_action: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire/cache representation."""
        return {
            'sentiment': {
                'label': self.sentiment.label,
                'confidence': self.sentiment.confidence
            },
            'urgency': {
                'score': self.urgency.score,
                'reason': self.urgency.reason
            },
            'themes': [theme.to_dict() for theme in self.themes],
            'summary': self.summary,
            'next_action': self.next_action
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FeedbackAnalysis':
        """
        Rebuild from an already-validated dictionary (cache contents).

        Untrusted model output must go through FeedbackAnalysisValidator instead.
        """
        return cls(
            sentiment=Sentiment(**data['sentiment']),
            urgency=Urgency(**data['urgency']),
            themes=[Theme(**theme) for theme in data['themes']],
            summary=data['summary'],
            next_action=data['next_action']
        )

    def themes_json(self) -> str:
        """Serialize themes for the analysis table."""
        return json.dumps([theme.to_dict() for theme in self.themes], ensure_ascii=False)


@dataclass
class AnalysisRecord:
    """Represents an analysis row stored in the database (one per feedback item)."""
    feedback_id: int
    sentiment_label: Optional[str] = None
    sentiment_confidence: Optional[float] = None
    urgency_score: Optional[int] = None
    urgency_reason: Optional[str] = None
    themes_json: Optional[str] = None
    summary: Optional[str] = None
    next_action: Optional[str] = None
    model: Optional[str] = None
    error: Optional[str] = None
    updated_at: Optional[datetime] = None
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'AnalysisRecord':
        """Create AnalysisRecord from a database row."""
        confidence = row.get('sentiment_confidence')
        return cls(
            id=row.get('id'),
            feedback_id=row['feedback_id'],
            sentiment_label=row.get('sentiment_label'),
            sentiment_confidence=float(confidence) if confidence is not None else None,
            urgency_score=row.get('urgency_score'),
            urgency_reason=row.get('urgency_reason'),
            themes_json=row.get('themes_json'),
            summary=row.get('summary'),
            next_action=row.get('next_action'),
            model=row.get('model'),
            error=row.get('error'),
            updated_at=_parse_datetime_safe(row.get('updated_at'))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'feedback_id': self.feedback_id,
            'sentiment_label': self.sentiment_label,
            'sentiment_confidence': self.sentiment_confidence,
            'urgency_score': self.urgency_score,
            'urgency_reason': self.urgency_reason,
            'themes_json': self.themes_json,
            'summary': self.summary,
            'next_action': self.next_action,
            'model': self.model,
            'error': self.error,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }


def decode_themes(themes_json: Optional[str], feedback_id: Optional[int] = None) -> List[Theme]:
    """
    Decode a stored themes_json column.

    Raises:
        MalformedStoredDataError: If the value is missing, not JSON, or not a
            list of theme objects with a string label.
    """
    try:
        raw = json.loads(themes_json)
        if not isinstance(raw, list):
            raise TypeError(f"expected list, got {type(raw).__name__}")

        themes = []
        for entry in raw:
            if not isinstance(entry, dict) or not isinstance(entry.get('theme'), str):
                raise TypeError(f"invalid theme entry: {entry!r}")
            themes.append(Theme(
                theme=entry['theme'],
                impact_area=str(entry.get('impact_area', '')),
                evidence_quote=str(entry.get('evidence_quote', ''))
            ))
        return themes

    except (TypeError, ValueError) as e:
        raise MalformedStoredDataError(feedback_id, e) from e
