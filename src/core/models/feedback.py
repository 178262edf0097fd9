#!/usr/bin/env python3
"""
Feedback item data model.

Represents a submitted piece of customer feedback and its analysis status.
"""

import hashlib
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional
from dataclasses import dataclass

from dateutil import parser as date_parser


class AnalysisStatus(str, Enum):
    """Current analysis state of a feedback item."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def generate_fingerprint(source: str, title: str, body: str) -> str:
    """
    Build the deduplication fingerprint for feedback content.

    First 8 bytes of the SHA-256 digest of ``source:title:body``, hex encoded.
    """
    content = f"{source}:{title}:{body}"
    return hashlib.sha256(content.encode('utf-8')).hexdigest()[:16]


def _parse_datetime_safe(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError, TypeError):
        return None


@dataclass
class FeedbackItem:
    """A single feedback submission."""
    id: int
    source: str
    title: str
    body: str
    fingerprint: str
    analysis_status: AnalysisStatus = AnalysisStatus.PENDING
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.analysis_status, AnalysisStatus):
            self.analysis_status = AnalysisStatus(self.analysis_status)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'source': self.source,
            'title': self.title,
            'body': self.body,
            'fingerprint': self.fingerprint,
            'analysis_status': self.analysis_status.value,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'FeedbackItem':
        """Create FeedbackItem from a database row or serialized dict."""
        return cls(
            id=row['id'],
            source=row['source'],
            title=row['title'],
            body=row['body'],
            fingerprint=row['fingerprint'],
            analysis_status=row.get('analysis_status') or AnalysisStatus.PENDING,
            created_at=_parse_datetime_safe(row.get('created_at'))
        )

    def __repr__(self):
        return f"FeedbackItem(id={self.id}, source='{self.source}', title='{self.title[:50]}', status='{self.analysis_status.value}')"
