#!/usr/bin/env python3
"""
Core data models for feedback insights.

Contains all data structures used throughout the application.
"""

from .feedback import FeedbackItem, AnalysisStatus, generate_fingerprint
from .analysis import (
    SENTIMENT_LABELS, Sentiment, Urgency, Theme, FeedbackAnalysis,
    AnalysisRecord, decode_themes
)
from .similarity import ThemeMatch, SimilarityResult
from .digest import DigestReport

__all__ = [
    'FeedbackItem', 'AnalysisStatus', 'generate_fingerprint',
    'SENTIMENT_LABELS', 'Sentiment', 'Urgency', 'Theme', 'FeedbackAnalysis',
    'AnalysisRecord', 'decode_themes',
    'ThemeMatch', 'SimilarityResult', 'DigestReport'
]
