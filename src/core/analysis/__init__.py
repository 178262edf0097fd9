#!/usr/bin/env python3
"""
Feedback analysis: single-item orchestration and windowed digests.
"""

from .orchestrator import AnalysisOrchestrator
from .digest import DigestAggregator, WINDOW_HOURS
from .prompts import FeedbackAnalysisPrompts

__all__ = [
    'AnalysisOrchestrator', 'DigestAggregator', 'WINDOW_HOURS',
    'FeedbackAnalysisPrompts'
]
