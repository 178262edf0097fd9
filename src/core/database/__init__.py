#!/usr/bin/env python3
"""
Database package for feedback insights.

Provides modular database services with proper separation of concerns.
"""

from .connection_manager import ConnectionManager
from .feedback_service import FeedbackService
from .analysis_service import AnalysisService
from .database_facade import DatabaseFacade

__all__ = [
    'ConnectionManager',
    'FeedbackService',
    'AnalysisService',
    'DatabaseFacade'
]
