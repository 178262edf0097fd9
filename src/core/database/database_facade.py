#!/usr/bin/env python3
"""
Database Facade

Provides a single entry point to the feedback and analysis services over a
shared connection.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from .connection_manager import ConnectionManager
from .feedback_service import FeedbackService
from .analysis_service import AnalysisService

logger = logging.getLogger(__name__)


class DatabaseFacade:
    """Unified database interface over the modular services."""

    def __init__(self, config, connection_manager: Optional[ConnectionManager] = None):
        """
        Initialize database facade with configuration.

        Args:
            config: Application configuration object
            connection_manager: Pre-built connection manager (tests)
        """
        self.config = config
        self.connection_manager = connection_manager or ConnectionManager(config.database)

        self.feedback = FeedbackService(self.connection_manager)
        self.analyses = AnalysisService(self.connection_manager)

    def get_feedback_detail(self, feedback_id: int) -> Optional[Dict[str, Any]]:
        """
        Get a feedback item together with its stored analysis.

        Returns:
            {'feedback': ..., 'analysis': ... or None}, or None if the
            feedback item does not exist
        """
        item = self.feedback.get_feedback(feedback_id)
        if item is None:
            return None

        record = self.analyses.get_analysis(feedback_id)
        return {
            'feedback': item.to_dict(),
            'analysis': record.to_dict() if record else None
        }

    def health_check(self) -> Dict[str, Any]:
        """Check database connection and return status info with table counts."""
        try:
            health_info = self.connection_manager.health_check()

            if not health_info.get('connected', False):
                return health_info

            tables_info = {}

            try:
                status_counts = self.feedback.get_status_counts()
                tables_info['feedback'] = {
                    'count': sum(status_counts.values()),
                    'by_status': status_counts
                }
            except Exception as e:
                logger.warning(f"Could not get feedback stats: {e}")
                tables_info['feedback'] = {'error': str(e)}

            try:
                tables_info['analysis'] = {'count': self.analyses.count_analyses()}
            except Exception as e:
                logger.warning(f"Could not get analysis stats: {e}")
                tables_info['analysis'] = {'error': str(e)}

            health_info['tables'] = tables_info
            return health_info

        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {
                'connected': False,
                'error': str(e),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }

    def close(self) -> None:
        """Close underlying connection."""
        self.connection_manager.close()
