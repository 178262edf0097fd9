#!/usr/bin/env python3
"""
Analysis Database Service

Handles persistence of per-feedback analysis results and the aggregate
queries used by similarity and digest reporting.
"""

import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

from ..models.analysis import AnalysisRecord, FeedbackAnalysis, SENTIMENT_LABELS

logger = logging.getLogger(__name__)


class AnalysisService:
    """Service for analysis-related database operations."""

    def __init__(self, connection_manager):
        """
        Initialize analysis service.

        Args:
            connection_manager: Database connection manager instance
        """
        self.connection_manager = connection_manager

    def upsert_result(self, feedback_id: int, analysis: FeedbackAnalysis, model: str) -> None:
        """
        Store a successful analysis, replacing any previous result.

        All structured fields are overwritten and any earlier error is cleared.

        Args:
            feedback_id: Feedback item the analysis belongs to
            analysis: Validated analysis
            model: Model identifier that produced it
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    INSERT INTO analysis (
                        feedback_id, sentiment_label, sentiment_confidence,
                        urgency_score, urgency_reason, themes_json, summary,
                        next_action, model, error, updated_at
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, NULL, %s)
                    ON CONFLICT (feedback_id) DO UPDATE SET
                        sentiment_label = EXCLUDED.sentiment_label,
                        sentiment_confidence = EXCLUDED.sentiment_confidence,
                        urgency_score = EXCLUDED.urgency_score,
                        urgency_reason = EXCLUDED.urgency_reason,
                        themes_json = EXCLUDED.themes_json,
                        summary = EXCLUDED.summary,
                        next_action = EXCLUDED.next_action,
                        model = EXCLUDED.model,
                        error = NULL,
                        updated_at = EXCLUDED.updated_at
                """, (
                    feedback_id,
                    analysis.sentiment.label,
                    analysis.sentiment.confidence,
                    analysis.urgency.score,
                    analysis.urgency.reason,
                    analysis.themes_json(),
                    analysis.summary,
                    analysis.next_action,
                    model,
                    datetime.now(timezone.utc)
                ))

                logger.debug(f"Stored analysis for feedback {feedback_id}")

        except Exception as e:
            logger.error(f"Failed to store analysis for feedback {feedback_id}: {e}")
            raise

    def record_error(self, feedback_id: int, error: str) -> None:
        """
        Record an analysis failure.

        Only the error message and timestamp are written; structured fields
        from a previous successful run are left in place.
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    INSERT INTO analysis (feedback_id, error, updated_at)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (feedback_id) DO UPDATE SET
                        error = EXCLUDED.error,
                        updated_at = EXCLUDED.updated_at
                """, (feedback_id, error, datetime.now(timezone.utc)))

                logger.debug(f"Recorded analysis error for feedback {feedback_id}")

        except Exception as e:
            logger.error(f"Failed to record analysis error for feedback {feedback_id}: {e}")
            raise

    def get_analysis(self, feedback_id: int) -> Optional[AnalysisRecord]:
        """
        Get stored analysis row for a feedback item.

        Returns:
            AnalysisRecord or None if never analyzed
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT id, feedback_id, sentiment_label, sentiment_confidence,
                           urgency_score, urgency_reason, themes_json, summary,
                           next_action, model, error, updated_at
                    FROM analysis
                    WHERE feedback_id = %s
                """, (feedback_id,))

                row = cursor.fetchone()
                return AnalysisRecord.from_row(row) if row else None

        except Exception as e:
            logger.error(f"Failed to get analysis for feedback {feedback_id}: {e}")
            raise

    def get_themes_json(self, feedback_id: int) -> Optional[str]:
        """Get the raw stored themes for a feedback item, if any."""
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT themes_json FROM analysis WHERE feedback_id = %s
                """, (feedback_id,))

                row = cursor.fetchone()
                return row['themes_json'] if row else None

        except Exception as e:
            logger.error(f"Failed to get themes for feedback {feedback_id}: {e}")
            raise

    def list_theme_candidates(self, exclude_id: int, limit: int = 50) -> List[Dict[str, Any]]:
        """
        Get analyzed feedback items to compare against, in store order.

        Args:
            exclude_id: Feedback item to leave out (the lookup source)
            limit: Maximum number of candidates

        Returns:
            List of dicts with feedback fields plus themes_json
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT f.id, f.source, f.title, f.body, f.analysis_status,
                           f.created_at, a.themes_json
                    FROM analysis a
                    JOIN feedback f ON f.id = a.feedback_id
                    WHERE a.feedback_id != %s
                      AND a.themes_json IS NOT NULL
                    ORDER BY a.feedback_id
                    LIMIT %s
                """, (exclude_id, limit))

                return [dict(row) for row in cursor.fetchall()]

        except Exception as e:
            logger.error(f"Failed to get similarity candidates: {e}")
            raise

    def sentiment_counts_since(self, cutoff: datetime) -> Dict[str, int]:
        """
        Count analyzed feedback per sentiment label in a window.

        Returns:
            Dictionary with every label present, missing labels as 0
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT a.sentiment_label, COUNT(*) as count
                    FROM analysis a
                    JOIN feedback f ON f.id = a.feedback_id
                    WHERE f.created_at >= %s
                      AND a.sentiment_label IS NOT NULL
                    GROUP BY a.sentiment_label
                """, (cutoff,))

                counts = {label: 0 for label in SENTIMENT_LABELS}
                for row in cursor.fetchall():
                    counts[row['sentiment_label']] = row['count']
                return counts

        except Exception as e:
            logger.error(f"Failed to get sentiment breakdown: {e}")
            raise

    def average_urgency_since(self, cutoff: datetime) -> Optional[float]:
        """
        Mean urgency score of analyzed feedback in a window.

        Returns:
            Average as float, or None when nothing was analyzed
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT AVG(a.urgency_score) as avg_urgency
                    FROM analysis a
                    JOIN feedback f ON f.id = a.feedback_id
                    WHERE f.created_at >= %s
                      AND a.urgency_score IS NOT NULL
                """, (cutoff,))

                result = cursor.fetchone()
                if not result or result['avg_urgency'] is None:
                    return None
                # AVG over integers comes back as Decimal
                return float(result['avg_urgency'])

        except Exception as e:
            logger.error(f"Failed to get average urgency: {e}")
            raise

    def themes_json_since(self, cutoff: datetime) -> List[Dict[str, Any]]:
        """
        Get stored themes of feedback created in a window, oldest first.

        Returns:
            List of {'feedback_id', 'themes_json'} dictionaries
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT a.feedback_id, a.themes_json
                    FROM analysis a
                    JOIN feedback f ON f.id = a.feedback_id
                    WHERE f.created_at >= %s
                      AND a.themes_json IS NOT NULL
                    ORDER BY f.created_at, a.feedback_id
                """, (cutoff,))

                return [dict(row) for row in cursor.fetchall()]

        except Exception as e:
            logger.error(f"Failed to get themes for window: {e}")
            raise

    def count_analyses(self) -> int:
        """Count stored analysis rows."""
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("SELECT COUNT(*) as count FROM analysis")
                result = cursor.fetchone()
                return result['count'] if result else 0

        except Exception as e:
            logger.error(f"Failed to count analyses: {e}")
            raise
