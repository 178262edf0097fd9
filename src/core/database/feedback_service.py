#!/usr/bin/env python3
"""
Feedback Database Service

Handles all database operations related to feedback items.
"""

import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

from ..exceptions import ValidationError
from ..models.feedback import FeedbackItem, AnalysisStatus, generate_fingerprint

logger = logging.getLogger(__name__)

FEEDBACK_COLUMNS = "id, source, title, body, fingerprint, analysis_status, created_at"

MAX_LIST_LIMIT = 100


class FeedbackService:
    """Service for feedback-related database operations."""

    def __init__(self, connection_manager):
        """
        Initialize feedback service.

        Args:
            connection_manager: Database connection manager instance
        """
        self.connection_manager = connection_manager

    def create_feedback(self, source: str, title: str, body: str) -> FeedbackItem:
        """
        Store a feedback item, deduplicated by content fingerprint.

        Re-submitting identical content returns the existing row unchanged.

        Args:
            source: Where the feedback came from (github, support, ...)
            title: Short title
            body: Feedback text

        Returns:
            The stored (or pre-existing) FeedbackItem
        """
        for field_name, value in (('source', source), ('title', title), ('body', body)):
            if not isinstance(value, str):
                raise ValidationError(field_name, value, "string")

        fingerprint = generate_fingerprint(source, title, body)

        try:
            with self.connection_manager.get_cursor() as cursor:
                # No-op update so RETURNING yields the existing row on conflict
                cursor.execute(f"""
                    INSERT INTO feedback (source, title, body, fingerprint, analysis_status, created_at)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON CONFLICT (fingerprint) DO UPDATE SET fingerprint = feedback.fingerprint
                    RETURNING {FEEDBACK_COLUMNS}
                """, (
                    source,
                    title,
                    body,
                    fingerprint,
                    AnalysisStatus.PENDING.value,
                    datetime.now(timezone.utc)
                ))

                item = FeedbackItem.from_row(cursor.fetchone())
                logger.info(f"Stored feedback {item.id} (fingerprint {fingerprint})")
                return item

        except Exception as e:
            logger.error(f"Failed to store feedback: {e}")
            raise

    def get_feedback(self, feedback_id: int) -> Optional[FeedbackItem]:
        """
        Get feedback item by ID.

        Returns:
            FeedbackItem or None if not found
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(f"""
                    SELECT {FEEDBACK_COLUMNS}
                    FROM feedback
                    WHERE id = %s
                """, (feedback_id,))

                row = cursor.fetchone()
                return FeedbackItem.from_row(row) if row else None

        except Exception as e:
            logger.error(f"Failed to get feedback {feedback_id}: {e}")
            raise

    def update_status(self, feedback_id: int, status: AnalysisStatus) -> None:
        """Set the current analysis status of a feedback item."""
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    UPDATE feedback SET analysis_status = %s WHERE id = %s
                """, (AnalysisStatus(status).value, feedback_id))

                logger.debug(f"Feedback {feedback_id} status -> {AnalysisStatus(status).value}")

        except Exception as e:
            logger.error(f"Failed to update status for feedback {feedback_id}: {e}")
            raise

    def list_feedback(self, source: Optional[str] = None, q: Optional[str] = None,
                      limit: int = 20, offset: int = 0) -> Dict[str, Any]:
        """
        List feedback with optional filters, newest first.

        Args:
            source: Exact source filter
            q: Case-insensitive substring match on title or body
            limit: Page size (1-100)
            offset: Rows to skip

        Returns:
            Dictionary with data, total, limit and offset
        """
        if not isinstance(limit, int) or not 1 <= limit <= MAX_LIST_LIMIT:
            raise ValidationError('limit', limit, f"integer between 1 and {MAX_LIST_LIMIT}")
        if not isinstance(offset, int) or offset < 0:
            raise ValidationError('offset', offset, "non-negative integer")

        where = ["1=1"]
        params: List[Any] = []

        if source:
            where.append("f.source = %s")
            params.append(source)

        if q:
            where.append("(f.title ILIKE %s OR f.body ILIKE %s)")
            search_term = f"%{q}%"
            params.extend([search_term, search_term])

        where_clause = " AND ".join(where)

        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(f"""
                    SELECT COUNT(*) as count
                    FROM feedback f
                    WHERE {where_clause}
                """, tuple(params))
                total = cursor.fetchone()['count']

                cursor.execute(f"""
                    SELECT f.id, f.source, f.title, f.body, f.fingerprint,
                           f.analysis_status, f.created_at, a.sentiment_label
                    FROM feedback f
                    LEFT JOIN analysis a ON f.id = a.feedback_id
                    WHERE {where_clause}
                    ORDER BY f.created_at DESC
                    LIMIT %s OFFSET %s
                """, tuple(params) + (limit, offset))

                data = []
                for row in cursor.fetchall():
                    item = FeedbackItem.from_row(row).to_dict()
                    item['sentiment_label'] = row.get('sentiment_label')
                    data.append(item)

                return {
                    'data': data,
                    'total': total,
                    'limit': limit,
                    'offset': offset
                }

        except Exception as e:
            logger.error(f"Failed to list feedback: {e}")
            raise

    def count_since(self, cutoff: datetime) -> int:
        """Count feedback created at or after cutoff."""
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT COUNT(*) as count
                    FROM feedback
                    WHERE created_at >= %s
                """, (cutoff,))

                result = cursor.fetchone()
                return result['count'] if result else 0

        except Exception as e:
            logger.error(f"Failed to count feedback: {e}")
            raise

    def source_counts_since(self, cutoff: datetime) -> List[Dict[str, Any]]:
        """
        Get per-source counts of feedback created at or after cutoff.

        Returns:
            List of {'source', 'count'} dictionaries
        """
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT source, COUNT(*) as count
                    FROM feedback
                    WHERE created_at >= %s
                    GROUP BY source
                    ORDER BY count DESC, source
                """, (cutoff,))

                return [{'source': row['source'], 'count': row['count']} for row in cursor.fetchall()]

        except Exception as e:
            logger.error(f"Failed to get source breakdown: {e}")
            raise

    def get_status_counts(self) -> Dict[str, int]:
        """Get number of feedback items per analysis status."""
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute("""
                    SELECT analysis_status, COUNT(*) as count
                    FROM feedback
                    GROUP BY analysis_status
                """)

                counts = {status.value: 0 for status in AnalysisStatus}
                for row in cursor.fetchall():
                    counts[row['analysis_status']] = row['count']
                return counts

        except Exception as e:
            logger.error(f"Failed to get status counts: {e}")
            raise
