#!/usr/bin/env python3
"""
Digest aggregation over a recent time window.

Combines counts, sentiment, urgency and theme frequency for feedback created
in the last 24 hours or 7 days, served through a short-lived cache.
"""

import math
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Any, Optional

from ..exceptions import ValidationError, MalformedStoredDataError
from ..models.analysis import decode_themes
from ..models.digest import DigestReport

logger = logging.getLogger(__name__)

WINDOW_HOURS = {
    '24h': 24,
    '7d': 7 * 24,
}

TOP_THEMES_LIMIT = 5


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up."""
    return int(math.floor(value + 0.5))


class DigestAggregator:
    """Builds windowed DigestReport objects from the feedback and analysis stores."""

    def __init__(self, feedback_service, analysis_service, cache_manager,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize digest aggregator.

        Args:
            feedback_service: Feedback store (count_since, source_counts_since)
            analysis_service: Analysis store (sentiment/urgency/theme window queries)
            cache_manager: CacheManager for digest results
            clock: Returns the current UTC datetime (injectable for tests)
        """
        self.feedback_service = feedback_service
        self.analysis_service = analysis_service
        self.cache = cache_manager
        self.clock = clock or _utc_now

    def digest(self, window: str = "24h") -> DigestReport:
        """
        Get the digest for a window, from cache when fresh.

        Args:
            window: '24h' or '7d'

        Returns:
            DigestReport

        Raises:
            ValidationError: For an unsupported window
        """
        if window not in WINDOW_HOURS:
            raise ValidationError('window', window, f"one of: {', '.join(WINDOW_HOURS)}")

        cache_key = self.cache.digest_key(window)
        cached = self.cache.get_json(cache_key)
        if cached is not None:
            try:
                return DigestReport.from_dict(cached)
            except (KeyError, TypeError) as e:
                logger.warning(f"Dropping unusable cached digest {cache_key}: {e}")
                self.cache.invalidate(cache_key)

        report = self._compute(window)
        self.cache.put_json(cache_key, report.to_dict(), 'digest')
        return report

    def _compute(self, window: str) -> DigestReport:
        cutoff = self.clock() - timedelta(hours=WINDOW_HOURS[window])
        logger.info(f"Computing {window} digest since {cutoff.isoformat()}")

        average = self.analysis_service.average_urgency_since(cutoff)

        return DigestReport(
            window=window,
            total_feedback=self.feedback_service.count_since(cutoff),
            sentiment_breakdown=self.analysis_service.sentiment_counts_since(cutoff),
            avg_urgency=round_half_up(average) if average is not None else 0,
            top_themes=self._top_themes(self.analysis_service.themes_json_since(cutoff)),
            sources=self.feedback_service.source_counts_since(cutoff)
        )

    @staticmethod
    def _top_themes(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Count theme labels across rows and keep the most frequent.

        Labels are counted exactly as stored. Ties keep first-seen order.
        """
        counts: Counter = Counter()

        for row in rows:
            try:
                themes = decode_themes(row.get('themes_json'), row.get('feedback_id'))
            except MalformedStoredDataError as e:
                logger.debug(f"Skipping themes for digest: {e}")
                continue

            for theme in themes:
                counts[theme.theme] += 1

        # most_common keeps insertion order for equal counts
        return [
            {'theme': label, 'count': count}
            for label, count in counts.most_common(TOP_THEMES_LIMIT)
        ]
