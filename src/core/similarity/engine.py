#!/usr/bin/env python3
"""
Similarity Engine

Ranks previously analyzed feedback against one source item.
"""

import logging
from typing import List, Dict, Any, Optional

from ..exceptions import NotAnalyzedError, MalformedStoredDataError, ValidationError
from ..models.analysis import decode_themes
from ..models.similarity import SimilarityResult
from .strategies import SimilarityStrategy, ThemeJaccardStrategy

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 50

CANDIDATE_FIELDS = ('source', 'title', 'body', 'analysis_status', 'created_at')


class SimilarityEngine:
    """Finds feedback items that share themes with a given item."""

    def __init__(self, analysis_service, cache_manager,
                 strategy: Optional[SimilarityStrategy] = None,
                 pool_size: int = DEFAULT_POOL_SIZE):
        """
        Initialize similarity engine.

        Args:
            analysis_service: Analysis store (get_themes_json, list_theme_candidates)
            cache_manager: CacheManager for ranked lookups
            strategy: Scoring strategy (theme Jaccard by default)
            pool_size: Maximum number of candidates compared per lookup
        """
        self.analysis_service = analysis_service
        self.cache = cache_manager
        self.strategy = strategy or ThemeJaccardStrategy()
        self.pool_size = pool_size

    def find_similar(self, feedback_id: int, limit: int = 10) -> List[SimilarityResult]:
        """
        Get the items most similar to feedback_id, best first.

        Args:
            feedback_id: Source feedback item
            limit: Maximum number of results

        Returns:
            Ranked SimilarityResult list, never containing the source item

        Raises:
            ValidationError: If limit is below 1
            NotAnalyzedError: If the source has no usable themes
        """
        if not isinstance(limit, int) or limit < 1:
            raise ValidationError('limit', limit, "integer >= 1")

        cache_key = self.cache.similar_key(feedback_id)
        cached = self.cache.get_json(cache_key)
        if cached is not None:
            try:
                return [SimilarityResult.from_dict(item) for item in cached][:limit]
            except (KeyError, TypeError) as e:
                logger.warning(f"Dropping unusable cached similarity list {cache_key}: {e}")
                self.cache.invalidate(cache_key)

        ranked = self._rank(feedback_id)
        self.cache.put_json(cache_key, [result.to_dict() for result in ranked], 'similar')
        return ranked[:limit]

    def _rank(self, feedback_id: int) -> List[SimilarityResult]:
        source_themes = self._source_themes(feedback_id)

        candidates = self.analysis_service.list_theme_candidates(feedback_id, self.pool_size)
        logger.debug(
            f"Scoring {len(candidates)} candidates for feedback {feedback_id} "
            f"with {self.strategy.get_name()}"
        )

        results = []
        for row in candidates:
            if row['id'] == feedback_id:
                continue

            try:
                candidate_themes = decode_themes(row.get('themes_json'), row['id'])
            except MalformedStoredDataError as e:
                logger.debug(f"Skipping similarity candidate: {e}")
                continue

            match = self.strategy.score(source_themes, candidate_themes)
            if match is None:
                continue

            results.append(SimilarityResult(
                feedback_id=row['id'],
                similarity_score=match.score,
                matching_themes=match.matching_themes,
                feedback=self._candidate_fields(row)
            ))

        # sort is stable, ties keep store order
        results.sort(key=lambda result: result.similarity_score, reverse=True)
        return results

    def _source_themes(self, feedback_id: int):
        themes_json = self.analysis_service.get_themes_json(feedback_id)
        if themes_json is None:
            raise NotAnalyzedError(feedback_id)

        try:
            themes = decode_themes(themes_json, feedback_id)
        except MalformedStoredDataError as e:
            logger.warning(f"Source feedback has unusable themes: {e}")
            raise NotAnalyzedError(feedback_id) from e

        if not themes:
            raise NotAnalyzedError(feedback_id)
        return themes

    @staticmethod
    def _candidate_fields(row: Dict[str, Any]) -> Dict[str, Any]:
        fields = {}
        for name in CANDIDATE_FIELDS:
            value = row.get(name)
            if hasattr(value, 'isoformat'):
                value = value.isoformat()
            fields[name] = value
        return fields
