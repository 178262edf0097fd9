#!/usr/bin/env python3
"""
Analysis orchestrator.

Drives one feedback item through pending -> processing -> completed|failed:
cache lookup, inference call, strict validation with a single retry,
persistence and cache write-through.
"""

import logging
from typing import Optional

from ..exceptions import (
    FeedbackNotFoundError, AnalysisParseError, AnalysisFailedError
)
from ..json_validator import FeedbackAnalysisValidator
from ..models.analysis import FeedbackAnalysis
from ..models.feedback import FeedbackItem, AnalysisStatus
from ..schemas import get_schema_by_type
from .prompts import FeedbackAnalysisPrompts

logger = logging.getLogger(__name__)

SCHEMA_NAME = "feedback_analysis"


class AnalysisOrchestrator:
    """
    Runs and persists the analysis of single feedback items.

    Concurrent calls for the same id are not coordinated: both run inference
    and the last write wins.
    """

    def __init__(self, feedback_service, analysis_service, cache_manager, client,
                 model: str = "gpt-4o-mini", validator: Optional[FeedbackAnalysisValidator] = None):
        """
        Initialize orchestrator.

        Args:
            feedback_service: Feedback store (get_feedback, update_status)
            analysis_service: Analysis store (upsert_result, record_error)
            cache_manager: CacheManager for analysis results
            client: Inference client with run(model, system_prompt, user_prompt, response_schema)
            model: Model identifier sent to the client and recorded on rows
            validator: Output validator
        """
        self.feedback_service = feedback_service
        self.analysis_service = analysis_service
        self.cache = cache_manager
        self.client = client
        self.model = model
        self.validator = validator or FeedbackAnalysisValidator()

    def analyze(self, feedback_id: int, force: bool = False) -> FeedbackAnalysis:
        """
        Analyze one feedback item, serving from cache when possible.

        Args:
            feedback_id: Feedback item to analyze
            force: Skip and drop any cached result

        Returns:
            Validated FeedbackAnalysis

        Raises:
            FeedbackNotFoundError: If the item does not exist (no status change)
            AnalysisFailedError: If inference, validation or persistence failed
        """
        cache_key = self.cache.analysis_key(feedback_id)

        if force:
            self.cache.invalidate(cache_key)
        else:
            cached = self._get_cached(cache_key)
            if cached is not None:
                logger.info(f"Serving cached analysis for feedback {feedback_id}")
                return cached

        item = self.feedback_service.get_feedback(feedback_id)
        if item is None:
            raise FeedbackNotFoundError(feedback_id)

        self.feedback_service.update_status(feedback_id, AnalysisStatus.PROCESSING)
        logger.info(f"Analyzing feedback {feedback_id} with {self.model}")

        try:
            analysis = self._run_with_retry(item)

            self.analysis_service.upsert_result(feedback_id, analysis, self.model)
            self.feedback_service.update_status(feedback_id, AnalysisStatus.COMPLETED)
            self.cache.put_json(cache_key, analysis.to_dict(), 'analysis')

        except Exception as e:
            reason = str(e)
            logger.error(f"Analysis failed for feedback {feedback_id}: {reason}")
            self._mark_failed(feedback_id, reason)
            raise AnalysisFailedError(feedback_id, reason) from e

        logger.info(
            f"Feedback {feedback_id} analyzed: {analysis.sentiment.label}, "
            f"urgency {analysis.urgency.score}, {len(analysis.themes)} themes"
        )
        return analysis

    def _get_cached(self, cache_key: str) -> Optional[FeedbackAnalysis]:
        cached = self.cache.get_json(cache_key)
        if cached is None:
            return None

        try:
            return FeedbackAnalysis.from_dict(cached)
        except (KeyError, TypeError) as e:
            logger.warning(f"Dropping unusable cached analysis {cache_key}: {e}")
            self.cache.invalidate(cache_key)
            return None

    def _run_with_retry(self, item: FeedbackItem) -> FeedbackAnalysis:
        """Call inference and validate; one more attempt on unparseable output."""
        try:
            return self._run_once(item)
        except AnalysisParseError as e:
            logger.warning(f"First parse failed for feedback {item.id}, retrying: {e}")
            return self._run_once(item)

    def _run_once(self, item: FeedbackItem) -> FeedbackAnalysis:
        raw_output = self.client.run(
            self.model,
            FeedbackAnalysisPrompts.SYSTEM_PROMPT,
            FeedbackAnalysisPrompts.get_analysis_prompt(item),
            get_schema_by_type(SCHEMA_NAME)
        )
        return self.validator.validate_and_parse(raw_output)

    def _mark_failed(self, feedback_id: int, reason: str) -> None:
        """Record the failure; store errors here are logged so the original cause is reported."""
        try:
            self.feedback_service.update_status(feedback_id, AnalysisStatus.FAILED)
            self.analysis_service.record_error(feedback_id, reason)
        except Exception as e:
            logger.error(f"Could not record failure for feedback {feedback_id}: {e}")
