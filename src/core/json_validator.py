#!/usr/bin/env python3
"""
JSON Schema Validation for feedback analysis output.

Validates LLM output against the feedback analysis schema and builds the
typed result. Anything that does not match is rejected; there are no
fallback values.
"""

import json
import logging
from typing import Dict, Any, List, Optional, Union

from .exceptions import AnalysisParseError
from .models.analysis import (
    SENTIMENT_LABELS, Sentiment, Urgency, Theme, FeedbackAnalysis
)

logger = logging.getLogger(__name__)

MIN_THEMES = 1
MAX_THEMES = 4


class FeedbackAnalysisValidator:
    """Validates feedback analysis JSON output from the inference engine."""

    @staticmethod
    def validate_and_parse(raw_output: Union[str, bytes, Dict[str, Any]]) -> FeedbackAnalysis:
        """
        Normalize and strictly validate raw model output.

        Args:
            raw_output: JSON string or already-decoded mapping

        Returns:
            Validated FeedbackAnalysis

        Raises:
            AnalysisParseError: If the output is not JSON or violates the schema
        """
        data = FeedbackAnalysisValidator._normalize(raw_output)

        errors: List[str] = []
        sentiment = FeedbackAnalysisValidator._validate_sentiment(data.get("sentiment"), errors)
        urgency = FeedbackAnalysisValidator._validate_urgency(data.get("urgency"), errors)
        themes = FeedbackAnalysisValidator._validate_themes(data.get("themes"), errors)
        summary = FeedbackAnalysisValidator._require_string(data, "summary", "summary", errors)
        next_action = FeedbackAnalysisValidator._require_string(data, "next_action", "next_action", errors)

        if errors:
            logger.warning(f"Analysis output failed validation: {errors}")
            raise AnalysisParseError(errors)

        return FeedbackAnalysis(
            sentiment=sentiment,
            urgency=urgency,
            themes=themes,
            summary=summary,
            next_action=next_action
        )

    @staticmethod
    def _normalize(raw_output: Any) -> Dict[str, Any]:
        """Turn a string or mapping response into a dict."""
        if isinstance(raw_output, bytes):
            raw_output = raw_output.decode('utf-8', errors='replace')

        if isinstance(raw_output, str):
            json_str = FeedbackAnalysisValidator._extract_json(raw_output)
            try:
                data = json.loads(json_str)
            except json.JSONDecodeError as e:
                logger.error(f"JSON parsing failed: {e}")
                logger.debug(f"First 300 chars: {repr(json_str[:300])}")
                raise AnalysisParseError([f"response is not valid JSON ({e.msg})"]) from e
        else:
            data = raw_output

        if not isinstance(data, dict):
            raise AnalysisParseError([f"response must be a JSON object, got {type(data).__name__}"])

        return data

    @staticmethod
    def _extract_json(raw_output: str) -> str:
        """Strip markdown code fences around a JSON body."""
        text = raw_output.strip()
        if text.startswith("```"):
            text = text[3:]
            if text.lower().startswith("json"):
                text = text[4:]
            if text.endswith("```"):
                text = text[:-3]
        return text.strip()

    @staticmethod
    def _validate_sentiment(value: Any, errors: List[str]) -> Optional[Sentiment]:
        if not isinstance(value, dict):
            errors.append("sentiment: required object")
            return None

        label = value.get("label")
        if label not in SENTIMENT_LABELS:
            errors.append(f"sentiment.label: must be one of {', '.join(SENTIMENT_LABELS)}, got {label!r}")

        confidence = value.get("confidence")
        if not _is_number(confidence):
            errors.append(f"sentiment.confidence: required number, got {confidence!r}")
        elif not 0 <= confidence <= 1:
            errors.append(f"sentiment.confidence: must be between 0 and 1, got {confidence}")

        return Sentiment(label=label, confidence=float(confidence) if _is_number(confidence) else None)

    @staticmethod
    def _validate_urgency(value: Any, errors: List[str]) -> Optional[Urgency]:
        if not isinstance(value, dict):
            errors.append("urgency: required object")
            return None

        score = value.get("score")
        if not _is_integer(score):
            errors.append(f"urgency.score: required integer, got {score!r}")
        elif not 0 <= score <= 100:
            errors.append(f"urgency.score: must be between 0 and 100, got {score}")

        reason = FeedbackAnalysisValidator._require_string(value, "reason", "urgency.reason", errors)
        return Urgency(score=int(score) if _is_integer(score) else None, reason=reason)

    @staticmethod
    def _validate_themes(value: Any, errors: List[str]) -> List[Theme]:
        if not isinstance(value, list):
            errors.append("themes: required array")
            return []

        if not MIN_THEMES <= len(value) <= MAX_THEMES:
            errors.append(f"themes: must contain {MIN_THEMES}-{MAX_THEMES} entries, got {len(value)}")

        themes = []
        for i, item in enumerate(value):
            path = f"themes[{i}]"
            if not isinstance(item, dict):
                errors.append(f"{path}: required object")
                continue
            themes.append(Theme(
                theme=FeedbackAnalysisValidator._require_string(item, "theme", f"{path}.theme", errors),
                impact_area=FeedbackAnalysisValidator._require_string(item, "impact_area", f"{path}.impact_area", errors),
                evidence_quote=FeedbackAnalysisValidator._require_string(item, "evidence_quote", f"{path}.evidence_quote", errors)
            ))
        return themes

    @staticmethod
    def _require_string(data: Dict[str, Any], key: str, path: str, errors: List[str]) -> Optional[str]:
        value = data.get(key)
        if not isinstance(value, str):
            errors.append(f"{path}: required string")
            return None
        return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()
