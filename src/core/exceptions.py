#!/usr/bin/env python3
"""
Standardized exception hierarchy for the feedback insights service.

Provides specific exception types for different error conditions with
proper error context for logging and caller-visible failures.
"""

from typing import Optional, Dict, Any


class FeedbackInsightsError(Exception):
    """Base exception for all feedback insights errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Lookup-related exceptions
class FeedbackNotFoundError(FeedbackInsightsError):
    """Referenced feedback item does not exist."""

    def __init__(self, feedback_id: int):
        message = "Feedback not found"
        context = {'feedback_id': feedback_id}
        super().__init__(message, error_code='NotFound', context=context)
        self.feedback_id = feedback_id


class NotAnalyzedError(FeedbackInsightsError):
    """Feedback item has no completed analysis with themes."""

    def __init__(self, feedback_id: int):
        message = "Feedback not found or not analyzed"
        context = {'feedback_id': feedback_id}
        super().__init__(message, error_code='NotAnalyzed', context=context)
        self.feedback_id = feedback_id


# Analysis-related exceptions
class AnalysisError(FeedbackInsightsError):
    """Base exception for analysis errors."""
    pass


class AnalysisParseError(AnalysisError):
    """Inference output failed schema validation."""

    def __init__(self, validation_errors: list):
        if len(validation_errors) == 1:
            message = f"Analysis output invalid: {validation_errors[0]}"
        else:
            message = f"Analysis output invalid: {len(validation_errors)} errors ({'; '.join(validation_errors)})"
        context = {'validation_errors': list(validation_errors)}
        super().__init__(message, error_code='ParseError', context=context)
        self.validation_errors = list(validation_errors)


class AnalysisFailedError(AnalysisError):
    """Terminal analysis failure, persisted as status 'failed'."""

    def __init__(self, feedback_id: int, reason: str):
        message = "Analysis failed"
        context = {
            'feedback_id': feedback_id,
            'reason': reason
        }
        super().__init__(message, error_code='AnalysisFailed', context=context)
        self.feedback_id = feedback_id
        self.reason = reason

    def __str__(self) -> str:
        return f"Analysis failed for feedback {self.feedback_id}: {self.reason}"


class LLMError(AnalysisError):
    """LLM/AI inference error."""

    def __init__(self, provider: str, model: str, original_error: Exception):
        message = f"LLM error from {provider} ({model}): {original_error}"
        context = {
            'provider': provider,
            'model': model,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class MalformedStoredDataError(FeedbackInsightsError):
    """Stored theme data could not be decoded."""

    def __init__(self, feedback_id: Optional[int], original_error: Exception):
        message = f"Malformed theme data for feedback {feedback_id}"
        context = {
            'feedback_id': feedback_id,
            'original_error': str(original_error)
        }
        super().__init__(message, error_code='MalformedStoredData', context=context)


# Database-related exceptions
class DatabaseError(FeedbackInsightsError):
    """Base exception for database errors."""
    pass


class DatabaseConnectionError(DatabaseError):
    """Failed to connect to database."""

    def __init__(self, original_error: Exception):
        message = "Failed to connect to database"
        context = {'original_error': str(original_error)}
        super().__init__(message, context=context)


# Validation-related exceptions
class ValidationError(FeedbackInsightsError):
    """Request data validation failed."""

    def __init__(self, field: str, value: Any, expected: str):
        message = f"Validation failed for {field}: expected {expected}, got {value!r}"
        context = {
            'field': field,
            'value': str(value),
            'expected': expected
        }
        super().__init__(message, context=context)
