#!/usr/bin/env python3
"""
Centralized JSON schemas for LLM structured outputs.

Contains the JSON schema sent with every analysis request so the model's
output can be constrained and then validated against the same shape.
"""

from typing import Dict, Any

# Schema for single feedback item analysis
FEEDBACK_ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "sentiment": {
            "type": "object",
            "properties": {
                "label": {
                    "type": "string",
                    "enum": ["positive", "neutral", "negative"]
                },
                "confidence": {
                    "type": "number",
                    "minimum": 0,
                    "maximum": 1
                }
            },
            "required": ["label", "confidence"],
            "additionalProperties": False
        },
        "urgency": {
            "type": "object",
            "properties": {
                "score": {
                    "type": "integer",
                    "minimum": 0,
                    "maximum": 100
                },
                "reason": {"type": "string"}
            },
            "required": ["score", "reason"],
            "additionalProperties": False
        },
        "themes": {
            "type": "array",
            "minItems": 1,
            "maxItems": 4,
            "items": {
                "type": "object",
                "properties": {
                    "theme": {"type": "string"},
                    "impact_area": {"type": "string"},
                    "evidence_quote": {"type": "string"}
                },
                "required": ["theme", "impact_area", "evidence_quote"],
                "additionalProperties": False
            }
        },
        "summary": {"type": "string"},
        "next_action": {"type": "string"}
    },
    "required": ["sentiment", "urgency", "themes", "summary", "next_action"],
    "additionalProperties": False
}


def get_schema_by_type(analysis_type: str) -> Dict[str, Any]:
    """
    Get JSON schema by analysis type.

    Args:
        analysis_type: Type of analysis ("feedback_analysis")

    Returns:
        JSON schema dictionary

    Raises:
        ValueError: If analysis_type is not recognized
    """
    schemas = {
        "feedback_analysis": FEEDBACK_ANALYSIS_SCHEMA,
    }

    if analysis_type not in schemas:
        raise ValueError(f"Unknown analysis type: {analysis_type}")

    return schemas[analysis_type]
