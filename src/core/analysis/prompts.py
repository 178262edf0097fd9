#!/usr/bin/env python3
"""
AI prompts for customer feedback analysis.

Centralizes the prompt templates sent with every analysis request.
"""

from ..models.feedback import FeedbackItem


class FeedbackAnalysisPrompts:
    """Collection of prompts for single-item feedback analysis."""

    # ---------- SYSTEM PROMPT ----------
    SYSTEM_PROMPT = (
        "You are an assistant that outputs STRICT JSON only.\n"
        "Return JSON matching the provided schema exactly.\n"
        "Do not include markdown, comments, or extra keys."
    )

    # ---------- USER PROMPT ----------
    ANALYSIS_TEMPLATE = (
        "Analyze this customer feedback and output JSON with:\n"
        "- sentiment (label + confidence 0..1)\n"
        "- urgency score 0..100 with reason\n"
        "- 2-4 themes with evidence_quote\n"
        "- 1-2 sentence summary\n"
        "- next_action: one actionable step for product/support/engineering\n"
        "\n"
        "Feedback:\n"
        "SOURCE: {source}\n"
        "TITLE: {title}\n"
        "BODY: {body}"
    )

    @classmethod
    def get_analysis_prompt(cls, feedback: FeedbackItem) -> str:
        """
        Build the user prompt for one feedback item.

        Source, title and body are embedded as-is.
        """
        return cls.ANALYSIS_TEMPLATE.format(
            source=feedback.source,
            title=feedback.title,
            body=feedback.body
        )
