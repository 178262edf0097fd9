#!/usr/bin/env python3
"""
Formatting utilities for feedback, analysis and digest display.
"""

import json
from typing import List, Dict, Any, Optional

from .models.analysis import FeedbackAnalysis
from .models.digest import DigestReport
from .models.feedback import FeedbackItem
from .models.similarity import SimilarityResult

SENTIMENT_ICONS = {
    'positive': '😊',
    'neutral': '😐',
    'negative': '😠',
}


def to_json(data: Any) -> str:
    """Serialize command output as indented JSON."""
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _shorten(text: str, limit: int = 80) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[:limit - 3] + "..."


def format_feedback(item: FeedbackItem) -> str:
    """Format a single feedback item for display."""
    timestamp = item.created_at.strftime("%Y-%m-%d %H:%M") if item.created_at else ""
    return (
        f"#{item.id} [{timestamp}] [{item.source.upper()}] {item.title}\n"
        f"    status: {item.analysis_status.value}  fingerprint: {item.fingerprint}\n"
    )


def format_feedback_list(page: Dict[str, Any]) -> str:
    """Format a list_feedback page."""
    rows = page.get('data', [])
    if not rows:
        return "No feedback found."

    start = page['offset'] + 1
    lines = [f"Showing {start}-{page['offset'] + len(rows)} of {page['total']}"]
    for row in rows:
        icon = SENTIMENT_ICONS.get(row.get('sentiment_label'), '  ')
        lines.append(
            f"  {icon} #{row['id']:<6} {row['source']:<10} {row['analysis_status']:<10} "
            f"{_shorten(row['title'], 60)}"
        )
    return "\n".join(lines)


def format_analysis(analysis: FeedbackAnalysis, feedback_id: Optional[int] = None) -> str:
    """Format an analysis result for display."""
    header = "=== Feedback Analysis ==="
    if feedback_id is not None:
        header = f"=== Feedback Analysis #{feedback_id} ==="

    icon = SENTIMENT_ICONS.get(analysis.sentiment.label, '')
    lines = [
        header,
        f"{icon} Sentiment: {analysis.sentiment.label} ({analysis.sentiment.confidence:.2f})",
        f"🚨 Urgency: {analysis.urgency.score}/100 - {analysis.urgency.reason}",
        "",
        "💡 Summary:",
        f"  {analysis.summary}",
        "",
        "🏷️ Themes:",
    ]

    for theme in analysis.themes:
        lines.append(f"  • {theme.theme} ({theme.impact_area})")
        lines.append(f"      \"{_shorten(theme.evidence_quote, 100)}\"")

    lines.extend([
        "",
        f"➡️  Next action: {analysis.next_action}",
    ])
    return "\n".join(lines)


def format_similar(feedback_id: int, results: List[SimilarityResult]) -> str:
    """Format a ranked similarity list."""
    if not results:
        return f"No feedback shares themes with #{feedback_id}."

    lines = [f"=== Similar to #{feedback_id} ==="]
    for rank, result in enumerate(results, 1):
        title = result.feedback.get('title') or ''
        lines.append(
            f"{rank:>2}. #{result.feedback_id:<6} score {result.similarity_score:.2f}  {_shorten(title, 60)}"
        )
        lines.append(f"      shared: {', '.join(result.matching_themes)}")
    return "\n".join(lines)


def format_digest(report: DigestReport) -> str:
    """Format a digest report for display."""
    breakdown = report.sentiment_breakdown
    lines = [
        f"=== Feedback Digest ({report.window}) ===",
        f"📰 Total feedback: {report.total_feedback}",
        f"😊 {breakdown.get('positive', 0)}  😐 {breakdown.get('neutral', 0)}  😠 {breakdown.get('negative', 0)}",
        f"🚨 Average urgency: {report.avg_urgency}",
    ]

    if report.top_themes:
        lines.extend(["", "🏷️ Top themes:"])
        for item in report.top_themes:
            lines.append(f"  • {item['theme']} ({item['count']})")

    if report.sources:
        lines.extend(["", "📥 Sources:"])
        for item in report.sources:
            lines.append(f"  • {item['source']}: {item['count']}")

    return "\n".join(lines)
