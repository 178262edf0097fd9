#!/usr/bin/env python3
"""
Feedback command for submitting and browsing feedback items.
"""

from argparse import Namespace

from .base import BaseCommand, EXIT_OK, EXIT_ERROR
from core.exceptions import FeedbackNotFoundError
from core.formatters import format_feedback, format_feedback_list


class FeedbackCommand(BaseCommand):
    """Submit, list and inspect feedback items."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute feedback subcommand."""
        try:
            if subcommand == "submit":
                return self.submit(args)
            elif subcommand == "list":
                return self.list(args)
            elif subcommand == "show":
                return self.show(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return EXIT_ERROR

        except Exception as e:
            return self.handle_error(e, f"feedback {subcommand}")

    def submit(self, args: Namespace) -> int:
        """Store a feedback item (identical content returns the existing item)."""
        item = self.database.feedback.create_feedback(args.source, args.title, args.body)
        self.emit(args, item.to_dict(), f"✅ Stored feedback\n{format_feedback(item)}")
        return EXIT_OK

    def list(self, args: Namespace) -> int:
        """List feedback, newest first."""
        page = self.database.feedback.list_feedback(
            source=args.source,
            q=args.q,
            limit=args.limit,
            offset=args.offset
        )
        self.emit(args, page, format_feedback_list(page))
        return EXIT_OK

    def show(self, args: Namespace) -> int:
        """Show one feedback item with its stored analysis."""
        detail = self.database.get_feedback_detail(args.id)
        if detail is None:
            raise FeedbackNotFoundError(args.id)

        feedback = detail['feedback']
        analysis = detail['analysis']

        lines = [
            f"#{feedback['id']} [{feedback['source'].upper()}] {feedback['title']}",
            f"Status: {feedback['analysis_status']}  Created: {feedback['created_at']}",
            "",
            feedback['body'],
        ]
        if analysis:
            lines.append("")
            if analysis.get('sentiment_label'):
                lines.append(
                    f"Sentiment: {analysis['sentiment_label']}  "
                    f"Urgency: {analysis['urgency_score']}  Model: {analysis['model']}"
                )
                lines.append(f"Summary: {analysis['summary']}")
            if analysis.get('error'):
                lines.append(f"❌ Last error: {analysis['error']}")

        self.emit(args, detail, "\n".join(lines))
        return EXIT_OK
