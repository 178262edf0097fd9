#!/usr/bin/env python3
"""
Analysis command: run single-item analysis, similarity lookups and digests.
"""

from argparse import Namespace

from .base import BaseCommand, EXIT_OK, EXIT_ERROR
from core.formatters import format_analysis, format_similar, format_digest


class AnalysisCommand(BaseCommand):
    """Analyze feedback and report on analyzed feedback."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute analysis subcommand."""
        try:
            if subcommand == "run":
                return self.run(args)
            elif subcommand == "similar":
                return self.similar(args)
            elif subcommand == "digest":
                return self.digest(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return EXIT_ERROR

        except Exception as e:
            return self.handle_error(e, f"analysis {subcommand}")

    def run(self, args: Namespace) -> int:
        """Analyze one feedback item."""
        orchestrator = self.create_orchestrator()
        analysis = orchestrator.analyze(args.id, force=args.force)
        self.emit(args, analysis.to_dict(), format_analysis(analysis, args.id))
        return EXIT_OK

    def similar(self, args: Namespace) -> int:
        """List feedback sharing themes with one item."""
        engine = self.create_similarity_engine()
        results = engine.find_similar(args.id, limit=args.limit)
        self.emit(args, [result.to_dict() for result in results], format_similar(args.id, results))
        return EXIT_OK

    def digest(self, args: Namespace) -> int:
        """Show the windowed digest."""
        aggregator = self.create_digest_aggregator()
        report = aggregator.digest(args.window)
        self.emit(args, report.to_dict(), format_digest(report))
        return EXIT_OK
