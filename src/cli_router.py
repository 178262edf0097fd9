#!/usr/bin/env python3
"""
CLI Router for Feedback Insights.

Modular command architecture for feedback analysis.
"""

import argparse
import logging
import sys
from typing import Optional, List

from commands import get_command, COMMANDS

logger = logging.getLogger(__name__)


class CLIRouter:
    """
    CLI router for feedback insight commands.

    Command structure:
    - python run.py feedback submit --source github --title ... --body ...
    - python run.py analysis run 42 --force
    - python run.py analysis similar 42 --limit 5
    - python run.py analysis digest --window 7d
    - python run.py health check
    """

    def __init__(self, container=None):
        """Initialize CLI router."""
        self.container = container
        self._command_parsers = {}
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="Customer feedback analysis with sentiment, urgency and theme insights",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_feedback_parser(subparsers)
        self._add_analysis_parser(subparsers)
        self._add_health_parser(subparsers)

        return parser

    @staticmethod
    def _add_json_flag(parser: argparse.ArgumentParser) -> None:
        parser.add_argument('--json', action='store_true', help='Print machine-readable JSON')

    def _add_feedback_parser(self, subparsers):
        """Add feedback command parser."""
        feedback_parser = subparsers.add_parser(
            'feedback',
            help='Submit and browse feedback items'
        )
        self._command_parsers['feedback'] = feedback_parser

        feedback_subparsers = feedback_parser.add_subparsers(
            dest='subcommand',
            help='Feedback operations',
            metavar='{submit,list,show}'
        )

        # Submit subcommand
        submit_parser = feedback_subparsers.add_parser('submit', help='Store a feedback item')
        submit_parser.add_argument('--source', required=True, help='Where the feedback came from (github, email, ...)')
        submit_parser.add_argument('--title', required=True, help='Short title')
        submit_parser.add_argument('--body', required=True, help='Feedback text')
        self._add_json_flag(submit_parser)

        # List subcommand
        list_parser = feedback_subparsers.add_parser('list', help='List feedback, newest first')
        list_parser.add_argument('--source', default=None, help='Only this source')
        list_parser.add_argument('--q', default=None, help='Search title and body')
        list_parser.add_argument('--limit', type=int, default=20, help='Page size, 1-100 (default: 20)')
        list_parser.add_argument('--offset', type=int, default=0, help='Rows to skip (default: 0)')
        self._add_json_flag(list_parser)

        # Show subcommand
        show_parser = feedback_subparsers.add_parser('show', help='Show feedback with its analysis')
        show_parser.add_argument('id', type=int, help='Feedback id')
        self._add_json_flag(show_parser)

    def _add_analysis_parser(self, subparsers):
        """Add analysis command parser."""
        analysis_parser = subparsers.add_parser(
            'analysis',
            help='Analyze feedback, find similar items and build digests'
        )
        self._command_parsers['analysis'] = analysis_parser

        analysis_subparsers = analysis_parser.add_subparsers(
            dest='subcommand',
            help='Analysis operations',
            metavar='{run,similar,digest}'
        )

        # Run subcommand
        run_parser = analysis_subparsers.add_parser('run', help='Analyze one feedback item')
        run_parser.add_argument('id', type=int, help='Feedback id')
        run_parser.add_argument('--force', action='store_true', help='Ignore cached result and re-analyze')
        self._add_json_flag(run_parser)

        # Similar subcommand
        similar_parser = analysis_subparsers.add_parser('similar', help='Find feedback sharing themes')
        similar_parser.add_argument('id', type=int, help='Feedback id')
        similar_parser.add_argument('--limit', type=int, default=10, help='Maximum results (default: 10)')
        self._add_json_flag(similar_parser)

        # Digest subcommand
        digest_parser = analysis_subparsers.add_parser('digest', help='Summarize recent feedback')
        digest_parser.add_argument('--window', choices=['24h', '7d'], default='24h', help='Time window (default: 24h)')
        self._add_json_flag(digest_parser)

    def _add_health_parser(self, subparsers):
        """Add health command parser."""
        health_parser = subparsers.add_parser(
            'health',
            help='System health monitoring and diagnostics'
        )
        self._command_parsers['health'] = health_parser

        health_subparsers = health_parser.add_subparsers(
            dest='subcommand',
            help='Health operations',
            metavar='{check}'
        )

        check_parser = health_subparsers.add_parser('check', help='Run comprehensive health check')
        check_parser.add_argument('--test', action='store_true', help='Test actual connections')
        self._add_json_flag(check_parser)

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  python run.py feedback submit --source github --title "Export broken" --body "CSV export is corrupted"
  python run.py feedback list --source github --q export
  python run.py feedback show 12

  python run.py analysis run 12
  python run.py analysis run 12 --force       # Ignore cached result
  python run.py analysis similar 12 --limit 5
  python run.py analysis digest --window 7d --json

  python run.py health check --test
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            self._command_parsers[args.command].print_help()
            return 1

        try:
            command = get_command(args.command, self.container)
            return command.execute(subcommand, args)
        except Exception as e:
            logger.error(f"Error executing {args.command} {subcommand}: {e}", exc_info=True)
            return 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        from core.config import get_config_manager
        get_config_manager().update_logging()
    except ValueError as e:
        # Commands that need configuration report it themselves
        logger.warning(f"Configuration not loaded: {e}")

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
