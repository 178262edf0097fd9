#!/usr/bin/env python3
"""
Health check command for monitoring system status.

Checks configuration, database, cache and inference client setup.
"""

from argparse import Namespace
from typing import Dict, Any

from .base import BaseCommand, EXIT_OK, EXIT_ERROR


class HealthCommand(BaseCommand):
    """Handle system health monitoring and diagnostics."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute health subcommand."""
        try:
            if subcommand == "check":
                return self.check(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return EXIT_ERROR

        except Exception as e:
            return self.handle_error(e, f"health {subcommand}")

    def check(self, args: Namespace) -> int:
        """Run comprehensive health check."""
        report = self.collect(test_connections=getattr(args, 'test', False))

        if getattr(args, 'json', False):
            self.emit(args, report, "")
        else:
            self._print_report(report)

        return EXIT_OK if report['healthy'] else EXIT_ERROR

    def collect(self, test_connections: bool = False) -> Dict[str, Any]:
        """Gather health information for every component."""
        report: Dict[str, Any] = {'healthy': True}

        try:
            report['database'] = self.database.health_check()
        except Exception as e:
            report['database'] = {'connected': False, 'error': str(e)}
        if not report['database'].get('connected'):
            report['healthy'] = False

        try:
            report['cache'] = self.cache_manager.get_stats()
            # A down Redis degrades to misses only
            report['cache']['ok'] = report['cache'].get('connected', True)
        except Exception as e:
            report['cache'] = {'ok': False, 'error': str(e)}

        openai_info: Dict[str, Any] = {'configured': self.config.has_openai()}
        if openai_info['configured'] and test_connections:
            client = self.create_openai_client()
            openai_info['connected'] = client.test_connection(self.config.app.analysis_model)
        report['openai'] = openai_info
        if not openai_info['configured'] or openai_info.get('connected') is False:
            report['healthy'] = False

        return report

    def _print_report(self, report: Dict[str, Any]) -> None:
        print("🏥 System Health Check")
        print("=" * 50)

        database = report['database']
        print("\n📊 Database Status:")
        if database.get('connected'):
            print("  ✅ Database connection: OK")
            for table, info in database.get('tables', {}).items():
                print(f"  📋 {table}: {info.get('count', info.get('error'))} records")
        else:
            print("  ❌ Database connection: FAILED")
            print(f"     Error: {database.get('error', 'Unknown error')}")

        cache = report['cache']
        print("\n💾 Cache Status:")
        if cache.get('ok'):
            print(f"  ✅ {cache.get('backend', 'unknown')} cache: OK")
            if 'entries' in cache:
                print(f"  📊 {cache['entries']} entries")
        else:
            print(f"  ⚠️  Cache unavailable: {cache.get('error', 'not connected')}")

        openai_info = report['openai']
        print("\n🔌 Integration Status:")
        if not openai_info['configured']:
            print("  ❌ OpenAI configuration: OPENAI_API_KEY not set")
        elif openai_info.get('connected') is False:
            print("  ❌ OpenAI connection: FAILED")
        else:
            print("  ✅ OpenAI configuration: OK")

        print("\n" + "=" * 50)
        if report['healthy']:
            print("✅ Overall Status: HEALTHY")
        else:
            print("❌ Overall Status: UNHEALTHY")
