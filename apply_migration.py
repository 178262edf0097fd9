#!/usr/bin/env python3
"""
Apply database migrations for the feedback and analysis tables.
"""

import os
import sys
import glob

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from core.config import get_config
from core.database import ConnectionManager

MIGRATIONS_DIR = os.path.join(os.path.dirname(__file__), "database", "migrations")


def apply_migration(dry_run: bool = False) -> bool:
    """Apply every migration file in order."""

    migration_paths = sorted(glob.glob(os.path.join(MIGRATIONS_DIR, "*.sql")))

    if not migration_paths:
        print(f"No migration files found in: {MIGRATIONS_DIR}")
        return False

    config = get_config()

    with ConnectionManager(config.database) as manager:
        for path in migration_paths:
            with open(path, 'r') as f:
                migration_sql = f.read()

            name = os.path.basename(path)
            print(f"Database Migration: {name}")
            print("=" * 60)

            if dry_run:
                print(migration_sql)
                continue

            with manager.transaction() as cursor:
                cursor.execute(migration_sql)
            print(f"✅ Applied {name}")

    return True


if __name__ == "__main__":
    success = apply_migration(dry_run='--dry-run' in sys.argv)
    exit(0 if success else 1)
