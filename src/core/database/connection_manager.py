#!/usr/bin/env python3
"""
PostgreSQL connection for the feedback store.

One autocommit psycopg connection, opened on first use and reopened when it
has dropped. Rows come back as dicts.
"""

import logging
from contextlib import contextmanager
from typing import Optional, Dict, Any

import psycopg
from psycopg.rows import dict_row

from ..exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Owns the store connection used by the feedback and analysis services."""

    def __init__(self, config):
        """
        Args:
            config: DatabaseConfig (database_url, connection_timeout)
        """
        self.config = config
        self.connection: Optional[psycopg.Connection] = None

    def _open(self) -> psycopg.Connection:
        try:
            connection = psycopg.connect(
                self.config.database_url,
                row_factory=dict_row,
                autocommit=True,
                connect_timeout=self.config.connection_timeout
            )
        except psycopg.Error as e:
            raise DatabaseConnectionError(e) from e

        logger.debug("Database connection opened")
        return connection

    def _live_connection(self) -> psycopg.Connection:
        """Current connection, reopened if closed or broken."""
        if self.connection is not None and not self.connection.closed:
            try:
                self.connection.execute("SELECT 1")
                return self.connection
            except psycopg.Error as e:
                logger.warning(f"Database connection lost, reopening: {e}")
                self.close()

        self.connection = self._open()
        return self.connection

    @contextmanager
    def get_cursor(self):
        """Autocommit cursor; each statement commits on its own."""
        with self._live_connection().cursor() as cursor:
            yield cursor

    @contextmanager
    def transaction(self):
        """Cursor whose statements commit together or roll back together."""
        connection = self._live_connection()
        with connection.transaction():
            with connection.cursor() as cursor:
                yield cursor

    def close(self) -> None:
        if self.connection is not None and not self.connection.closed:
            self.connection.close()
            logger.debug("Database connection closed")
        self.connection = None

    def health_check(self) -> Dict[str, Any]:
        """
        Check the store is reachable.

        Returns:
            {'connected': True, 'database', 'version'} or {'connected': False, 'error'}
        """
        try:
            with self.get_cursor() as cursor:
                cursor.execute("SELECT current_database() AS database, version() AS version")
                row = cursor.fetchone()
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {'connected': False, 'error': str(e)}

        return {
            'connected': True,
            'database': row['database'],
            'version': row['version']
        }

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
