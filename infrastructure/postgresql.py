# ============================================================================
# POSTGRESQL CONNECTION INFRASTRUCTURE
# ============================================================================
# STATUS: Infrastructure - PostgreSQL connection handling
# PURPOSE: Database connectivity for introspection and DDL execution
# CREATED: 18 OCT 2026
# ============================================================================
"""
PostgreSQL Connection Infrastructure

Provides database connectivity for the schema synchronizer:
- Connection string resolution (explicit, DATABASE_URL, POSTGRES_* parts)
- Context manager for safe connection handling

Connection Priority:
1. Explicit connection string (constructor / --connection)
2. DATABASE_URL
3. POSTGRES_HOST, POSTGRES_PORT, POSTGRES_DB, POSTGRES_USER, POSTGRES_PASSWORD
"""

import os
import logging
import threading
from typing import Optional
from contextlib import contextmanager

import psycopg

from core.errors import ConfigurationError

logger = logging.getLogger(__name__)


# ============================================================================
# POSTGRESQL REPOSITORY
# ============================================================================

class PostgreSQLRepository:
    """
    Connection management for PostgreSQL.

    Usage:
        repo = PostgreSQLRepository("postgresql://localhost/app")
        with repo.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
    """

    def __init__(self, connection_string: Optional[str] = None):
        """
        Initialize PostgreSQL repository.

        Args:
            connection_string: Optional explicit connection string
        """
        self._conn_string = connection_string
        self._conn_string_lock = threading.Lock()

    @property
    def conn_string(self) -> str:
        """Get or build connection string (lazy, thread-safe)."""
        if self._conn_string is None:
            with self._conn_string_lock:
                if self._conn_string is None:
                    self._conn_string = self._build_connection_string()
        return self._conn_string

    def _build_connection_string(self) -> str:
        """
        Build PostgreSQL connection string from the environment.

        Raises:
            ConfigurationError: If neither DATABASE_URL nor host/db are set
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            logger.debug("Using DATABASE_URL")
            return url

        host = os.environ.get("POSTGRES_HOST")
        port = os.environ.get("POSTGRES_PORT", "5432")
        database = os.environ.get("POSTGRES_DB")

        if not host or not database:
            raise ConfigurationError(
                "Database connection not configured. "
                "Pass --connection, set DATABASE_URL, or set POSTGRES_HOST and POSTGRES_DB.",
                setting="connection_string",
            )

        return self._build_password_connection_string(host=host, port=port, database=database)

    def _build_password_connection_string(
        self,
        host: str,
        port: str,
        database: str,
    ) -> str:
        """Build a key/value connection string from POSTGRES_* parts."""
        user = os.environ.get("POSTGRES_USER", "postgres")
        password = os.environ.get("POSTGRES_PASSWORD", "")
        sslmode = os.environ.get("POSTGRES_SSLMODE", "prefer")

        parts = [
            f"host={host}",
            f"port={port}",
            f"dbname={database}",
            f"user={user}",
            f"sslmode={sslmode}",
        ]
        if password:
            parts.append(f"password={password}")

        logger.debug(f"Connection string built for {database}@{host}")
        return " ".join(parts)

    @contextmanager
    def get_connection(self):
        """
        Context manager for PostgreSQL connections.

        Yields:
            psycopg connection (autocommit off)

        Usage:
            with repo.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1")
        """
        conn = None
        try:
            logger.debug("Connecting to PostgreSQL...")
            conn = psycopg.connect(self.conn_string)
            logger.debug("PostgreSQL connection established")
            yield conn

        except psycopg.Error as e:
            logger.error(f"PostgreSQL error: {e}")
            if conn:
                conn.rollback()
            raise

        finally:
            if conn:
                conn.close()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "PostgreSQLRepository",
]
