"""
PGVectorService: the relational execution layer.

Wraps a single psycopg 3 connection with the pgvector type adapters
registered. All psycopg-specific calls live here; the rest of the store
only sees execute_update(), cursor() and transaction().

The connection runs in autocommit mode so DDL and reads take effect
immediately; writes that must land together go through transaction().
"""

import logging
from contextlib import contextmanager

import psycopg
from pgvector.psycopg import register_vector

logger = logging.getLogger(__name__)


class PGVectorService:
    """Lazy psycopg connection with vector support."""

    def __init__(self, dsn: str, connect_timeout: int = 10):
        self.dsn = dsn
        self.connect_timeout = connect_timeout
        self._conn: psycopg.Connection | None = None

    def connect(self) -> psycopg.Connection:
        """Open the connection on first use and enable the vector extension."""
        if self._conn is not None and not self._conn.closed:
            return self._conn

        conn = psycopg.connect(
            self.dsn, autocommit=True, connect_timeout=self.connect_timeout
        )
        try:
            # The extension must exist before the vector type can be registered
            conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
            register_vector(conn)
        except psycopg.Error:
            conn.close()
            raise
        self._conn = conn
        logger.info("PGVectorService connected (host=%s)", conn.info.host)
        return conn

    def execute_update(self, sql: str, params: tuple | list | None = None) -> int:
        """Run one statement and return its row count."""
        with self.cursor() as cur:
            cur.execute(sql, params)
            return cur.rowcount

    @contextmanager
    def cursor(self):
        """A cursor that is closed when the block exits."""
        conn = self.connect()
        with conn.cursor() as cur:
            yield cur

    @contextmanager
    def transaction(self):
        """
        A cursor inside one transaction.
        Commits when the block exits normally, rolls back if it raises.
        """
        conn = self.connect()
        with conn.transaction():
            with conn.cursor() as cur:
                yield cur

    def close(self):
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
            logger.debug("PGVectorService connection closed")
        self._conn = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
