"""
SchemaManager: makes sure the vectors and metadata tables exist.

Runs once when a store is constructed. Unlike the insert and search paths,
a failure here is raised: a store that cannot verify its schema must not be
handed to callers.
"""

import logging

import psycopg

from vecbox.storage.sql import SqlCommandProvider

logger = logging.getLogger(__name__)


class SchemaManager:
    def __init__(self, service, sql: SqlCommandProvider, vector_dimensions: int):
        self.service = service
        self.sql = sql
        self.vector_dimensions = vector_dimensions

    def ensure_tables(self):
        """Create (or, with overwrite, recreate) both tables."""
        statements = self.sql.schema_statements(self.vector_dimensions)
        for statement in statements:
            try:
                self.service.execute_update(statement)
            except psycopg.Error as e:
                logger.error("Schema statement failed (%s): %s", statement, e)
                raise
        logger.info(
            "Schema ready: %s, %s (dim=%d, overwrite=%s)",
            self.sql.vectors_table,
            self.sql.metadata_table,
            self.vector_dimensions,
            self.sql.overwrite_existing_tables,
        )
