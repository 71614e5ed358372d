"""
BatchInserter: writes one batch of vector records in two statements.

Both statements run in a single transaction: if either raises, or either
affects a different number of rows than expected, the whole batch is rolled
back and nothing is left behind in only one of the tables.
"""

import logging

import numpy as np
import psycopg

from vecbox.models import InsertResult, QueryParameters, ResultStatus
from vecbox.storage.sql import SqlCommandProvider

logger = logging.getLogger(__name__)


class RowCountMismatch(Exception):
    """A statement reported a different row count than the batch expected."""

    def __init__(self, table: str, expected: int, actual: int):
        super().__init__(f"{table}: expected {expected} rows, wrote {actual}")
        self.table = table
        self.expected = expected
        self.actual = actual


def vector_values(params: QueryParameters) -> list:
    """Positional values for the vectors INSERT: id, vector per record."""
    values = []
    for record in params.records:
        values.append(record.id)
        values.append(np.asarray(record.values, dtype=np.float32))
    return values


def metadata_values(params: QueryParameters) -> list:
    """
    Positional values for the metadata INSERT: row id, key, value, vector id
    per entry. The row id is vector id + key, which is not checked for
    collisions (e.g. "a" + "bc" and "ab" + "c").
    """
    values = []
    for record in params.records:
        for key, value in record.metadata.items():
            values.extend([record.id + key, key, value, record.id])
    return values


class BatchInserter:
    def __init__(self, service, sql: SqlCommandProvider):
        self.service = service
        self.sql = sql

    def insert(self, params: QueryParameters) -> InsertResult:
        expected_vectors = len(params.records)
        expected_metadata = params.metadata_size
        if expected_vectors == 0:
            return InsertResult()

        try:
            with self.service.transaction() as cur:
                cur.execute(self.sql.insert_vectors(params.vector_parameters), vector_values(params))
                if cur.rowcount != expected_vectors:
                    raise RowCountMismatch(self.sql.vectors_table, expected_vectors, cur.rowcount)

                # An empty VALUES list is not valid SQL
                if expected_metadata:
                    cur.execute(
                        self.sql.insert_metadata(params.metadata_parameters),
                        metadata_values(params),
                    )
                    if cur.rowcount != expected_metadata:
                        raise RowCountMismatch(self.sql.metadata_table, expected_metadata, cur.rowcount)
        except (psycopg.Error, RowCountMismatch) as e:
            logger.error("Batch insert of %d vectors rolled back: %s", expected_vectors, e)
            return InsertResult(status=ResultStatus.FAILED, error=str(e))

        logger.debug("Inserted %d vectors, %d metadata rows", expected_vectors, expected_metadata)
        return InsertResult(
            vectors_written=expected_vectors,
            metadata_written=expected_metadata,
        )
