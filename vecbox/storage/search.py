"""
Similarity search: one SELECT, then a single forward pass over the rows.

The query joins the top-K vectors with their metadata, so one document
arrives as several rows, one per metadata key. ResultAssembler folds those
back into one Document per vector id, in the order the ids first appear.
"""

import logging

import numpy as np
import psycopg

from vecbox.distance import DistanceStrategy
from vecbox.models import Document, ResultStatus, SearchResult
from vecbox.storage.sql import SqlCommandProvider

logger = logging.getLogger(__name__)


class ResultAssembler:
    """Streaming reducer: (vector_id, vector, key, value) rows -> documents."""

    def __init__(self, distance: DistanceStrategy, query_vector, text_key: str | None = None):
        self.distance = distance
        self.query_vector = query_vector
        self.text_key = text_key
        self._documents: dict[str, Document] = {}

    def add_row(self, vector_id: str, vector, key: str | None, value: str | None):
        document = self._documents.get(vector_id)
        if document is None:
            document = Document(
                id=vector_id,
                page_content="",
                metadata={},
                similarity_score=self.distance.score(self.query_vector, vector),
            )
            self._documents[vector_id] = document

        if key is None or value is None:
            return
        document.metadata[key] = value
        if self.text_key is not None and key == self.text_key:
            document.page_content = value

    @property
    def documents(self) -> list[Document]:
        return list(self._documents.values())


class SimilaritySearchEngine:
    def __init__(self, service, sql: SqlCommandProvider, distance: DistanceStrategy,
                 text_key: str | None = None):
        self.service = service
        self.sql = sql
        self.distance = distance
        self.text_key = text_key

    def search(self, query_vector, top_k: int) -> SearchResult:
        """
        Nearest top_k documents to query_vector, closest first.

        A database error part-way through is logged and whatever documents
        were already assembled are returned with status PARTIAL (or FAILED
        when there were none).
        """
        if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k <= 0:
            raise ValueError(f"top_k must be a positive integer, got {top_k!r}")

        query = np.asarray(query_vector, dtype=np.float32)
        statement = self.sql.select_nearest(self.distance.syntax(placeholder=self.sql.placeholder))
        assembler = ResultAssembler(self.distance, query, self.text_key)

        try:
            with self.service.cursor() as cur:
                cur.execute(statement, (query, top_k))
                for vector_id, vector, key, value in cur:
                    assembler.add_row(vector_id, vector, key, value)
        except psycopg.Error as e:
            documents = assembler.documents
            logger.error(
                "Similarity search failed after %d documents: %s", len(documents), e
            )
            status = ResultStatus.PARTIAL if documents else ResultStatus.FAILED
            return SearchResult(documents=documents, status=status, error=str(e))

        documents = assembler.documents
        logger.debug("Similarity search returned %d documents (top_k=%d)", len(documents), top_k)
        return SearchResult(documents=documents)
