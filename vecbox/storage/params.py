"""
QueryParameterBuilder: turns a batch of documents into the values and
placeholder strings for the two INSERT statements.
"""

import logging

from vecbox.embeddings.base import EmbeddingProvider
from vecbox.models import Document, QueryParameters, VectorRecord
from vecbox.storage.sql import METADATA_PLACEHOLDERS, VECTOR_PLACEHOLDERS, SqlCommandProvider

logger = logging.getLogger(__name__)


class QueryParameterBuilder:
    def __init__(self, embedder: EmbeddingProvider, sql: SqlCommandProvider,
                 embedding_model: str | None = None):
        self.embedder = embedder
        self.sql = sql
        self.embedding_model = embedding_model

    def _embed(self, document: Document) -> list[float]:
        # One text per call; the provider contract is batch-shaped
        return self.embedder.embed([document.page_content], self.embedding_model)[0]

    def build(self, documents: list[Document]) -> QueryParameters:
        """
        One VectorRecord and one '(%s, %s)' group per document, plus one
        '(%s, %s, %s, %s)' group per metadata entry.

        Raises EmbeddingError if the provider fails for any document.
        """
        records: list[VectorRecord] = []
        vector_groups: list[str] = []
        metadata_groups: list[str] = []
        vector_group = self.sql.group(VECTOR_PLACEHOLDERS)
        metadata_group = self.sql.group(METADATA_PLACEHOLDERS)

        for document in documents:
            doc_id = document.resolve_id()
            metadata = dict(document.metadata or {})
            records.append(VectorRecord(id=doc_id, values=self._embed(document), metadata=metadata))
            vector_groups.append(vector_group)
            metadata_groups.extend([metadata_group] * len(metadata))

        logger.debug(
            "Built parameters for %d documents (%d metadata rows)",
            len(records), len(metadata_groups),
        )
        return QueryParameters(
            records=records,
            vector_parameters=", ".join(vector_groups),
            metadata_parameters=", ".join(metadata_groups),
            metadata_size=len(metadata_groups),
        )
