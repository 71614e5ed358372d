"""
PGVectorStore: document storage + similarity search over pgvector.

Owns the wiring between the embedding provider and the database:

  add_documents      embed -> build parameters -> insert (one transaction)
  similarity_search  select nearest -> score -> fold join rows into documents

Tables, dimensions and the distance strategy are fixed when the store is
built; see build_store() for construction from config.yaml.
"""

import logging

import psycopg

from vecbox.config import StoreSpec
from vecbox.distance import DistanceStrategy, get_distance_strategy
from vecbox.embeddings import EmbeddingError, EmbeddingProvider, embedder_from_config
from vecbox.models import Document, InsertResult, ResultStatus, SearchResult
from vecbox.storage.inserter import BatchInserter
from vecbox.storage.params import QueryParameterBuilder
from vecbox.storage.schema import SchemaManager
from vecbox.storage.search import SimilaritySearchEngine
from vecbox.storage.service import PGVectorService
from vecbox.storage.sql import SqlCommandProvider

logger = logging.getLogger(__name__)


class PGVectorStore:
    """
    Embedding-backed document store over two PostgreSQL tables.

    Construction creates the tables (or recreates them when StoreSpec asks to
    overwrite) and raises if that fails.
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        spec: StoreSpec,
        service,
        distance: DistanceStrategy | None = None,
    ):
        self.embedder = embedder
        self.spec = spec
        self.service = service
        self.distance = distance or get_distance_strategy(spec.distance_strategy)

        self.sql = SqlCommandProvider(spec.database_name, spec.overwrite_existing_tables)
        self._params = QueryParameterBuilder(embedder, self.sql, spec.embedding_model)
        self._inserter = BatchInserter(service, self.sql)
        self._engine = SimilaritySearchEngine(service, self.sql, self.distance, spec.text_key)

        SchemaManager(service, self.sql, spec.vector_dimensions).ensure_tables()

        logger.info(
            "PGVectorStore initialised (tables=%s_*, distance=%s, model=%s)",
            spec.database_name,
            self.distance.name,
            spec.embedding_model,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add_documents(self, documents: list[Document]) -> InsertResult:
        """
        Embed and store documents.

        The result is truthy only if every vector row and every metadata row
        was written. An empty list is a successful no-op.
        """
        if not documents:
            return InsertResult()
        try:
            params = self._params.build(documents)
        except EmbeddingError as e:
            logger.error("add_documents: failed to embed %d documents: %s", len(documents), e)
            return InsertResult(status=ResultStatus.FAILED, error=str(e))
        return self._inserter.insert(params)

    def similarity_search(self, query_vector: list[float], top_k: int = 4) -> SearchResult:
        """Nearest top_k documents to a query vector, closest first."""
        return self._engine.search(query_vector, top_k)

    def similarity_search_by_text(self, query: str, top_k: int = 4) -> SearchResult:
        """Embed the query text with the store's provider, then search."""
        try:
            query_vector = self.embedder.embed([query], self.spec.embedding_model)[0]
        except EmbeddingError as e:
            logger.error("similarity_search_by_text: failed to embed query: %s", e)
            return SearchResult(status=ResultStatus.FAILED, error=str(e))
        return self.similarity_search(query_vector, top_k)

    def get_stats(self) -> dict:
        """Return row counts for both tables."""
        with self.service.cursor() as cur:
            cur.execute(self.sql.count_rows(self.sql.vectors_table))
            vectors = cur.fetchone()[0]
            cur.execute(self.sql.count_rows(self.sql.metadata_table))
            metadata = cur.fetchone()[0]
        return {"vectors": vectors, "metadata": metadata}

    def close(self):
        self.service.close()


def build_store(cfg: dict, embedder: EmbeddingProvider | None = None) -> PGVectorStore:
    """
    Build a store from a loaded config dict.

    Raises:
        ConfigError: If the store or embedding config is invalid.
        psycopg.Error: If the database is unreachable or the schema cannot be created.
    """
    spec = StoreSpec.from_config(cfg)
    distance = get_distance_strategy(spec.distance_strategy)
    embedder = embedder or embedder_from_config(cfg)
    service = PGVectorService(spec.dsn, connect_timeout=spec.connect_timeout)
    try:
        return PGVectorStore(embedder, spec, service, distance)
    except psycopg.Error:
        service.close()
        raise
