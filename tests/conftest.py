"""
Shared fixtures: an in-memory stand-in for PGVectorService and a
deterministic embedding provider, so store behaviour can be tested without
PostgreSQL or Ollama.
"""

import math
import re
from contextlib import contextmanager

import psycopg
import pytest

from vecbox.config import StoreSpec
from vecbox.embeddings.base import EmbeddingProvider


def _l2(a, b):
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


def _cos(a, b):
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return 1.0 if norm == 0 else 1.0 - dot / norm


def _neg_ip(a, b):
    return -sum(x * y for x, y in zip(a, b))


_OPERATORS = {"<->": _l2, "<=>": _cos, "<#>": _neg_ip}


class FakeCursor:
    def __init__(self, service):
        self.service = service
        self.rowcount = -1
        self._rows = []

    def execute(self, sql, params=None):
        svc = self.service
        params = list(params) if params is not None else None
        svc.executed.append((sql, params))
        if svc.fail_on and svc.fail_on in sql:
            raise psycopg.OperationalError(f"injected failure on: {svc.fail_on}")
        self._rows = []

        if sql.startswith("INSERT INTO") and "_vectors" in sql.split("(")[0]:
            added = 0
            for i in range(0, len(params), 2):
                vid, vector = params[i], params[i + 1]
                if vid in svc.vectors:
                    raise psycopg.errors.UniqueViolation(f"duplicate key: {vid}")
                svc.vectors[vid] = [float(x) for x in vector]
                added += 1
            self.rowcount = svc.rowcount_override.get("vectors", added)
        elif sql.startswith("INSERT INTO") and "_metadata" in sql.split("(")[0]:
            for i in range(0, len(params), 4):
                svc.metadata.append(tuple(params[i:i + 4]))
            self.rowcount = svc.rowcount_override.get("metadata", len(params) // 4)
        elif sql.startswith("SELECT v.id"):
            self._rows = self._nearest(sql, params)
            self.rowcount = len(self._rows)
        elif sql.startswith("SELECT COUNT(*)"):
            table = sql.rsplit(" ", 1)[-1]
            count = len(svc.vectors) if table.endswith("_vectors") else len(svc.metadata)
            self._rows = [(count,)]
            self.rowcount = 1
        else:
            svc.ddl.append(sql)
            self.rowcount = 0

    def _nearest(self, sql, params):
        op = re.search(r"vector (<->|<=>|<#>) ", sql).group(1)
        distance = _OPERATORS[op]
        query, top_k = [float(x) for x in params[0]], params[1]
        ranked = sorted(self.service.vectors.items(), key=lambda kv: (distance(kv[1], query), kv[0]))
        rows = []
        for vid, vector in ranked[:top_k]:
            entries = [m for m in self.service.metadata if m[3] == vid]
            if not entries:
                rows.append((vid, list(vector), None, None))
            for _, key, value, _ in entries:
                rows.append((vid, list(vector), key, value))
        return rows

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def __iter__(self):
        for i, row in enumerate(self._rows):
            if self.service.fail_after_rows is not None and i >= self.service.fail_after_rows:
                raise psycopg.OperationalError("connection lost while reading rows")
            yield row


class FakeService:
    """Behaves like PGVectorService, backed by dicts."""

    def __init__(self):
        self.vectors: dict[str, list[float]] = {}
        self.metadata: list[tuple] = []
        self.ddl: list[str] = []
        self.executed: list[tuple] = []
        self.fail_on: str | None = None
        self.fail_after_rows: int | None = None
        self.rowcount_override: dict[str, int] = {}
        self.closed = False
        self.transactions = 0
        self.open_cursors = 0

    @contextmanager
    def cursor(self):
        self.open_cursors += 1
        try:
            yield FakeCursor(self)
        finally:
            self.open_cursors -= 1

    @contextmanager
    def transaction(self):
        self.transactions += 1
        snapshot = (dict(self.vectors), list(self.metadata))
        try:
            with self.cursor() as cur:
                yield cur
        except BaseException:
            self.vectors, self.metadata = snapshot
            raise

    def execute_update(self, sql, params=None):
        with self.cursor() as cur:
            cur.execute(sql, params)
            return cur.rowcount

    def statements(self, prefix: str) -> list[str]:
        return [sql for sql, _ in self.executed if sql.startswith(prefix)]

    def close(self):
        self.closed = True


class FakeEmbedder(EmbeddingProvider):
    """Returns vectors from a lookup table, or a fixed fallback."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, dimensions: int = 3):
        super().__init__("fake", "http://fake", "fake-embed")
        self.vectors = vectors or {}
        self.dimensions = dimensions
        self.calls: list[tuple[list[str], str | None]] = []
        self.error: Exception | None = None

    def embed(self, texts, model=None):
        self.calls.append((list(texts), model))
        if self.error is not None:
            raise self.error
        fallback = [0.0] * (self.dimensions - 1) + [1.0]
        return [list(self.vectors.get(t, fallback)) for t in texts]


@pytest.fixture
def service():
    return FakeService()


@pytest.fixture
def embedder():
    return FakeEmbedder({
        "hi": [1.0, 0.0, 0.0],
        "north": [0.0, 1.0, 0.0],
        "north-ish": [0.1, 0.9, 0.0],
        "down": [0.0, 0.0, -1.0],
    })


@pytest.fixture
def spec():
    return StoreSpec(
        database_name="test",
        dsn="postgresql://fake",
        vector_dimensions=3,
        embedding_model="fake-embed",
        distance_strategy="euclidean",
        text_key="body",
    )
