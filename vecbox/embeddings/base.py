"""
Base embedding provider abstraction.
The store only knows this contract: a batch of texts in, one vector per
text out, same order.
"""

from __future__ import annotations

import abc
import logging

logger = logging.getLogger(__name__)


class EmbeddingError(RuntimeError):
    """An embedding call failed or returned something unusable."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmbeddingProvider(abc.ABC):
    """
    Abstract base for embedding providers.
    Each provider knows how to turn texts into vectors for one endpoint.
    """

    def __init__(self, name: str, url: str, model: str = "", timeout: float = 30.0):
        self.name = name
        self.url = url.rstrip("/")
        self.model = model
        self.timeout = timeout

    @abc.abstractmethod
    def embed(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """
        Embed a batch of texts.
        Returns one vector per input, in input order.
        Raises EmbeddingError on any failure.
        """
        ...

    def _check_count(self, texts: list[str], vectors: list) -> list[list[float]]:
        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"{self.name}: expected {len(texts)} embeddings, got {len(vectors)}"
            )
        if any(not v for v in vectors):
            raise EmbeddingError(
                f"{self.name}: model returned an empty embedding; input may be blank "
                f"or the model may have failed silently."
            )
        vectors = [list(map(float, v)) for v in vectors]
        # pgvector's <=> yields NaN for a zero vector, which sorts after every real distance
        zeros = [i for i, v in enumerate(vectors) if not any(v)]
        if zeros:
            raise EmbeddingError(
                f"{self.name}: model returned an all-zero embedding for input(s) {zeros}"
            )
        return vectors

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r} url={self.url!r} model={self.model!r}>"
