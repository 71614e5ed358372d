"""
Ollama embeddings: local embedding models via Ollama's /api/embed endpoint.
"""

from __future__ import annotations

import logging

import httpx

from vecbox.embeddings.base import EmbeddingError, EmbeddingProvider

logger = logging.getLogger(__name__)


class OllamaEmbeddings(EmbeddingProvider):
    """Embedding provider for local Ollama instances."""

    def __init__(
        self,
        name: str = "ollama",
        url: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
        timeout: float = 30.0,
    ):
        super().__init__(name, url, model, timeout)

    def embed(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        if not texts:
            return []
        model = model or self.model
        try:
            resp = httpx.post(
                f"{self.url}/api/embed",
                json={"model": model, "input": texts},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise EmbeddingError(
                    f"Embedding model '{model}' not found, run: ollama pull {model}",
                    status_code=status,
                ) from e
            raise EmbeddingError(
                f"Ollama embed failed: HTTP {status}: {e.response.text[:200]}",
                status_code=status,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Ollama embeddings '%s' request failed: %s", self.name, e)
            raise EmbeddingError(f"Ollama embed request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise EmbeddingError(
                f"Embedding endpoint returned non-JSON response: {resp.text[:200]}"
            ) from e

        embeddings = data.get("embeddings") or []
        return self._check_count(texts, embeddings)
