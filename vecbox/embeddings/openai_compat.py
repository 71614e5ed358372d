"""
Generic OpenAI-compatible embeddings.

Works with any service that implements /v1/embeddings:
- OpenAI
- vLLM
- LocalAI
- llama.cpp server (--embedding)
- Ollama (can also use this instead of OllamaEmbeddings)
"""

from __future__ import annotations

import logging

import httpx

from vecbox.embeddings.base import EmbeddingError, EmbeddingProvider

logger = logging.getLogger(__name__)


class OpenAIEmbeddings(EmbeddingProvider):
    """Embedding provider for OpenAI-compatible endpoints."""

    def __init__(
        self,
        name: str = "openai",
        url: str = "https://api.openai.com",
        model: str = "text-embedding-3-small",
        timeout: float = 30.0,
        api_key: str = "",
    ):
        super().__init__(name, url, model, timeout)
        self.api_key = api_key

    def embed(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        if not texts:
            return []
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            resp = httpx.post(
                f"{self.url}/v1/embeddings",
                json={"model": model or self.model, "input": texts},
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("OpenAI-compat embeddings '%s' request failed: %s", self.name, e)
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        if resp.status_code >= 400:
            raise EmbeddingError(
                f"HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise EmbeddingError(
                f"Embedding endpoint returned non-JSON response: {resp.text[:200]}"
            ) from e

        items = sorted(data.get("data", []), key=lambda d: d.get("index", 0))
        return self._check_count(texts, [item.get("embedding") for item in items])
