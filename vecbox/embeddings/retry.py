"""
Retry wrapper for embedding providers with exponential backoff.

Wraps any provider to add retry logic for transient errors:
- 429: Rate limited
- 5xx: Server errors
- No status at all: connection refused, timeout

Non-retried errors (permanent):
- 401, 403: Auth/permission errors
- 400, 404: Bad request, model not pulled
"""

from __future__ import annotations

import logging
import time

from vecbox.embeddings.base import EmbeddingError, EmbeddingProvider

logger = logging.getLogger(__name__)


class RetryingEmbeddings(EmbeddingProvider):
    """
    Wraps any provider with exponential backoff retry logic.
    Callers see the same embed() contract as the wrapped provider.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        max_retries: int = 2,
        backoff_base: float = 1.5,
        backoff_max: float = 10.0,
        sleep=time.sleep,
    ):
        super().__init__(provider.name, provider.url, provider.model, provider.timeout)
        self.provider = provider
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self._sleep = sleep

    def _is_retryable(self, status_code: int | None) -> bool:
        """Determine if a failure is retryable (transient)."""
        if status_code is None:
            return True
        return status_code in (429, 500, 502, 503, 504)

    def _backoff_seconds(self, attempt: int) -> float:
        """Calculate backoff time for attempt N (exponential)."""
        delay = self.backoff_base ** attempt
        return min(delay, self.backoff_max)

    def embed(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Embed with retry on transient errors."""
        for attempt in range(self.max_retries + 1):
            try:
                return self.provider.embed(texts, model)
            except EmbeddingError as e:
                if not self._is_retryable(e.status_code):
                    logger.debug(
                        "Embeddings '%s' non-retryable %s: %s", self.name, e.status_code, e
                    )
                    raise
                if attempt >= self.max_retries:
                    logger.error("Embeddings '%s' exhausted retries (last: %s)", self.name, e)
                    raise
                backoff = self._backoff_seconds(attempt + 1)
                logger.warning(
                    "Embeddings '%s' transient failure, retry in %.1fs (%d/%d): %s",
                    self.name,
                    backoff,
                    attempt + 1,
                    self.max_retries,
                    e,
                )
                self._sleep(backoff)
        raise EmbeddingError(f"{self.name}: no embedding attempts were made")
