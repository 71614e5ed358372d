"""
Embedding provider factory.

Usage:
    from vecbox.embeddings import make_embedder
    embedder = make_embedder("ollama", url="http://localhost:11434", model="nomic-embed-text")

Adding a new provider:
    1. Create vecbox/embeddings/<name>.py implementing EmbeddingProvider.
    2. Add an entry to _REGISTRY below.
    3. Set  embedding.provider: <name>  in config.yaml.
"""

from vecbox.config import ConfigError
from vecbox.embeddings.base import EmbeddingError, EmbeddingProvider
from vecbox.embeddings.ollama import OllamaEmbeddings
from vecbox.embeddings.openai_compat import OpenAIEmbeddings
from vecbox.embeddings.retry import RetryingEmbeddings

_REGISTRY: dict[str, type[EmbeddingProvider]] = {
    "ollama": OllamaEmbeddings,
    "openai": OpenAIEmbeddings,
    "openai_compat": OpenAIEmbeddings,
}


def make_embedder(provider_type: str, max_retries: int = 0, **kwargs) -> EmbeddingProvider:
    """
    Instantiate an embedding provider by name.

    Args:
        provider_type: Registry key (e.g. "ollama").
        max_retries:   Wrap the provider in RetryingEmbeddings when > 0.
        **kwargs:      Passed directly to the provider constructor.

    Raises:
        ConfigError: If the provider type is not registered.
    """
    cls = _REGISTRY.get(provider_type)
    if cls is None:
        available = ", ".join(_REGISTRY.keys())
        raise ConfigError(
            f"Unknown embedding provider: '{provider_type}'. "
            f"Available: {available}"
        )
    provider = cls(**kwargs)
    if max_retries > 0:
        return RetryingEmbeddings(provider, max_retries=max_retries)
    return provider


def embedder_from_config(cfg: dict) -> EmbeddingProvider:
    """Build the provider described by the `embedding` block of config.yaml."""
    embed_cfg = dict(cfg.get("embedding") or {})
    provider_type = embed_cfg.pop("provider", "ollama")
    max_retries = int(embed_cfg.pop("max_retries", 0))
    kwargs = {
        "url": embed_cfg.get("backend_url", "http://localhost:11434"),
        "model": embed_cfg.get("model", ""),
        "timeout": float(embed_cfg.get("timeout", 30.0)),
    }
    if embed_cfg.get("api_key") and provider_type != "ollama":
        kwargs["api_key"] = embed_cfg["api_key"]
    return make_embedder(provider_type, max_retries=max_retries, **kwargs)


__all__ = [
    "EmbeddingError",
    "EmbeddingProvider",
    "OllamaEmbeddings",
    "OpenAIEmbeddings",
    "RetryingEmbeddings",
    "make_embedder",
    "embedder_from_config",
]
