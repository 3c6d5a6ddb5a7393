"""Lazy registry of embedding providers.

Global singletons, created on first use with deferred imports so the heavy
provider libraries are only imported when actually selected.
"""

import logging

from config import settings
from services.embedding.base import EmbeddingClient

logger = logging.getLogger(__name__)

# Used when settings.embedding_model is left empty
DEFAULT_MODELS = {
    "local": "TechWolf/JobBERT-v2",
    "gemini": "gemini-embedding-001",
}

_registry: dict[str, EmbeddingClient] = {}


def resolve_model(provider: str | None = None) -> str:
    """The configured embedding model, or the provider's default."""
    provider = provider or settings.embedding_provider
    if settings.embedding_model:
        return settings.embedding_model
    try:
        return DEFAULT_MODELS[provider]
    except KeyError:
        raise ValueError(f"Unknown embedding provider: {provider}") from None


def _create_client(name: str) -> EmbeddingClient:
    """Factory: create a provider client by name with deferred imports."""
    if name == "local":
        from services.embedding.local import SentenceTransformerClient
        return SentenceTransformerClient(default_model=resolve_model(name))
    elif name == "gemini":
        from services.embedding.gemini import GeminiEmbeddingClient
        return GeminiEmbeddingClient(api_key=settings.gemini_api_key)
    else:
        raise ValueError(f"Unknown embedding provider: {name}")


def get_client(name: str | None = None) -> EmbeddingClient:
    """Get a provider client by name (defaults to settings.embedding_provider)."""
    name = name or settings.embedding_provider
    if name not in _registry:
        _registry[name] = _create_client(name)
        logger.info("Embedding provider selected: %s (model %s)", name, resolve_model(name))
    return _registry[name]


def clear() -> None:
    """Drop all provider clients. Useful for testing."""
    _registry.clear()
