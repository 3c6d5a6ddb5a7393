"""Shared dependencies for API routes."""

from functools import lru_cache

from config import settings
from services.embedding.registry import get_client, resolve_model
from services.embedding_cache import EmbeddingCache
from services.scorer import MatchEngine


@lru_cache(maxsize=1)
def get_engine() -> MatchEngine:
    cache = EmbeddingCache(
        client=get_client(settings.embedding_provider),
        model=resolve_model(settings.embedding_provider),
        ttl_seconds=settings.cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
        concurrency=settings.embedding_concurrency,
    )
    return MatchEngine(cache, config=settings.match, timeout=settings.match_timeout_seconds)
