"""Shared test configuration, pytest markers and engine fixtures."""

import pytest

from services.embedding_cache import EmbeddingCache
from services.scorer import MatchEngine

from fakes import FAKE_MODEL, FakeEmbeddingClient


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: loads a real embedding model (slow, needs network)"
    )


@pytest.fixture
def fake_client():
    return FakeEmbeddingClient()


@pytest.fixture
def make_cache():
    def _make(client=None, **kwargs):
        return EmbeddingCache(client=client or FakeEmbeddingClient(), model=FAKE_MODEL, **kwargs)
    return _make


@pytest.fixture
def cache(fake_client, make_cache):
    return make_cache(fake_client)


@pytest.fixture
def make_engine(make_cache):
    def _make(client=None, config=None, timeout=None, **cache_kwargs):
        return MatchEngine(make_cache(client, **cache_kwargs), config=config, timeout=timeout)
    return _make
