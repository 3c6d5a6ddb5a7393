"""Tests for the embedding provider registry and provider error handling."""

from types import SimpleNamespace

import pytest

from api.dependencies import get_engine
from config import settings
from services.embedding import registry
from services.embedding.gemini import GeminiEmbeddingClient
from services.embedding.local import DEFAULT_MODEL, SentenceTransformerClient
from services.errors import ProviderError


@pytest.fixture(autouse=True)
def fresh_registry():
    registry.clear()
    yield
    registry.clear()


class _FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    async def embed_content(self, model, contents):
        self.requests.append((model, contents))
        if self.error:
            raise self.error
        return self.response


def _gemini_with(models: _FakeModels) -> GeminiEmbeddingClient:
    client = GeminiEmbeddingClient(api_key="test-key")
    client._client = SimpleNamespace(aio=SimpleNamespace(models=models))
    client._loaded = True
    return client


class TestRegistry:
    def test_creates_and_reuses_client(self):
        first = registry.get_client("local")
        assert isinstance(first, SentenceTransformerClient)
        assert registry.get_client("local") is first
        assert not first.is_loaded

    def test_gemini_provider(self):
        assert isinstance(registry.get_client("gemini"), GeminiEmbeddingClient)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown embedding provider"):
            registry.get_client("word2vec")

    def test_clear(self):
        first = registry.get_client("local")
        registry.clear()
        assert registry.get_client("local") is not first


class TestModelResolution:
    @pytest.mark.parametrize(
        "provider,expected",
        [("local", "TechWolf/JobBERT-v2"), ("gemini", "gemini-embedding-001")],
    )
    def test_default_per_provider(self, monkeypatch, provider, expected):
        monkeypatch.setattr(settings, "embedding_model", "")
        assert registry.resolve_model(provider) == expected

    def test_explicit_model_wins(self, monkeypatch):
        monkeypatch.setattr(settings, "embedding_model", "text-embedding-custom")
        assert registry.resolve_model("gemini") == "text-embedding-custom"

    def test_unknown_provider(self, monkeypatch):
        monkeypatch.setattr(settings, "embedding_model", "")
        with pytest.raises(ValueError):
            registry.resolve_model("word2vec")

    def test_local_client_uses_resolved_default(self, monkeypatch):
        monkeypatch.setattr(settings, "embedding_model", "")
        assert registry.get_client("local").default_model == "TechWolf/JobBERT-v2"

    def test_engine_for_gemini_uses_gemini_model(self, monkeypatch):
        monkeypatch.setattr(settings, "embedding_provider", "gemini")
        monkeypatch.setattr(settings, "embedding_model", "")
        get_engine.cache_clear()
        try:
            engine = get_engine()
            assert engine.cache.model == "gemini-embedding-001"
            assert isinstance(engine.cache.client, GeminiEmbeddingClient)
        finally:
            get_engine.cache_clear()


class TestGeminiClient:
    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        client = GeminiEmbeddingClient(api_key="")
        with pytest.raises(ProviderError, match="GEMINI_API_KEY"):
            await client.embed("Sales", "gemini-embedding-001")
        assert not client.is_loaded

    @pytest.mark.asyncio
    async def test_returns_vector(self):
        response = SimpleNamespace(embeddings=[SimpleNamespace(values=[0.1, 0.2, 0.3])])
        models = _FakeModels(response=response)
        vec = await _gemini_with(models).embed("Salesforce", "gemini-embedding-001")
        assert vec == (0.1, 0.2, 0.3)
        assert models.requests == [("gemini-embedding-001", "Salesforce")]

    @pytest.mark.asyncio
    async def test_wraps_upstream_errors(self):
        client = _gemini_with(_FakeModels(error=RuntimeError("429 quota exceeded")))
        with pytest.raises(ProviderError, match="quota") as excinfo:
            await client.embed("Salesforce", "gemini-embedding-001")
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_empty_response(self):
        client = _gemini_with(_FakeModels(response=SimpleNamespace(embeddings=[])))
        with pytest.raises(ProviderError, match="no embedding"):
            await client.embed("Salesforce", "gemini-embedding-001")


class TestSentenceTransformerClient:
    def test_default_model(self):
        assert SentenceTransformerClient().default_model == DEFAULT_MODEL == "TechWolf/JobBERT-v2"

    @pytest.mark.asyncio
    async def test_encodes_off_loop(self):
        class _Encoder:
            def encode(self, text, convert_to_numpy=True):
                return [1, 2.5]

        client = SentenceTransformerClient()
        client._models["tiny"] = _Encoder()
        assert await client.embed("Excel", "tiny") == (1.0, 2.5)

    @pytest.mark.asyncio
    async def test_encode_failure(self):
        class _Broken:
            def encode(self, text, convert_to_numpy=True):
                raise RuntimeError("CUDA out of memory")

        client = SentenceTransformerClient()
        client._models["tiny"] = _Broken()
        with pytest.raises(ProviderError, match="Encoding failed"):
            await client.embed("Excel", "tiny")

    @pytest.mark.asyncio
    async def test_load_failure(self, monkeypatch):
        def _fail(name):
            raise ProviderError(f"Could not load embedding model {name}")

        client = SentenceTransformerClient()
        monkeypatch.setattr(client, "_get_model", _fail)
        with pytest.raises(ProviderError, match="Could not load"):
            await client.embed("Excel", "does-not-exist/model")


@pytest.mark.integration
class TestSentenceTransformerIntegration:
    @pytest.mark.asyncio
    async def test_related_terms_are_closer(self):
        from services.similarity import cosine_similarity

        client = SentenceTransformerClient()
        sales = await client.embed("account executive", DEFAULT_MODEL)
        crm = await client.embed("sales representative", DEFAULT_MODEL)
        nurse = await client.embed("registered nurse", DEFAULT_MODEL)
        assert cosine_similarity(sales, crm) > cosine_similarity(sales, nurse)
