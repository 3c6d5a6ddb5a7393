"""Google Gemini embedding provider."""

import logging

from google import genai

from services.embedding.base import EmbeddingClient, Vector
from services.errors import ProviderError

logger = logging.getLogger(__name__)


class GeminiEmbeddingClient(EmbeddingClient):
    provider_name = "gemini"

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key
        self._client: genai.Client | None = None

    def load(self) -> None:
        if not self._api_key:
            raise ProviderError("No GEMINI_API_KEY set - Gemini embeddings disabled")
        self._client = genai.Client(api_key=self._api_key)

    async def embed(self, text: str, model: str) -> Vector:
        self.ensure_loaded()
        try:
            response = await self._client.aio.models.embed_content(
                model=model,
                contents=text,
            )
        except Exception as e:
            logger.warning("Gemini embedding error: %s", e)
            raise ProviderError(f"Gemini embedding failed: {e}") from e

        if not response.embeddings or not response.embeddings[0].values:
            raise ProviderError("Gemini returned no embedding values")
        return tuple(float(v) for v in response.embeddings[0].values)
