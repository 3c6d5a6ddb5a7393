"""Local SentenceTransformer embedding provider (JobBERT-v2 by default).

TechWolf/JobBERT-v2: trained on millions of job postings, 1024-dim embeddings.
Models are loaded lazily on first use (~425MB) and shared across requests.
"""

import asyncio
import logging
import threading

from services.embedding.base import EmbeddingClient, Vector
from services.errors import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "TechWolf/JobBERT-v2"


class SentenceTransformerClient(EmbeddingClient):
    provider_name = "local"

    def __init__(self, default_model: str = DEFAULT_MODEL) -> None:
        self.default_model = default_model
        self._models: dict = {}
        self._lock = threading.Lock()

    def load(self) -> None:
        self._get_model(self.default_model)

    def _get_model(self, name: str):
        """Load a SentenceTransformer lazily; one instance per model name."""
        with self._lock:
            model = self._models.get(name)
            if model is None:
                try:
                    from sentence_transformers import SentenceTransformer

                    model = SentenceTransformer(name)
                except Exception as e:
                    logger.warning("Failed to load embedding model %s: %s", name, e)
                    raise ProviderError(f"Could not load embedding model {name}") from e
                self._models[name] = model
                logger.info("%s model loaded successfully", name)
            return model

    def _encode(self, text: str, model: str) -> Vector:
        encoder = self._get_model(model)
        try:
            vec = encoder.encode(text, convert_to_numpy=True)
        except Exception as e:
            logger.warning("SBERT encoding failed: %s", e)
            raise ProviderError(f"Encoding failed for model {model}") from e
        return tuple(float(x) for x in vec)

    async def embed(self, text: str, model: str) -> Vector:
        # encode() is CPU-bound; keep the event loop free
        return await asyncio.to_thread(self._encode, text, model)
