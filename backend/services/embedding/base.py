"""Abstract base class for embedding providers."""

from abc import ABC, abstractmethod
import logging

logger = logging.getLogger(__name__)

Vector = tuple[float, ...]


class EmbeddingClient(ABC):
    """Turns text into a fixed-length vector for a given model identifier.

    Subclasses must implement:
        - provider_name: identifier used in the registry
        - load(): acquire clients / model weights
        - embed(text, model): return the vector, raising ProviderError on failure

    No retries happen here; retry policy belongs to whoever wraps the client.
    """

    provider_name: str = ""
    _loaded: bool = False

    @abstractmethod
    def load(self) -> None:
        """Prepare the provider. Called once by ensure_loaded()."""

    @abstractmethod
    async def embed(self, text: str, model: str) -> Vector:
        """Embed a single text with the given model."""

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def ensure_loaded(self) -> None:
        """Load provider if not already loaded."""
        if not self._loaded:
            logger.info("Loading embedding provider: %s", self.provider_name)
            self.load()
            self._loaded = True
            logger.info("Embedding provider loaded: %s", self.provider_name)
