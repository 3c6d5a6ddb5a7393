"""Content-addressed embedding cache with TTL and single-flight fills.

Keys are sha256(namespace, model, text). An entry is live while it is younger
than the TTL and was produced by the currently configured model; anything
else reads as a miss and is regenerated. Expiry is lazy (checked on read).

Concurrent misses for one key share a single upstream call. Each caller waits
on a shielded view of that call, so a cancelled caller leaves immediately
without disturbing the others. The upstream call itself is cancelled only
when its last waiter goes away.
"""

import asyncio
import hashlib
import logging
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from services.embedding.base import EmbeddingClient, Vector
from services.errors import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


class CacheService(ABC):
    """What the engine needs from an embedding cache."""

    model: str

    @abstractmethod
    async def get(self, namespace: str, id: str, text: str) -> Vector:
        """Return the vector for text, computing and storing it on a miss."""

    @abstractmethod
    def put(self, namespace: str, text: str, vector: Vector) -> None:
        """Store a vector computed elsewhere."""

    @abstractmethod
    def invalidate(self, namespace: str, text: str) -> bool:
        """Drop one entry. Returns True if something was removed."""


@dataclass(frozen=True)
class CacheEntry:
    vector: Vector
    created_at: float
    model: str


@dataclass
class _Flight:
    task: asyncio.Task
    waiters: int = 0


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    shared: int = 0  # callers that joined an in-flight fill
    errors: int = 0
    entries: int = 0
    in_flight: int = 0
    model: str = ""


class EmbeddingCache(CacheService):
    """In-memory CacheService backed by an EmbeddingClient.

    max_entries > 0 adds an LRU bound; 0 leaves growth to the host.
    concurrency bounds the number of simultaneous provider calls.
    """

    def __init__(
        self,
        client: EmbeddingClient,
        model: str,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = 0,
        concurrency: int = 8,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.model = model
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._inflight: dict[str, _Flight] = {}
        self._semaphore = asyncio.Semaphore(max(1, concurrency))
        self._stats = CacheStats()

    def make_key(self, namespace: str, text: str) -> str:
        raw = f"{namespace}\x00{self.model}\x00{text}".encode("utf-8")
        return hashlib.sha256(raw).hexdigest()

    def _lookup(self, key: str) -> Vector | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        age = self._clock() - entry.created_at
        if entry.model != self.model or age >= self.ttl_seconds:
            # Stale: treat as absent and let the caller refill
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry.vector

    def _store(self, key: str, vector: Vector) -> None:
        self._entries[key] = CacheEntry(vector=tuple(vector), created_at=self._clock(), model=self.model)
        self._entries.move_to_end(key)
        if self.max_entries > 0:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    async def _fill(self, key: str, namespace: str, id: str, text: str) -> Vector:
        async with self._semaphore:
            # Nothing is written on failure, so the next call retries the provider
            try:
                vector = tuple(await self.client.embed(text, self.model))
            except ProviderError:
                self._stats.errors += 1
                logger.warning("Embedding fill failed for %s:%s", namespace, id)
                raise
            except Exception as e:
                self._stats.errors += 1
                logger.warning("Embedding fill failed for %s:%s: %s", namespace, id, e)
                raise ProviderError(f"Embedding provider failed: {e}") from e
        self._store(key, vector)
        return vector

    async def get(self, namespace: str, id: str, text: str) -> Vector:
        key = self.make_key(namespace, text)
        cached = self._lookup(key)
        if cached is not None:
            self._stats.hits += 1
            logger.debug("Embedding cache hit %s:%s (%s...)", namespace, id, key[:12])
            return cached

        flight = self._inflight.get(key)
        if flight is None:
            self._stats.misses += 1
            logger.debug("Embedding cache miss %s:%s (%s...)", namespace, id, key[:12])
            task = asyncio.ensure_future(self._fill(key, namespace, id, text))
            flight = _Flight(task=task)
            self._inflight[key] = flight

            def _forget(_task: asyncio.Task, key: str = key, flight: _Flight = flight) -> None:
                if self._inflight.get(key) is flight:
                    del self._inflight[key]

            task.add_done_callback(_forget)
        else:
            self._stats.shared += 1

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                # Every caller gave up; abort the upstream call. Later callers
                # must not join a flight that is being torn down.
                flight.task.cancel()
                if self._inflight.get(key) is flight:
                    del self._inflight[key]

    def put(self, namespace: str, text: str, vector: Vector) -> None:
        self._store(self.make_key(namespace, text), tuple(vector))

    def invalidate(self, namespace: str, text: str) -> bool:
        return self._entries.pop(self.make_key(namespace, text), None) is not None

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Embedding cache cleared")

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> CacheStats:
        return CacheStats(
            hits=self._stats.hits,
            misses=self._stats.misses,
            shared=self._stats.shared,
            errors=self._stats.errors,
            entries=len(self._entries),
            in_flight=len(self._inflight),
            model=self.model,
        )
