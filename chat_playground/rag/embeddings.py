"""Embedding client for the remote inference API with a local fallback.

Calls the OpenAI-compatible ``/embeddings`` endpoint one text at a time,
paced to stay under provider rate limits. Any per-item failure degrades that
item to a locally generated vector so ingestion and retrieval never fail on
embedding problems. Fallback vectors are seeded from the text, so the same
text always maps to the same vector, but their similarity scores carry no
meaning; ``EmbeddingBatch.used_fallback`` makes that condition visible.
"""

import asyncio
import hashlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import httpx
import numpy as np

logger = logging.getLogger(__name__)

MIN_CHUNK_LENGTH = 3
DEFAULT_MAX_ITEMS = 50
DEFAULT_DIMENSIONS = 1536


def prepare_chunks(texts: Sequence[str], max_items: int = DEFAULT_MAX_ITEMS) -> list[str]:
    """Clean chunk texts before embedding.

    Trims each text, drops those shorter than 3 characters, removes exact
    duplicates (first occurrence wins) and caps the result at ``max_items``.

    Args:
        texts: Raw chunk texts.
        max_items: Maximum number of texts to keep.

    Returns:
        Cleaned texts in their original order.
    """
    seen: set[str] = set()
    cleaned: list[str] = []
    for text in texts:
        if not isinstance(text, str):
            continue
        stripped = text.strip()
        if len(stripped) < MIN_CHUNK_LENGTH or stripped in seen:
            continue
        seen.add(stripped)
        cleaned.append(stripped)

    if len(cleaned) > max_items:
        logger.warning(f"Embedding batch capped at {max_items} of {len(cleaned)} chunks")
        cleaned = cleaned[:max_items]

    logger.debug(f"Validated {len(cleaned)} chunks from {len(texts)} original chunks")
    return cleaned


def fallback_embedding(text: str, dimensions: int = DEFAULT_DIMENSIONS) -> list[float]:
    """Generate a pseudo-random vector seeded from the text.

    Values lie in ``[0, 1)``, matching the shape of a real embedding but
    not its meaning.
    """
    seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:8], "big")
    rng = np.random.default_rng(seed)
    return rng.random(dimensions).tolist()


@dataclass
class EmbeddingBatch:
    """Vectors for a batch of texts, one per input, in input order."""

    vectors: list[list[float]] = field(default_factory=list)
    fallback_count: int = 0
    remote_count: int = 0

    @property
    def used_fallback(self) -> bool:
        return self.fallback_count > 0


class EmbeddingClient:
    """Async client for the remote embedding endpoint.

    Wraps a shared ``httpx.AsyncClient`` with:
    - one request per text (the provider has no native batch call)
    - pacing delays between items and between groups of items
    - per-item fallback to deterministic local vectors
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "",
        model: str = "llama3.1:8b",
        dimensions: int = DEFAULT_DIMENSIONS,
        http_client: httpx.AsyncClient | None = None,
        item_delay: float = 0.1,
        batch_delay: float = 0.3,
        pacing_group: int = 3,
        max_items: int = DEFAULT_MAX_ITEMS,
        timeout: float = 60.0,
    ) -> None:
        """Initialize the embedding client.

        Args:
            api_key: Bearer credential. Empty disables remote calls entirely.
            base_url: Inference API base URL.
            model: Embedding model identifier.
            dimensions: Length of fallback vectors.
            http_client: Shared HTTP client. Created lazily when omitted.
            item_delay: Seconds to wait after each remote call.
            batch_delay: Seconds to wait between pacing groups.
            pacing_group: Number of items per pacing group.
            max_items: Cap applied by ``embed_chunks``.
            timeout: Timeout for a lazily created HTTP client.
        """
        self.api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.dimensions = dimensions
        self.item_delay = item_delay
        self.batch_delay = batch_delay
        self.pacing_group = max(1, pacing_group)
        self.max_items = max_items
        self._timeout = timeout
        self._http_client = http_client

        if not self.remote_enabled:
            logger.warning("No embedding API key configured, using fallback embeddings")

    @property
    def remote_enabled(self) -> bool:
        """Whether the remote embedding service will be called."""
        return bool(self.api_key and self.base_url)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/embeddings"

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def aclose(self) -> None:
        """Close the underlying HTTP client, if one was created."""
        if self._http_client is not None:
            await self._http_client.aclose()

    async def _request_embedding(self, text: str) -> list[float] | None:
        """Embed one text remotely. Returns None on any failure."""
        try:
            response = await self._client().post(
                self.endpoint,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                json={
                    "model": self.model,
                    "input": text,
                    "encoding_format": "float",
                },
            )
        except httpx.HTTPError as e:
            logger.warning(f"Text embedding request failed: {e}")
            return None

        if not response.is_success:
            logger.warning(f"Text embedding failed with status {response.status_code}")
            return None

        try:
            embedding = response.json()["data"][0]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.warning("Text embedding returned invalid data")
            return None

        if (
            not isinstance(embedding, list)
            or not embedding
            or not all(isinstance(v, int | float) and not isinstance(v, bool) for v in embedding)
        ):
            logger.warning("Text embedding returned invalid data")
            return None

        return [float(v) for v in embedding]

    async def embed(self, texts: Sequence[str]) -> EmbeddingBatch:
        """Embed every text, preserving order.

        Never raises on remote failures: failed items get fallback vectors.

        Args:
            texts: Texts to embed.

        Returns:
            EmbeddingBatch with exactly one vector per input text.
        """
        batch = EmbeddingBatch()

        if not self.remote_enabled:
            batch.vectors = [fallback_embedding(t, self.dimensions) for t in texts]
            batch.fallback_count = len(texts)
            return batch

        total_groups = (len(texts) + self.pacing_group - 1) // self.pacing_group
        for start in range(0, len(texts), self.pacing_group):
            group = texts[start : start + self.pacing_group]
            logger.debug(f"Processing batch {start // self.pacing_group + 1}/{total_groups}")

            for text in group:
                vector = await self._request_embedding(text)
                if vector is None:
                    batch.vectors.append(fallback_embedding(text, self.dimensions))
                    batch.fallback_count += 1
                else:
                    batch.vectors.append(vector)
                    batch.remote_count += 1
                if self.item_delay:
                    await asyncio.sleep(self.item_delay)

            if start + self.pacing_group < len(texts) and self.batch_delay:
                await asyncio.sleep(self.batch_delay)

        if batch.used_fallback:
            logger.warning(f"Used fallback embeddings for {batch.fallback_count}/{len(texts)} texts")
        else:
            logger.info(f"Successfully processed {batch.remote_count} embeddings")
        return batch

    async def embed_chunks(self, chunks: Sequence[str]) -> tuple[list[str], EmbeddingBatch]:
        """Clean, cap and embed document chunks.

        Chunks dropped by cleaning or by the cap are excluded from the
        returned texts, so no chunk is ever stored without a vector.

        Returns:
            The kept chunk texts and their embeddings.
        """
        kept = prepare_chunks(chunks, self.max_items)
        batch = await self.embed(kept)
        return kept, batch

    async def embed_query(self, text: str) -> tuple[list[float], bool]:
        """Embed a single query.

        Returns:
            The query vector and whether it came from the fallback.
        """
        batch = await self.embed([text.strip()])
        return batch.vectors[0], batch.used_fallback
