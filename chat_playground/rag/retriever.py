"""Similarity search over a session's stored chunks."""

import logging
from collections.abc import Mapping, Sequence

import numpy as np

from chat_playground.models.documents import Document, ScoredChunk

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3
MAX_TOP_K = 10


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 for empty or mismatched-length inputs and whenever either
    vector has zero magnitude.
    """
    if len(a) == 0 or len(a) != len(b):
        return 0.0

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = float(np.dot(va, vb) / (norm_a * norm_b))
    if not np.isfinite(similarity):
        return 0.0
    # Rounding can push the ratio just outside [-1, 1]
    return max(-1.0, min(1.0, similarity))


def retrieve_scored(
    query_vector: Sequence[float],
    documents: Mapping[str, Document],
    top_k: int = DEFAULT_TOP_K,
) -> list[ScoredChunk]:
    """Rank every stored chunk of a session against the query.

    Args:
        query_vector: Embedding of the query.
        documents: The session's documents keyed by file id.
        top_k: Number of results, clamped to [1, 10].

    Returns:
        Chunks with positive similarity, best first. Ties keep insertion order.
    """
    if not documents or len(query_vector) == 0:
        return []

    top_k = max(1, min(top_k, MAX_TOP_K))
    candidates: list[ScoredChunk] = []

    for file_id, document in documents.items():
        if len(document.chunks) != len(document.embeddings):
            logger.warning(
                f"Document {file_id} has {len(document.chunks)} chunks but "
                f"{len(document.embeddings)} embeddings, using common prefix"
            )
        for chunk, embedding in document.pairs():
            if not chunk.strip():
                continue
            score = cosine_similarity(query_vector, embedding)
            if score > 0:
                candidates.append(
                    ScoredChunk(
                        text=chunk.strip(),
                        score=score,
                        file_id=file_id,
                        filename=document.filename,
                    )
                )

    logger.debug(f"Found {len(candidates)} chunks for similarity search")

    # sorted() is stable, so equal scores keep insertion order
    ranked = sorted(candidates, key=lambda c: c.score, reverse=True)
    return ranked[:top_k]


def retrieve(
    query_vector: Sequence[float],
    documents: Mapping[str, Document],
    top_k: int = DEFAULT_TOP_K,
) -> list[str]:
    """Return the texts of the ``top_k`` most similar chunks.

    An empty result means "no injected context", not an error.
    """
    return [chunk.text for chunk in retrieve_scored(query_vector, documents, top_k)]
