"""Domain models for the in-memory RAG pipeline."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class Document(BaseModel):
    """A processed upload owned by one session.

    ``chunks[i]`` corresponds to ``embeddings[i]``.

    Attributes:
        file_id: Identifier assigned at upload time.
        filename: Original filename supplied by the client.
        file_type: MIME type of the uploaded file.
        chunks: Trimmed chunk texts in document order.
        embeddings: One vector per chunk.
        embeddings_fallback: True if any vector came from the local fallback.
        created_at: When the document was stored.
    """

    file_id: str
    filename: str
    file_type: str = "application/pdf"
    chunks: list[str] = Field(default_factory=list)
    embeddings: list[list[float]] = Field(default_factory=list)
    embeddings_fallback: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def pairs(self) -> list[tuple[str, list[float]]]:
        """Pair chunks with vectors, truncated to the shorter of the two."""
        return list(zip(self.chunks, self.embeddings, strict=False))


class ScoredChunk(BaseModel):
    """Chunk with its similarity to a query."""

    text: str
    score: float
    file_id: str
    filename: str
