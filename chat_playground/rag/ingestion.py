"""Ingestion pipeline for a single uploaded file.

Sequences extraction -> chunking -> embedding -> storage. Each rejection
raises a distinct error so the HTTP layer can report it precisely.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi.concurrency import run_in_threadpool

from chat_playground.errors import NoChunksError
from chat_playground.models.documents import Document
from chat_playground.parsing.chunker import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_CHUNKS,
    chunk_text,
)
from chat_playground.parsing.pdf_parser import (
    MIN_TEXT_LENGTH,
    PDF_MIME_TYPE,
    NoContentError,
    UnsupportedTypeError,
    extract_text,
)
from chat_playground.rag.embeddings import EmbeddingClient
from chat_playground.rag.store import SessionDocumentStore

logger = logging.getLogger(__name__)

SUPPORTED_TYPES = frozenset({PDF_MIME_TYPE})


@dataclass
class IngestionResult:
    """Summary of one ingested file."""

    chunk_count: int
    warning: str | None = None
    embeddings_fallback: bool = False


class IngestionOrchestrator:
    """Turns an uploaded file into a stored, embedded Document."""

    def __init__(
        self,
        store: SessionDocumentStore,
        embedder: EmbeddingClient,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        max_chunks: int = DEFAULT_MAX_CHUNKS,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.max_chunks = max_chunks

    async def ingest(
        self,
        session_id: str,
        file_id: str,
        filename: str,
        file_path: str | Path,
        file_type: str,
    ) -> IngestionResult:
        """Extract, chunk, embed and store one file.

        Args:
            session_id: Owning session.
            file_id: Identifier of the upload.
            filename: Original filename.
            file_path: Location of the stored upload.
            file_type: MIME type reported at upload.

        Returns:
            IngestionResult with the number of stored chunks.

        Raises:
            UnsupportedTypeError: For non-PDF files.
            ExtractionError: If text extraction fails.
            NoContentError: If the text is too short.
            NoChunksError: If no usable chunks remain.
            StorageError: If the store rejects the document.
        """
        if file_type not in SUPPORTED_TYPES:
            raise UnsupportedTypeError("Only PDF files are supported for now.", details=file_type)

        text = await run_in_threadpool(extract_text, file_path, file_type)
        if len(text) < MIN_TEXT_LENGTH:
            raise NoContentError("No text extracted from document.")

        chunks = chunk_text(text, self.chunk_size, self.chunk_overlap, self.max_chunks)
        if not chunks:
            raise NoChunksError("No valid text chunks found in document.")

        kept, batch = await self.embedder.embed_chunks(chunks)
        if not kept:
            raise NoChunksError("No valid text chunks found in document.")

        warning = None
        dropped = len(chunks) - len(kept)
        if dropped:
            logger.info(f"Dropped {dropped} short, duplicate or over-limit chunks from {filename}")
        if len(kept) == self.embedder.max_items and dropped:
            warning = f"Only the first {len(kept)} chunks were embedded for retrieval."

        self.store.put(
            session_id,
            file_id,
            Document(
                file_id=file_id,
                filename=filename,
                file_type=file_type,
                chunks=kept,
                embeddings=batch.vectors,
                embeddings_fallback=batch.used_fallback,
            ),
        )

        logger.info(
            f"Ingested {filename} for session {session_id}: {len(kept)} chunks"
            f"{' (fallback embeddings)' if batch.used_fallback else ''}"
        )
        return IngestionResult(
            chunk_count=len(kept),
            warning=warning,
            embeddings_fallback=batch.used_fallback,
        )
