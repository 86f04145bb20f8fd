"""In-process retrieval-augmented generation pipeline.

Responsibilities:
    - Embedding generation with a deterministic local fallback
    - Session-scoped in-memory document store
    - Cosine-similarity retrieval
    - Session activity tracking and idle reclamation
    - Ingestion orchestration for uploaded files

All state is owned by objects the application constructs once and passes
to the routes; nothing here is a module-level singleton.
"""

from chat_playground.rag.embeddings import EmbeddingBatch, EmbeddingClient, prepare_chunks
from chat_playground.rag.ingestion import IngestionOrchestrator, IngestionResult
from chat_playground.rag.retriever import cosine_similarity, retrieve, retrieve_scored
from chat_playground.rag.sessions import CleanupReport, SessionLifecycleManager
from chat_playground.rag.store import SessionDocumentStore

__all__ = [
    "CleanupReport",
    "EmbeddingBatch",
    "EmbeddingClient",
    "IngestionOrchestrator",
    "IngestionResult",
    "SessionDocumentStore",
    "SessionLifecycleManager",
    "cosine_similarity",
    "prepare_chunks",
    "retrieve",
    "retrieve_scored",
]
