"""Pydantic models for the pipeline and the HTTP API.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - Document / ScoredChunk: stored documents and retrieval results
    - ChatMessage / ChatRequest: chat completion payload
    - ProcessDocumentRequest / ProcessDocumentResponse: ingestion boundary
    - UploadResponse, CleanupResponse, ErrorResponse: endpoint responses
"""

from chat_playground.models.documents import Document, ScoredChunk
from chat_playground.models.schemas import (
    ChatMessage,
    ChatRequest,
    CleanupFailure,
    CleanupResponse,
    DocumentStoreCleanup,
    ErrorResponse,
    ProcessDocumentRequest,
    ProcessDocumentResponse,
    UploadResponse,
    UploadsCleanup,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "CleanupFailure",
    "CleanupResponse",
    "Document",
    "DocumentStoreCleanup",
    "ErrorResponse",
    "ProcessDocumentRequest",
    "ProcessDocumentResponse",
    "ScoredChunk",
    "UploadResponse",
    "UploadsCleanup",
]
