"""Chat Playground - streaming chat proxy with session-scoped RAG.

Combines FastAPI for HTTP streaming, pypdf for text extraction,
httpx for the upstream inference API, and Pydantic for data validation.

Components:
    - api: HTTP endpoints, session cookies and streamed completions
    - rag: embeddings, in-memory document store, retrieval and session lifecycle
    - parsing: PDF extraction and text chunking
    - completion: upstream chat completion client
    - models: Request/response schemas
"""

__version__ = "0.1.0"
