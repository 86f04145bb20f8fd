"""FastAPI endpoints for the chat playground.

Endpoints:
    - GET /health: Service health status
    - POST /upload: Document upload and ingestion
    - POST /process-document: Server-to-server ingestion of a stored upload
    - POST /chat: Streamed chat completion with optional RAG context
    - POST /cleanup: Idle sweep and per-session cleanup
"""

from chat_playground.api.app import app, create_app

__all__ = ["app", "create_app"]
