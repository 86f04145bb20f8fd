"""Streaming chat endpoint with optional retrieval-augmented context."""

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from starlette.types import Receive, Scope, Send

from chat_playground.api.dependencies import (
    get_completions,
    get_embedder,
    get_sessions,
    get_settings,
    get_store,
)
from chat_playground.api.session_cookie import read_session_id
from chat_playground.completion.client import CompletionClient, forward_stream
from chat_playground.completion.prompting import inject_context, last_user_index
from chat_playground.config import Settings
from chat_playground.errors import ValidationError
from chat_playground.models.schemas import ChatRequest
from chat_playground.rag.embeddings import EmbeddingClient
from chat_playground.rag.retriever import retrieve
from chat_playground.rag.sessions import SessionLifecycleManager
from chat_playground.rag.store import SessionDocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


class CompletionStreamResponse(StreamingResponse):
    """Streams an open upstream completion and always releases it.

    If the client is gone before the body starts, the body generator never
    runs, so the upstream response is also closed once the response ends,
    however it ends.
    """

    def __init__(self, upstream: httpx.Response) -> None:
        super().__init__(
            forward_stream(upstream),
            media_type="text/plain; charset=utf-8",
            headers={"Cache-Control": "no-cache"},
            background=BackgroundTask(upstream.aclose),
        )
        self.upstream = upstream

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.upstream.aclose()


async def augment_with_context(
    messages: list[dict[str, Any]],
    session_id: str | None,
    store: SessionDocumentStore,
    embedder: EmbeddingClient,
    top_k: int,
) -> list[dict[str, Any]]:
    """Inject the session's most relevant chunks before the last user message.

    Any retrieval failure leaves the messages unchanged: the chat goes on
    without context.
    """
    documents = store.get(session_id) if session_id else {}
    if not documents:
        logger.info(f"No documents available for RAG for session: {session_id}")
        return messages

    index = last_user_index(messages)
    if index is None or not messages[index]["content"].strip():
        return messages

    query = messages[index]["content"]
    logger.info(f"Performing RAG retrieval for: {query[:100]}")

    try:
        query_vector, used_fallback = await embedder.embed_query(query)
        chunks = retrieve(query_vector, documents, top_k)
    except Exception:
        logger.error("RAG processing error, continuing without context", exc_info=True)
        return messages

    if used_fallback:
        logger.warning("Query embedded with fallback vector; retrieval ranking is arbitrary")
    if not chunks:
        logger.info("No relevant chunks found")
        return messages

    logger.info(f"Found {len(chunks)} relevant chunks")
    return inject_context(messages, chunks)


@router.post("/chat")
async def chat(
    payload: ChatRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
    store: SessionDocumentStore = Depends(get_store),
    sessions: SessionLifecycleManager = Depends(get_sessions),
    embedder: EmbeddingClient = Depends(get_embedder),
    completions: CompletionClient = Depends(get_completions),
) -> StreamingResponse:
    """Stream a chat completion from the upstream provider.

    The upstream event stream is forwarded byte for byte, ending with its
    ``data: [DONE]`` line.

    Raises:
        400: Empty messages or missing API key.
        502: Upstream unreachable. Upstream error statuses pass through.
    """
    if not settings.has_api_key:
        raise ValidationError("API key not configured")

    session_id = read_session_id(request)
    if session_id:
        sessions.touch(session_id)

    messages = [message.model_dump() for message in payload.messages]
    if payload.use_rag:
        messages = await augment_with_context(
            messages, session_id, store, embedder, settings.retrieval_top_k
        )

    upstream = await completions.open_stream(
        model=payload.model or settings.chat_model,
        messages=messages,
        temperature=payload.temperature,
        max_tokens=payload.max_tokens,
    )

    return CompletionStreamResponse(upstream)
