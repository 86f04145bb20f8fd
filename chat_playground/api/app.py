"""FastAPI application factory and configuration.

Builds the application with its owned services (document store, session
lifecycle manager, embedding and completion clients), middleware, error
handlers and routers.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_playground import __version__
from chat_playground.api.chat import router as chat_router
from chat_playground.api.cleanup import router as cleanup_router
from chat_playground.api.documents import router as documents_router
from chat_playground.api.errors import register_exception_handlers
from chat_playground.api.upload import router as upload_router
from chat_playground.completion.client import CompletionClient
from chat_playground.config import Settings, get_settings
from chat_playground.rag.embeddings import EmbeddingClient
from chat_playground.rag.ingestion import IngestionOrchestrator
from chat_playground.rag.sessions import SessionLifecycleManager
from chat_playground.rag.store import SessionDocumentStore

logger = logging.getLogger(__name__)

INTERNAL_BASE_URL = "http://internal"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    Services are built by ``create_app``; shutdown closes the HTTP clients
    and drops all in-memory session state.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    settings: Settings = app.state.settings
    logger.info("Starting Chat Playground API...")
    logger.info(f"Uploads directory: {settings.uploads_dir}")
    if not settings.has_api_key:
        logger.warning("No LLM API key configured: chat is disabled, embeddings use fallback")
    yield
    logger.info("Shutting down Chat Playground API...")
    await close_services(app)


async def close_services(app: FastAPI) -> None:
    """Release HTTP clients and clear session state owned by ``app``."""
    await app.state.internal_client.aclose()
    await app.state.upstream_client.aclose()
    app.state.store.clear()


def _build_internal_client(application: FastAPI, settings: Settings) -> httpx.AsyncClient:
    """Client for server-to-server calls.

    Without ``internal_base_url`` the calls are routed in-process through
    the ASGI app instead of the network.
    """
    if settings.internal_base_url:
        return httpx.AsyncClient(base_url=settings.internal_base_url, timeout=settings.request_timeout)
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=application),
        base_url=INTERNAL_BASE_URL,
        timeout=settings.request_timeout,
    )


def create_app(
    settings: Settings | None = None,
    upstream_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Service settings. Loads from environment if not provided.
        upstream_client: HTTP client for the inference API. A new one is
            created when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    application = FastAPI(
        title="Chat Playground API",
        description=(
            "Streaming chat proxy for a hosted inference API with session-scoped "
            "retrieval-augmented generation over uploaded PDF documents."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    upstream = upstream_client or httpx.AsyncClient(timeout=settings.request_timeout)
    store = SessionDocumentStore()
    embedder = EmbeddingClient(
        api_key=settings.api_key,
        base_url=settings.base_url,
        model=settings.embedding_model,
        dimensions=settings.embedding_dimensions,
        http_client=upstream,
        item_delay=settings.embedding_item_delay,
        batch_delay=settings.embedding_batch_delay,
        pacing_group=settings.embedding_pacing_group,
        max_items=settings.max_embedding_items,
    )

    application.state.settings = settings
    application.state.upstream_client = upstream
    application.state.store = store
    application.state.embedder = embedder
    application.state.sessions = SessionLifecycleManager(
        store,
        settings.uploads_dir,
        idle_timeout=settings.session_idle_timeout,
    )
    application.state.ingestion = IngestionOrchestrator(
        store,
        embedder,
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        max_chunks=settings.max_chunks,
    )
    application.state.completions = CompletionClient(
        api_key=settings.api_key,
        base_url=settings.base_url,
        http_client=upstream,
    )
    application.state.internal_client = _build_internal_client(application, settings)

    register_exception_handlers(application)
    application.include_router(upload_router)
    application.include_router(documents_router)
    application.include_router(chat_router)
    application.include_router(cleanup_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "chat-playground"}

    return application


app = create_app()
