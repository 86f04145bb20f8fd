"""FastAPI dependencies resolving the services owned by the application."""

from fastapi import Request

from chat_playground.completion.client import CompletionClient
from chat_playground.config import Settings
from chat_playground.rag.embeddings import EmbeddingClient
from chat_playground.rag.ingestion import IngestionOrchestrator
from chat_playground.rag.sessions import SessionLifecycleManager
from chat_playground.rag.store import SessionDocumentStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SessionDocumentStore:
    return request.app.state.store


def get_sessions(request: Request) -> SessionLifecycleManager:
    return request.app.state.sessions


def get_embedder(request: Request) -> EmbeddingClient:
    return request.app.state.embedder


def get_ingestion(request: Request) -> IngestionOrchestrator:
    return request.app.state.ingestion


def get_completions(request: Request) -> CompletionClient:
    return request.app.state.completions
