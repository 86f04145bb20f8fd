"""Service configuration with environment variable loading.

Pydantic-based settings for the playground. Targets any OpenAI-compatible
inference API (chat completions and embeddings) via ``LLM_BASE_URL``.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "https://api.gravixlayer.com/v1/inference"
DEFAULT_MODEL = "llama3.1:8b"


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings(BaseModel):
    """Configuration for the chat playground service.

    An empty ``api_key`` is allowed: embeddings then fall back to local
    vectors, and the chat endpoint rejects requests with a 400.

    Attributes:
        api_key: Bearer credential for the inference API.
        base_url: Inference API base URL (no trailing slash).
        chat_model: Default model for chat completions.
        embedding_model: Model used for the embeddings endpoint.
        embedding_dimensions: Length of locally generated fallback vectors.
        uploads_dir: Directory holding uploaded files.
        internal_base_url: Base URL for server-to-server calls. None routes
            them in-process through the ASGI app.
        session_idle_timeout: Seconds of inactivity before a session is swept.
        max_upload_size: Maximum accepted upload size in bytes.
    """

    # Defaults come from the environment and go through the same validators
    model_config = ConfigDict(validate_default=True)

    api_key: str = Field(
        default_factory=lambda: os.getenv("LLM_API_KEY", os.getenv("GRAVIXLAYER_API_KEY", "")),
        description="API key for the inference provider",
    )
    base_url: str = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or DEFAULT_BASE_URL,
        description="Inference API base URL",
    )
    chat_model: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", DEFAULT_MODEL),
        description="Default chat completion model",
    )
    embedding_model: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL", DEFAULT_MODEL),
        description="Embedding model",
    )
    embedding_dimensions: int = Field(
        default_factory=lambda: int(os.getenv("EMBEDDING_DIMENSIONS", "1536")),
        ge=1,
        description="Dimensionality of fallback embedding vectors",
    )
    uploads_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("UPLOADS_DIR") or Path.cwd() / "uploads"),
        description="Directory for uploaded files",
    )
    internal_base_url: str | None = Field(
        default_factory=lambda: os.getenv("INTERNAL_BASE_URL") or None,
        description="Base URL for server-to-server calls",
    )
    session_idle_timeout: float = Field(
        default_factory=lambda: float(os.getenv("SESSION_IDLE_TIMEOUT_SECONDS", "3600")),
        gt=0,
        description="Idle seconds before a session is reclaimed",
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("LLM_TIMEOUT_SECONDS", "60")),
        gt=0,
        description="Timeout for upstream HTTP calls in seconds",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: _env_list("CORS_ORIGINS", "*"),
        description="Allowed CORS origins",
    )
    max_upload_size: int = Field(default=10 * 1024 * 1024, ge=1)
    chunk_size: int = Field(default=1000, ge=1)
    chunk_overlap: int = Field(default=200, ge=0)
    max_chunks: int = Field(default=50, ge=1)
    max_embedding_items: int = Field(default=50, ge=1)
    embedding_item_delay: float = Field(default=0.1, ge=0.0)
    embedding_batch_delay: float = Field(default=0.3, ge=0.0)
    embedding_pacing_group: int = Field(default=3, ge=1)
    retrieval_top_k: int = Field(default=3, ge=1, le=10)

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Strip surrounding whitespace from the API key."""
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, v: str) -> str:
        """Drop trailing slashes so endpoint paths can be appended."""
        return v.rstrip("/")

    @model_validator(mode="after")
    def check_chunking(self) -> "Settings":
        """Reject overlap settings that would stall the chunker."""
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self

    @property
    def has_api_key(self) -> bool:
        """Whether remote embeddings and completions are available."""
        return bool(self.api_key)


def get_settings() -> Settings:
    """Create settings from environment.

    Returns:
        Configured Settings instance.
    """
    return Settings()
