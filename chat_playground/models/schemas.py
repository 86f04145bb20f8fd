"""Request and response schemas for the HTTP API.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]{1,128}$"


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint.

    Attributes:
        error: Machine-checkable error message.
        details: Optional extra context.
    """

    error: str
    details: Any = None


class ChatMessage(BaseModel):
    """A single chat message in the conversation.

    Attributes:
        role: The speaker identifier (user, assistant, or system).
        content: The message text.
    """

    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(CamelModel):
    """Request payload for the chat completion endpoint.

    Attributes:
        messages: Conversation so far, last message usually from the user.
        model: Upstream model id. Falls back to the configured default.
        temperature: Sampling temperature.
        max_tokens: Maximum tokens in the generated response.
        use_rag: Whether to inject context from the session's documents.
    """

    messages: list[ChatMessage] = Field(..., min_length=1)
    model: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1, le=128000, alias="maxTokens")
    use_rag: bool = Field(default=False, alias="useRAG")

    @field_validator("model", mode="before")
    @classmethod
    def blank_model_is_default(cls, v: Any) -> Any:
        """Treat an empty model string as "use the default"."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ProcessDocumentRequest(CamelModel):
    """Server-to-server request to ingest an uploaded file."""

    session_id: str = Field(..., alias="sessionId", pattern=SESSION_ID_PATTERN)
    file_id: str = Field(..., alias="fileId", min_length=1)
    filename: str = Field(..., min_length=1)
    filepath: str = Field(..., min_length=1)
    file_type: str = Field(..., alias="fileType", min_length=1)


class ProcessDocumentResponse(CamelModel):
    """Result of ingesting one document."""

    file_id: str = Field(..., alias="fileId")
    filename: str
    type: str
    chunks: int = Field(..., ge=0)
    warning: str | None = None
    embeddings_fallback: bool = Field(default=False, alias="embeddingsFallback")
    processing_time: int = Field(..., ge=0, alias="processingTime")
    message: str = "Document processed successfully"


class UploadResponse(CamelModel):
    """Response after a file upload.

    Attributes:
        success: Whether the file was stored.
        file_id: Identifier assigned to the upload.
        filename: Original filename.
        size: Size in bytes.
        type: MIME type.
        chunks: Number of chunks available for retrieval (0 if not processed).
        warning: Set when the upload succeeded but processing did not.
        processing_error: Processing failure detail, if any.
    """

    success: bool
    file_id: str = Field(..., alias="fileId")
    filename: str
    size: int = Field(..., ge=0)
    type: str
    chunks: int = Field(default=0, ge=0)
    warning: str | None = None
    processing_error: str | None = Field(default=None, alias="processingError")


class UploadsCleanup(BaseModel):
    deleted: int = Field(..., ge=0)
    error: str | None = None


class DocumentStoreCleanup(BaseModel):
    cleared: int = Field(..., ge=0)


class CleanupResponse(CamelModel):
    """Result of clearing the requesting session."""

    success: bool = True
    uploads: UploadsCleanup
    document_store: DocumentStoreCleanup = Field(..., alias="documentStore")
    idle_cleaned: int = Field(..., ge=0, alias="idleCleaned")
    message: str


class CleanupFailure(CamelModel):
    """Returned when cleanup is requested without a session cookie."""

    success: bool = False
    error: str
    idle_cleaned: int = Field(..., ge=0, alias="idleCleaned")
