"""Document processing endpoint.

Invoked server-to-server by the upload handler. Runs the ingestion pipeline
for one stored file and reports every rejection as a distinct 400.
"""

import logging
import time
from pathlib import Path

from fastapi import APIRouter, Depends

from chat_playground.api.dependencies import get_ingestion, get_sessions, get_settings
from chat_playground.config import Settings
from chat_playground.errors import PlaygroundError, ValidationError
from chat_playground.models.schemas import ProcessDocumentRequest, ProcessDocumentResponse
from chat_playground.rag.ingestion import IngestionOrchestrator
from chat_playground.rag.sessions import SessionLifecycleManager, session_file_prefix

logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])


def _resolve_upload_path(payload: ProcessDocumentRequest, uploads_dir: Path) -> Path:
    """Resolve the file path and check the session owns it.

    Raises:
        ValidationError: If the path is outside the uploads directory or
            does not carry the session's filename prefix.
    """
    path = Path(payload.filepath).resolve()
    if path.parent != uploads_dir.resolve() or not path.name.startswith(
        session_file_prefix(payload.session_id)
    ):
        raise ValidationError("Invalid file path", details=payload.filepath)
    return path


@router.post(
    "/process-document",
    response_model=ProcessDocumentResponse,
    response_model_exclude_none=True,
)
async def process_document(
    payload: ProcessDocumentRequest,
    settings: Settings = Depends(get_settings),
    ingestion: IngestionOrchestrator = Depends(get_ingestion),
    sessions: SessionLifecycleManager = Depends(get_sessions),
) -> ProcessDocumentResponse:
    """Extract, chunk, embed and store an uploaded document.

    Returns:
        ProcessDocumentResponse with chunk count and processing time in ms.

    Raises:
        400: Missing fields, unsupported type, extraction failure, no content.
        500: Storage or unexpected failure.
    """
    started = time.perf_counter()
    path = _resolve_upload_path(payload, settings.uploads_dir)
    sessions.touch(payload.session_id)

    try:
        result = await ingestion.ingest(
            session_id=payload.session_id,
            file_id=payload.file_id,
            filename=payload.filename,
            file_path=path,
            file_type=payload.file_type,
        )
    except PlaygroundError:
        raise
    except Exception as e:
        logger.error(f"Failed to process document {payload.filename}", exc_info=True)
        raise PlaygroundError("Failed to process document", details=str(e)) from e

    return ProcessDocumentResponse(
        file_id=payload.file_id,
        filename=payload.filename,
        type=payload.file_type,
        chunks=result.chunk_count,
        warning=result.warning,
        embeddings_fallback=result.embeddings_fallback,
        processing_time=int((time.perf_counter() - started) * 1000),
    )
