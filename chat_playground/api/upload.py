"""File upload endpoint.

Validates and stores the upload under the session's filename prefix, then
asks the processing endpoint to ingest it. A processing failure never fails
the upload: the file stays available and the response carries a warning.
"""

import logging
import re
import uuid
from pathlib import Path
from typing import Any

import httpx
from fastapi import APIRouter, Depends, File, Request, Response, UploadFile
from fastapi.concurrency import run_in_threadpool

from chat_playground.api.dependencies import get_sessions, get_settings
from chat_playground.api.session_cookie import issue_session_id, read_session_id
from chat_playground.config import Settings
from chat_playground.errors import PlaygroundError, ValidationError
from chat_playground.models.schemas import ProcessDocumentRequest, UploadResponse
from chat_playground.rag.sessions import SessionLifecycleManager, session_file_prefix

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])

ALLOWED_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)
PROCESSING_WARNING = (
    "File uploaded but processing failed. RAG functionality may not work for this file."
)
_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


def _safe_extension(filename: str) -> str:
    """Return the file's extension if it is safe to reuse on disk."""
    suffix = Path(filename).suffix
    return suffix.lower() if _EXTENSION_RE.match(suffix) else ""


async def _read_and_validate(file: UploadFile, max_size: int) -> bytes:
    """Read the upload and enforce the size and type limits.

    Raises:
        ValidationError: 400 if the file is too large or of a disallowed type.
    """
    content = await file.read()

    if len(content) > max_size:
        limit_mb = max_size // (1024 * 1024)
        raise ValidationError(
            f"File size exceeds {limit_mb}MB limit",
            details={"size": len(content)},
        )

    if file.content_type not in ALLOWED_TYPES:
        raise ValidationError(
            "Only PDF and DOC files are allowed",
            details={"receivedType": file.content_type},
        )

    return content


async def _request_processing(
    client: httpx.AsyncClient, payload: ProcessDocumentRequest
) -> dict[str, Any]:
    """Call the processing endpoint and return its JSON result.

    Raises:
        PlaygroundError: If processing failed or returned an invalid response.
    """
    response = await client.post(
        "/process-document",
        json=payload.model_dump(by_alias=True),
    )
    logger.debug(f"Process response status: {response.status_code}")

    if "application/json" not in response.headers.get("content-type", ""):
        logger.error(f"Non-JSON response from process-document: {response.text[:500]}")
        raise PlaygroundError("Document processing service returned an invalid response")

    data = response.json()
    if not response.is_success:
        raise PlaygroundError(
            data.get("error") or f"Processing failed with status {response.status_code}",
            details=data.get("details"),
            status_code=response.status_code,
        )
    return data


@router.post("/upload", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_file(
    request: Request,
    response: Response,
    file: UploadFile | None = File(default=None),
    settings: Settings = Depends(get_settings),
    sessions: SessionLifecycleManager = Depends(get_sessions),
) -> UploadResponse:
    """Upload a document and ingest it for retrieval.

    Accepts PDF and Word documents up to 10MB. Only PDFs are chunked and
    embedded; other types are stored and reported with a warning.

    Args:
        file: The uploaded file (multipart/form-data field ``file``).

    Returns:
        UploadResponse with the file id and number of retrievable chunks.

    Raises:
        400: No file, file too large, or disallowed type.
        500: The file could not be saved.
    """
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    content = await _read_and_validate(file, settings.max_upload_size)

    # Rejected uploads neither create nor refresh a session
    session_id = read_session_id(request) or issue_session_id(response)
    sessions.touch(session_id)

    content_type = file.content_type or ""
    logger.info(f"Processing upload: {file.filename} ({len(content)} bytes, {content_type})")

    file_id = str(uuid.uuid4())
    stored_name = f"{session_file_prefix(session_id)}{file_id}{_safe_extension(file.filename)}"
    filepath = settings.uploads_dir / stored_name

    try:
        await run_in_threadpool(settings.uploads_dir.mkdir, parents=True, exist_ok=True)
        await run_in_threadpool(filepath.write_bytes, content)
    except OSError as e:
        logger.error(f"File save error: {e}")
        raise PlaygroundError("Failed to save file", details=str(e)) from e

    payload = ProcessDocumentRequest(
        session_id=session_id,
        file_id=file_id,
        filename=file.filename,
        filepath=str(filepath),
        file_type=content_type,
    )

    try:
        result = await _request_processing(request.app.state.internal_client, payload)
    except Exception as e:
        message = e.error if isinstance(e, PlaygroundError) else str(e)
        logger.warning(f"Document processing error for {file.filename}: {message}")
        return UploadResponse(
            success=True,
            file_id=file_id,
            filename=file.filename,
            size=len(content),
            type=content_type,
            chunks=0,
            warning=PROCESSING_WARNING,
            processing_error=message or type(e).__name__,
        )

    logger.info(f"Document processing completed: {file.filename} ({result.get('chunks', 0)} chunks)")
    return UploadResponse(
        success=True,
        file_id=file_id,
        filename=file.filename,
        size=len(content),
        type=content_type,
        chunks=int(result.get("chunks") or 0),
        warning=result.get("warning"),
    )
