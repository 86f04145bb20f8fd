"""Session cleanup endpoint.

Sweeps idle sessions first, then clears the requesting session's uploads
and stored documents.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from chat_playground.api.dependencies import get_sessions
from chat_playground.api.session_cookie import read_session_id
from chat_playground.models.schemas import (
    CleanupFailure,
    CleanupResponse,
    DocumentStoreCleanup,
    UploadsCleanup,
)
from chat_playground.rag.sessions import SessionLifecycleManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cleanup"])


@router.post(
    "/cleanup",
    response_model=CleanupResponse,
    response_model_exclude_none=True,
    responses={400: {"model": CleanupFailure}},
)
async def cleanup(
    request: Request,
    sessions: SessionLifecycleManager = Depends(get_sessions),
) -> CleanupResponse | JSONResponse:
    """Reclaim idle sessions and clear the caller's session.

    Returns:
        CleanupResponse with files deleted, store entries cleared and the
        number of idle sessions reclaimed. 400 without a session cookie.
    """
    idle_cleaned = await run_in_threadpool(sessions.sweep_idle)

    session_id = read_session_id(request)
    if not session_id:
        logger.debug("No sessionId found in cookies")
        failure = CleanupFailure(error="No sessionId found in cookies.", idle_cleaned=idle_cleaned)
        return JSONResponse(status_code=400, content=failure.model_dump(by_alias=True))

    report = await run_in_threadpool(sessions.clear_session, session_id)

    return CleanupResponse(
        uploads=UploadsCleanup(
            deleted=report.files_deleted,
            error="; ".join(report.errors) or None,
        ),
        document_store=DocumentStoreCleanup(cleared=report.documents_cleared),
        idle_cleaned=idle_cleaned,
        message=(
            f"Uploads and document store cleared for session {session_id}. "
            f"Idle sessions cleaned: {idle_cleaned}"
        ),
    )
