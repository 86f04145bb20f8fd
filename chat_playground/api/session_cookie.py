"""Session token carried in the ``sessionId`` cookie."""

import re
import uuid

from fastapi import Request, Response

from chat_playground.models.schemas import SESSION_ID_PATTERN

SESSION_COOKIE = "sessionId"
_SESSION_ID_RE = re.compile(SESSION_ID_PATTERN)


def is_valid_session_id(value: str | None) -> bool:
    """Session ids end up in filenames, so only a safe alphabet is accepted."""
    return bool(value) and _SESSION_ID_RE.fullmatch(value) is not None


def read_session_id(request: Request) -> str | None:
    """Return the request's session id, or None if missing or malformed."""
    value = request.cookies.get(SESSION_COOKIE)
    return value if is_valid_session_id(value) else None


def issue_session_id(response: Response) -> str:
    """Create a new session id and set it as an httpOnly cookie."""
    session_id = str(uuid.uuid4())
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return session_id
