"""Exception handlers rendering errors as ``{"error", "details"}`` bodies."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chat_playground.errors import PlaygroundError

logger = logging.getLogger(__name__)


async def playground_error_handler(request: Request, exc: PlaygroundError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.error} ({exc.details})")
    else:
        logger.warning(f"{request.url.path} rejected: {exc.error}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    logger.warning(f"{request.url.path} rejected: invalid request ({len(details)} errors)")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": details},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to ``app``."""
    app.add_exception_handler(PlaygroundError, playground_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
