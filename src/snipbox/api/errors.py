"""Turn snipbox exceptions into HTTP responses at the request boundary."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from snipbox.api.dependencies import wants_json
from snipbox.errors import AuthError, SnipboxError, SnippetNotFoundError, StorageError

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


async def handle_snipbox_error(request: Request, exc: Exception) -> Response:
    assert isinstance(exc, SnipboxError)
    if isinstance(exc, AuthError):
        return RedirectResponse(LOGIN_PATH, status_code=303)

    if isinstance(exc, StorageError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    elif isinstance(exc, SnippetNotFoundError):
        logger.warning("%s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)

    if wants_json(request):
        return JSONResponse({"success": False, "message": exc.message}, status_code=exc.status_code)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SnipboxError, handle_snipbox_error)
