from __future__ import annotations

from typing import Any, TypeVar

from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError

from snipbox.core.ports.store import SnippetStore
from snipbox.core.tokens import TokenGuard
from snipbox.errors import SnippetValidationError
from snipbox.settings import Settings

CSRF_FIELD = "_csrf"
CSRF_HEADERS = ("x-csrf-token", "x-csrftoken")

ModelT = TypeVar("ModelT", bound=BaseModel)


async def get_store(request: Request) -> SnippetStore:
    """Return the store the application was built with, initialised for use."""
    store: SnippetStore = request.app.state.store
    await store.ensure_ready()
    return store


def get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_token_guard(request: Request) -> TokenGuard:
    guard: TokenGuard = request.app.state.tokens
    return guard


def wants_json(request: Request) -> bool:
    """True when the caller asked for (or spoke) JSON rather than a browser page."""
    if "application/json" in request.headers.get("accept", ""):
        return True
    if request.headers.get("x-requested-with", "").lower() == "xmlhttprequest":
        return True
    return request.headers.get("content-type", "").startswith("application/json")


async def read_payload(request: Request) -> dict[str, Any]:
    """Read a form-encoded or JSON request body into a flat dict."""
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return {}
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            body = await request.json()
        except ValueError as exc:
            raise SnippetValidationError("Request body is not valid JSON") from exc
        if not isinstance(body, dict):
            raise SnippetValidationError("Request body must be a JSON object")
        return body
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def parse_body(model: type[ModelT], payload: dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][-1]) for err in exc.errors() if err.get("loc"))
        raise SnippetValidationError(f"Invalid field(s): {fields}") from exc


async def require_session(request: Request, guard: TokenGuard = Depends(get_token_guard)) -> None:
    guard.require_auth(request.session)


async def require_token(
    request: Request,
    payload: dict[str, Any] = Depends(read_payload),
    guard: TokenGuard = Depends(get_token_guard),
) -> None:
    """Reject the request unless it carries the session's anti-forgery token."""
    presented: Any = None
    for header in CSRF_HEADERS:
        presented = request.headers.get(header)
        if presented:
            break
    else:
        presented = payload.get(CSRF_FIELD)
    guard.validate(request.session, presented if isinstance(presented, str) else None)
