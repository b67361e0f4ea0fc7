"""Jinja2 rendering boundary: routes hand plain data to templates, templates never call the core."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from snipbox.core.languages import LANGUAGES

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def render(request: Request, name: str, status_code: int = 200, **context: Any) -> Response:
    """Render *name* with a fresh-or-current anti-forgery token for the page's forms."""
    context.setdefault("csrf_token", request.app.state.tokens.issue(request.session))
    context.setdefault("languages", LANGUAGES)
    context.setdefault("authenticated", request.app.state.tokens.is_authenticated(request.session))
    return templates.TemplateResponse(request, name, context, status_code=status_code)
