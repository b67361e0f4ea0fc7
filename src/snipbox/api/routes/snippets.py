from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from snipbox.api.dependencies import get_store, parse_body, read_payload, require_token, wants_json
from snipbox.api.schemas import SnippetCreateForm, SnippetOut, SubmitResponse
from snipbox.api.rendering import render
from snipbox.core.languages import is_highlighted
from snipbox.core.mutations import create_snippet
from snipbox.core.ports.store import SnippetStore
from snipbox.core.query import SortOrder, search_snippets
from snipbox.errors import SnippetValidationError

router = APIRouter(tags=["snippets"])


@router.get("/", include_in_schema=False)
async def submission_form(request: Request) -> Response:
    return render(request, "form.html")


@router.post("/submit", dependencies=[Depends(require_token)])
async def submit(
    request: Request,
    payload: dict[str, Any] = Depends(read_payload),
    store: SnippetStore = Depends(get_store),
) -> Response:
    """Create a snippet. Open to anonymous visitors, but the anti-forgery token is still required."""
    form = parse_body(SnippetCreateForm, payload)
    snippet = await create_snippet(store, form.language, form.code)
    if wants_json(request):
        body = SubmitResponse(filename=snippet.filename)
        return JSONResponse(body.model_dump())
    return render(request, "saved.html", snippet=snippet)


@router.get("/search", response_model=list[SnippetOut])
async def search(
    q: str = Query(""),
    lang: str = Query(""),
    sort: str = Query(SortOrder.NEWEST.value),
    store: SnippetStore = Depends(get_store),
) -> list[SnippetOut]:
    snippets = await search_snippets(store, q, lang, SortOrder.parse(sort))
    return [SnippetOut.model_validate(s) for s in snippets]


@router.get("/view")
async def view(
    request: Request,
    file: str | None = Query(None),
    store: SnippetStore = Depends(get_store),
) -> Response:
    if not file:
        raise SnippetValidationError("No file specified")
    snippet = await store.get(file)
    if wants_json(request):
        return JSONResponse(SnippetOut.model_validate(snippet).model_dump(mode="json"))
    return render(request, "view.html", snippet=snippet, highlighted=is_highlighted(snippet.language))
