from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.responses import Response

from snipbox.api.dependencies import (
    get_settings,
    get_store,
    get_token_guard,
    parse_body,
    read_payload,
    require_session,
    require_token,
    wants_json,
)
from snipbox.api.schemas import DeleteResponse, LoginForm, SnippetDeleteForm, SnippetOut, SnippetUpdateForm
from snipbox.api.rendering import render
from snipbox.core.mutations import delete_snippet, update_snippet
from snipbox.core.ports.store import SnippetStore
from snipbox.core.query import SortOrder, filter_snippets, language_counts, list_languages, sort_snippets
from snipbox.core.tokens import TokenGuard
from snipbox.errors import SnippetValidationError
from snipbox.settings import Settings

router = APIRouter(tags=["admin"])

ADMIN_PATH = "/admin"


@router.get("/login", include_in_schema=False)
async def login_form(request: Request, error: bool = Query(False)) -> Response:
    return render(request, "login.html", error=error)


@router.post("/login", include_in_schema=False, dependencies=[Depends(require_token)])
async def login(
    request: Request,
    payload: dict[str, Any] = Depends(read_payload),
    settings: Settings = Depends(get_settings),
    guard: TokenGuard = Depends(get_token_guard),
) -> Response:
    form = parse_body(LoginForm, payload)
    if guard.login(request.session, form.password, settings.admin_password):
        return RedirectResponse(ADMIN_PATH, status_code=303)
    return RedirectResponse("/login?error=1", status_code=303)


@router.post("/logout", include_in_schema=False, dependencies=[Depends(require_token)])
async def logout(request: Request, guard: TokenGuard = Depends(get_token_guard)) -> Response:
    guard.logout(request.session)
    return RedirectResponse("/", status_code=303)


@router.get(ADMIN_PATH, include_in_schema=False, dependencies=[Depends(require_session)])
async def admin(
    request: Request,
    q: str = Query(""),
    lang: str = Query(""),
    sort: str = Query(SortOrder.NEWEST.value),
    store: SnippetStore = Depends(get_store),
) -> Response:
    everything = await store.list()
    order = SortOrder.parse(sort)
    snippets = sort_snippets(filter_snippets(everything, q, lang), order)
    return render(
        request,
        "admin.html",
        snippets=snippets,
        stored_languages=list_languages(everything),
        total=len(everything),
        counts=language_counts(everything),
        q=q,
        lang=lang,
        sort=order.value,
        sort_orders=[o.value for o in SortOrder],
    )


@router.get("/edit", include_in_schema=False, dependencies=[Depends(require_session)])
async def edit_form(
    request: Request,
    file: str | None = Query(None),
    store: SnippetStore = Depends(get_store),
) -> Response:
    if not file:
        raise SnippetValidationError("No file specified")
    snippet = await store.get(file)
    return render(request, "edit.html", snippet=snippet)


async def _save_edit(request: Request, filename: str | None, form: SnippetUpdateForm, store: SnippetStore) -> Response:
    snippet = await update_snippet(store, filename, form.language, form.code)
    if wants_json(request):
        return JSONResponse(SnippetOut.model_validate(snippet).model_dump(mode="json"))
    return RedirectResponse(ADMIN_PATH, status_code=303)


@router.post("/edit", dependencies=[Depends(require_session), Depends(require_token)])
async def edit(
    request: Request,
    file: str | None = Query(None),
    payload: dict[str, Any] = Depends(read_payload),
    store: SnippetStore = Depends(get_store),
) -> Response:
    """Replace a snippet's language and code; its filename and timestamp stay as they are."""
    form = parse_body(SnippetUpdateForm, payload)
    return await _save_edit(request, file or form.filename, form, store)


@router.post("/save-edit", include_in_schema=False, dependencies=[Depends(require_session), Depends(require_token)])
async def save_edit(
    request: Request,
    payload: dict[str, Any] = Depends(read_payload),
    store: SnippetStore = Depends(get_store),
) -> Response:
    form = parse_body(SnippetUpdateForm, payload)
    return await _save_edit(request, form.filename, form, store)


@router.post("/delete", dependencies=[Depends(require_session), Depends(require_token)])
async def delete(
    request: Request,
    file: str | None = Query(None),
    payload: dict[str, Any] = Depends(read_payload),
    store: SnippetStore = Depends(get_store),
) -> Response:
    """Delete a snippet named by ``file`` in the body or the query string."""
    form = parse_body(SnippetDeleteForm, payload)
    filename = form.file or file
    await delete_snippet(store, filename)
    if wants_json(request) or not request.headers.get("accept", "").startswith("text/html"):
        return JSONResponse(DeleteResponse(filename=str(filename)).model_dump())
    return RedirectResponse(ADMIN_PATH, status_code=303)
