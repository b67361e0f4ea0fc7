from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from snipbox.api.dependencies import get_token_guard
from snipbox.api.schemas import CsrfResponse
from snipbox.core.tokens import TokenGuard

router = APIRouter(tags=["csrf"])


@router.get("/get-csrf", response_model=CsrfResponse)
async def get_csrf(
    request: Request,
    refresh: bool = Query(False),
    guard: TokenGuard = Depends(get_token_guard),
) -> CsrfResponse:
    """Return the session's anti-forgery token; ``refresh=true`` replaces it with a new one."""
    token = guard.rotate(request.session) if refresh else guard.issue(request.session)
    return CsrfResponse(csrf_token=token)
