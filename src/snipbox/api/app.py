from __future__ import annotations

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from snipbox.api.errors import register_exception_handlers
from snipbox.api.lifespan import lifespan
from snipbox.api.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from snipbox.api.routes.admin import router as admin_router
from snipbox.api.routes.csrf import router as csrf_router
from snipbox.api.routes.health import router as health_router
from snipbox.api.routes.snippets import router as snippets_router
from snipbox.core.ports.store import SnippetStore
from snipbox.core.tokens import TokenGuard
from snipbox.db.engine import create_store
from snipbox.settings import Settings

SESSION_MAX_AGE = 24 * 60 * 60


def create_app(settings: Settings | None = None, store: SnippetStore | None = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="snipbox",
        description="Submit, search, edit and delete code snippets.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store if store is not None else create_store(settings)
    app.state.tokens = TokenGuard(settings.csrf_token_ttl)

    if settings.rate_limit > 0:
        app.add_middleware(
            RateLimitMiddleware,
            limit=settings.rate_limit,
            window_seconds=settings.rate_limit_window,
            proxy_hops=settings.proxy_hops,
        )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        max_age=SESSION_MAX_AGE,
        same_site="lax",
        https_only=settings.production,
    )
    register_exception_handlers(app)

    app.include_router(health_router, include_in_schema=False)
    app.include_router(csrf_router)
    app.include_router(snippets_router)
    app.include_router(admin_router)

    return app
