from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from snipbox.core.ports.store import SnippetStore
from snipbox.db.files import FileSnippetStore
from snipbox.db.memory import InMemorySnippetStore
from snipbox.db.sql import SqlSnippetStore
from snipbox.settings import Settings


def get_engine(db_url: str | None = None) -> AsyncEngine:
    url = db_url or Settings.from_env().database_url
    return create_async_engine(url, future=True)


def create_store(settings: Settings) -> SnippetStore:
    """Build the store backend selected by ``settings.backend``."""
    if settings.backend == "sql":
        return SqlSnippetStore(get_engine(settings.database_url))
    if settings.backend == "memory":
        return InMemorySnippetStore()
    return FileSnippetStore(settings.snippets_dir)
