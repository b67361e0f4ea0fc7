"""Integration tests for the relational store against a real PostgreSQL server."""

import asyncio
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from snipbox.api.app import create_app
from snipbox.core.mutations import create_snippet, delete_snippet, update_snippet
from snipbox.core.query import SortOrder, search_snippets
from snipbox.db import SqlSnippetStore
from snipbox.errors import SnippetConflictError, SnippetNotFoundError
from snipbox.models import make_filename
from snipbox.settings import Settings

TRICKY_CODE = "SELECT 'it''s' AS \"quoted\";\n-- ünïcode ✓\n\tDROP TABLE snippets; --"


@pytest.mark.asyncio
async def test_create_get_update_delete(pg_store: SqlSnippetStore) -> None:
    created = await create_snippet(pg_store, "SQL", TRICKY_CODE)

    fetched = await pg_store.get(created.filename)
    assert fetched.code == TRICKY_CODE
    assert fetched.language == "sql"
    assert fetched.timestamp == created.timestamp

    updated = await update_snippet(pg_store, created.filename, "plaintext", "v2")
    assert updated.timestamp == created.timestamp
    assert (await pg_store.get(created.filename)).code == "v2"

    await delete_snippet(pg_store, created.filename)
    with pytest.raises(SnippetNotFoundError):
        await delete_snippet(pg_store, created.filename)


@pytest.mark.asyncio
async def test_duplicate_filename_conflicts(pg_store: SqlSnippetStore) -> None:
    instant = datetime(2025, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
    await create_snippet(pg_store, "python", "first", now=instant)

    with pytest.raises(SnippetConflictError):
        await create_snippet(pg_store, "python", "second", now=instant)
    assert (await pg_store.get(make_filename(instant))).code == "first"


@pytest.mark.asyncio
async def test_concurrent_creates_with_same_name_keep_one_winner(pg_store: SqlSnippetStore) -> None:
    instant = datetime(2025, 6, 1, tzinfo=timezone.utc)
    filename = make_filename(instant)

    results = await asyncio.gather(
        *(pg_store.put(filename, "python", f"writer {n}", instant) for n in range(5)),
        return_exceptions=True,
    )

    assert sum(not isinstance(r, BaseException) for r in results) == 1
    assert sum(isinstance(r, SnippetConflictError) for r in results) == 4


@pytest.mark.asyncio
async def test_search_over_relational_store(pg_store: SqlSnippetStore) -> None:
    base = datetime(2025, 2, 1, tzinfo=timezone.utc)
    for minutes, (language, code) in enumerate([("python", "print('hi')"), ("sql", "SELECT 'HI';"), ("bash", "ls")]):
        await pg_store.put(make_filename(base.replace(minute=minutes)), language, code, base.replace(minute=minutes))

    hits = await search_snippets(pg_store, "hi", order=SortOrder.OLDEST)
    assert [s.language for s in hits] == ["python", "sql"]


@pytest.mark.asyncio
async def test_ping(pg_store: SqlSnippetStore) -> None:
    assert await pg_store.ping() is True


def test_app_on_relational_backend(_run_migrations: None, test_db_url: str) -> None:
    settings = Settings(backend="sql", database_url=test_db_url, session_secret="test-secret")
    with TestClient(create_app(settings)) as client:
        token = client.get("/get-csrf").json()["csrfToken"]
        resp = client.post("/submit", json={"language": "bash", "code": "echo pg"}, headers={"x-csrf-token": token})
        assert resp.status_code == 200
        filename = resp.json()["filename"]

        assert client.get("/healthz/ready").json() == {"status": "ok", "store": "up"}
        assert [h["filename"] for h in client.get("/search", params={"q": "echo pg"}).json()] == [filename]
