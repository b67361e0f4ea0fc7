"""Shared fixtures and helpers for tests."""

from collections.abc import AsyncIterator
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from snipbox.core.ports.store import SnippetStore
from snipbox.db import FileSnippetStore, InMemorySnippetStore, SqlSnippetStore
from snipbox.settings import Settings

_TESTS_ROOT = Path(__file__).parent

BACKENDS = ["memory", "file", "sql"]


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        rel = Path(str(item.fspath)).relative_to(_TESTS_ROOT)
        if rel.parts and rel.parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


def build_store(kind: str, tmp_path: Path) -> SnippetStore:
    if kind == "memory":
        return InMemorySnippetStore()
    if kind == "file":
        return FileSnippetStore(tmp_path / "snippets")
    return SqlSnippetStore(create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'snippets.db'}"))


@pytest_asyncio.fixture(params=BACKENDS)
async def store(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncIterator[SnippetStore]:
    """Every store backend, initialised and empty."""
    instance = build_store(request.param, tmp_path)
    await instance.ensure_ready()
    yield instance
    await instance.dispose()


@pytest.fixture
def memory_store() -> InMemorySnippetStore:
    return InMemorySnippetStore()


@pytest.fixture
def file_store(tmp_path: Path) -> FileSnippetStore:
    return FileSnippetStore(tmp_path / "snippets")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        backend="memory",
        snippets_dir=tmp_path / "snippets",
        session_secret="test-secret",
        admin_password="hunter2",
    )


@pytest.fixture
def instant() -> datetime:
    return datetime(2025, 3, 14, 15, 9, 26, 535897, tzinfo=timezone.utc)
