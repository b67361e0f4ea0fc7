"""Session-scoped fixtures for integration tests."""

import warnings
from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from testcontainers.core.container import DockerContainer
from testcontainers.core.waiting_utils import wait_for_logs

from alembic.config import Config
from snipbox.db import SqlSnippetStore
from snipbox.db.migrations import alembic_config as build_alembic_config
from snipbox.db.migrations import downgrade_migrations, run_migrations

POSTGRES_IMAGE = "postgres:16-alpine"


@pytest.fixture(scope="session")
def postgres_container() -> Generator[DockerContainer, None, None]:
    """Start a throwaway PostgreSQL container for the session."""
    container = DockerContainer(POSTGRES_IMAGE).with_exposed_ports(5432).with_env("POSTGRES_PASSWORD", "postgres")
    container.start()
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DeprecationWarning)
        # the official image restarts once after initdb, so wait for the second banner
        wait_for_logs(container, r"(?s)ready to accept connections.*ready to accept connections", timeout=60)
    yield container
    container.stop()


@pytest.fixture(scope="session")
def test_db_url(postgres_container: DockerContainer) -> str:
    """Async connection URL for the test database."""
    host = postgres_container.get_container_host_ip()
    port = postgres_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://postgres:postgres@{host}:{port}/postgres"


@pytest.fixture(scope="session")
def alembic_config(test_db_url: str) -> Config:
    """Alembic config pointed at the test database."""
    return build_alembic_config(test_db_url)


@pytest.fixture(scope="session")
def _run_migrations(test_db_url: str) -> Generator[None, None, None]:
    """Run migrations once per session, cleanup on teardown."""
    run_migrations(test_db_url)
    yield
    downgrade_migrations(test_db_url)


@pytest_asyncio.fixture
async def database(_run_migrations: None, test_db_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Per-test engine so each event loop gets its own connection pool."""
    engine = create_async_engine(test_db_url, future=True)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def pg_store(database: AsyncEngine) -> AsyncGenerator[SqlSnippetStore, None]:
    """Per-test store on an emptied snippets table."""
    instance = SqlSnippetStore(database)
    await instance.ensure_ready()
    for snippet in await instance.list():
        await instance.delete(snippet.filename)
    yield instance
