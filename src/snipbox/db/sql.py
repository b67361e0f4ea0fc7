from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from snipbox.errors import SnippetConflictError, SnippetNotFoundError, StorageError
from snipbox.models import Snippet, check_filename, parse_timestamp

logger = logging.getLogger(__name__)

TABLE_NAME = "snippets"

# Same shape as alembic/versions/001_snippets.py, for databases that were never migrated.
_CREATE_TABLE = (
    "CREATE TABLE IF NOT EXISTS snippets ("
    " filename TEXT PRIMARY KEY,"
    " language TEXT NOT NULL,"
    " code TEXT NOT NULL,"
    ' "timestamp" TEXT NOT NULL'
    ")"
)
_SELECT_ONE = 'SELECT filename, language, code, "timestamp" FROM snippets WHERE filename = :filename'
_SELECT_ALL = 'SELECT filename, language, code, "timestamp" FROM snippets'
_INSERT = (
    'INSERT INTO snippets (filename, language, code, "timestamp") '
    "VALUES (:filename, :language, :code, :timestamp)"
)
_REPLACE = 'UPDATE snippets SET language = :language, code = :code, "timestamp" = :timestamp WHERE filename = :filename'
_UPDATE = "UPDATE snippets SET language = :language, code = :code WHERE filename = :filename"
_DELETE = "DELETE FROM snippets WHERE filename = :filename"


def _row_to_snippet(row: Any) -> Snippet:
    filename = str(row[0])
    return Snippet(
        filename=filename,
        language=str(row[1]),
        code=str(row[2]),
        timestamp=parse_timestamp(row[3], filename),
    )


class SqlSnippetStore:
    """Relational snippet store on an SQLAlchemy ``AsyncEngine`` (PostgreSQL or SQLite).

    Create collisions are detected by the primary key on ``filename``.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._table_ready = False

    async def ensure_ready(self) -> None:
        if self._table_ready:
            return
        try:
            async with self._engine.begin() as conn:
                await conn.execute(text(_CREATE_TABLE))
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not prepare table {TABLE_NAME}: {exc}") from exc
        self._table_ready = True

    async def put(
        self,
        filename: str,
        language: str,
        code: str,
        timestamp: datetime,
        *,
        overwrite: bool = False,
    ) -> Snippet:
        check_filename(filename)
        snippet = Snippet(filename=filename, language=language, code=code, timestamp=timestamp)
        params = {
            "filename": filename,
            "language": language,
            "code": code,
            "timestamp": timestamp.isoformat(),
        }
        await self.ensure_ready()
        try:
            async with self._engine.begin() as conn:
                if overwrite:
                    result = await conn.execute(text(_REPLACE), params)
                    if result.rowcount == 0:
                        await conn.execute(text(_INSERT), params)
                else:
                    await conn.execute(text(_INSERT), params)
        except IntegrityError as exc:
            raise SnippetConflictError(f"Snippet {filename} already exists") from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not write snippet {filename}: {exc}") from exc
        return snippet

    async def get(self, filename: str) -> Snippet:
        await self.ensure_ready()
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(text(_SELECT_ONE), {"filename": filename})
                row = result.fetchone()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not read snippet {filename}: {exc}") from exc
        if row is None:
            raise SnippetNotFoundError(f"Snippet {filename!r} not found")
        return _row_to_snippet(row)

    async def list(self) -> list[Snippet]:
        await self.ensure_ready()
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(text(_SELECT_ALL))
                rows = result.fetchall()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not list snippets: {exc}") from exc
        return [_row_to_snippet(row) for row in rows]

    async def update(self, filename: str, language: str, code: str) -> Snippet:
        await self.ensure_ready()
        params = {"filename": filename, "language": language, "code": code}
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(text(_UPDATE), params)
                updated = result.rowcount
                row = None
                if updated:
                    row = (await conn.execute(text(_SELECT_ONE), {"filename": filename})).fetchone()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not update snippet {filename}: {exc}") from exc
        if row is None:
            raise SnippetNotFoundError(f"Snippet {filename!r} not found")
        return _row_to_snippet(row)

    async def delete(self, filename: str) -> None:
        await self.ensure_ready()
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(text(_DELETE), {"filename": filename})
                deleted = result.rowcount
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not delete snippet {filename}: {exc}") from exc
        if not deleted:
            raise SnippetNotFoundError(f"Snippet {filename!r} not found")

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("database ping failed", exc_info=True)
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()
