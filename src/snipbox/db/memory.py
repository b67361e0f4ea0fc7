from __future__ import annotations

from datetime import datetime

from snipbox.errors import SnippetConflictError, SnippetNotFoundError
from snipbox.models import Snippet, check_filename


class InMemorySnippetStore:
    def __init__(self) -> None:
        self.snippets: dict[str, Snippet] = {}

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
        if not overwrite and filename in self.snippets:
            raise SnippetConflictError(f"Snippet {filename} already exists")
        snippet = Snippet(filename=filename, language=language, code=code, timestamp=timestamp)
        self.snippets[filename] = snippet
        return snippet

    async def get(self, filename: str) -> Snippet:
        snippet = self.snippets.get(filename)
        if snippet is None:
            raise SnippetNotFoundError(f"Snippet {filename!r} not found")
        return snippet

    async def list(self) -> list[Snippet]:
        return list(self.snippets.values())

    async def update(self, filename: str, language: str, code: str) -> Snippet:
        existing = await self.get(filename)
        snippet = existing.model_copy(update={"language": language, "code": code})
        self.snippets[filename] = snippet
        return snippet

    async def delete(self, filename: str) -> None:
        if self.snippets.pop(filename, None) is None:
            raise SnippetNotFoundError(f"Snippet {filename!r} not found")

    async def ensure_ready(self) -> None:
        pass

    async def ping(self) -> bool:
        return True

    async def dispose(self) -> None:
        pass
