from __future__ import annotations

from datetime import datetime
from typing import Protocol

from snipbox.models import Snippet


class SnippetStore(Protocol):
    async def put(
        self,
        filename: str,
        language: str,
        code: str,
        timestamp: datetime,
        *,
        overwrite: bool = False,
    ) -> Snippet: ...

    async def get(self, filename: str) -> Snippet: ...

    async def list(self) -> list[Snippet]: ...

    async def update(self, filename: str, language: str, code: str) -> Snippet: ...

    async def delete(self, filename: str) -> None: ...

    async def ensure_ready(self) -> None: ...

    async def ping(self) -> bool: ...

    async def dispose(self) -> None: ...
