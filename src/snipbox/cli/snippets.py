from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from snipbox.core.languages import is_highlighted
from snipbox.core.mutations import create_snippet, delete_snippet
from snipbox.core.ports.store import SnippetStore
from snipbox.core.query import SortOrder, search_snippets
from snipbox.db.engine import create_store
from snipbox.errors import SnipboxError
from snipbox.settings import Settings

console = Console()

_PREVIEW_WIDTH = 60


def _get_store() -> SnippetStore:
    return create_store(Settings.from_env())


def _render_table(headers: Sequence[str], rows: Sequence[tuple[Any, ...]]) -> None:
    table = Table()
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(str(v) for v in row))
    console.print(table)
    console.print(f"({len(rows)} rows)")


def _preview(code: str) -> str:
    first_line = code.strip().splitlines()[0] if code.strip() else ""
    if len(first_line) > _PREVIEW_WIDTH:
        return first_line[: _PREVIEW_WIDTH - 3] + "..."
    return first_line


def _run(coro_factory: Any) -> Any:
    """Run one store operation, printing snipbox errors instead of a traceback."""

    async def _runner() -> Any:
        store = _get_store()
        try:
            await store.ensure_ready()
            return await coro_factory(store)
        finally:
            await store.dispose()

    try:
        return asyncio.run(_runner())
    except SnipboxError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(1) from exc


def add(
    path: Annotated[Path | None, typer.Argument(help="File whose contents become the snippet.")] = None,
    code: Annotated[str | None, typer.Option(help="Snippet text instead of a file.")] = None,
    language: Annotated[str, typer.Option(help="Language tag.")] = "plaintext",
) -> None:
    """Store a new snippet."""
    if code is None and path is None:
        console.print("[red]Provide a PATH or --code.[/red]")
        raise typer.Exit(1)
    text = code if code is not None else path.read_text(encoding="utf-8")  # type: ignore[union-attr]

    snippet = _run(lambda store: create_snippet(store, language, text))
    console.print(f"Saved snippet [green]{snippet.filename}[/green]")


def search(
    query: Annotated[str, typer.Argument(help="Substring to look for in code or filename.")] = "",
    lang: Annotated[str, typer.Option(help="Only this language.")] = "",
    sort: Annotated[str, typer.Option(help="newest, oldest, language or language-desc.")] = "newest",
) -> None:
    """List snippets matching a query."""
    snippets = _run(lambda store: search_snippets(store, query, lang, SortOrder.parse(sort)))
    _render_table(
        ["filename", "language", "preview"],
        [(s.filename, s.language, _preview(s.code)) for s in snippets],
    )


def show(filename: Annotated[str, typer.Argument(help="Snippet filename.")]) -> None:
    """Print one snippet."""
    snippet = _run(lambda store: store.get(filename))
    console.print(f"[bold]{snippet.filename}[/bold] ({snippet.language})")
    if is_highlighted(snippet.language):
        lexer = "text" if snippet.language.lower() == "plaintext" else snippet.language.lower()
        console.print(Syntax(snippet.code, lexer))
    else:
        console.print(snippet.code, markup=False, highlight=False)


def delete(filename: Annotated[str, typer.Argument(help="Snippet filename.")]) -> None:
    """Delete a snippet."""
    _run(lambda store: delete_snippet(store, filename))
    console.print(f"Deleted snippet [green]{filename}[/green]")
