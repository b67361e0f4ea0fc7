from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from enum import Enum

from snipbox.core.ports.store import SnippetStore
from snipbox.models import Snippet, parse_filename


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    LANGUAGE = "language"
    LANGUAGE_DESC = "language-desc"

    @classmethod
    def parse(cls, value: str | None) -> SortOrder:
        """Map a user-supplied sort key to a ``SortOrder``; unknown keys fall back to newest."""
        if not value:
            return cls.NEWEST
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.NEWEST


def filter_snippets(snippets: Iterable[Snippet], query: str = "", language: str = "") -> list[Snippet]:
    """Keep snippets whose code or filename contains *query* and whose language equals *language*.

    Both comparisons are case-insensitive; an empty argument disables that filter.
    """
    needle = (query or "").lower()
    wanted = (language or "").strip().lower()

    def _matches(snippet: Snippet) -> bool:
        if needle and needle not in snippet.code.lower() and needle not in snippet.filename.lower():
            return False
        return not wanted or snippet.language.lower() == wanted

    return [s for s in snippets if _matches(s)]


def sort_snippets(snippets: Iterable[Snippet], order: SortOrder = SortOrder.NEWEST) -> list[Snippet]:
    # millisecond and microsecond names mix, so compare decoded instants rather than strings
    newest_first = sorted(snippets, key=lambda s: (parse_filename(s.filename), s.filename), reverse=True)
    if order is SortOrder.NEWEST:
        return newest_first
    if order is SortOrder.OLDEST:
        return newest_first[::-1]
    return sorted(
        newest_first,
        key=lambda s: s.language.lower(),
        reverse=order is SortOrder.LANGUAGE_DESC,
    )


def list_languages(snippets: Iterable[Snippet]) -> list[str]:
    return sorted({s.language for s in snippets}, key=lambda lang: (lang.lower(), lang))


def language_counts(snippets: Iterable[Snippet]) -> dict[str, int]:
    """Number of snippets per stored language tag, keyed in ``list_languages`` order."""
    counts = Counter(s.language for s in snippets)
    return {lang: counts[lang] for lang in sorted(counts, key=lambda lang: (lang.lower(), lang))}


async def search_snippets(
    store: SnippetStore,
    query: str = "",
    language: str = "",
    order: SortOrder = SortOrder.NEWEST,
) -> list[Snippet]:
    """Return every stored snippet matching *query* and *language*, in *order*. No pagination."""
    snippets = await store.list()
    return sort_snippets(filter_snippets(snippets, query, language), order)
