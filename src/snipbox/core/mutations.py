import logging
from datetime import datetime, timezone

from snipbox.core.languages import normalize_language
from snipbox.core.ports.store import SnippetStore
from snipbox.errors import SnippetValidationError
from snipbox.models import Snippet, make_filename, parse_filename

logger = logging.getLogger(__name__)


async def create_snippet(
    store: SnippetStore,
    language: str | None,
    code: str | None,
    *,
    now: datetime | None = None,
) -> Snippet:
    """Store a new snippet named after the current instant.

    ``code`` may be empty but not missing. A second snippet created within the
    same microsecond collides with the first and raises
    ``SnippetConflictError``; the earlier snippet is left untouched.
    """
    if code is None:
        raise SnippetValidationError("Missing code")
    instant = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    filename = make_filename(instant)
    snippet = await store.put(filename, normalize_language(language), code, instant)
    logger.info("created snippet %s (%s, %d chars)", filename, snippet.language, len(code))
    return snippet


async def update_snippet(store: SnippetStore, filename: str | None, language: str | None, code: str | None) -> Snippet:
    if not filename:
        raise SnippetValidationError("Missing filename")
    if code is None:
        raise SnippetValidationError("Missing code")
    parse_filename(filename)
    snippet = await store.update(filename, normalize_language(language), code)
    logger.info("updated snippet %s (%s, %d chars)", filename, snippet.language, len(code))
    return snippet


async def delete_snippet(store: SnippetStore, filename: str | None) -> None:
    if not filename:
        raise SnippetValidationError("Missing filename")
    parse_filename(filename)
    await store.delete(filename)
    logger.info("deleted snippet %s", filename)
