import re
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict

from snipbox.errors import SnippetNotFoundError, SnippetValidationError

FILENAME_SUFFIX = ".json"

# Current names carry microseconds, names written by the first release carry milliseconds.
_FILENAME_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2})-(\d{2})-(\d{2})-(\d{6}|\d{3})Z\.json$")


class Snippet(BaseModel):
    """A stored snippet. ``filename`` is the primary key and never changes."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    filename: str
    language: str
    code: str
    timestamp: datetime

    def to_document(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "code": self.code,
            "timestamp": self.timestamp.isoformat(),
        }


def make_filename(instant: datetime) -> str:
    """Derive a filesystem-safe, chronologically sortable filename from *instant*."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    stamp = instant.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
    return f"{stamp}Z{FILENAME_SUFFIX}"


def is_valid_filename(filename: str) -> bool:
    return _FILENAME_RE.match(filename) is not None


def check_filename(filename: str) -> str:
    """Reject names that ``parse_filename`` would not accept, impossible dates included."""
    try:
        parse_filename(filename)
    except SnippetNotFoundError as exc:
        raise SnippetValidationError(f"Invalid snippet filename {filename!r}") from exc
    return filename


def parse_filename(filename: str) -> datetime:
    """Return the creation instant encoded in *filename*.

    Anything that is not a snippet filename (including path components) cannot
    name a stored record, so it is reported as not found.
    """
    match = _FILENAME_RE.match(filename)
    if match is None:
        raise SnippetNotFoundError(f"Snippet {filename!r} not found")
    year, month, day, hour, minute, second, fraction = match.groups()
    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour),
            int(minute),
            int(second),
            int(fraction.ljust(6, "0")),
            tzinfo=timezone.utc,
        )
    except ValueError as exc:
        raise SnippetNotFoundError(f"Snippet {filename!r} not found") from exc


def parse_timestamp(value: Any, filename: str) -> datetime:
    """Read a stored timestamp, falling back to the instant encoded in the filename.

    Records written by the first release stored the filename stem instead of
    an ISO-8601 instant.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value + FILENAME_SUFFIX != filename:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return parse_filename(filename)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return parse_filename(filename)
