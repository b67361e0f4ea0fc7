"""Unit tests for the snippet model, filename derivation and language tags."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from snipbox.core.languages import LANGUAGES, PLAINTEXT, is_highlighted, normalize_language
from snipbox.errors import SnippetNotFoundError, SnippetValidationError
from snipbox.models import (
    Snippet,
    check_filename,
    is_valid_filename,
    make_filename,
    parse_filename,
    parse_timestamp,
)


class TestFilenames:
    def test_make_filename_is_filesystem_safe(self, instant: datetime) -> None:
        filename = make_filename(instant)
        assert filename == "2025-03-14T15-09-26-535897Z.json"
        assert ":" not in filename
        assert "/" not in filename

    def test_make_filename_converts_to_utc(self) -> None:
        local = datetime(2025, 3, 14, 17, 9, 26, 1, tzinfo=timezone(timedelta(hours=2)))
        assert make_filename(local) == "2025-03-14T15-09-26-000001Z.json"

    def test_naive_instant_is_treated_as_utc(self) -> None:
        assert make_filename(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02T03-04-05-000000Z.json"

    def test_parse_filename_recovers_instant(self, instant: datetime) -> None:
        assert parse_filename(make_filename(instant)) == instant

    def test_parse_filename_accepts_millisecond_names(self) -> None:
        parsed = parse_filename("2024-11-05T08-30-00-123Z.json")
        assert parsed == datetime(2024, 11, 5, 8, 30, 0, 123000, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "filename",
        [
            "../etc/passwd",
            "2025-03-14T15-09-26-535897Z.json/../../x",
            "notes.json",
            "2025-03-14T15:09:26.535897Z.json",
            "2025-13-40T15-09-26-535897Z.json",
            "",
        ],
    )
    def test_parse_filename_rejects_non_snippet_names(self, filename: str) -> None:
        with pytest.raises(SnippetNotFoundError):
            parse_filename(filename)

    def test_is_valid_filename(self, instant: datetime) -> None:
        assert is_valid_filename(make_filename(instant))
        assert not is_valid_filename("../" + make_filename(instant))

    def test_check_filename_raises_validation_error(self) -> None:
        with pytest.raises(SnippetValidationError):
            check_filename("bad name.json")

    @pytest.mark.parametrize("filename", ["2025-02-30T00-00-00-000000Z.json", "2025-01-01T24-00-00-000Z.json"])
    def test_check_filename_rejects_impossible_dates(self, filename: str) -> None:
        assert is_valid_filename(filename)
        with pytest.raises(SnippetValidationError):
            check_filename(filename)

    def test_filenames_sort_chronologically(self) -> None:
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        instants = [base + timedelta(microseconds=n * 997, days=n % 3) for n in range(20)]
        names = [make_filename(i) for i in instants]
        assert sorted(names) == [make_filename(i) for i in sorted(instants)]


class TestParseTimestamp:
    def test_reads_iso_timestamp(self, instant: datetime) -> None:
        assert parse_timestamp(instant.isoformat(), make_filename(instant)) == instant

    def test_falls_back_to_filename_for_legacy_stem(self) -> None:
        filename = "2024-11-05T08-30-00-123Z.json"
        parsed = parse_timestamp("2024-11-05T08-30-00-123Z", filename)
        assert parsed == datetime(2024, 11, 5, 8, 30, 0, 123000, tzinfo=timezone.utc)

    def test_falls_back_to_filename_when_missing(self, instant: datetime) -> None:
        assert parse_timestamp(None, make_filename(instant)) == instant

    def test_naive_datetime_gets_utc(self) -> None:
        parsed = parse_timestamp(datetime(2025, 1, 1), "2025-01-01T00-00-00-000000Z.json")
        assert parsed.tzinfo is not None


class TestSnippetModel:
    def test_snippet_is_immutable(self, instant: datetime) -> None:
        snippet = Snippet(filename=make_filename(instant), language="python", code="x = 1", timestamp=instant)
        with pytest.raises(ValidationError):
            snippet.code = "y = 2"  # type: ignore[misc]

    def test_snippet_rejects_extra_fields(self, instant: datetime) -> None:
        with pytest.raises(ValidationError):
            Snippet(
                filename=make_filename(instant),
                language="python",
                code="",
                timestamp=instant,
                owner="someone",  # type: ignore[call-arg]
            )

    def test_to_document_has_exactly_the_stored_fields(self, instant: datetime) -> None:
        snippet = Snippet(filename=make_filename(instant), language="sql", code="SELECT 1;", timestamp=instant)
        assert snippet.to_document() == {
            "language": "sql",
            "code": "SELECT 1;",
            "timestamp": instant.isoformat(),
        }


class TestLanguages:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, PLAINTEXT),
            ("", PLAINTEXT),
            ("   ", PLAINTEXT),
            ("python", "python"),
            ("  PY ", "python"),
            ("JavaScript", "javascript"),
            ("sh", "bash"),
            ("pwsh", "powershell"),
            ("txt", PLAINTEXT),
            ("Rust", "Rust"),
        ],
    )
    def test_normalize_language(self, raw: str | None, expected: str) -> None:
        assert normalize_language(raw) == expected

    def test_known_languages_are_highlighted(self) -> None:
        assert all(is_highlighted(lang) for lang in LANGUAGES)
        assert is_highlighted("SQL")
        assert not is_highlighted("Rust")
