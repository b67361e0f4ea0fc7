"""Filesystem snippet store: one JSON document per snippet, named by the snippet's filename."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path

from snipbox.core.languages import PLAINTEXT
from snipbox.errors import SnippetConflictError, SnippetNotFoundError, StorageError
from snipbox.models import Snippet, check_filename, is_valid_filename, parse_filename, parse_timestamp

logger = logging.getLogger(__name__)

_TEMP_PREFIX = ".tmp-"
_TEMP_SUFFIX = ".part"


def _encode(snippet: Snippet) -> bytes:
    return json.dumps(snippet.to_document(), indent=2, ensure_ascii=False).encode("utf-8")


def _decode(filename: str, raw: bytes) -> Snippet:
    try:
        document = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StorageError(f"Snippet {filename} is not a valid JSON document") from exc
    if not isinstance(document, dict) or not isinstance(document.get("code"), str):
        raise StorageError(f"Snippet {filename} has no code")
    return Snippet(
        filename=filename,
        language=str(document.get("language") or PLAINTEXT),
        code=document["code"],
        timestamp=parse_timestamp(document.get("timestamp"), filename),
    )


class FileSnippetStore:
    """Stores snippets as ``<root>/<filename>`` JSON documents.

    Every write lands in a temporary file in the same directory first and is
    then published in one step: ``os.link`` for creates (fails if the name is
    taken) and ``os.replace`` for overwrites, so readers never see a partial
    document.

    Read-modify-write sequences (update, delete) are serialized by a
    ``threading.Lock`` held by this instance only. Another process sharing
    the directory can slip a delete between an update's read and its
    ``os.replace`` and see the record come back, so serve this backend from a
    single worker process and use ``SqlSnippetStore`` for multi-worker setups.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self._write_lock = threading.Lock()

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
        await asyncio.to_thread(self._put_sync, snippet, overwrite)
        return snippet

    async def get(self, filename: str) -> Snippet:
        return await asyncio.to_thread(self._read, filename)

    async def list(self) -> list[Snippet]:
        return await asyncio.to_thread(self._list_sync)

    async def update(self, filename: str, language: str, code: str) -> Snippet:
        return await asyncio.to_thread(self._update_sync, filename, language, code)

    async def delete(self, filename: str) -> None:
        await asyncio.to_thread(self._delete_sync, filename)

    async def ensure_ready(self) -> None:
        await asyncio.to_thread(self._ensure_root)

    async def ping(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.W_OK)

    async def dispose(self) -> None:
        pass

    def _path(self, filename: str) -> Path:
        parse_filename(filename)
        return self.root / filename

    def _ensure_root(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Could not create snippet directory {self.root}: {exc}") from exc

    def _read(self, filename: str) -> Snippet:
        path = self._path(filename)
        try:
            raw = path.read_bytes()
        except FileNotFoundError as exc:
            raise SnippetNotFoundError(f"Snippet {filename!r} not found") from exc
        except OSError as exc:
            raise StorageError(f"Could not read snippet {filename}: {exc}") from exc
        return _decode(filename, raw)

    def _list_sync(self) -> list[Snippet]:
        try:
            names = os.listdir(self.root)
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageError(f"Could not list snippet directory {self.root}: {exc}") from exc

        snippets: list[Snippet] = []
        for name in names:
            if not is_valid_filename(name):
                continue
            try:
                snippets.append(self._read(name))
            except SnippetNotFoundError:
                # deleted between listdir and read
                continue
        return snippets

    def _put_sync(self, snippet: Snippet, overwrite: bool) -> None:
        self._ensure_root()
        with self._write_lock:
            self._publish(snippet, overwrite=overwrite)
        logger.debug("wrote %s (overwrite=%s)", snippet.filename, overwrite)

    def _update_sync(self, filename: str, language: str, code: str) -> Snippet:
        with self._write_lock:
            existing = self._read(filename)
            snippet = existing.model_copy(update={"language": language, "code": code})
            self._publish(snippet, overwrite=True)
        return snippet

    def _delete_sync(self, filename: str) -> None:
        path = self._path(filename)
        with self._write_lock:
            try:
                path.unlink()
            except FileNotFoundError as exc:
                raise SnippetNotFoundError(f"Snippet {filename!r} not found") from exc
            except OSError as exc:
                raise StorageError(f"Could not delete snippet {filename}: {exc}") from exc

    def _write_temp(self, payload: bytes) -> Path:
        fd, name = tempfile.mkstemp(prefix=_TEMP_PREFIX, suffix=_TEMP_SUFFIX, dir=self.root)
        temp_path = Path(name)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
        return temp_path

    def _publish(self, snippet: Snippet, *, overwrite: bool) -> None:
        target = self.root / snippet.filename
        try:
            temp_path = self._write_temp(_encode(snippet))
        except OSError as exc:
            raise StorageError(f"Could not write snippet {snippet.filename}: {exc}") from exc

        try:
            if overwrite:
                os.replace(temp_path, target)
            else:
                try:
                    os.link(temp_path, target)
                except FileExistsError as exc:
                    raise SnippetConflictError(f"Snippet {snippet.filename} already exists") from exc
        except OSError as exc:
            raise StorageError(f"Could not write snippet {snippet.filename}: {exc}") from exc
        finally:
            temp_path.unlink(missing_ok=True)
