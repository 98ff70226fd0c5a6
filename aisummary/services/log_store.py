"""Journal entries held in memory and persisted wholesale to a JSON file."""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from pydantic import ValidationError

from ..logging_config import logger
from ..models import LogEntry, ReportCategory


class EntryNotFoundError(LookupError):
    """Raised when an entry id or index does not exist in the store."""


def write_text_atomic(path: Path, text: str) -> None:
    """Write *text* to a sibling temp file, then rename it over *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


class LogStore:
    """Ordered journal entries (insertion order) backed by a single JSON array.

    In-memory state is guarded by one lock and disk writes by another, so
    overlapping saves are serialized. Every mutation bumps a revision and a
    save never replaces a snapshot on disk with an older one.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._entries: List[LogEntry] = []
        self._revision = 0
        self._persisted_revision = -1

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Loading and saving
    # ------------------------------------------------------------------
    async def load(self) -> List[LogEntry]:
        entries = await asyncio.to_thread(self._read_entries)
        with self._lock:
            self._entries = entries
            self._revision += 1
            self._persisted_revision = self._revision
        logger.info("loaded journal", extra={"path": str(self._path), "entries": len(entries)})
        return list(entries)

    async def save(self) -> bool:
        """Persist the current entries; failures are logged and reported as False."""
        revision, snapshot = self._snapshot()
        return await asyncio.to_thread(self._write_snapshot, revision, snapshot)

    def _snapshot(self) -> Tuple[int, List[dict]]:
        with self._lock:
            return self._revision, [entry.to_storage() for entry in self._entries]

    def _read_entries(self) -> List[LogEntry]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "failed to read journal; starting empty",
                extra={"path": str(self._path), "error": str(exc)},
            )
            return []

        try:
            data = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError as exc:
            logger.warning(
                "journal file is not valid JSON; starting empty",
                extra={"path": str(self._path), "error": str(exc)},
            )
            return []

        if not isinstance(data, list):
            logger.warning("journal payload invalid; expected list", extra={"path": str(self._path)})
            return []

        entries: List[LogEntry] = []
        seen_ids = set()
        for position, item in enumerate(data):
            try:
                entry = LogEntry.model_validate(item)
            except ValidationError as exc:
                logger.warning(
                    "skipping invalid journal entry",
                    extra={"position": position, "error": str(exc)},
                )
                continue
            if entry.id in seen_ids:
                logger.warning("skipping duplicate journal entry", extra={"id": entry.id})
                continue
            seen_ids.add(entry.id)
            entries.append(entry)
        return entries

    def _write_snapshot(self, revision: int, snapshot: List[dict]) -> bool:
        with self._write_lock:
            if revision < self._persisted_revision:
                logger.debug(
                    "skipping stale journal save",
                    extra={"revision": revision, "persisted": self._persisted_revision},
                )
                return True
            try:
                write_text_atomic(self._path, json.dumps(snapshot, ensure_ascii=False, indent=2))
            except (OSError, ValueError) as exc:
                logger.error(
                    "failed to persist journal",
                    extra={"path": str(self._path), "error": str(exc)},
                )
                return False
            self._persisted_revision = revision
            return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def entries(self) -> List[LogEntry]:
        with self._lock:
            return list(self._entries)

    def get(self, entry_id: str) -> LogEntry:
        with self._lock:
            return self._entries[self._index_of_locked(entry_id)]

    def filter_by_category(self, category: ReportCategory) -> List[LogEntry]:
        with self._lock:
            return [entry for entry in self._entries if entry.category == category]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Mutations (each one persists the whole collection)
    # ------------------------------------------------------------------
    async def add(self, entry: LogEntry) -> LogEntry:
        with self._lock:
            if any(existing.id == entry.id for existing in self._entries):
                raise ValueError(f"entry {entry.id} already exists")
            self._entries.append(entry)
            self._revision += 1
        await self.save()
        return entry

    async def update(self, entry: LogEntry) -> LogEntry:
        with self._lock:
            self._entries[self._index_of_locked(entry.id)] = entry
            self._revision += 1
        await self.save()
        return entry

    async def remove(self, entry_id: str) -> LogEntry:
        with self._lock:
            removed = self._entries.pop(self._index_of_locked(entry_id))
            self._revision += 1
        await self.save()
        return removed

    async def remove_at(self, index: int) -> LogEntry:
        with self._lock:
            if not 0 <= index < len(self._entries):
                raise EntryNotFoundError(f"no entry at index {index}")
            removed = self._entries.pop(index)
            self._revision += 1
        await self.save()
        return removed

    async def attach_images(self, entry_id: str, images: Iterable[bytes]) -> LogEntry:
        with self._lock:
            index = self._index_of_locked(entry_id)
            current = self._entries[index]
            updated = current.model_copy(update={"image_data": [*current.image_data, *images]})
            self._entries[index] = updated
            self._revision += 1
        await self.save()
        return updated

    async def detach_image(self, entry_id: str, image_index: int) -> LogEntry:
        with self._lock:
            index = self._index_of_locked(entry_id)
            current = self._entries[index]
            if not 0 <= image_index < len(current.image_data):
                raise EntryNotFoundError(f"entry {entry_id} has no image at index {image_index}")
            images = list(current.image_data)
            del images[image_index]
            updated = current.model_copy(update={"image_data": images})
            self._entries[index] = updated
            self._revision += 1
        await self.save()
        return updated

    def _index_of_locked(self, entry_id: Optional[str]) -> int:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        raise EntryNotFoundError(f"no entry with id {entry_id}")


__all__ = ["EntryNotFoundError", "LogStore", "write_text_atomic"]
