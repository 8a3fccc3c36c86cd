"""Content record persistence.

Responsibilities:
- Define the record store protocol used by stage services and the orchestrator.
- Provide an in-memory store and a JSON-file store keyed by `(id, language)`.

Each `update` or `upsert` is atomic for one row only; there are no cross-row
transactions.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import os
from pathlib import Path
import threading
from typing import Callable, Iterable, Protocol

from ..errors import RecordStoreError
from ..models.datatypes import ContentRecord


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string with second precision."""

    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class RecordStore(Protocol):
    """Protocol for content record persistence."""

    def get(self, content_id: str, language: str) -> ContentRecord | None:
        """Return one row, or `None` when it does not exist."""

    def select(self, **filters: object) -> list[ContentRecord]:
        """Return rows whose attributes equal every given filter value."""

    def update(self, content_id: str, language: str, /, **changes: object) -> ContentRecord:
        """Apply field changes to one existing row and return the stored row."""

    def upsert(self, record: ContentRecord) -> ContentRecord:
        """Insert or replace one row and return the stored row."""


def _matches(record: ContentRecord, filters: dict[str, object]) -> bool:
    """Return whether a record satisfies every equality filter."""

    for key, expected in filters.items():
        if not hasattr(record, key):
            raise RecordStoreError(f"Unknown record filter `{key}`.")
        if getattr(record, key) != expected:
            return False
    return True


class InMemoryRecordStore:
    """Thread-safe dictionary-backed record store."""

    def __init__(
        self,
        records: Iterable[ContentRecord] = (),
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        """Initialize the store with optional seed rows."""

        self._clock = clock
        self._lock = threading.Lock()
        self._rows: dict[tuple[str, str], ContentRecord] = {
            (record.id, record.language): record for record in records
        }

    def get(self, content_id: str, language: str) -> ContentRecord | None:
        """Return one row, or `None` when it does not exist."""

        with self._lock:
            return self._rows.get((content_id, language))

    def select(self, **filters: object) -> list[ContentRecord]:
        """Return matching rows in insertion order."""

        with self._lock:
            rows = list(self._rows.values())
        return [record for record in rows if _matches(record, filters)]

    def update(self, content_id: str, language: str, /, **changes: object) -> ContentRecord:
        """Apply field changes to one existing row."""

        with self._lock:
            current = self._rows.get((content_id, language))
            if current is None:
                raise RecordStoreError(f"No {language} record found for {content_id}.")
            updated = _apply_changes(current, changes, self._clock())
            self._rows[(content_id, language)] = updated
            return updated

    def upsert(self, record: ContentRecord) -> ContentRecord:
        """Insert or replace one row."""

        with self._lock:
            stored = record.with_changes(updated_at=self._clock())
            self._rows[(record.id, record.language)] = stored
            return stored


class JsonFileRecordStore:
    """Record store that keeps one JSON file per row.

    Rows live at `<root>/<language>/<category>/<id>.json`.
    """

    def __init__(self, root: Path, clock: Callable[[], str] = utc_timestamp) -> None:
        """Initialize the store rooted at a content directory."""

        self.root = root
        self._clock = clock
        self._lock = threading.Lock()

    def path_for(self, record: ContentRecord) -> Path:
        """Return the storage path of a row."""

        return self.root / record.language / record.category / f"{record.id}.json"

    def get(self, content_id: str, language: str) -> ContentRecord | None:
        """Return one row, or `None` when it does not exist."""

        with self._lock:
            path = self._find_path(content_id, language)
            return self._read(path) if path is not None else None

    def select(self, **filters: object) -> list[ContentRecord]:
        """Return matching rows ordered by language, category, and id.

        `id` and `language` filters narrow which files are read, so a corrupt row
        only affects selections that would include it.
        """

        language = filters.get("language")
        content_id = filters.get("id")
        pattern = (
            f"{language if isinstance(language, str) else '*'}/*/"
            f"{content_id if isinstance(content_id, str) else '*'}.json"
        )
        with self._lock:
            rows = [self._read(path) for path in sorted(self.root.glob(pattern))]
        return [record for record in rows if _matches(record, filters)]

    def update(self, content_id: str, language: str, /, **changes: object) -> ContentRecord:
        """Apply field changes to one existing row."""

        with self._lock:
            path = self._find_path(content_id, language)
            if path is None:
                raise RecordStoreError(f"No {language} record found for {content_id}.")
            updated = _apply_changes(self._read(path), changes, self._clock())
            new_path = self.path_for(updated)
            self._write(new_path, updated)
            if new_path != path:
                path.unlink()
            return updated

    def upsert(self, record: ContentRecord) -> ContentRecord:
        """Insert or replace one row."""

        with self._lock:
            stored = record.with_changes(updated_at=self._clock())
            existing = self._find_path(record.id, record.language)
            new_path = self.path_for(stored)
            self._write(new_path, stored)
            if existing is not None and existing != new_path:
                existing.unlink()
            return stored

    def _find_path(self, content_id: str, language: str) -> Path | None:
        """Locate a row file regardless of its category directory."""

        matches = sorted((self.root / language).glob(f"*/{content_id}.json"))
        if len(matches) > 1:
            raise RecordStoreError(
                f"Multiple {language} records found for {content_id}: "
                + ", ".join(str(path) for path in matches)
            )
        return matches[0] if matches else None

    def _read(self, path: Path) -> ContentRecord:
        """Read and decode one row file."""

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            return ContentRecord.from_payload(payload)
        except (OSError, ValueError, TypeError) as exc:
            raise RecordStoreError(f"Failed to read record `{path}`: {exc}") from exc

    def _write(self, path: Path, record: ContentRecord) -> None:
        """Write one row file atomically via a sibling temporary file."""

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = path.with_suffix(".json.tmp")
            temp_path.write_text(
                json.dumps(record.to_payload(), ensure_ascii=False, indent=2, sort_keys=True),
                encoding="utf-8",
            )
            os.replace(temp_path, path)
        except OSError as exc:
            raise RecordStoreError(f"Failed to write record `{path}`: {exc}") from exc


def _apply_changes(record: ContentRecord, changes: dict[str, object], stamp: str) -> ContentRecord:
    """Return `record` with validated field changes and a fresh `updated_at`."""

    unknown = sorted(key for key in changes if not hasattr(record, key))
    if unknown:
        raise RecordStoreError(f"Unknown record field(s): {', '.join(unknown)}.")
    if "id" in changes or "language" in changes:
        raise RecordStoreError("Record keys `id` and `language` cannot be changed.")
    return record.with_changes(**{**changes, "updated_at": stamp})
