"""JSON file record store with full-array overwrite semantics.

Each collection (months, trades) lives as one JSON array in one file.
Every mutation loads the array, changes it in memory and replaces the
whole file under one exclusive lock, mirroring a key-value store
holding one list per key.

Usage::

    store = JsonRecordStore(Path("data/months.json"), MONTH_LIST_ADAPTER, kind="month")
    store.upsert(record)
    months = store.load_all()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Generic, Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError

from pnl_journal.core.errors import StorageError
from pnl_journal.core.file_io import (
    safe_read_text,
    safe_remove,
    safe_update_text,
    safe_write_text,
)

logger = logging.getLogger(__name__)


class _HasId(Protocol):
    id: str


T = TypeVar("T", bound=_HasId)


class JsonRecordStore(Generic[T]):
    """List store keyed by record ``id``.

    Parameters
    ----------
    path : Path
        JSON file holding the collection.  A missing file is an empty
        collection.
    adapter : TypeAdapter[list[T]]
        Validates and serialises the whole array.
    kind : str
        Record kind used in log and error messages.
    """

    def __init__(self, path: Path | str, adapter: TypeAdapter, *, kind: str) -> None:
        self._path = Path(path)
        self._adapter = adapter
        self._kind = kind

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------ #
    # Whole-array access                                                   #
    # ------------------------------------------------------------------ #

    def _parse(self, text: str | None) -> list[T]:
        if text is None or not text.strip():
            return []
        try:
            records = self._adapter.validate_json(text)
        except ValidationError as exc:
            raise StorageError(
                f"Corrupt {self._kind} store {self._path}: {exc.error_count()} errors"
            ) from exc
        logger.debug("Loaded %d %s records from %s", len(records), self._kind, self._path)
        return records

    def _dump(self, records: list[T]) -> str:
        return self._adapter.dump_json(records, indent=2).decode("utf-8")

    def load_all(self) -> list[T]:
        try:
            text = safe_read_text(self._path)
        except OSError as exc:
            raise StorageError(f"Could not read {self._path}: {exc}") from exc
        return self._parse(text)

    def save_all(self, records: list[T]) -> None:
        try:
            safe_write_text(self._path, self._dump(records))
        except OSError as exc:
            raise StorageError(f"Could not write {self._path}: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Record helpers                                                       #
    # ------------------------------------------------------------------ #

    def get(self, record_id: str) -> T | None:
        for record in self.load_all():
            if record.id == record_id:
                return record
        return None

    def update(self, change: Callable[[list[T]], list[T] | None]) -> list[T] | None:
        """Read-modify-write the whole array under the store's exclusive lock.

        ``change`` gets the current records and returns the new list, or
        ``None`` to leave the file untouched.  Returns what was written.
        """
        written: list[list[T]] = []

        def _apply(text: str | None) -> str | None:
            records = change(self._parse(text))
            if records is None:
                return None
            written.append(records)
            return self._dump(records)

        try:
            safe_update_text(self._path, _apply)
        except OSError as exc:
            raise StorageError(f"Could not update {self._path}: {exc}") from exc
        return written[0] if written else None

    def upsert(self, record: T) -> list[T]:
        """Replace the record with the same id, or append it."""

        def _upsert(records: list[T]) -> list[T]:
            for i, existing in enumerate(records):
                if existing.id == record.id:
                    records[i] = record
                    break
            else:
                records.append(record)
            return records

        return self.update(_upsert) or []

    def delete(self, record_id: str) -> bool:
        """Remove a record.  Returns False if no record had that id."""

        def _delete(records: list[T]) -> list[T] | None:
            kept = [r for r in records if r.id != record_id]
            return kept if len(kept) != len(records) else None

        return self.update(_delete) is not None

    def clear(self) -> None:
        try:
            safe_remove(self._path)
        except OSError as exc:
            raise StorageError(f"Could not remove {self._path}: {exc}") from exc
