#!/usr/bin/env python3
"""
note_vault.py - Minute-keyed journal archive

Holds every Entry in memory, indexed two ways:
    key -> Entry                 (get / put / contains)
    day -> sorted minute keys    (entries_on_day, days_with_entries)

Persistence is delegated to a store with load()/save(records). The vault
loads everything once and writes through on every change. One entry per
TemporalKey - a second put at the same key overwrites the body and
updated_at but keeps created_at.
"""

import logging
from bisect import bisect_left, bisect_right, insort
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Optional, Protocol, Union

from plantacerium.core.clock import ClockSource, SystemClock
from plantacerium.core.datashapes import Entry, TemporalKey
from plantacerium.core.errors import (
    TemporalValidationError,
    VaultCorruptError,
    VaultWriteError,
)

logger = logging.getLogger(__name__)


class VaultStore(Protocol):
    def load(self) -> Dict[str, Dict[str, Any]]:
        ...

    def save(self, records: Dict[str, Dict[str, Any]]):
        ...


KeyLike = Union[TemporalKey, str]


def _coerce_key(key: KeyLike) -> TemporalKey:
    if isinstance(key, TemporalKey):
        return key
    if isinstance(key, str):
        return TemporalKey.parse(key)
    raise TemporalValidationError(f"expected a TemporalKey, got {key!r}")


def _parse_timestamp(value: Any, field_name: str, key_text: str) -> datetime:
    if not isinstance(value, str):
        raise VaultCorruptError(f"{key_text}: {field_name} must be an ISO timestamp string")
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise VaultCorruptError(f"{key_text}: bad {field_name} {value!r}") from e


def decode_record(key_text: str, record: Dict[str, Any]) -> Entry:
    """
    Turn one stored record into an Entry.

    Accepts the current shape {body, created_at, updated_at} and the older
    {content, is_locked} shape, whose timestamps are taken from the key.
    """
    try:
        key = TemporalKey.parse(key_text)
    except TemporalValidationError as e:
        raise VaultCorruptError(f"invalid key in vault: {e}") from e

    body = record.get("body", record.get("content"))
    if not isinstance(body, str):
        raise VaultCorruptError(f"{key_text}: record has no text body")

    if "created_at" in record or "updated_at" in record:
        created_at = _parse_timestamp(record.get("created_at"), "created_at", key_text)
        updated_at = _parse_timestamp(record.get("updated_at", record.get("created_at")), "updated_at", key_text)
    else:
        created_at = updated_at = key.to_datetime()

    return Entry(key=key, body=body, created_at=created_at, updated_at=updated_at)


def encode_entry(entry: Entry) -> Dict[str, Any]:
    return {
        "body": entry.body,
        "created_at": entry.created_at.isoformat(),
        "updated_at": entry.updated_at.isoformat(),
    }


class NoteVault:
    """
    In-memory index over the persisted archive.

    Usage:
        vault = NoteVault.open(JsonVaultStore("chronos_notes.json"), clock)
        vault.put(TemporalKey.parse("2024-03-15-14-30"), "# first light")
        vault.entries_on_day(date(2024, 3, 15))
    """

    def __init__(self, store: Optional[VaultStore] = None, clock: Optional[ClockSource] = None):
        self.store = store
        self.clock = clock or SystemClock()

        self._entries: Dict[TemporalKey, Entry] = {}
        self._by_day: Dict[date, List[TemporalKey]] = {}
        self._days: List[date] = []

        self.dirty = False
        self.revision = 0  # bumped on every change, lets callers cache derived layout

    @classmethod
    def open(cls, store: VaultStore, clock: Optional[ClockSource] = None) -> "NoteVault":
        """Create a vault and load every record from `store`."""
        vault = cls(store=store, clock=clock)
        vault.load()
        return vault

    # ===== Persistence =====

    def load(self):
        """
        Replace the in-memory archive with the store's contents.

        All records are decoded before anything is swapped in, so a corrupt
        archive raises VaultCorruptError and leaves the vault untouched.
        """
        if self.store is None:
            return
        records = self.store.load()

        decoded = [decode_record(key_text, record) for key_text, record in records.items()]
        seen = set()
        for entry in decoded:
            # parse() strips whitespace, so two raw strings can name one minute
            if entry.key in seen:
                raise VaultCorruptError(f"duplicate key in vault: {entry.key}")
            seen.add(entry.key)

        self._entries = {}
        self._by_day = {}
        self._days = []
        for entry in decoded:
            self._index(entry)
        self.dirty = False
        self.revision += 1
        logger.info(f"Vault loaded: {len(self._entries)} entries across {len(self._days)} days")

    def flush(self) -> bool:
        """Write a dirty vault. Returns True if a write happened."""
        if not self.dirty:
            return False
        self._persist()
        return True

    def _persist(self):
        if self.store is None:
            self.dirty = False
            return
        self.dirty = True
        try:
            self.store.save(self.snapshot_records())
        except VaultWriteError:
            logger.error("Vault write failed; change kept in memory and marked dirty")
            raise
        self.dirty = False

    def snapshot_records(self) -> Dict[str, Dict[str, Any]]:
        return {entry.key.canonical(): encode_entry(entry) for entry in self}

    # ===== Index maintenance =====

    def _index(self, entry: Entry):
        day = entry.key.date
        existed = entry.key in self._entries
        self._entries[entry.key] = entry
        if existed:
            return
        if day not in self._by_day:
            self._by_day[day] = []
            insort(self._days, day)
        insort(self._by_day[day], entry.key)

    def _unindex(self, key: TemporalKey):
        del self._entries[key]
        day = key.date
        keys = self._by_day[day]
        keys.remove(key)
        if not keys:
            del self._by_day[day]
            self._days.remove(day)

    # ===== Operations =====

    def put(self, key: KeyLike, body: str) -> Entry:
        """
        Insert or overwrite the entry at `key`.

        Raises:
            TemporalValidationError: key is not a valid minute
            VaultWriteError: the change is in memory but could not be saved
        """
        key = _coerce_key(key)
        if not isinstance(body, str):
            raise TypeError(f"entry body must be str, got {type(body).__name__}")

        now = self.clock.now()
        existing = self._entries.get(key)
        if existing is not None:
            entry = replace(existing, body=body, updated_at=now)
        else:
            entry = Entry(key=key, body=body, created_at=now, updated_at=now)

        self._index(entry)
        self.revision += 1
        self._persist()
        return entry

    def delete(self, key: KeyLike) -> bool:
        key = _coerce_key(key)
        if key not in self._entries:
            return False
        self._unindex(key)
        self.revision += 1
        self._persist()
        return True

    def get(self, key: KeyLike) -> Optional[Entry]:
        return self._entries.get(_coerce_key(key))

    def contains(self, key: KeyLike) -> bool:
        return _coerce_key(key) in self._entries

    def __contains__(self, key) -> bool:
        try:
            return self.contains(key)
        except TemporalValidationError:
            return False

    def entries_on_day(self, day: date) -> List[Entry]:
        """Entries of one calendar day, ordered by minute."""
        if isinstance(day, datetime):
            day = day.date()
        return [self._entries[key] for key in self._by_day.get(day, [])]

    def entries_between(self, start: KeyLike, end: KeyLike) -> List[Entry]:
        """Entries with start <= key <= end, chronological."""
        start, end = _coerce_key(start), _coerce_key(end)
        if end < start:
            return []
        first = bisect_left(self._days, start.date)
        last = bisect_right(self._days, end.date)
        result = []
        for day in self._days[first:last]:
            for key in self._by_day[day]:
                if start <= key <= end:
                    result.append(self._entries[key])
        return result

    def days_with_entries(self) -> List[date]:
        """Distinct days holding at least one entry, ascending."""
        return list(self._days)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        for day in self._days:
            for key in self._by_day[day]:
                yield self._entries[key]
