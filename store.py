"""
Flat-file record store.

Each *slot* is one JSON array on disk (``<root>/<slot>.json``) holding the
whole collection of one entity type. Every write serializes the entire
collection; every mutating call holds the slot's lock across
load -> mutate -> save so concurrent writers cannot lose each other's updates.

Files are replaced atomically (temp file in the same directory + ``os.replace``),
so a reader never observes a half-written collection.
"""
import json
import logging
import os
import re
import tempfile
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional

from errors import NotFound, StorageError

logger = logging.getLogger(__name__)

SLOT_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")

# Fields the store owns; a patch can never overwrite them.
PROTECTED_FIELDS = frozenset({"id", "createdAt", "createdBy"})

SLOT_OK = "ok"
SLOT_MISSING = "missing"
SLOT_CORRUPTED = "corrupted"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    moment = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _later_than(*previous: Optional[str]) -> str:
    """Current time, bumped so it sorts strictly after every given stamp."""
    now = utcnow()
    for stamp in previous:
        if not stamp:
            continue
        try:
            before = parse_timestamp(stamp)
        except ValueError:
            continue
        if now <= before:
            now = before + timedelta(microseconds=1)
    return format_timestamp(now)


@dataclass
class SlotRead:
    """Tagged result of reading a slot: ``ok``, ``missing`` or ``corrupted``."""

    status: str
    records: list = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def corrupted(self) -> bool:
        return self.status == SLOT_CORRUPTED


class RecordStore:
    """Stores ordered collections of dict records, one JSON file per slot."""

    def __init__(self, root: str | os.PathLike | None = None):
        self._root: Optional[Path] = Path(root) if root is not None else None
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    # ---------- wiring ----------
    def init_app(self, app, slots: Iterable[str] = ()) -> None:
        self._root = Path(app.config["DATA_FOLDER"])
        self.ensure_slots(slots)
        app.extensions["record_store"] = self

    @property
    def root(self) -> Path:
        if self._root is None:
            raise StorageError("Record store is not initialised")
        return self._root

    def path_for(self, slot: str) -> Path:
        if not SLOT_NAME_RE.match(slot or ""):
            raise ValueError(f"Invalid slot name: {slot!r}")
        return self.root / f"{slot}.json"

    def lock_for(self, slot: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(slot)
            if lock is None:
                lock = self._locks[slot] = threading.RLock()
            return lock

    def ensure_slots(self, slots: Iterable[str]) -> None:
        """Create the data folder and an empty ``[]`` file for every missing slot."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create data folder {self.root}: {exc}") from exc
        for slot in slots:
            with self.lock_for(slot):
                if not self.path_for(slot).exists():
                    self.save_all(slot, [])
                    logger.info("Initialised empty slot %s", slot)

    def reset_slot(self, slot: str) -> None:
        with self.lock_for(slot):
            self.save_all(slot, [])
        logger.warning("Slot %s reset to an empty collection", slot)

    # ---------- reads ----------
    def read_slot(self, slot: str) -> SlotRead:
        path = self.path_for(slot)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return SlotRead(SLOT_MISSING)
        except OSError as exc:
            return SlotRead(SLOT_CORRUPTED, error=exc)

        try:
            data = json.loads(raw)
        except ValueError as exc:
            return SlotRead(SLOT_CORRUPTED, error=exc)
        if not isinstance(data, list):
            return SlotRead(SLOT_CORRUPTED, error=ValueError(f"{path.name} does not hold a JSON array"))
        if not all(isinstance(record, dict) for record in data):
            return SlotRead(SLOT_CORRUPTED, error=ValueError(f"{path.name} holds non-object entries"))
        return SlotRead(SLOT_OK, records=data)

    def load_all(self, slot: str) -> list[dict]:
        """Whole collection; an absent or unreadable slot reads as empty."""
        result = self.read_slot(slot)
        if result.corrupted:
            logger.warning("Slot %s is unreadable, serving it as empty: %s", slot, result.error)
        return result.records

    def get_by_id(self, slot: str, record_id: str) -> dict:
        for record in self.load_all(slot):
            if record.get("id") == record_id:
                return record
        raise NotFound(slot, record_id)

    # ---------- writes ----------
    def save_all(self, slot: str, records: list[dict]) -> None:
        """Overwrite the whole collection through a temp file and an atomic rename."""
        path = self.path_for(slot)
        with self.lock_for(slot):
            tmp_name = None
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with tempfile.NamedTemporaryFile(
                    "w", encoding="utf-8", dir=path.parent,
                    prefix=f".{slot}.", suffix=".tmp", delete=False,
                ) as tmp:
                    tmp_name = tmp.name
                    json.dump(records, tmp, indent=2, ensure_ascii=False)
                    tmp.flush()
                    os.fsync(tmp.fileno())
                os.replace(tmp_name, path)
            except (OSError, TypeError, ValueError) as exc:
                logger.error("Failed to save slot %s: %s", slot, exc)
                if tmp_name and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise StorageError(f"Cannot write {slot}: {exc}") from exc
        logger.debug("Saved %d records to slot %s", len(records), slot)

    @contextmanager
    def transaction(self, slot: str):
        """
        Hold the slot lock, yield the loaded collection as a mutable list and
        save it back when the block exits cleanly. An exception inside the
        block leaves the persisted collection untouched.
        """
        with self.lock_for(slot):
            result = self.read_slot(slot)
            if result.corrupted:
                raise StorageError(
                    f"Slot {slot} is corrupted and will not be overwritten: {result.error}"
                )
            records = list(result.records)
            yield records
            self.save_all(slot, records)

    def new_record(self, data: dict, principal: Optional[str] = None) -> dict:
        """Copy ``data`` and stamp store-owned identity and creation fields."""
        record = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
        record = {"id": str(uuid.uuid4()), **record, "createdAt": format_timestamp(utcnow())}
        if principal:
            record["createdBy"] = principal
        return record

    def insert(
        self,
        slot: str,
        data: dict,
        principal: Optional[str] = None,
        guard: Optional[Callable[[list], None]] = None,
    ) -> dict:
        """Append a new record; ``guard`` sees the current collection under the lock."""
        with self.transaction(slot) as records:
            if guard is not None:
                guard(records)
            record = self.new_record(data, principal)
            records.append(record)
        return dict(record)

    def update_by_id(
        self,
        slot: str,
        record_id: str,
        patch: dict | Callable[[dict], dict],
        principal: Optional[str] = None,
    ) -> dict:
        """
        Shallow-merge ``patch`` over the stored record and stamp update metadata.

        ``patch`` may be a callable receiving the current record (under the
        lock) and returning the fields to merge; it may raise to abort.
        """
        with self.transaction(slot) as records:
            index = _index_of(records, record_id)
            if index is None:
                raise NotFound(slot, record_id)
            current = records[index]
            changes = patch(dict(current)) if callable(patch) else patch
            updated = dict(current)
            updated.update({k: v for k, v in changes.items() if k not in PROTECTED_FIELDS})
            updated["updatedAt"] = _later_than(current.get("createdAt"), current.get("updatedAt"))
            if principal:
                updated["updatedBy"] = principal
            records[index] = updated
        return dict(updated)

    def delete_by_id(
        self,
        slot: str,
        record_id: str,
        before_delete: Optional[Callable[[dict], None]] = None,
    ) -> dict:
        """Remove one record and return it so the caller can cascade side effects."""
        with self.transaction(slot) as records:
            index = _index_of(records, record_id)
            if index is None:
                raise NotFound(slot, record_id)
            removed = records[index]
            if before_delete is not None:
                before_delete(dict(removed))
            del records[index]
        return removed


def _index_of(records: list, record_id: str) -> Optional[int]:
    for index, record in enumerate(records):
        if isinstance(record, dict) and record.get("id") == record_id:
            return index
    return None
