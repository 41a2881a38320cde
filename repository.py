"""
Typed repositories over the record store.

A repository binds one slot to a record shape: a tuple of ``Field`` rules used
to validate and default caller data before it reaches ``insert`` /
``update_by_id``. Validation collects every offending field before raising,
so a bad payload never results in a partial write.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from errors import NotFound, ValidationError
from store import RecordStore

STR = "str"
INT = "int"
DECIMAL = "decimal"
CHOICE = "choice"

_MISSING = object()


@dataclass(frozen=True)
class Field:
    name: str
    kind: str = STR
    required: bool = False
    max_length: Optional[int] = None
    choices: tuple = ()
    default: Any = _MISSING

    def has_default(self) -> bool:
        return self.default is not _MISSING

    def default_value(self):
        # lists are copied so records never share a default instance
        return list(self.default) if isinstance(self.default, list) else self.default


def parse_decimal(value) -> Optional[Decimal]:
    """Decimal from an int/float/str, or None when unparsable or not finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def decimal_text(value) -> str:
    """Storage form of a decimal: strings keep their text, numbers are rendered."""
    if isinstance(value, str):
        return value.strip()
    return str(Decimal(str(value)))


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def clean_value(spec: Field, value):
    """Return ``(cleaned, error)`` for one field value."""
    if spec.kind == STR:
        if isinstance(value, (dict, list, bool)):
            return None, "must be text"
        text = str(value).strip()
        if spec.max_length is not None and len(text) > spec.max_length:
            return None, f"must be at most {spec.max_length} characters"
        return text, None

    if spec.kind == INT:
        if isinstance(value, bool):
            return None, "must be a whole number"
        if isinstance(value, int):
            number = value
        else:
            text = str(value).strip()
            if not text.lstrip("-").isdigit():
                return None, "must be a whole number"
            number = int(text)
        if number < 0:
            return None, "must not be negative"
        return number, None

    if spec.kind == DECIMAL:
        number = parse_decimal(value)
        if number is None:
            return None, "must be a number"
        if number < 0:
            return None, "must not be negative"
        return decimal_text(value), None

    if spec.kind == CHOICE:
        text = str(value).strip()
        if text not in spec.choices:
            return None, "must be one of: " + ", ".join(spec.choices)
        return text, None

    raise ValueError(f"Unknown field kind {spec.kind!r}")


class Repository:
    """Base repository; subclasses set ``slot``, ``entity`` and ``fields``."""

    slot: str = ""
    entity: str = "Record"
    fields: tuple[Field, ...] = ()

    def __init__(self, store: RecordStore):
        self.store = store

    # ---------- shape ----------
    def field_map(self) -> dict[str, Field]:
        return {f.name: f for f in self.fields}

    def clean(self, data: dict, partial: bool = False) -> dict:
        """
        Validate and normalise caller data.

        Unknown keys are dropped. With ``partial`` only supplied fields are
        checked (update patches); otherwise required fields must be present.
        """
        if not isinstance(data, dict):
            raise ValidationError({"_": "payload must be an object"})

        cleaned: dict = {}
        errors: dict[str, str] = {}
        for spec in self.fields:
            value = data.get(spec.name, _MISSING)
            if value is _MISSING or _is_blank(value):
                if spec.required and (not partial or value is not _MISSING):
                    errors[spec.name] = "is required"
                elif value is not _MISSING and spec.kind == STR:
                    cleaned[spec.name] = ""
                continue
            result, error = clean_value(spec, value)
            if error:
                errors[spec.name] = error
            else:
                cleaned[spec.name] = result

        errors.update(self.extra_errors(data, cleaned, partial))
        if errors:
            raise ValidationError(errors, f"Invalid {self.entity.lower()} data")
        return cleaned

    def extra_errors(self, data: dict, cleaned: dict, partial: bool) -> dict[str, str]:
        """Cross-field checks for subclasses."""
        return {}

    def apply_defaults(self, cleaned: dict) -> dict:
        for spec in self.fields:
            if spec.has_default() and cleaned.get(spec.name) in (None, ""):
                if spec.name not in cleaned or spec.kind != STR:
                    cleaned[spec.name] = spec.default_value()
        return cleaned

    def prepare_new(self, data: dict) -> dict:
        return self.apply_defaults(self.clean(data))

    def serialize(self, record: dict) -> dict:
        return dict(record)

    @contextmanager
    def labelled(self, record_id: str):
        """Re-raise store-level NotFound with this repository's entity name."""
        try:
            yield
        except NotFound as exc:
            if exc.entity == self.entity:
                raise
            raise NotFound(self.entity, record_id) from exc

    # ---------- operations ----------
    def list(self) -> list[dict]:
        return [self.serialize(r) for r in self.store.load_all(self.slot)]

    def get(self, record_id: str) -> dict:
        with self.labelled(record_id):
            return self.serialize(self.store.get_by_id(self.slot, record_id))

    def create(self, data: dict, principal: Optional[str] = None) -> dict:
        record = self.store.insert(self.slot, self.prepare_new(data), principal, guard=self.guard_insert)
        return self.serialize(record)

    def guard_insert(self, records: list) -> None:
        """Called under the slot lock before an insert."""

    def update(self, record_id: str, data: dict, principal: Optional[str] = None) -> dict:
        patch = self.clean(data, partial=True)
        with self.labelled(record_id):
            record = self.store.update_by_id(self.slot, record_id, patch, principal)
        return self.serialize(record)

    def delete(self, record_id: str) -> dict:
        with self.labelled(record_id):
            return self.serialize(self.store.delete_by_id(self.slot, record_id))

    def create_many(self, rows: Iterable[dict], principal: Optional[str] = None):
        """
        Import many rows in one write. Valid rows are stored, invalid rows are
        reported as ``(row_number, errors)`` with 1-based row numbers.
        """
        created: list[dict] = []
        failed: list[tuple[int, dict]] = []
        with self.store.transaction(self.slot) as records:
            for number, row in enumerate(rows, start=1):
                try:
                    cleaned = self.prepare_new(row)
                except ValidationError as exc:
                    failed.append((number, exc.errors))
                    continue
                record = self.store.new_record(cleaned, principal)
                records.append(record)
                created.append(record)
        return [self.serialize(r) for r in created], failed
