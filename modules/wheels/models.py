# -*- coding: utf-8 -*-
"""
Wheel records.

Status and category are independent: category is a key into a fixed table
with no lifecycle, status is the sale lifecycle
(Available / Reserved / Damaged / Sold).

Sold is reachable only through ``workflow.mark_sold``: a generic create,
update or import may not set it, nor touch the sale fields. Leaving Sold
through a generic update clears the sale fields, so a record is never Sold
without sale data and never carries sale data while not Sold.

Images are owned by ``images.ImageAttachmentManager``; updates only ever
append to the list.
"""
import random
import re
import string
from typing import Optional

from errors import ValidationError
from repository import CHOICE, DECIMAL, INT, Field, Repository

WHEELS_SLOT = "wheels"

STATUS_AVAILABLE = "Available"
STATUS_RESERVED = "Reserved"
STATUS_SOLD = "Sold"
STATUS_DAMAGED = "Damaged"
WHEEL_STATUSES = (STATUS_AVAILABLE, STATUS_RESERVED, STATUS_SOLD, STATUS_DAMAGED)

WHEEL_CONDITIONS = ("Excellent", "Good", "Fair", "Poor")

CATEGORY_UNKNOWN = "UNKNOWN"
WHEEL_CATEGORIES = ("OEM", "AFTERMARKET", "REPLICA", "STEEL", "WINTER", CATEGORY_UNKNOWN)

SALE_FIELDS = ("soldAt", "soldPrice", "soldTo", "soldNotes")
SELL_VIA_MARK_SOLD = "use the mark-sold operation to sell a wheel"

SKU_PREFIX = "SPP"
SKU_ALPHABET = string.digits + string.ascii_uppercase
_SKU_KEEP_RE = re.compile(r"[^0-9.]")


# ---------- SKU ----------

def _spec_digits(value) -> str:
    # "18x7.5" -> "187.5", "5x114.3" -> "5114.3"
    return _SKU_KEEP_RE.sub("", str(value or ""))


def generate_sku(year, make, model, size, bolt_pattern, rng: Optional[random.Random] = None) -> str:
    """
    ``SPP-{year}{MAK}{MOD}-{size}-{bolt}-{XXXX}``.

    Pure: the same inputs and the same seeded ``rng`` give the same SKU.
    Uniqueness is probabilistic; existing SKUs are not checked.
    """
    rng = rng or random.Random()
    make3 = str(make or "").strip()[:3].upper()
    model3 = str(model or "").strip()[:3].upper()
    suffix = "".join(rng.choice(SKU_ALPHABET) for _ in range(4))
    return (
        f"{SKU_PREFIX}-{str(year or '').strip()}{make3}{model3}"
        f"-{_spec_digits(size)}-{_spec_digits(bolt_pattern)}-{suffix}"
    )


# ---------- repository ----------

class WheelRepository(Repository):
    slot = WHEELS_SLOT
    entity = "Wheel"
    fields = (
        Field("sku", max_length=50),
        Field("year", max_length=10),
        Field("make", max_length=50),
        Field("model", max_length=50),
        Field("trim", max_length=50),
        Field("size", max_length=30),
        Field("boltPattern", max_length=30),
        Field("offset", max_length=30),
        Field("oemPart", max_length=50),
        Field("condition", CHOICE, choices=WHEEL_CONDITIONS, default="Good"),
        Field("price", DECIMAL),
        Field("quantity", INT, default=1),
        Field("status", CHOICE, choices=WHEEL_STATUSES, default=STATUS_AVAILABLE),
        Field("category", CHOICE, choices=WHEEL_CATEGORIES, default=CATEGORY_UNKNOWN),
        Field("subcategory", max_length=50, default=""),
        Field("notes", max_length=500),
    )

    def __init__(self, store, attachments=None, rng: Optional[random.Random] = None):
        super().__init__(store)
        self.attachments = attachments
        self.rng = rng

    def extra_errors(self, data: dict, cleaned: dict, partial: bool) -> dict[str, str]:
        errors = {}
        # updates compare against the stored status under the lock, see update()
        if not partial and cleaned.get("status") == STATUS_SOLD:
            errors["status"] = SELL_VIA_MARK_SOLD
        for name in SALE_FIELDS:
            if data.get(name) not in (None, ""):
                errors[name] = "is set only by the mark-sold operation"
        return errors

    def prepare_new(self, data: dict) -> dict:
        cleaned = super().prepare_new(data)
        if not cleaned.get("sku"):
            cleaned["sku"] = generate_sku(
                cleaned.get("year"), cleaned.get("make"), cleaned.get("model"),
                cleaned.get("size"), cleaned.get("boltPattern"), self.rng,
            )
        cleaned["images"] = []
        for name in SALE_FIELDS:
            cleaned[name] = None
        return cleaned

    def _require_attachments(self):
        if self.attachments is None:
            raise RuntimeError("WheelRepository needs an ImageAttachmentManager for image work")
        return self.attachments

    def create(self, data: dict, principal: Optional[str] = None, uploads=()) -> dict:
        """Validate first, then store blobs, then insert; blobs are removed if the insert fails."""
        cleaned = self.prepare_new(data)
        refs = self._require_attachments().store_uploads(uploads) if uploads else []
        cleaned["images"] = list(refs)
        try:
            record = self.store.insert(self.slot, cleaned, principal)
        except Exception:
            if refs:
                self.attachments.discard(refs)
            raise
        return self.serialize(record)

    def update(self, record_id: str, data: dict, principal: Optional[str] = None, uploads=()) -> dict:
        patch = self.clean(data, partial=True)
        if not patch.get("sku"):
            # an edit form posts the SKU back blank; the stored one is kept
            patch.pop("sku", None)
        refs = self._require_attachments().store_uploads(uploads) if uploads else []

        def merge(current: dict) -> dict:
            if patch.get("status") == STATUS_SOLD and current.get("status") != STATUS_SOLD:
                raise ValidationError({"status": SELL_VIA_MARK_SOLD}, "Invalid wheel data")
            changes = dict(patch)
            if refs:
                changes["images"] = list(current.get("images") or []) + list(refs)
            leaving_sold = (
                current.get("status") == STATUS_SOLD
                and changes.get("status") not in (None, STATUS_SOLD)
            )
            if leaving_sold:
                changes.update({name: None for name in SALE_FIELDS})
            return changes

        try:
            with self.labelled(record_id):
                record = self.store.update_by_id(self.slot, record_id, merge, principal)
        except Exception:
            if refs:
                self.attachments.discard(refs)
            raise
        return self.serialize(record)

    def delete(self, record_id: str) -> dict:
        return self._require_attachments().delete_wheel_cascade(record_id)
