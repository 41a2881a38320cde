"""Record shape and repository for OEM parts."""

from repository import DECIMAL, INT, Field, Repository

OEM_PARTS_SLOT = "oem-parts"

MAX_PART_NUMBER_LENGTH = 50
MAX_PART_NAME_LENGTH = 100
MAX_CATEGORY_LENGTH = 50
MAX_LOCATION_LENGTH = 100
MAX_NOTES_LENGTH = 500


class OemPartRepository(Repository):
    """Part numbers are not unique: two bins may hold the same part."""

    slot = OEM_PARTS_SLOT
    entity = "Part"
    fields = (
        Field("partNumber", required=True, max_length=MAX_PART_NUMBER_LENGTH),
        Field("oemPartNumber", max_length=MAX_PART_NUMBER_LENGTH),
        Field("partName", required=True, max_length=MAX_PART_NAME_LENGTH),
        Field("category", max_length=MAX_CATEGORY_LENGTH),
        Field("quantity", INT, required=True),
        Field("location", max_length=MAX_LOCATION_LENGTH),
        Field("price", DECIMAL),
        Field("notes", max_length=MAX_NOTES_LENGTH),
    )


def _quantity(part: dict) -> int:
    try:
        return int(part.get("quantity") or 0)
    except (TypeError, ValueError):
        return 0


def stock_summary(parts: list[dict], low_stock_threshold: int) -> dict:
    """Counts for the parts dashboard: in stock, low stock, out of stock."""
    quantities = [_quantity(p) for p in parts]
    return {
        "total": len(parts),
        "inStock": sum(1 for q in quantities if q > 0),
        "lowStock": sum(1 for q in quantities if 0 < q <= low_stock_threshold),
        "outOfStock": sum(1 for q in quantities if q <= 0),
    }
