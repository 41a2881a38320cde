# -*- coding: utf-8 -*-
"""
Доменные операции над дисками: продажа, статистика, пакетный импорт.

- mark_sold        - единственный путь в статус Sold: статус и все поля
                     продажи меняются одной записью коллекции.
- compute_stats    - статистика считается заново по текущей коллекции
                     (ничего не хранится и не обновляется инкрементально).
- import_wheels    - пакетный импорт: валидные строки сохраняются,
                     невалидные возвращаются с ошибками по каждой строке.
"""
from decimal import Decimal
from typing import Iterable, Optional

from errors import NotFound, ValidationError
from repository import decimal_text, parse_decimal
from store import RecordStore, format_timestamp, parse_timestamp, utcnow

from .models import (
    CATEGORY_UNKNOWN,
    STATUS_AVAILABLE,
    STATUS_SOLD,
    WHEELS_SLOT,
    WheelRepository,
)

MAX_SOLD_TO_LENGTH = 100
MAX_SOLD_NOTES_LENGTH = 500


# ---------- Продажа ----------

def _clean_sale(sale: dict) -> dict:
    if not isinstance(sale, dict):
        raise ValidationError({"_": "payload must be an object"})

    errors: dict[str, str] = {}
    cleaned: dict = {}

    price = sale.get("soldPrice")
    if price is None or (isinstance(price, str) and not price.strip()):
        errors["soldPrice"] = "is required"
    else:
        number = parse_decimal(price)
        if number is None:
            errors["soldPrice"] = "must be a number"
        elif number < 0:
            errors["soldPrice"] = "must not be negative"
        else:
            cleaned["soldPrice"] = decimal_text(price)

    sold_at = sale.get("soldAt")
    if sold_at in (None, ""):
        cleaned["soldAt"] = format_timestamp(utcnow())
    else:
        try:
            cleaned["soldAt"] = format_timestamp(parse_timestamp(sold_at))
        except (TypeError, ValueError):
            errors["soldAt"] = "must be an ISO-8601 date or timestamp"

    for name, limit in (("soldTo", MAX_SOLD_TO_LENGTH), ("soldNotes", MAX_SOLD_NOTES_LENGTH)):
        value = sale.get(name)
        if value in (None, ""):
            cleaned[name] = None
            continue
        text = str(value).strip()
        if len(text) > limit:
            errors[name] = f"must be at most {limit} characters"
        else:
            cleaned[name] = text

    if errors:
        raise ValidationError(errors, "Invalid sale data")
    return cleaned


def mark_sold(store: RecordStore, wheel_id: str, sale: dict, principal: Optional[str] = None) -> dict:
    """
    Flip a wheel to Sold and stamp soldAt / soldPrice / soldTo / soldNotes.

    A missing wheel is reported before any problem with the sale data.
    """
    def sell(current: dict) -> dict:
        return {"status": STATUS_SOLD, **_clean_sale(sale)}

    try:
        return store.update_by_id(WHEELS_SLOT, wheel_id, sell, principal)
    except NotFound as exc:
        raise NotFound("Wheel", wheel_id) from exc


# ---------- Статистика ----------

def _amount(value) -> Decimal:
    number = parse_decimal(value)
    return number if number is not None else Decimal("0")


def _bucket(buckets: dict, key: str, price: Decimal) -> None:
    bucket = buckets.setdefault(key, {"count": 0, "value": Decimal("0")})
    bucket["count"] += 1
    bucket["value"] += price


def compute_stats(wheels: Iterable[dict]) -> dict:
    """
    One pass over the wheels:
    - byCategory / byStatus: count and summed price per key,
    - totalValue / availableCount: Available wheels only,
    - soldStats: Sold wheels with a soldPrice.
    """
    by_category: dict = {}
    by_status: dict = {}
    total_wheels = 0
    total_value = Decimal("0")
    available_count = 0
    sold_count = 0
    revenue = Decimal("0")

    for wheel in wheels:
        total_wheels += 1
        price = _amount(wheel.get("price"))
        status = wheel.get("status") or STATUS_AVAILABLE

        _bucket(by_category, wheel.get("category") or CATEGORY_UNKNOWN, price)
        _bucket(by_status, status, price)

        if status == STATUS_SOLD and wheel.get("soldPrice") not in (None, ""):
            sold_count += 1
            revenue += _amount(wheel.get("soldPrice"))
        if status == STATUS_AVAILABLE:
            total_value += price
            available_count += 1

    return {
        "byCategory": by_category,
        "byStatus": by_status,
        "totalWheels": total_wheels,
        "totalValue": total_value,
        "availableCount": available_count,
        "soldStats": {
            "count": sold_count,
            "totalRevenue": revenue,
            "averagePrice": revenue / sold_count if sold_count else Decimal("0"),
        },
    }


def stats_to_json(stats: dict) -> dict:
    """Decimals as floats for JSON clients."""
    if isinstance(stats, dict):
        return {key: stats_to_json(value) for key, value in stats.items()}
    if isinstance(stats, Decimal):
        return float(stats)
    return stats


# ---------- Импорт ----------

def import_wheels(repo: WheelRepository, rows: Iterable[dict], principal: Optional[str] = None) -> dict:
    """Import valid rows in one write; report the others by 1-based row number."""
    created, failed = repo.create_many(rows, principal)
    return {
        "imported": len(created),
        "failed": [{"row": number, "errors": errors} for number, errors in failed],
        "data": created,
    }
