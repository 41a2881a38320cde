import random
import re

from modules.wheels.models import WheelRepository, generate_sku

SKU_RE = re.compile(r"^SPP-2024SUBOUT-187\.5-5114\.3-[A-Z0-9]{4}$")


def test_sku_shape():
    sku = generate_sku(2024, "Subaru", "Outback", "18x7.5", "5x114.3")
    assert SKU_RE.match(sku), sku


def test_sku_reproducible_with_seed():
    first = generate_sku("2019", "Subaru", "Forester", "17x7", "5x100", random.Random(42))
    second = generate_sku("2019", "Subaru", "Forester", "17x7", "5x100", random.Random(42))
    assert first == second


def test_sku_short_and_missing_parts():
    sku = generate_sku("", "VW", None, "", "", random.Random(1))
    assert re.match(r"^SPP-VW---[A-Z0-9]{4}$", sku), sku


def test_created_wheel_without_sku_gets_one(record_store):
    repo = WheelRepository(record_store, rng=random.Random(7))
    wheel = repo.create({
        "year": 2024, "make": "Subaru", "model": "Outback",
        "size": "18x7.5", "boltPattern": "5x114.3",
    })
    assert SKU_RE.match(wheel["sku"]), wheel["sku"]


def test_caller_sku_is_kept(record_store):
    wheel = WheelRepository(record_store).create({"sku": "SHELF-42", "make": "Subaru"})
    assert wheel["sku"] == "SHELF-42"


def test_blank_sku_on_edit_keeps_stored_one(record_store):
    repo = WheelRepository(record_store, rng=random.Random(7))
    wheel = repo.create({
        "year": 2024, "make": "Subaru", "model": "Outback",
        "size": "18x7.5", "boltPattern": "5x114.3",
    })

    edited = repo.update(wheel["id"], {"sku": "", "notes": "edited"})
    assert edited["sku"] == wheel["sku"]
    assert edited["notes"] == "edited"

    renamed = repo.update(wheel["id"], {"sku": "SHELF-7"})
    assert renamed["sku"] == "SHELF-7"
