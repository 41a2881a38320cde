import pytest

from errors import NotFound, ValidationError
from models import UserRepository
from modules.oem_parts.models import OemPartRepository, stock_summary


@pytest.fixture()
def parts(record_store):
    return OemPartRepository(record_store)


@pytest.fixture()
def users(record_store):
    return UserRepository(record_store)


def test_validation_lists_every_bad_field(parts):
    with pytest.raises(ValidationError) as info:
        parts.create({
            "partNumber": "X" * 51,
            "quantity": -1,
            "price": "abc",
            "notes": "n" * 501,
        })
    assert set(info.value.errors) == {"partNumber", "partName", "quantity", "price", "notes"}
    assert parts.list() == []


def test_create_normalises_values(parts):
    part = parts.create({
        "partNumber": " 12345AA ",
        "partName": "Lug nut",
        "quantity": "4",
        "price": 7.5,
        "unknown": "dropped",
    })
    assert part["partNumber"] == "12345AA"
    assert part["quantity"] == 4
    assert part["price"] == "7.5"
    assert "unknown" not in part


def test_part_numbers_are_not_unique(parts):
    parts.create({"partNumber": "P-1", "partName": "A", "quantity": 1})
    parts.create({"partNumber": "P-1", "partName": "B", "quantity": 1})
    assert len(parts.list()) == 2


def test_partial_update_checks_only_given_fields(parts):
    part = parts.create({"partNumber": "P-1", "partName": "A", "quantity": 1, "location": "Shelf 2"})

    updated = parts.update(part["id"], {"quantity": 9})
    assert updated["quantity"] == 9
    assert updated["location"] == "Shelf 2"

    with pytest.raises(ValidationError) as info:
        parts.update(part["id"], {"partName": "", "quantity": "many"})
    assert set(info.value.errors) == {"partName", "quantity"}


def test_missing_record_uses_entity_name(parts):
    with pytest.raises(NotFound) as info:
        parts.update("missing", {"quantity": 1})
    assert info.value.entity == "Part"
    with pytest.raises(NotFound):
        parts.delete("missing")


def test_create_many_reports_bad_rows(parts):
    created, failed = parts.create_many([
        {"partNumber": "P-1", "partName": "A", "quantity": 1},
        {"partNumber": "", "partName": "B", "quantity": 1},
        {"partNumber": "P-3", "partName": "C", "quantity": 3},
        "not a row",
    ])
    assert [p["partNumber"] for p in created] == ["P-1", "P-3"]
    assert [number for number, _ in failed] == [2, 4]
    assert "partNumber" in failed[0][1]
    assert len(parts.list()) == 2


def test_stock_summary_threshold():
    summary = stock_summary(
        [{"quantity": 0}, {"quantity": 1}, {"quantity": 5}, {"quantity": 6}, {"quantity": "x"}],
        low_stock_threshold=5,
    )
    assert summary == {"total": 5, "inStock": 3, "lowStock": 2, "outOfStock": 2}


def test_user_password_is_hashed_and_hidden(users, record_store):
    user = users.create({"username": "kim", "password": "s3cret", "role": "admin"})
    assert "password" not in user

    stored = record_store.get_by_id("users", user["id"])
    assert stored["password"] != "s3cret"
    assert users.authenticate("kim", "s3cret").role == "admin"
    assert users.authenticate("kim", "wrong") is None
    assert all("password" not in u for u in users.list())


def test_usernames_are_unique(users):
    users.create({"username": "kim", "password": "a"})
    with pytest.raises(ValidationError) as info:
        users.create({"username": "kim", "password": "b"})
    assert "username" in info.value.errors

    other = users.create({"username": "lee", "password": "c"})
    with pytest.raises(ValidationError):
        users.update(other["id"], {"username": "kim"})


def test_default_admin_seeded_once(users):
    assert users.ensure_default_admin("admin", "admin123")["role"] == "admin"
    assert users.ensure_default_admin("admin", "admin123") is None
    assert len(users.list()) == 1
