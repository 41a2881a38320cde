"""Smoke tests for the OEM parts module."""

import io

from openpyxl import load_workbook

PART = {
    "partNumber": "20310FG000",
    "oemPartNumber": "20310-FG000",
    "partName": "Strut mount",
    "category": "Suspension",
    "quantity": 4,
    "location": "Rack B",
    "price": "39.99",
    "notes": "",
}


def test_list_starts_empty(auth_client) -> None:
    resp = auth_client.get("/api/oem-parts")
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True, "data": []}


def test_add_part_flow(auth_client) -> None:
    resp = auth_client.post("/api/oem-parts", json=PART)
    assert resp.status_code == 201
    part = resp.get_json()["data"]
    assert part["partName"] == "Strut mount"
    assert part["quantity"] == 4
    assert part["id"] and part["createdAt"]

    listed = auth_client.get("/api/oem-parts").get_json()["data"]
    assert listed == [part]


def test_add_part_form_encoded(auth_client) -> None:
    resp = auth_client.post("/api/oem-parts", data={"partNumber": "P-1", "partName": "Clip", "quantity": "12"})
    assert resp.status_code == 201
    assert resp.get_json()["data"]["quantity"] == 12


def test_add_part_reports_all_errors(auth_client) -> None:
    resp = auth_client.post("/api/oem-parts", json={"price": "-1"})
    assert resp.status_code == 400
    assert set(resp.get_json()["details"]) == {"partNumber", "partName", "quantity", "price"}
    assert auth_client.get("/api/oem-parts").get_json()["data"] == []


def test_edit_and_delete_part(auth_client) -> None:
    part = auth_client.post("/api/oem-parts", json=PART).get_json()["data"]

    resp = auth_client.patch(f"/api/oem-parts/{part['id']}", json={"quantity": 1, "location": "Rack C"})
    assert resp.status_code == 200
    updated = resp.get_json()["data"]
    assert updated["quantity"] == 1
    assert updated["location"] == "Rack C"
    assert updated["partName"] == PART["partName"]
    assert updated["updatedBy"] == "test-user"

    resp = auth_client.delete(f"/api/oem-parts/{part['id']}")
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Part deleted successfully"

    missing = auth_client.delete(f"/api/oem-parts/{part['id']}")
    assert missing.status_code == 404
    assert missing.get_json()["code"] == "not_found"


def test_summary_counts_stock(auth_client) -> None:
    for qty in (0, 2, 10):
        auth_client.post("/api/oem-parts", json={**PART, "quantity": qty})
    summary = auth_client.get("/api/oem-parts/summary").get_json()["data"]
    assert summary == {"total": 3, "inStock": 2, "lowStock": 1, "outOfStock": 1}


def test_export_parts(auth_client) -> None:
    auth_client.post("/api/oem-parts", json=PART)
    resp = auth_client.get("/api/oem-parts/export")
    assert resp.status_code == 200
    rows = list(load_workbook(io.BytesIO(resp.data)).active.iter_rows(values_only=True))
    assert rows[1][1] == PART["partNumber"]
