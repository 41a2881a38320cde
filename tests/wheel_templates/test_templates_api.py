TEMPLATE = {
    "name": "Outback 18in OEM",
    "year": "2024",
    "make": "Subaru",
    "model": "Outback",
    "size": "18x7.5",
    "boltPattern": "5x114.3",
}


def test_template_crud(auth_client):
    resp = auth_client.post("/api/wheel-templates", json=TEMPLATE)
    assert resp.status_code == 201
    template = resp.get_json()["data"]

    assert auth_client.get("/api/wheel-templates").get_json()["data"] == [template]

    resp = auth_client.put(f"/api/wheel-templates/{template['id']}", json={"trim": "Touring"})
    assert resp.get_json()["data"]["trim"] == "Touring"
    assert resp.get_json()["data"]["name"] == TEMPLATE["name"]

    assert auth_client.delete(f"/api/wheel-templates/{template['id']}").status_code == 200
    assert auth_client.get(f"/api/wheel-templates/{template['id']}").status_code == 404


def test_template_requires_identity_fields(auth_client):
    resp = auth_client.post("/api/wheel-templates", json={"name": "x" * 101, "size": "17x7"})
    assert resp.status_code == 400
    assert set(resp.get_json()["details"]) == {"name", "year", "make", "model"}


def test_template_prefills_wheel_by_value(auth_client):
    template = auth_client.post("/api/wheel-templates", json=TEMPLATE).get_json()["data"]

    prefill = auth_client.get(f"/api/wheel-templates/{template['id']}/wheel").get_json()["data"]
    assert "name" not in prefill and "id" not in prefill
    wheel = auth_client.post("/api/wheels", json={**prefill, "price": "199"}).get_json()["data"]
    assert wheel["model"] == "Outback"

    auth_client.put(f"/api/wheel-templates/{template['id']}", json={"model": "Legacy"})
    stored = auth_client.get(f"/api/wheels/{wheel['id']}").get_json()["data"]
    assert stored["model"] == "Outback"
