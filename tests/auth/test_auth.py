import pytest

from app import create_app


@pytest.fixture()
def secure_app(tmp_path):
    app = create_app({
        "TESTING": True,
        "DATA_FOLDER": str(tmp_path / "data"),
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "SECRET_KEY": "test-secret",
        "DEFAULT_ADMIN_USERNAME": "admin",
        "DEFAULT_ADMIN_PASSWORD": "admin123",
    })
    with app.app_context():
        yield app


@pytest.fixture()
def secure_client(secure_app):
    return secure_app.test_client()


def _login(client, username="admin", password="admin123"):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def test_anonymous_gets_401(secure_client):
    resp = secure_client.get("/api/wheels")
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "unauthorized"


def test_login_with_seeded_admin(secure_client):
    resp = _login(secure_client)
    assert resp.status_code == 200
    user = resp.get_json()["data"]["user"]
    assert user["username"] == "admin"
    assert user["role"] == "admin"
    assert "password" not in user

    me = secure_client.get("/api/auth/me").get_json()["data"]
    assert me["username"] == "admin"
    assert me["permissions"]["can_inventory_edit"] is True

    assert secure_client.get("/api/wheels").status_code == 200


def test_bad_credentials(secure_client):
    resp = _login(secure_client, password="nope")
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "invalid_credentials"

    resp = secure_client.post("/api/auth/login", json={})
    assert resp.status_code == 400
    assert set(resp.get_json()["details"]) == {"username", "password"}


def test_logout_ends_session(secure_client):
    _login(secure_client)
    assert secure_client.post("/api/auth/logout").status_code == 200
    assert secure_client.get("/api/auth/me").status_code == 401


def test_plain_user_cannot_edit(secure_app, secure_client):
    from extensions import store
    from models import UserRepository

    UserRepository(store).create({"username": "clerk", "password": "pw", "role": "user"})
    _login(secure_client, "clerk", "pw")

    assert secure_client.get("/api/wheels").status_code == 200
    assert secure_client.post("/api/wheels", json={"make": "Subaru"}).status_code == 403
    me = secure_client.get("/api/auth/me").get_json()["data"]
    assert me["permissions"]["can_inventory_edit"] is False


def test_admin_stamps_principal(secure_client):
    _login(secure_client)
    wheel = secure_client.post("/api/wheels", json={"make": "Subaru"}).get_json()["data"]
    assert wheel["createdBy"] == "admin"
