# tests/conftest.py
import os
import sys
import pytest

# чтобы import create_app работал при запуске из корня
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app import create_app
from blobs import ImageStore
from store import RecordStore


@pytest.fixture()
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "DATA_FOLDER": str(tmp_path / "data"),
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "LOGIN_DISABLED": True,       # ← ключевая строка: отключаем логин в тестах
        "SECRET_KEY": "test-secret",  # чтобы не ругался Flask-Login/сессии
        "DEFAULT_ADMIN_PASSWORD": "",
    })
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def root_user():
    class U:
        id = "1"
        username = "root"
        role = "root"
    return U()


@pytest.fixture()
def auth_client(client, root_user):
    """Test client with a root session already established."""
    with client.session_transaction() as session:
        session["_user_id"] = str(root_user.id)
        session["_fresh"] = True
    return client


@pytest.fixture()
def record_store(tmp_path):
    return RecordStore(tmp_path / "data")


@pytest.fixture()
def images(tmp_path):
    return ImageStore(tmp_path / "uploads")
