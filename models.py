"""Shared user records and the Flask-Login principal wrapper."""

from typing import Optional

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from errors import ValidationError
from repository import CHOICE, Field, Repository

USERS_SLOT = "users"
ROLES = ("user", "admin", "root")


class User(UserMixin):
    """Represents an authenticated application user."""

    def __init__(self, record: dict):
        self.id = record["id"]
        self.username = record.get("username")
        self.role = record.get("role", "user")

    def to_dict(self) -> dict:
        return {"id": self.id, "username": self.username, "role": self.role}

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<User {self.username}>"


class UserRepository(Repository):
    slot = USERS_SLOT
    entity = "User"
    fields = (
        Field("username", required=True, max_length=150),
        Field("password", required=True, max_length=200),
        Field("role", CHOICE, choices=ROLES, default="user"),
    )

    def serialize(self, record: dict) -> dict:
        # the hash never leaves the repository
        return {k: v for k, v in record.items() if k != "password"}

    def prepare_new(self, data: dict) -> dict:
        cleaned = super().prepare_new(data)
        cleaned["password"] = generate_password_hash(cleaned["password"])
        return cleaned

    def create(self, data: dict, principal: Optional[str] = None) -> dict:
        cleaned = self.prepare_new(data)

        def unique_username(records):
            if any(r.get("username") == cleaned["username"] for r in records):
                raise ValidationError({"username": "is already taken"}, "Username already exists")

        record = self.store.insert(self.slot, cleaned, principal, guard=unique_username)
        return self.serialize(record)

    def update(self, record_id: str, data: dict, principal: Optional[str] = None) -> dict:
        patch = self.clean(data, partial=True)
        if "password" in patch:
            patch["password"] = generate_password_hash(patch["password"])
        with self.labelled(record_id), self.store.lock_for(self.slot):
            if "username" in patch and any(
                r.get("username") == patch["username"] and r.get("id") != record_id
                for r in self.store.load_all(self.slot)
            ):
                raise ValidationError({"username": "is already taken"}, "Username already exists")
            record = self.store.update_by_id(self.slot, record_id, patch, principal)
        return self.serialize(record)

    def find_by_username(self, username: str) -> Optional[dict]:
        for record in self.store.load_all(self.slot):
            if record.get("username") == username:
                return record
        return None

    def authenticate(self, username: str, password: str) -> Optional[User]:
        record = self.find_by_username((username or "").strip())
        if record and check_password_hash(record.get("password", ""), password or ""):
            return User(record)
        return None

    def load_user(self, user_id: str) -> Optional[User]:
        for record in self.store.load_all(self.slot):
            if record.get("id") == user_id:
                return User(record)
        return None

    def ensure_default_admin(self, username: str, password: str) -> Optional[dict]:
        """Seed one admin account when the collection is empty."""
        if not username or not password or self.store.load_all(self.slot):
            return None
        return self.create({"username": username, "password": password, "role": "admin"})
