"""Session login for the inventory API."""

import logging

from flask import current_app, jsonify, request
from flask_login import (
    UserMixin,
    current_user,
    login_required,
    login_user,
    logout_user,
)

from errors import ValidationError
from extensions import login_manager, store
from models import User, UserRepository
from permissions import permission_flags

from . import bp

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id: str | None) -> User | UserMixin | None:
    """Resolve a ``User`` instance for Flask-Login sessions."""

    if not user_id:
        return None

    user = UserRepository(store).load_user(user_id)
    if user is not None:
        return user

    if current_app.config.get("LOGIN_DISABLED"):
        class _TestingUser(UserMixin):
            """Fallback principal used when authentication is disabled."""

            def __init__(self, test_user_id: str) -> None:
                self.id = test_user_id
                self.username = "test-user"
                self.role = "root"

        return _TestingUser(user_id)

    return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify(ok=False, error="Authentication required", code="unauthorized"), 401


@bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or request.form.to_dict()
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""

    missing = {k: "is required" for k, v in (("username", username), ("password", password)) if not v}
    if missing:
        raise ValidationError(missing)

    user = UserRepository(store).authenticate(username, password)
    if user is None:
        logger.warning("Failed login for %s", username)
        return jsonify(ok=False, error="Invalid username or password", code="invalid_credentials"), 401

    login_user(user, remember=bool(data.get("remember")))
    logger.info("User %s logged in", user.username)
    return jsonify(ok=True, data={"user": user.to_dict()})


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    username = getattr(current_user, "username", None)
    logout_user()
    logger.info("User %s logged out", username)
    return jsonify(ok=True, message="Logged out")


@bp.route("/me", methods=["GET"])
@login_required
def me():
    user = {
        "id": current_user.get_id(),
        "username": getattr(current_user, "username", None),
        "role": getattr(current_user, "role", None),
    }
    return jsonify(ok=True, data={**user, "permissions": permission_flags()})
