import logging
import sys

from flask import Flask, jsonify, send_from_directory
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

load_dotenv()

from config import Config  # noqa: E402  (load_dotenv needs to run first)
from errors import InventoryError  # noqa: E402
from extensions import image_store, login_manager, store  # noqa: E402  (load_dotenv needs to run first)

logger = logging.getLogger(__name__)


def configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        root_logger.addHandler(handler)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(InventoryError)
    def handle_inventory_error(exc: InventoryError):
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.code, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        code = (exc.name or "error").lower().replace(" ", "_")
        return jsonify(ok=False, error=exc.description, code=code), exc.code


def create_app(test_config: dict | None = None) -> Flask:
    """Application factory for the inventory API."""

    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(app)

    # blueprints
    from modules.auth import bp as auth_bp
    from modules.oem_parts import bp as oem_parts_bp
    from modules.wheels import bp as wheels_bp
    from modules.wheel_templates import bp as wheel_templates_bp
    from modules.oem_parts.models import OEM_PARTS_SLOT
    from modules.wheels.models import WHEELS_SLOT
    from modules.wheel_templates.models import WHEEL_TEMPLATES_SLOT
    from models import USERS_SLOT, UserRepository

    # init extensions: every slot exists (as []) before the first request
    store.init_app(app, slots=(OEM_PARTS_SLOT, WHEELS_SLOT, WHEEL_TEMPLATES_SLOT, USERS_SLOT))
    image_store.init_app(app)
    login_manager.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(oem_parts_bp)
    app.register_blueprint(wheels_bp)
    app.register_blueprint(wheel_templates_bp)

    from dashboard import ui
    app.register_blueprint(ui)  # домашняя "/"

    register_error_handlers(app)

    @app.route(app.config["UPLOAD_URL_PREFIX"] + "<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(image_store.root.resolve(), filename)

    seeded = UserRepository(store).ensure_default_admin(
        app.config.get("DEFAULT_ADMIN_USERNAME"),
        app.config.get("DEFAULT_ADMIN_PASSWORD"),
    )
    if seeded:
        logger.warning("Seeded default admin account %r; change its password", seeded["username"])

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
