"""OEM parts module package."""

from flask import Blueprint

bp = Blueprint("oem_parts", __name__, url_prefix="/api/oem-parts")

from . import models  # noqa: E402  pylint: disable=wrong-import-position
from . import routes  # noqa: E402  pylint: disable=wrong-import-position

__all__ = ["bp", "models", "routes"]
