"""HTTP routes for wheels: CRUD, images, sale workflow, statistics, import/export."""

from flask import jsonify, request
from flask_login import login_required

from errors import ValidationError
from extensions import image_store, store
from permissions import role_required
from spreadsheets import read_rows, workbook_response
from utils import collect_uploads, principal_name, request_payload

from . import bp
from .images import ImageAttachmentManager
from .models import WheelRepository
from .workflow import compute_stats, import_wheels, mark_sold, stats_to_json

EXPORT_COLUMNS = [
    "id", "sku", "year", "make", "model", "trim", "size", "boltPattern", "offset",
    "oemPart", "condition", "price", "quantity", "status", "category", "subcategory",
    "notes", "images", "soldAt", "soldPrice", "soldTo", "soldNotes", "createdAt", "updatedAt",
]


def _attachments() -> ImageAttachmentManager:
    return ImageAttachmentManager(store, image_store)


def _repo() -> WheelRepository:
    return WheelRepository(store, _attachments())


# ---------- CRUD ----------
@bp.route("", methods=["GET"])
@login_required
def list_wheels():
    return jsonify(ok=True, data=_repo().list())


@bp.route("", methods=["POST"])
@role_required(["admin"])
def create_wheel():
    data = request_payload()
    wheel = _repo().create(data, principal_name(), uploads=collect_uploads())
    return jsonify(ok=True, data=wheel), 201


@bp.route("/<string:wheel_id>", methods=["GET"])
@login_required
def get_wheel(wheel_id):
    return jsonify(ok=True, data=_repo().get(wheel_id))


@bp.route("/<string:wheel_id>", methods=["PUT", "PATCH"])
@role_required(["admin"])
def update_wheel(wheel_id):
    data = request_payload()
    wheel = _repo().update(wheel_id, data, principal_name(), uploads=collect_uploads())
    return jsonify(ok=True, data=wheel)


@bp.route("/<string:wheel_id>", methods=["DELETE"])
@role_required(["admin"])
def delete_wheel(wheel_id):
    removed = _repo().delete(wheel_id)
    return jsonify(ok=True, message="Wheel deleted successfully", data={"id": removed["id"]})


# ---------- Фото ----------
@bp.route("/<string:wheel_id>/image", methods=["DELETE"])
@role_required(["admin"])
def detach_wheel_image(wheel_id):
    data = request.get_json(silent=True) or {}
    image_path = data.get("imagePath") or request.args.get("imagePath")
    if not image_path:
        raise ValidationError({"imagePath": "is required"})
    wheel = _attachments().detach_image(wheel_id, image_path, principal_name())
    return jsonify(ok=True, data=wheel)


# ---------- Продажа ----------
@bp.route("/<string:wheel_id>/sold", methods=["POST"])
@role_required(["admin"])
def mark_wheel_sold(wheel_id):
    wheel = mark_sold(store, wheel_id, request_payload(), principal_name())
    return jsonify(ok=True, data=wheel)


# ---------- Статистика ----------
@bp.route("/stats", methods=["GET"])
@login_required
def category_stats():
    stats = compute_stats(store.load_all(WheelRepository.slot))
    return jsonify(ok=True, data=stats_to_json(stats))


# ---------- Импорт / экспорт ----------
@bp.route("/import", methods=["POST"])
@role_required(["admin"])
def import_wheels_batch():
    file = request.files.get("file")
    if file and file.filename:
        rows = read_rows(file)
    else:
        rows = request.get_json(silent=True)
        if isinstance(rows, dict):
            rows = rows.get("wheels")
        if not isinstance(rows, list):
            raise ValidationError({"file": "upload a .csv/.xlsx file or post a JSON array of wheels"})

    report = import_wheels(_repo(), rows, principal_name())
    return jsonify(ok=True, data=report)


@bp.route("/export", methods=["GET"])
@role_required(["admin"])
def export_wheels():
    return workbook_response(_repo().list(), EXPORT_COLUMNS, "Wheels", "wheels_export")
