"""HTTP routes for OEM parts."""

from flask import current_app, jsonify
from flask_login import login_required

from extensions import store
from permissions import role_required
from spreadsheets import workbook_response
from utils import principal_name, request_payload

from . import bp
from .models import OemPartRepository, stock_summary

EXPORT_COLUMNS = [
    "id", "partNumber", "oemPartNumber", "partName", "category",
    "quantity", "location", "price", "notes", "createdAt", "updatedAt",
]


def _repo() -> OemPartRepository:
    return OemPartRepository(store)


@bp.route("", methods=["GET"])
@login_required
def list_parts():
    return jsonify(ok=True, data=_repo().list())


@bp.route("", methods=["POST"])
@role_required(["admin"])
def create_part():
    part = _repo().create(request_payload(), principal_name())
    return jsonify(ok=True, data=part), 201


@bp.route("/<string:part_id>", methods=["GET"])
@login_required
def get_part(part_id):
    return jsonify(ok=True, data=_repo().get(part_id))


@bp.route("/<string:part_id>", methods=["PUT", "PATCH"])
@role_required(["admin"])
def update_part(part_id):
    part = _repo().update(part_id, request_payload(), principal_name())
    return jsonify(ok=True, data=part)


@bp.route("/<string:part_id>", methods=["DELETE"])
@role_required(["admin"])
def delete_part(part_id):
    removed = _repo().delete(part_id)
    return jsonify(ok=True, message="Part deleted successfully", data={"id": removed["id"]})


@bp.route("/summary", methods=["GET"])
@login_required
def parts_summary():
    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 5)
    return jsonify(ok=True, data=stock_summary(_repo().list(), threshold))


@bp.route("/export", methods=["GET"])
@role_required(["admin"])
def export_parts():
    return workbook_response(_repo().list(), EXPORT_COLUMNS, "OEM Parts", "oem_parts_export")
