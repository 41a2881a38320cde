"""HTTP routes for wheel templates."""

from flask import jsonify
from flask_login import login_required

from extensions import store
from permissions import role_required
from utils import principal_name, request_payload

from . import bp
from .models import WheelTemplateRepository, template_to_wheel


def _repo() -> WheelTemplateRepository:
    return WheelTemplateRepository(store)


@bp.route("", methods=["GET"])
@login_required
def list_templates():
    return jsonify(ok=True, data=_repo().list())


@bp.route("", methods=["POST"])
@role_required(["admin"])
def create_template():
    template = _repo().create(request_payload(), principal_name())
    return jsonify(ok=True, data=template), 201


@bp.route("/<string:template_id>", methods=["GET"])
@login_required
def get_template(template_id):
    return jsonify(ok=True, data=_repo().get(template_id))


@bp.route("/<string:template_id>/wheel", methods=["GET"])
@login_required
def template_prefill(template_id):
    return jsonify(ok=True, data=template_to_wheel(_repo().get(template_id)))


@bp.route("/<string:template_id>", methods=["PUT", "PATCH"])
@role_required(["admin"])
def update_template(template_id):
    template = _repo().update(template_id, request_payload(), principal_name())
    return jsonify(ok=True, data=template)


@bp.route("/<string:template_id>", methods=["DELETE"])
@role_required(["admin"])
def delete_template(template_id):
    removed = _repo().delete(template_id)
    return jsonify(ok=True, message="Template deleted successfully", data={"id": removed["id"]})
