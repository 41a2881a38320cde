# dashboard.py - домашняя "/" : сводка по складу (KPI)
from flask import Blueprint, current_app, jsonify
from flask_login import login_required

from extensions import store
from modules.oem_parts.models import OEM_PARTS_SLOT, stock_summary
from modules.wheel_templates.models import WHEEL_TEMPLATES_SLOT
from modules.wheels.models import WHEELS_SLOT
from modules.wheels.workflow import compute_stats, stats_to_json

ui = Blueprint("ui", __name__)


@ui.route("/")
@login_required
def home():
    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 5)
    wheels = store.load_all(WHEELS_SLOT)
    return jsonify(
        ok=True,
        data={
            "oemParts": stock_summary(store.load_all(OEM_PARTS_SLOT), threshold),
            "wheels": stats_to_json(compute_stats(wheels)),
            "templates": len(store.load_all(WHEEL_TEMPLATES_SLOT)),
        },
    )
