"""
Development Tracker
Panel-configuration blueprint.

Endpoints:
    GET    /api/v1/developments/<id>/details         list
    POST   /api/v1/developments/<id>/details         create one
    PATCH  /api/v1/developments/<id>/details         update one (detail_id in body)
    DELETE /api/v1/developments/<id>/details         delete one (?detail_id= or body)
    POST   /api/v1/developments/<id>/details/batch   {"delete": [...], "update": [...], "create": [...]}
"""

from flask import Blueprint, jsonify, request

from devtracker.blueprints import json_body
from devtracker.services import panel_config_service as svc
from devtracker.utils.errors import register_core_error_handlers

panel_config_bp = Blueprint("panel_config", __name__, url_prefix="/api/v1/developments")
register_core_error_handlers(panel_config_bp)


@panel_config_bp.route("/<int:development_id>/details", methods=["GET"])
def list_details(development_id):
    panels = svc.list_panel_configs(development_id)
    return jsonify({"items": [p.to_dict() for p in panels], "total": len(panels)}), 200


@panel_config_bp.route("/<int:development_id>/details", methods=["POST"])
def create_detail(development_id):
    panel = svc.create_panel_config(development_id, json_body())
    return jsonify(panel.to_dict()), 201


@panel_config_bp.route("/<int:development_id>/details", methods=["PATCH"])
def update_detail(development_id):
    data = json_body()
    detail_id = data.get("detail_id") if isinstance(data, dict) else None
    fields = {k: v for k, v in data.items() if k != "detail_id"} if isinstance(data, dict) else data
    panel = svc.update_panel_config(development_id, detail_id, fields)
    return jsonify(panel.to_dict()), 200


@panel_config_bp.route("/<int:development_id>/details", methods=["DELETE"])
def delete_detail(development_id):
    detail_id = request.args.get("detail_id")
    if detail_id is None:
        data = json_body()
        detail_id = data.get("detail_id") if isinstance(data, dict) else None
    deleted_id = svc.delete_panel_config(development_id, detail_id)
    return jsonify({"deleted": True, "id": deleted_id}), 200


@panel_config_bp.route("/<int:development_id>/details/batch", methods=["POST"])
def batch_details(development_id):
    """Apply a batch; 200 even when some items failed (see each result)."""
    return jsonify(svc.apply_panel_batch(development_id, json_body())), 200
