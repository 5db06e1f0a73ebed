"""
Development Tracker
Development blueprint — list/detail views, section editors, notes and
tender offers.

Endpoints summary:
    GET    /api/v1/developments                               list (?stage=, limit/offset)
    POST   /api/v1/developments                               create (overview fields)
    GET    /api/v1/developments/<id>                          detail view
    PATCH  /api/v1/developments/<id>/<section>                overview | commercial | design |
                                                              planning | marketing | build
    POST   /api/v1/developments/<id>/notes                    add note
    POST   /api/v1/developments/<id>/tender-offers            add tender offer
    DELETE /api/v1/developments/<id>/tender-offers/<offer_id> remove tender offer
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from devtracker.blueprints import json_body, paginate_list
from devtracker.services import development_service, task_service
from devtracker.services.reconciliation import apply_section_update
from devtracker.utils.errors import register_core_error_handlers

logger = logging.getLogger(__name__)

development_bp = Blueprint("developments", __name__, url_prefix="/api/v1")
register_core_error_handlers(development_bp)


def _stalled_days():
    return current_app.config.get("STALLED_AFTER_DAYS", 30)


# ── Developments ─────────────────────────────────────────────────────────────


@development_bp.route("/developments", methods=["GET"])
def list_developments():
    stage = development_service.parse_stage(request.args.get("stage"))
    rows = development_service.list_developments(stage=stage, stalled_after_days=_stalled_days())
    items, total = paginate_list(rows)
    return jsonify({"items": items, "total": total}), 200


@development_bp.route("/developments", methods=["POST"])
def create_development():
    development = development_service.create_development(json_body())
    return jsonify(development.to_dict()), 201


@development_bp.route("/developments/<int:development_id>", methods=["GET"])
def get_development(development_id):
    detail = development_service.development_detail(
        development_id,
        stalled_after_days=_stalled_days(),
        notes_limit=current_app.config.get("RECENT_NOTES_LIMIT", 5),
    )
    return jsonify(detail), 200


@development_bp.route("/developments/<int:development_id>/<section>", methods=["PATCH"])
def update_section(development_id, section):
    """Partial update of one section; fields outside it are ignored."""
    development = apply_section_update(development_id, section, json_body())
    return jsonify(development.to_dict()), 200


# ── Notes & tender offers ────────────────────────────────────────────────────


@development_bp.route("/developments/<int:development_id>/notes", methods=["POST"])
def add_note(development_id):
    note = task_service.add_note(development_id, json_body())
    return jsonify(note.to_dict()), 201


@development_bp.route("/developments/<int:development_id>/tender-offers", methods=["POST"])
def add_tender_offer(development_id):
    offer = task_service.add_tender_offer(development_id, json_body())
    return jsonify(offer.to_dict()), 201


@development_bp.route(
    "/developments/<int:development_id>/tender-offers/<int:offer_id>", methods=["DELETE"],
)
def delete_tender_offer(development_id, offer_id):
    task_service.delete_tender_offer(development_id, offer_id)
    return jsonify({"deleted": True, "id": offer_id}), 200
