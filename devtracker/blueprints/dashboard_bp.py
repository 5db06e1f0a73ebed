"""
Dashboard Blueprint

Stage distribution, stalled developments and task figures in one call.
"""

from flask import Blueprint, current_app, jsonify, request

from devtracker.services import dashboard_service as svc
from devtracker.utils.errors import register_core_error_handlers

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1/dashboard")
register_core_error_handlers(dashboard_bp)


@dashboard_bp.route("", methods=["GET"])
def full_dashboard():
    """Full dashboard; ?assigned_to= narrows the task figures."""
    return jsonify(svc.build_dashboard(
        stalled_after_days=current_app.config.get("STALLED_AFTER_DAYS", 30),
        assigned_to=request.args.get("assigned_to") or None,
    )), 200
