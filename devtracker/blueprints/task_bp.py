"""
Development Tracker
Task blueprint.

Endpoints:
    GET   /api/v1/developments/<id>/tasks   tasks of one development (next-action order)
    POST  /api/v1/developments/<id>/tasks   create
    PATCH /api/v1/tasks/<id>/complete       {"complete": true|false}, idempotent
    GET   /api/v1/tasks                     open tasks everywhere (?assigned_to=)
"""

import logging

from flask import Blueprint, jsonify, request

from devtracker.blueprints import json_body, paginate_list
from devtracker.services import activity, task_service
from devtracker.utils.helpers import utcnow
from devtracker.utils.errors import register_core_error_handlers

logger = logging.getLogger(__name__)

task_bp = Blueprint("tasks", __name__, url_prefix="/api/v1")
register_core_error_handlers(task_bp)


def _task_rows(tasks):
    now = utcnow()
    return [
        {**task.to_dict(), "overdue": activity.is_overdue(task, now)}
        for task in activity.display_order(tasks)
    ]


@task_bp.route("/developments/<int:development_id>/tasks", methods=["GET"])
def list_development_tasks(development_id):
    tasks = task_service.list_tasks_for_development(development_id)
    return jsonify({
        "items": _task_rows(tasks),
        "metrics": activity.task_metrics(tasks, utcnow()),
    }), 200


@task_bp.route("/developments/<int:development_id>/tasks", methods=["POST"])
def create_task(development_id):
    task = task_service.create_task(development_id, json_body())
    return jsonify(task.to_dict()), 201


@task_bp.route("/tasks/<int:task_id>/complete", methods=["PATCH"])
def set_complete(task_id):
    data = json_body()
    complete = data.get("complete", True) if isinstance(data, dict) else None
    task = task_service.set_task_complete(task_id, complete)
    return jsonify(task.to_dict()), 200


@task_bp.route("/tasks", methods=["GET"])
def list_open_tasks():
    tasks = task_service.list_open_tasks(request.args.get("assigned_to") or None)
    items, total = paginate_list(_task_rows(tasks))
    return jsonify({"items": items, "total": total}), 200
